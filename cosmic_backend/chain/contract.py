"""
Astrology contract wrapper.

One CosmicContract per RPC endpoint and signer; pass it explicitly to whatever
needs chain access. Every web3/transport failure surfaces as ChainCallError with
the underlying exception chained. No retries.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from web3 import Web3
from web3.exceptions import Web3Exception

from cosmic_backend.config.env import BASE_CHAIN_ID, DEFAULT_CONTRACT_ADDRESS, mask_rpc_url
from cosmic_backend.config.settings import Settings
from cosmic_backend.core.exceptions import (
    ChainCallError,
    InvalidAddressError,
    SignerNotConfiguredError,
    TransactionFailedError,
    WrongNetworkError,
)
from cosmic_backend.cosmic_logging import get_logger
from cosmic_backend.database import INT64_MAX, INT64_MIN

logger = get_logger(__name__)

_PROFILE_OUTPUTS = ("element", "level", "xp", "energy", "luckyNumber", "winStreak", "lastFortune")


def _storable(fn_name: str, value: Any) -> int:
    """uint256 results must fit the signed 64-bit cache columns."""
    value = int(value)
    if not INT64_MIN <= value <= INT64_MAX:
        raise ChainCallError(f"{fn_name} returned {value}, outside the storable range")
    return value


COSMIC_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "createProfile",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "claimDailyFortune",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "matchWithAddress",
        "stateMutability": "view",
        "inputs": [{"name": "other", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "getProfile",
        "stateMutability": "view",
        "inputs": [{"name": "user", "type": "address"}],
        "outputs": [{"name": name, "type": "uint256"} for name in _PROFILE_OUTPUTS],
    },
    {
        "type": "function",
        "name": "hasProfile",
        "stateMutability": "view",
        "inputs": [{"name": "user", "type": "address"}],
        "outputs": [{"name": "", "type": "bool"}],
    },
]

# Chain failures we translate; requests/aiohttp transport errors are OSError subclasses.
_CHAIN_ERRORS = (Web3Exception, OSError, ValueError)


@dataclass(frozen=True)
class OnChainProfile:
    """getProfile() output. Ranges (e.g. element 0-3) are owned by the contract."""

    element: int
    level: int
    xp: int
    energy: int
    lucky_number: int
    win_streak: int
    last_fortune: int
    """Block time of the last fortune claim, epoch seconds."""

    @classmethod
    def from_call_result(cls, result: Any) -> "OnChainProfile":
        values = [_storable("getProfile", v) for v in result]
        if len(values) != len(_PROFILE_OUTPUTS):
            raise ChainCallError(f"getProfile returned {len(values)} values, expected {len(_PROFILE_OUTPUTS)}")
        return cls(*values)

    def as_cache_fields(self) -> dict[str, int]:
        """Keyword arguments for Database.upsert_session."""
        return {f"cached_{name}": value for name, value in asdict(self).items()}


class CosmicContract:
    """
    Calls into the astrology contract.

    Read calls need only an RPC endpoint. createProfile / claimDailyFortune sign
    with private_key; without one they raise SignerNotConfiguredError.
    """

    def __init__(
        self,
        w3: Web3,
        address: str = DEFAULT_CONTRACT_ADDRESS,
        *,
        chain_id: int = BASE_CHAIN_ID,
        private_key: str | None = None,
        tx_timeout_sec: float = 120.0,
    ) -> None:
        self._w3 = w3
        self._chain_id = chain_id
        self._tx_timeout_sec = tx_timeout_sec
        self._contract = w3.eth.contract(address=Web3.to_checksum_address(address), abi=COSMIC_ABI)
        self._account = w3.eth.account.from_key(private_key) if private_key else None

    @property
    def chain_id(self) -> int:
        return self._chain_id

    @property
    def signer_address(self) -> str | None:
        return self._account.address if self._account is not None else None

    @staticmethod
    def checksum(address: str) -> str:
        """Validate and checksum an address for the contract. Raises InvalidAddressError."""
        address = (address or "").strip()
        if not Web3.is_address(address):
            raise InvalidAddressError(f"Invalid EVM address: {address!r}")
        return Web3.to_checksum_address(address)

    # --- Network ---

    def connected_chain_id(self) -> int:
        try:
            return int(self._w3.eth.chain_id)
        except _CHAIN_ERRORS as e:
            raise ChainCallError(f"eth_chainId failed: {e}") from e

    def is_correct_network(self) -> bool:
        return self.connected_chain_id() == self._chain_id

    def ensure_network(self) -> None:
        actual = self.connected_chain_id()
        if actual != self._chain_id:
            logger.warning("chain_wrong_network", expected=self._chain_id, actual=actual)
            raise WrongNetworkError(self._chain_id, actual)

    # --- Reads ---

    def _call(self, fn_name: str, *args: Any, tx: dict[str, Any] | None = None) -> Any:
        try:
            fn = getattr(self._contract.functions, fn_name)
            return fn(*args).call(tx) if tx else fn(*args).call()
        except _CHAIN_ERRORS as e:
            logger.warning("chain_call_failed", fn=fn_name, error=str(e))
            raise ChainCallError(f"{fn_name} failed: {e}") from e

    def has_profile(self, address: str) -> bool:
        return bool(self._call("hasProfile", self.checksum(address)))

    def get_profile(self, address: str) -> OnChainProfile | None:
        """Return the profile, or None when the address has not created one."""
        user = self.checksum(address)
        if not self.has_profile(user):
            return None
        return OnChainProfile.from_call_result(self._call("getProfile", user))

    def match_with_address(self, other: str, *, sender: str) -> int:
        """Compatibility of sender with other. The contract reads msg.sender, so `from` is set."""
        result = self._call(
            "matchWithAddress",
            self.checksum(other),
            tx={"from": self.checksum(sender)},
        )
        return _storable("matchWithAddress", result)

    # --- Transactions ---

    def _transact(self, fn_name: str) -> str:
        if self._account is None:
            raise SignerNotConfiguredError(f"{fn_name} needs SIGNER_PRIVATE_KEY")
        sender = self._account.address
        try:
            tx = getattr(self._contract.functions, fn_name)().build_transaction(
                {
                    "from": sender,
                    "value": 0,
                    "nonce": self._w3.eth.get_transaction_count(sender),
                    "chainId": self._chain_id,
                }
            )
            signed = self._account.sign_transaction(tx)
            tx_hash = self._w3.eth.send_raw_transaction(signed.raw_transaction)
            logger.info("chain_tx_sent", fn=fn_name, wallet_id=sender, tx_hash=Web3.to_hex(tx_hash))
            receipt = self._w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self._tx_timeout_sec)
        except _CHAIN_ERRORS as e:
            logger.warning("chain_tx_failed", fn=fn_name, wallet_id=sender, error=str(e))
            raise ChainCallError(f"{fn_name} failed: {e}") from e
        tx_hex = Web3.to_hex(tx_hash)
        if receipt["status"] != 1:
            logger.warning("chain_tx_reverted", fn=fn_name, wallet_id=sender, tx_hash=tx_hex)
            raise TransactionFailedError(tx_hex)
        logger.info("chain_tx_confirmed", fn=fn_name, wallet_id=sender, tx_hash=tx_hex)
        return tx_hex

    def create_profile(self) -> str:
        """Send createProfile() from the signer and wait for confirmation. Returns tx hash."""
        return self._transact("createProfile")

    def claim_daily_fortune(self) -> str:
        """Send claimDailyFortune() from the signer and wait for confirmation. Returns tx hash."""
        return self._transact("claimDailyFortune")


def connect_contract(settings: Settings) -> CosmicContract:
    """Build a CosmicContract over an HTTP provider from settings. Does not touch the network."""
    w3 = Web3(Web3.HTTPProvider(settings.rpc_url, request_kwargs={"timeout": settings.rpc_timeout_sec}))
    logger.info(
        "chain_contract_configured",
        rpc=mask_rpc_url(settings.rpc_url),
        chain_id=settings.chain_id,
        contract=settings.contract_address,
        signer=settings.signer_private_key is not None,
    )
    return CosmicContract(
        w3,
        settings.contract_address,
        chain_id=settings.chain_id,
        private_key=settings.signer_private_key,
        tx_timeout_sec=settings.tx_timeout_sec,
    )
