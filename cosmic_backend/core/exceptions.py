"""
Application-level exceptions.

Store and chain failures are raised as these types with the driver error
chained as __cause__; the API server maps each type to one HTTP status.
"""

from __future__ import annotations


class CosmicBackendError(Exception):
    """Base class for all backend errors."""


class StoreUnavailableError(CosmicBackendError):
    """The backing store failed (connectivity, locking, schema). Not retried."""


class ChainCallError(CosmicBackendError):
    """An RPC or contract call to the chain failed."""


class WrongNetworkError(ChainCallError):
    """Connected RPC endpoint reports a chain id other than the configured one."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Connected to chain {actual}, expected {expected}")
        self.expected = expected
        self.actual = actual


class InvalidAddressError(ChainCallError, ValueError):
    """Address is not a well-formed EVM address."""


class SignerNotConfiguredError(ChainCallError):
    """A state-changing call was requested but no private key is configured."""


class TransactionFailedError(ChainCallError):
    """Transaction was mined but reverted (receipt status 0)."""

    def __init__(self, tx_hash: str) -> None:
        super().__init__(f"Transaction {tx_hash} reverted")
        self.tx_hash = tx_hash


class ProfileRequiredError(CosmicBackendError):
    """The action needs an on-chain profile and the wallet has none."""


class ValueOutOfRangeError(CosmicBackendError, ValueError):
    """An integer does not fit the store's signed 64-bit columns."""
