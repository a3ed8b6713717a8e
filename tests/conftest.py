"""
Pytest fixtures for Cosmic backend tests. Temporary SQLite files, a fake clock,
and a CosmicContract over a mocked web3 instance (no RPC).
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

ALICE = "0x" + "AB" * 20
BOB = "0x" + "cd" * 20
CAROL = "0x" + "12" * 20
DAVE = "0x" + "34" * 20

SIGNER_KEY = "0x" + "11" * 32
SIGNER_ADDRESS = "0x" + "EF" * 20

DEFAULT_PROFILE = (1, 2, 3, 4, 5, 6, 7)


class FakeClock:
    """Epoch-ms clock that advances by `step` on every read."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        value = self.now
        self.now += self.step
        return value


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(params=["sqlite", "sqlalchemy"])
def db(request, tmp_path, clock):
    """Database on a temp file, once per backend."""
    from cosmic_backend.database import get_database

    if request.param == "sqlite":
        return get_database(tmp_path / "cosmic.db", clock=clock)
    return get_database(url=f"sqlite:///{tmp_path / 'cosmic_sa.db'}", clock=clock)


@pytest.fixture
def sqlite_db(tmp_path, clock):
    from cosmic_backend.database import get_database

    return get_database(tmp_path / "cosmic.db", clock=clock)


def make_contract(
    *,
    chain_id: int = 8453,
    has_profile: bool = True,
    profile: tuple[int, ...] = DEFAULT_PROFILE,
    compatibility: int = 80,
    private_key: str | None = None,
):
    """CosmicContract over a MagicMock web3. Returns (contract, w3)."""
    from cosmic_backend.chain import CosmicContract

    w3 = MagicMock()
    w3.eth.chain_id = chain_id
    fns = w3.eth.contract.return_value.functions
    fns.hasProfile.return_value.call.return_value = has_profile
    fns.getProfile.return_value.call.return_value = list(profile)
    fns.matchWithAddress.return_value.call.return_value = compatibility
    if private_key:
        account = w3.eth.account.from_key.return_value
        account.address = SIGNER_ADDRESS
        account.sign_transaction.return_value.raw_transaction = b"\x01\x02"
        w3.eth.get_transaction_count.return_value = 3
        w3.eth.send_raw_transaction.return_value = b"\xaa" * 32
        w3.eth.wait_for_transaction_receipt.return_value = {"status": 1}
    return CosmicContract(w3, chain_id=8453, private_key=private_key), w3


@pytest.fixture
def contract_and_w3():
    return make_contract()


@pytest.fixture
def contract(contract_and_w3):
    return contract_and_w3[0]


@pytest.fixture
def client(sqlite_db, contract):
    """FastAPI TestClient with the store and contract dependencies overridden."""
    from fastapi.testclient import TestClient

    from cosmic_backend.api_server.deps import get_contract, get_db, reset_dependencies_for_test
    from cosmic_backend.api_server.server import app

    app.dependency_overrides[get_db] = lambda: sqlite_db
    app.dependency_overrides[get_contract] = lambda: contract
    yield TestClient(app)
    app.dependency_overrides.clear()
    reset_dependencies_for_test()
