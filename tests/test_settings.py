"""Settings from environment variables."""

from __future__ import annotations

from pathlib import Path

from cosmic_backend.config import get_settings
from cosmic_backend.config.env import BASE_CHAIN_ID, DEFAULT_CONTRACT_ADDRESS, mask_rpc_url

_VARS = (
    "COSMIC_DB_PATH",
    "DATABASE_URL",
    "BASE_RPC_URL",
    "BASE_CHAIN_ID",
    "COSMIC_CONTRACT_ADDRESS",
    "SIGNER_PRIVATE_KEY",
    "API_PORT",
    "TX_TIMEOUT_SEC",
)


def _clear(monkeypatch):
    for name in _VARS:
        monkeypatch.setenv(name, "")


def test_defaults(monkeypatch):
    _clear(monkeypatch)
    s = get_settings()
    assert s.db_path == Path("cosmic.db")
    assert s.database_url is None
    assert s.rpc_url == "https://mainnet.base.org"
    assert s.chain_id == BASE_CHAIN_ID == 8453
    assert s.contract_address == DEFAULT_CONTRACT_ADDRESS
    assert s.signer_private_key is None
    assert s.api_port == 8000


def test_env_overrides(monkeypatch):
    _clear(monkeypatch)
    monkeypatch.setenv("COSMIC_DB_PATH", "/tmp/x.db")
    monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg://u:p@db/cosmic")
    monkeypatch.setenv("BASE_CHAIN_ID", "84532")
    monkeypatch.setenv("SIGNER_PRIVATE_KEY", "0xsecret")
    monkeypatch.setenv("TX_TIMEOUT_SEC", "30")
    s = get_settings()
    assert s.db_path == Path("/tmp/x.db")
    assert s.database_url == "postgresql+psycopg://u:p@db/cosmic"
    assert s.chain_id == 84532
    assert s.tx_timeout_sec == 30.0
    assert "0xsecret" not in repr(s)


def test_mask_rpc_url():
    assert mask_rpc_url("https://base-mainnet.g.alchemy.com/v2/KEY") == "https://base-mainnet.g.alchemy.com/v2/***"
    assert mask_rpc_url("https://rpc.example/?api-key=KEY") == "https://rpc.example/?api-key=***"
    assert mask_rpc_url("https://mainnet.base.org") == "https://mainnet.base.org"
