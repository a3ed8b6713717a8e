"""
Environment variable loading for the Cosmic backend.

- BASE_RPC_URL: JSON-RPC endpoint for Base (default: public mainnet endpoint)
- BASE_CHAIN_ID: expected chain id (default: 8453)
- COSMIC_CONTRACT_ADDRESS: deployed astrology contract
- SIGNER_PRIVATE_KEY: optional hex key for createProfile / claimDailyFortune
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is cosmic_backend/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

BASE_CHAIN_ID = 8453
BASE_MAINNET_RPC_URL = "https://mainnet.base.org"
DEFAULT_CONTRACT_ADDRESS = "0x374531294780aB871568Ebc8a3606c80D62cdc5e"
DEFAULT_DB_PATH = "cosmic.db"


def load_cosmic_env() -> None:
    """Load .env from project root. Safe to call multiple times; existing env wins."""
    load_dotenv(_ENV_PATH)


def _env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or "").strip() or default


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    return float(raw) if raw else default


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    return int(raw) if raw else default


def get_base_rpc_url() -> str:
    """Return BASE_RPC_URL, or the public Base mainnet endpoint."""
    load_cosmic_env()
    return _env_str("BASE_RPC_URL", BASE_MAINNET_RPC_URL)


def get_chain_id() -> int:
    load_cosmic_env()
    return _env_int("BASE_CHAIN_ID", BASE_CHAIN_ID)


def get_contract_address() -> str:
    load_cosmic_env()
    return _env_str("COSMIC_CONTRACT_ADDRESS", DEFAULT_CONTRACT_ADDRESS)


def get_signer_private_key() -> str | None:
    """Return SIGNER_PRIVATE_KEY or None. Never logged."""
    load_cosmic_env()
    return _env_str("SIGNER_PRIVATE_KEY") or None


def get_db_path() -> Path:
    load_cosmic_env()
    return Path(_env_str("COSMIC_DB_PATH", DEFAULT_DB_PATH))


def get_database_url() -> str | None:
    """Return DATABASE_URL when set; its presence selects the SQLAlchemy backend."""
    load_cosmic_env()
    return _env_str("DATABASE_URL") or None


def mask_rpc_url(url: str) -> str:
    """Hide API keys embedded in provider URLs (path or query) for logging."""
    if "api-key=" in url:
        return url.split("api-key=")[0] + "api-key=***"
    if "/v2/" in url:
        return url.split("/v2/")[0] + "/v2/***"
    return url
