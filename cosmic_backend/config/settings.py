"""
Application settings.

Typed view over the environment (see config.env) for the store, the chain
collaborator, the API server and logging. Built fresh by get_settings() so tests
can monkeypatch the environment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from cosmic_backend.config import env


@dataclass(frozen=True)
class Settings:
    """Service configuration (env or explicit)."""

    db_path: Path = field(default_factory=env.get_db_path)
    database_url: str | None = field(default_factory=env.get_database_url)
    rpc_url: str = field(default_factory=env.get_base_rpc_url)
    chain_id: int = field(default_factory=env.get_chain_id)
    contract_address: str = field(default_factory=env.get_contract_address)
    signer_private_key: str | None = field(default_factory=env.get_signer_private_key, repr=False)
    rpc_timeout_sec: float = field(default_factory=lambda: env._env_float("RPC_TIMEOUT_SEC", 15.0))
    tx_timeout_sec: float = field(default_factory=lambda: env._env_float("TX_TIMEOUT_SEC", 120.0))
    api_host: str = field(default_factory=lambda: env._env_str("API_HOST", "0.0.0.0"))
    api_port: int = field(default_factory=lambda: env._env_int("API_PORT", 8000))
    log_level: str = field(default_factory=lambda: env._env_str("LOG_LEVEL", "info").lower())


def get_settings() -> Settings:
    """Return the current application settings."""
    env.load_cosmic_env()
    return Settings()
