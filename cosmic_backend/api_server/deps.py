"""
Request dependencies: one Database and one CosmicContract per configuration.

Tests swap these through app.dependency_overrides.
"""

from __future__ import annotations

import functools

from cosmic_backend.chain.contract import CosmicContract, connect_contract
from cosmic_backend.config import Settings, get_settings
from cosmic_backend.database import Database, get_database


@functools.lru_cache(maxsize=8)
def _database_for(db_path: str, url: str | None) -> Database:
    return get_database(db_path, url=url)


@functools.lru_cache(maxsize=8)
def _contract_for(settings: Settings) -> CosmicContract:
    return connect_contract(settings)


def get_db() -> Database:
    """Dependency: app-scoped Database for the configured store."""
    settings = get_settings()
    return _database_for(str(settings.db_path), settings.database_url)


def get_contract() -> CosmicContract:
    """Dependency: app-scoped contract client for the configured RPC endpoint."""
    return _contract_for(get_settings())


def reset_dependencies_for_test() -> None:
    """Clear cached Database/contract instances. For tests only."""
    _database_for.cache_clear()
    _contract_for.cache_clear()
