"""
Database abstraction layer: wallet session cache, activity ledger, match ledger.

SQLite via Database and get_database() by default; DATABASE_URL switches to SQLAlchemy.
"""

from cosmic_backend.database.database import (
    INT64_MAX,
    INT64_MIN,
    MATCH_RESULTS_LIMIT,
    RECENT_ACTIVITY_LIMIT,
    Database,
    DatabaseBackend,
    SQLiteBackend,
    get_database,
    now_ms,
)
from cosmic_backend.database.models import (
    CACHED_FIELDS,
    ActivityEntry,
    MatchResult,
    WalletSession,
)

__all__ = [
    "INT64_MAX",
    "INT64_MIN",
    "MATCH_RESULTS_LIMIT",
    "RECENT_ACTIVITY_LIMIT",
    "Database",
    "DatabaseBackend",
    "SQLiteBackend",
    "get_database",
    "now_ms",
    "CACHED_FIELDS",
    "ActivityEntry",
    "MatchResult",
    "WalletSession",
]
