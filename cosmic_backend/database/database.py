"""
Database abstraction layer for the wallet session cache, activity log and match results.

SQLite by default; SQLAlchemyBackend (sqlalchemy_backend.py) serves any DATABASE_URL,
e.g. PostgreSQL. All access goes through the abstract interface. The Database facade
normalizes wallet keys and stamps ingestion time, so backends only store what they get.
"""

from __future__ import annotations

import sqlite3
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

from cosmic_backend.core.exceptions import StoreUnavailableError, ValueOutOfRangeError
from cosmic_backend.cosmic_logging import get_logger
from cosmic_backend.database.models import (
    CACHED_FIELDS,
    ActivityEntry,
    MatchResult,
    WalletSession,
)
from cosmic_backend.utils.wallet_utils import normalize_wallet

logger = get_logger(__name__)

RECENT_ACTIVITY_LIMIT = 20
MATCH_RESULTS_LIMIT = 10

# Signed 64-bit bounds shared by SQLite INTEGER and PostgreSQL BIGINT columns.
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# -----------------------------------------------------------------------------
# Schema (SQLite)
# -----------------------------------------------------------------------------

SCHEMA_WALLET_SESSIONS = """
CREATE TABLE IF NOT EXISTS wallet_sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    wallet_address TEXT NOT NULL UNIQUE,
    last_seen INTEGER NOT NULL,
    has_profile INTEGER NOT NULL,
    cached_element INTEGER,
    cached_level INTEGER,
    cached_xp INTEGER,
    cached_energy INTEGER,
    cached_lucky_number INTEGER,
    cached_win_streak INTEGER,
    cached_last_fortune INTEGER
);
"""

SCHEMA_ACTIVITY_LOG = """
CREATE TABLE IF NOT EXISTS activity_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    wallet_address TEXT NOT NULL,
    action TEXT NOT NULL,
    details TEXT NOT NULL,
    timestamp INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS ix_activity_log_wallet ON activity_log(wallet_address);
CREATE INDEX IF NOT EXISTS ix_activity_log_time ON activity_log(timestamp);
"""

SCHEMA_MATCH_RESULTS = """
CREATE TABLE IF NOT EXISTS match_results (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    wallet_address TEXT NOT NULL,
    matched_with TEXT NOT NULL,
    compatibility INTEGER NOT NULL,
    timestamp INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS ix_match_results_wallet_time ON match_results(wallet_address, timestamp);
"""


def now_ms() -> int:
    """Ingestion time: wall clock in epoch milliseconds."""
    return int(time.time() * 1000)


# -----------------------------------------------------------------------------
# Abstract backend
# -----------------------------------------------------------------------------


class DatabaseBackend(ABC):
    """Abstract interface for persistence. Keys arrive normalized, timestamps assigned."""

    @abstractmethod
    def ensure_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        ...

    @abstractmethod
    def upsert_session(
        self,
        wallet_address: str,
        has_profile: bool,
        last_seen: int,
        cached: dict[str, int | None],
    ) -> int:
        """
        Insert or fully overwrite the session for wallet_address. Every key of
        CACHED_FIELDS is written; None clears the column. Returns the row id.
        """
        ...

    @abstractmethod
    def get_session(self, wallet_address: str) -> WalletSession | None:
        """Return the session for the given key, or None."""
        ...

    @abstractmethod
    def insert_activity(self, wallet_address: str, action: str, details: str, timestamp: int) -> int:
        """Append an activity entry. Returns row id."""
        ...

    @abstractmethod
    def get_recent_activity(self, *, limit: int) -> list[ActivityEntry]:
        """Return entries across all wallets, newest first (ties: newest id first)."""
        ...

    @abstractmethod
    def insert_match_result(
        self,
        wallet_address: str,
        matched_with: str,
        compatibility: int,
        timestamp: int,
    ) -> int:
        """Append a match result. Returns row id."""
        ...

    @abstractmethod
    def get_match_results(self, wallet_address: str, *, limit: int) -> list[MatchResult]:
        """Return match results for one wallet, newest first (ties: newest id first)."""
        ...


# -----------------------------------------------------------------------------
# SQLite backend
# -----------------------------------------------------------------------------


class SQLiteBackend(DatabaseBackend):
    """SQLite implementation; single file, one connection per operation."""

    def __init__(self, path: str | Path, *, timeout_sec: float = 5.0) -> None:
        self._path = Path(path)
        self._timeout_sec = timeout_sec

    def _connect(self) -> sqlite3.Connection:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self._path), timeout=self._timeout_sec)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode = WAL")
        return conn

    @contextmanager
    def _cursor(self) -> Iterator[sqlite3.Cursor]:
        try:
            conn = self._connect()
        except sqlite3.Error as e:
            logger.error("sqlite_connect_failed", path=str(self._path), error=str(e))
            raise StoreUnavailableError(f"Cannot open {self._path}: {e}") from e
        try:
            cur = conn.cursor()
            yield cur
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreUnavailableError(str(e)) from e
        except OverflowError as e:
            conn.rollback()
            raise ValueOutOfRangeError(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def ensure_schema(self) -> None:
        with self._cursor() as cur:
            for stmt in (SCHEMA_WALLET_SESSIONS, SCHEMA_ACTIVITY_LOG, SCHEMA_MATCH_RESULTS):
                cur.executescript(stmt)

    def upsert_session(
        self,
        wallet_address: str,
        has_profile: bool,
        last_seen: int,
        cached: dict[str, int | None],
    ) -> int:
        values = [cached.get(name) for name in CACHED_FIELDS]
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO wallet_sessions (
                    wallet_address, last_seen, has_profile,
                    cached_element, cached_level, cached_xp, cached_energy,
                    cached_lucky_number, cached_win_streak, cached_last_fortune
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(wallet_address) DO UPDATE SET
                    last_seen = excluded.last_seen,
                    has_profile = excluded.has_profile,
                    cached_element = excluded.cached_element,
                    cached_level = excluded.cached_level,
                    cached_xp = excluded.cached_xp,
                    cached_energy = excluded.cached_energy,
                    cached_lucky_number = excluded.cached_lucky_number,
                    cached_win_streak = excluded.cached_win_streak,
                    cached_last_fortune = excluded.cached_last_fortune
                """,
                (wallet_address, last_seen, int(has_profile), *values),
            )
            cur.execute("SELECT id FROM wallet_sessions WHERE wallet_address = ?", (wallet_address,))
            return cur.fetchone()["id"]

    def get_session(self, wallet_address: str) -> WalletSession | None:
        with self._cursor() as cur:
            cur.execute(
                f"SELECT id, wallet_address, last_seen, has_profile, {', '.join(CACHED_FIELDS)} "
                "FROM wallet_sessions WHERE wallet_address = ?",
                (wallet_address,),
            )
            row = cur.fetchone()
        if row is None:
            return None
        return WalletSession(
            id=row["id"],
            wallet_address=row["wallet_address"],
            last_seen=row["last_seen"],
            has_profile=bool(row["has_profile"]),
            **{name: row[name] for name in CACHED_FIELDS},
        )

    def insert_activity(self, wallet_address: str, action: str, details: str, timestamp: int) -> int:
        with self._cursor() as cur:
            cur.execute(
                "INSERT INTO activity_log (wallet_address, action, details, timestamp) VALUES (?, ?, ?, ?)",
                (wallet_address, action, details, timestamp),
            )
            return cur.lastrowid or 0

    def get_recent_activity(self, *, limit: int) -> list[ActivityEntry]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT id, wallet_address, action, details, timestamp
                FROM activity_log ORDER BY timestamp DESC, id DESC LIMIT ?
                """,
                (limit,),
            )
            rows = cur.fetchall()
        return [
            ActivityEntry(
                id=row["id"],
                wallet_address=row["wallet_address"],
                action=row["action"],
                details=row["details"],
                timestamp=row["timestamp"],
            )
            for row in rows
        ]

    def insert_match_result(
        self,
        wallet_address: str,
        matched_with: str,
        compatibility: int,
        timestamp: int,
    ) -> int:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO match_results (wallet_address, matched_with, compatibility, timestamp)
                VALUES (?, ?, ?, ?)
                """,
                (wallet_address, matched_with, compatibility, timestamp),
            )
            return cur.lastrowid or 0

    def get_match_results(self, wallet_address: str, *, limit: int) -> list[MatchResult]:
        with self._cursor() as cur:
            cur.execute(
                """
                SELECT id, wallet_address, matched_with, compatibility, timestamp
                FROM match_results WHERE wallet_address = ?
                ORDER BY timestamp DESC, id DESC LIMIT ?
                """,
                (wallet_address, limit),
            )
            rows = cur.fetchall()
        return [
            MatchResult(
                id=row["id"],
                wallet_address=row["wallet_address"],
                matched_with=row["matched_with"],
                compatibility=row["compatibility"],
                timestamp=row["timestamp"],
            )
            for row in rows
        ]


# -----------------------------------------------------------------------------
# Database facade: single entrypoint; backend is swappable.
# -----------------------------------------------------------------------------


class Database:
    """
    Session cache, activity ledger and match ledger over one backend.

    Every wallet key is normalized here; free-text fields are stored as given.
    Ingestion time comes from `clock` (epoch ms), never from the caller.
    """

    def __init__(self, backend: DatabaseBackend, *, clock: Callable[[], int] = now_ms) -> None:
        self._backend = backend
        self._clock = clock

    def ensure_schema(self) -> None:
        """Create tables and indexes if they do not exist."""
        self._backend.ensure_schema()

    # --- Session cache ---

    def upsert_session(
        self,
        wallet_address: str,
        has_profile: bool,
        *,
        cached_element: int | None = None,
        cached_level: int | None = None,
        cached_xp: int | None = None,
        cached_energy: int | None = None,
        cached_lucky_number: int | None = None,
        cached_win_streak: int | None = None,
        cached_last_fortune: int | None = None,
    ) -> int:
        """
        Create or fully overwrite the cached session for a wallet. Returns its id.

        Full replace, not merge: a cached field omitted here is cleared even if
        the previous upsert set it.
        With has_profile False every cached field is stored unset, whatever was
        passed.
        """
        key = normalize_wallet(wallet_address)
        cached = {
            "cached_element": cached_element,
            "cached_level": cached_level,
            "cached_xp": cached_xp,
            "cached_energy": cached_energy,
            "cached_lucky_number": cached_lucky_number,
            "cached_win_streak": cached_win_streak,
            "cached_last_fortune": cached_last_fortune,
        }
        if not has_profile and any(v is not None for v in cached.values()):
            logger.info("session_cached_fields_dropped", wallet_id=key)
            cached = dict.fromkeys(cached)
        session_id = self._backend.upsert_session(key, has_profile, self._clock(), cached)
        logger.debug("session_upserted", wallet_id=key, has_profile=has_profile, session_id=session_id)
        return session_id

    def get_session(self, wallet_address: str) -> WalletSession | None:
        return self._backend.get_session(normalize_wallet(wallet_address))

    # --- Activity ledger ---

    def log_activity(self, wallet_address: str, action: str, details: str) -> int:
        """Append one activity entry (pure insert). Returns its id."""
        key = normalize_wallet(wallet_address)
        entry_id = self._backend.insert_activity(key, action, details, self._clock())
        logger.debug("activity_logged", wallet_id=key, action=action, entry_id=entry_id)
        return entry_id

    def get_recent_activity(self) -> list[ActivityEntry]:
        """Global feed: the RECENT_ACTIVITY_LIMIT newest entries across all wallets."""
        return self._backend.get_recent_activity(limit=RECENT_ACTIVITY_LIMIT)

    # --- Match ledger ---

    def save_match_result(self, wallet_address: str, matched_with: str, compatibility: int) -> int:
        """Append one match result; both addresses normalized. Returns its id."""
        key = normalize_wallet(wallet_address)
        result_id = self._backend.insert_match_result(
            key, normalize_wallet(matched_with), compatibility, self._clock()
        )
        logger.debug("match_result_saved", wallet_id=key, compatibility=compatibility, result_id=result_id)
        return result_id

    def get_match_results(self, wallet_address: str) -> list[MatchResult]:
        """The MATCH_RESULTS_LIMIT newest results requested by this wallet."""
        return self._backend.get_match_results(normalize_wallet(wallet_address), limit=MATCH_RESULTS_LIMIT)


def get_database(
    path: str | Path | None = None,
    *,
    url: str | None = None,
    clock: Callable[[], int] = now_ms,
) -> Database:
    """
    Return a Database with its schema ensured.

    url: SQLAlchemy URL (e.g. postgresql+psycopg://...); selects SQLAlchemyBackend.
    path: SQLite file used when no url is given. Default: "cosmic.db" in cwd.
    """
    backend: DatabaseBackend
    if url:
        from cosmic_backend.database.sqlalchemy_backend import SQLAlchemyBackend

        backend = SQLAlchemyBackend(url)
    else:
        backend = SQLiteBackend(path if path is not None else Path("cosmic.db"))
    db = Database(backend, clock=clock)
    db.ensure_schema()
    return db

