"""
SQLAlchemy-backed store for DATABASE_URL deployments (PostgreSQL, or SQLite URLs in tests).

Same tables and semantics as SQLiteBackend; the Database facade does not know which
one it is talking to.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

from sqlalchemy import BigInteger, Boolean, Column, Integer, String, Text, create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from cosmic_backend.core.exceptions import StoreUnavailableError, ValueOutOfRangeError
from cosmic_backend.cosmic_logging import get_logger
from cosmic_backend.database.database import DatabaseBackend
from cosmic_backend.database.models import (
    CACHED_FIELDS,
    ActivityEntry,
    MatchResult,
    WalletSession,
)

logger = get_logger(__name__)

Base = declarative_base()

# -----------------------------------------------------------------------------
# SQLAlchemy models
# -----------------------------------------------------------------------------


class WalletSessionRow(Base):
    """One row per normalized wallet address."""

    __tablename__ = "wallet_sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    wallet_address = Column(String(128), unique=True, nullable=False, index=True)
    last_seen = Column(BigInteger, nullable=False)  # epoch ms
    has_profile = Column(Boolean, nullable=False, default=False)
    cached_element = Column(BigInteger, nullable=True)
    cached_level = Column(BigInteger, nullable=True)
    cached_xp = Column(BigInteger, nullable=True)
    cached_energy = Column(BigInteger, nullable=True)
    cached_lucky_number = Column(BigInteger, nullable=True)
    cached_win_streak = Column(BigInteger, nullable=True)
    cached_last_fortune = Column(BigInteger, nullable=True)  # epoch s, contract time

    def to_model(self) -> WalletSession:
        return WalletSession(
            id=self.id,
            wallet_address=self.wallet_address,
            last_seen=self.last_seen,
            has_profile=bool(self.has_profile),
            **{name: getattr(self, name) for name in CACHED_FIELDS},
        )


class ActivityLogRow(Base):
    """Append-only global activity feed."""

    __tablename__ = "activity_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    wallet_address = Column(String(128), nullable=False, index=True)
    action = Column(String(64), nullable=False)
    details = Column(Text, nullable=False)
    timestamp = Column(BigInteger, nullable=False, index=True)  # epoch ms

    def to_model(self) -> ActivityEntry:
        return ActivityEntry(
            id=self.id,
            wallet_address=self.wallet_address,
            action=self.action,
            details=self.details,
            timestamp=self.timestamp,
        )


class MatchResultRow(Base):
    """Append-only match history, keyed by requester."""

    __tablename__ = "match_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    wallet_address = Column(String(128), nullable=False, index=True)
    matched_with = Column(String(128), nullable=False)
    compatibility = Column(BigInteger, nullable=False)
    timestamp = Column(BigInteger, nullable=False, index=True)  # epoch ms

    def to_model(self) -> MatchResult:
        return MatchResult(
            id=self.id,
            wallet_address=self.wallet_address,
            matched_with=self.matched_with,
            compatibility=self.compatibility,
            timestamp=self.timestamp,
        )


# -----------------------------------------------------------------------------
# Backend
# -----------------------------------------------------------------------------


def _safe_url(url: str) -> str:
    """Strip credentials and query string for logging."""
    return url.split("?")[0].split("@")[-1].split("//")[-1]


class SQLAlchemyBackend(DatabaseBackend):
    """One engine per backend instance; one session per operation."""

    def __init__(self, url: str, *, engine: Any = None) -> None:
        self._url = url
        if engine is None:
            connect_args = {}
            if url.startswith("sqlite"):
                connect_args["check_same_thread"] = False
            engine = create_engine(url, connect_args=connect_args, pool_pre_ping=True)
        self._engine = engine
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        logger.info("sqlalchemy_backend_engine", url=_safe_url(url))

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        """Single session. Commits on success, rolls back on error."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StoreUnavailableError(str(e)) from e
        except OverflowError as e:
            session.rollback()
            raise ValueOutOfRangeError(str(e)) from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ensure_schema(self) -> None:
        try:
            Base.metadata.create_all(bind=self._engine)
        except SQLAlchemyError as e:
            logger.exception("sqlalchemy_backend_schema_failed", url=_safe_url(self._url), error=str(e))
            raise StoreUnavailableError(str(e)) from e

    def _write_session(
        self,
        wallet_address: str,
        has_profile: bool,
        last_seen: int,
        cached: dict[str, int | None],
    ) -> int:
        with self._session_scope() as session:
            row = (
                session.query(WalletSessionRow)
                .filter(WalletSessionRow.wallet_address == wallet_address)
                .first()
            )
            if row is None:
                row = WalletSessionRow(wallet_address=wallet_address)
                session.add(row)
            row.last_seen = last_seen
            row.has_profile = has_profile
            for name in CACHED_FIELDS:
                setattr(row, name, cached.get(name))
            session.flush()
            return row.id

    def upsert_session(
        self,
        wallet_address: str,
        has_profile: bool,
        last_seen: int,
        cached: dict[str, int | None],
    ) -> int:
        try:
            return self._write_session(wallet_address, has_profile, last_seen, cached)
        except StoreUnavailableError as e:
            # Concurrent first insert for the same key lost the race; the row exists now.
            if not isinstance(e.__cause__, IntegrityError):
                raise
            logger.info("session_insert_race", wallet_id=wallet_address)
            return self._write_session(wallet_address, has_profile, last_seen, cached)

    def get_session(self, wallet_address: str) -> WalletSession | None:
        with self._session_scope() as session:
            row = (
                session.query(WalletSessionRow)
                .filter(WalletSessionRow.wallet_address == wallet_address)
                .first()
            )
            return row.to_model() if row else None

    def insert_activity(self, wallet_address: str, action: str, details: str, timestamp: int) -> int:
        with self._session_scope() as session:
            row = ActivityLogRow(
                wallet_address=wallet_address,
                action=action,
                details=details,
                timestamp=timestamp,
            )
            session.add(row)
            session.flush()
            return row.id

    def get_recent_activity(self, *, limit: int) -> list[ActivityEntry]:
        with self._session_scope() as session:
            rows = (
                session.query(ActivityLogRow)
                .order_by(ActivityLogRow.timestamp.desc(), ActivityLogRow.id.desc())
                .limit(limit)
                .all()
            )
            return [r.to_model() for r in rows]

    def insert_match_result(
        self,
        wallet_address: str,
        matched_with: str,
        compatibility: int,
        timestamp: int,
    ) -> int:
        with self._session_scope() as session:
            row = MatchResultRow(
                wallet_address=wallet_address,
                matched_with=matched_with,
                compatibility=compatibility,
                timestamp=timestamp,
            )
            session.add(row)
            session.flush()
            return row.id

    def get_match_results(self, wallet_address: str, *, limit: int) -> list[MatchResult]:
        with self._session_scope() as session:
            rows = (
                session.query(MatchResultRow)
                .filter(MatchResultRow.wallet_address == wallet_address)
                .order_by(MatchResultRow.timestamp.desc(), MatchResultRow.id.desc())
                .limit(limit)
                .all()
            )
            return [r.to_model() for r in rows]
