"""
Domain models for database entities.

Wallet session cache, activity log and match results. Used by both backends;
no ORM coupling so the backends stay swappable.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

CACHED_FIELDS = (
    "cached_element",
    "cached_level",
    "cached_xp",
    "cached_energy",
    "cached_lucky_number",
    "cached_win_streak",
    "cached_last_fortune",
)


@dataclass
class WalletSession:
    """Last known display snapshot for one wallet (advisory; the chain is authoritative)."""

    id: int
    wallet_address: str
    last_seen: int
    """Ingestion time of the last upsert, epoch milliseconds."""
    has_profile: bool
    cached_element: int | None = None
    cached_level: int | None = None
    cached_xp: int | None = None
    cached_energy: int | None = None
    cached_lucky_number: int | None = None
    cached_win_streak: int | None = None
    cached_last_fortune: int | None = None
    """Contract time of the last fortune claim, epoch seconds."""

    def cached_fields(self) -> dict[str, int | None]:
        return {name: getattr(self, name) for name in CACHED_FIELDS}

    @property
    def has_cached_profile(self) -> bool:
        return all(v is not None for v in self.cached_fields().values())

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class ActivityEntry:
    """One user action in the global feed."""

    id: int
    wallet_address: str
    action: str
    details: str
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class MatchResult:
    """One completed compatibility computation, keyed by the requester."""

    id: int
    wallet_address: str
    matched_with: str
    compatibility: int
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
