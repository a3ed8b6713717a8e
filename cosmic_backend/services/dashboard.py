"""
Read-side views for a connected wallet.

Session, match history and the global activity feed are read independently;
each reflects its own latest committed state, with no cross-table snapshot.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from cosmic_backend.database import ActivityEntry, Database, MatchResult, WalletSession
from cosmic_backend.services.fortune import (
    can_claim_fortune,
    element_name,
    fortune_cooldown_remaining,
    xp_for_next_level,
)
from cosmic_backend.utils.wallet_utils import normalize_wallet


@dataclass
class ProfileSummary:
    """Display fields derived from a cached profile snapshot at read time."""

    element: int
    element_name: str
    level: int
    xp: int
    xp_for_next_level: int
    energy: int
    lucky_number: int
    win_streak: int
    last_fortune: int
    can_claim_fortune: bool
    fortune_cooldown_sec: int


@dataclass
class DashboardView:
    wallet_address: str
    session: WalletSession | None
    profile: ProfileSummary | None
    match_results: list[MatchResult] = field(default_factory=list)
    recent_activity: list[ActivityEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def summarize_profile(session: WalletSession | None, now: float | None = None) -> ProfileSummary | None:
    """ProfileSummary for a session with a complete cached snapshot, else None."""
    if session is None or not session.has_profile or not session.has_cached_profile:
        return None
    return ProfileSummary(
        element=session.cached_element,
        element_name=element_name(session.cached_element),
        level=session.cached_level,
        xp=session.cached_xp,
        xp_for_next_level=xp_for_next_level(session.cached_level),
        energy=session.cached_energy,
        lucky_number=session.cached_lucky_number,
        win_streak=session.cached_win_streak,
        last_fortune=session.cached_last_fortune,
        can_claim_fortune=can_claim_fortune(session.cached_last_fortune, now),
        fortune_cooldown_sec=fortune_cooldown_remaining(session.cached_last_fortune, now),
    )


def build_dashboard(db: Database, wallet_address: str, *, now: float | None = None) -> DashboardView:
    """Compose session, profile summary, the wallet's matches and the global feed."""
    session = db.get_session(wallet_address)
    return DashboardView(
        wallet_address=normalize_wallet(wallet_address),
        session=session,
        profile=summarize_profile(session, now),
        match_results=db.get_match_results(wallet_address),
        recent_activity=db.get_recent_activity(),
    )
