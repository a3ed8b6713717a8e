"""Read-side dashboard and fortune cooldown helpers."""

from __future__ import annotations

from cosmic_backend.services.dashboard import build_dashboard, summarize_profile
from cosmic_backend.services.fortune import (
    FORTUNE_COOLDOWN_SEC,
    can_claim_fortune,
    element_name,
    fortune_cooldown_remaining,
    xp_for_next_level,
)

from conftest import ALICE, BOB, CAROL

LAST_FORTUNE = 1_700_000_000


def _cache_profile(db, wallet=ALICE, last_fortune=LAST_FORTUNE):
    db.upsert_session(
        wallet,
        True,
        cached_element=2,
        cached_level=3,
        cached_xp=150,
        cached_energy=40,
        cached_lucky_number=7,
        cached_win_streak=4,
        cached_last_fortune=last_fortune,
    )


def test_fortune_cooldown():
    assert can_claim_fortune(LAST_FORTUNE, LAST_FORTUNE + FORTUNE_COOLDOWN_SEC) is True
    assert can_claim_fortune(LAST_FORTUNE, LAST_FORTUNE + FORTUNE_COOLDOWN_SEC - 1) is False
    assert fortune_cooldown_remaining(LAST_FORTUNE, LAST_FORTUNE + 3600.7) == FORTUNE_COOLDOWN_SEC - 3600
    assert fortune_cooldown_remaining(LAST_FORTUNE, LAST_FORTUNE + 10 * FORTUNE_COOLDOWN_SEC) == 0
    # Never claimed: lastFortune is 0 on chain
    assert can_claim_fortune(0, LAST_FORTUNE) is True


def test_element_names_and_xp():
    assert [element_name(i) for i in range(4)] == ["Fire", "Water", "Air", "Earth"]
    assert element_name(9) == "Fire"
    assert element_name(-1) == "Fire"
    assert xp_for_next_level(3) == 300


def test_dashboard_for_unknown_wallet(db):
    db.log_activity(BOB, "profile_created", "Created cosmic profile")
    view = build_dashboard(db, ALICE)
    assert view.wallet_address == ALICE.lower()
    assert view.session is None
    assert view.profile is None
    assert view.match_results == []
    assert [e.wallet_address for e in view.recent_activity] == [BOB.lower()]


def test_dashboard_composes_session_matches_and_feed(db):
    _cache_profile(db)
    db.save_match_result(ALICE, BOB, 72)
    db.save_match_result(CAROL, BOB, 10)
    db.log_activity(ALICE, "match_found", "Matched with 0xcdcd...cdcd (72%)")

    view = build_dashboard(db, ALICE.lower(), now=LAST_FORTUNE + 60)
    assert view.session is not None and view.session.has_profile
    assert [m.compatibility for m in view.match_results] == [72]
    assert view.recent_activity[0].action == "match_found"

    profile = view.profile
    assert profile is not None
    assert profile.element_name == "Air"
    assert profile.xp_for_next_level == 300
    assert profile.can_claim_fortune is False
    assert profile.fortune_cooldown_sec == FORTUNE_COOLDOWN_SEC - 60


def test_summarize_profile_requires_complete_snapshot(db):
    db.upsert_session(ALICE, True, cached_level=3)
    assert summarize_profile(db.get_session(ALICE)) is None
    db.upsert_session(ALICE, False)
    assert summarize_profile(db.get_session(ALICE)) is None
    assert summarize_profile(None) is None


def test_dashboard_to_dict_is_plain(db):
    _cache_profile(db)
    data = build_dashboard(db, ALICE, now=LAST_FORTUNE).to_dict()
    assert data["session"]["cached_level"] == 3
    assert data["profile"]["element"] == 2
    assert data["match_results"] == []
