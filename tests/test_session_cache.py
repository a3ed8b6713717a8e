"""
Session cache: idempotent upsert, case-insensitive keys, full-overwrite semantics.

Runs against both backends via the parametrized `db` fixture.
"""

from __future__ import annotations

import pytest

from cosmic_backend.core.exceptions import StoreUnavailableError, ValueOutOfRangeError
from cosmic_backend.database import CACHED_FIELDS, SQLiteBackend

from conftest import ALICE

FULL_PROFILE = {
    "cached_element": 1,
    "cached_level": 2,
    "cached_xp": 3,
    "cached_energy": 4,
    "cached_lucky_number": 5,
    "cached_win_streak": 6,
    "cached_last_fortune": 7,
}


def test_get_session_unknown_address_returns_none(db):
    assert db.get_session(ALICE) is None


def test_upsert_twice_is_idempotent(db):
    """Two identical upserts leave one record with the supplied values."""
    first = db.upsert_session(ALICE, True, **FULL_PROFILE)
    second = db.upsert_session(ALICE, True, **FULL_PROFILE)
    assert first == second
    session = db.get_session(ALICE)
    assert session is not None
    assert session.id == first
    assert session.has_profile is True
    assert session.cached_fields() == FULL_PROFILE
    assert session.has_cached_profile is True


def test_lookup_is_case_insensitive(db):
    session_id = db.upsert_session(ALICE, True, **FULL_PROFILE)
    session = db.get_session(ALICE.lower())
    assert session is not None
    assert session.id == session_id
    assert session.wallet_address == ALICE.lower()
    # Lower-case key upserts the same row
    assert db.upsert_session(ALICE.lower(), False) == session_id


def test_upsert_overwrites_instead_of_merging(db):
    """has_profile=False with no fields clears every cached field from the earlier upsert."""
    db.upsert_session(ALICE, True, **FULL_PROFILE)
    db.upsert_session(ALICE, False)
    session = db.get_session(ALICE)
    assert session is not None
    assert session.has_profile is False
    assert all(getattr(session, name) is None for name in CACHED_FIELDS)
    assert session.has_cached_profile is False


def test_partial_upsert_clears_omitted_fields(db):
    db.upsert_session(ALICE, True, **FULL_PROFILE)
    db.upsert_session(ALICE, True, cached_level=9)
    session = db.get_session(ALICE)
    assert session.cached_level == 9
    assert session.cached_xp is None
    assert session.cached_last_fortune is None


def test_upsert_refreshes_last_seen(db, clock):
    db.upsert_session(ALICE, False)
    first_seen = db.get_session(ALICE).last_seen
    clock.now += 5_000
    db.upsert_session(ALICE, False)
    assert db.get_session(ALICE).last_seen == first_seen + 5_000 + clock.step


def test_no_range_validation(db):
    """Out-of-range values are cached as given."""
    db.upsert_session(ALICE, True, cached_element=42, cached_level=-1)
    session = db.get_session(ALICE)
    assert session.cached_element == 42
    assert session.cached_level == -1


def test_malformed_key_is_stored(db):
    session_id = db.upsert_session("Not A Wallet", False)
    session = db.get_session("NOT A WALLET")
    assert session is not None
    assert session.id == session_id
    assert session.wallet_address == "not a wallet"


def test_distinct_wallets_get_distinct_rows(db):
    a = db.upsert_session(ALICE, False)
    b = db.upsert_session("0x" + "cd" * 20, False)
    assert a != b


def test_store_failure_raises_store_unavailable(tmp_path):
    """A path that cannot be opened as a database surfaces as StoreUnavailableError."""
    backend = SQLiteBackend(tmp_path)  # a directory
    with pytest.raises(StoreUnavailableError):
        backend.get_session(ALICE)


def test_no_profile_drops_supplied_cached_fields(db):
    """Cached fields are stored unset whenever has_profile is False."""
    db.upsert_session(ALICE, False, cached_element=1, cached_level=2, cached_last_fortune=7)
    session = db.get_session(ALICE)
    assert session.has_profile is False
    assert all(getattr(session, f) is None for f in CACHED_FIELDS)


def test_cached_value_beyond_int64_raises_out_of_range(db):
    with pytest.raises(ValueOutOfRangeError):
        db.upsert_session(ALICE, True, cached_xp=2**64)
    assert db.get_session(ALICE) is None


def test_int64_extremes_are_stored(db):
    db.upsert_session(ALICE, True, cached_xp=2**63 - 1, cached_level=-(2**63))
    session = db.get_session(ALICE)
    assert session.cached_xp == 2**63 - 1
    assert session.cached_level == -(2**63)
