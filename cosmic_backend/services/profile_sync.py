"""
Profile sync and action recording.

Runs after the chain has answered (or a transaction has confirmed) and writes
the matching cache snapshot and ledger entries. Writes are issued in order and
each one commits on its own: if a later write fails, earlier ones stay, and the
caller re-issues whatever is missing.
"""

from __future__ import annotations

from dataclasses import dataclass

from cosmic_backend.chain.contract import CosmicContract
from cosmic_backend.core.exceptions import (
    ProfileRequiredError,
    SignerNotConfiguredError,
    StoreUnavailableError,
)
from cosmic_backend.cosmic_logging import bind_wallet
from cosmic_backend.database import Database, WalletSession
from cosmic_backend.utils.wallet_utils import normalize_wallet, short_address

ACTION_PROFILE_CREATED = "profile_created"
ACTION_FORTUNE_CLAIMED = "fortune_claimed"
ACTION_MATCH_FOUND = "match_found"

PROFILE_CREATED_DETAILS = "Created cosmic profile"
FORTUNE_CLAIMED_DETAILS = "Claimed daily fortune"


@dataclass
class MatchOutcome:
    """Result of compute_match: the stored match row id and the activity row id."""

    wallet_address: str
    matched_with: str
    compatibility: int
    match_id: int
    activity_id: int


@dataclass
class RecordedAction:
    activity_id: int
    session: WalletSession | None
    tx_hash: str | None = None


def match_details(other_address: str, compatibility: int) -> str:
    return f"Matched with {short_address(other_address)} ({compatibility}%)"


def refresh_profile(db: Database, contract: CosmicContract, wallet_address: str) -> WalletSession:
    """
    Read profile existence and fields from chain and overwrite the cached session.

    With no on-chain profile the session is stored with has_profile=False and
    every cached field cleared.
    """
    log = bind_wallet(wallet_address)
    contract.ensure_network()
    profile = contract.get_profile(wallet_address)
    if profile is not None:
        db.upsert_session(wallet_address, True, **profile.as_cache_fields())
    else:
        db.upsert_session(wallet_address, False)
    session = db.get_session(wallet_address)
    if session is None:
        raise StoreUnavailableError(f"Session for {wallet_address} missing after upsert")
    log.info("profile_refreshed", has_profile=session.has_profile, level=session.cached_level)
    return session


def _record(
    db: Database,
    wallet_address: str,
    action: str,
    details: str,
    contract: CosmicContract | None,
) -> RecordedAction:
    activity_id = db.log_activity(wallet_address, action, details)
    session = refresh_profile(db, contract, wallet_address) if contract is not None else db.get_session(wallet_address)
    return RecordedAction(activity_id=activity_id, session=session)


def record_profile_created(
    db: Database,
    wallet_address: str,
    contract: CosmicContract | None = None,
) -> RecordedAction:
    """Log a confirmed createProfile() and, given a contract, refresh the cache."""
    return _record(db, wallet_address, ACTION_PROFILE_CREATED, PROFILE_CREATED_DETAILS, contract)


def record_fortune_claimed(
    db: Database,
    wallet_address: str,
    contract: CosmicContract | None = None,
) -> RecordedAction:
    """Log a confirmed claimDailyFortune() and, given a contract, refresh the cache."""
    return _record(db, wallet_address, ACTION_FORTUNE_CLAIMED, FORTUNE_CLAIMED_DETAILS, contract)


def compute_match(
    db: Database,
    contract: CosmicContract,
    wallet_address: str,
    other_address: str,
) -> MatchOutcome:
    """
    Ask the contract for wallet_address's compatibility with other_address,
    then save the match result and log a match_found entry (in that order).
    """
    log = bind_wallet(wallet_address)
    contract.ensure_network()
    if not contract.has_profile(wallet_address):
        raise ProfileRequiredError(f"{wallet_address} has no cosmic profile")
    compatibility = contract.match_with_address(other_address, sender=wallet_address)
    match_id = db.save_match_result(wallet_address, other_address, compatibility)
    activity_id = db.log_activity(
        wallet_address,
        ACTION_MATCH_FOUND,
        match_details(other_address, compatibility),
    )
    log.info("match_recorded", matched_with=normalize_wallet(other_address), compatibility=compatibility)
    return MatchOutcome(
        wallet_address=normalize_wallet(wallet_address),
        matched_with=normalize_wallet(other_address),
        compatibility=compatibility,
        match_id=match_id,
        activity_id=activity_id,
    )


def _signer_address(contract: CosmicContract, fn_name: str) -> str:
    sender = contract.signer_address
    if sender is None:
        raise SignerNotConfiguredError(f"{fn_name} needs SIGNER_PRIVATE_KEY")
    return sender


def create_profile_onchain(db: Database, contract: CosmicContract) -> RecordedAction:
    """Send createProfile() from the configured signer, then record it."""
    sender = _signer_address(contract, "createProfile")
    tx_hash = contract.create_profile()
    recorded = record_profile_created(db, sender, contract)
    recorded.tx_hash = tx_hash
    return recorded


def claim_fortune_onchain(db: Database, contract: CosmicContract) -> RecordedAction:
    """Send claimDailyFortune() from the configured signer, then record it."""
    sender = _signer_address(contract, "claimDailyFortune")
    tx_hash = contract.claim_daily_fortune()
    recorded = record_fortune_claimed(db, sender, contract)
    recorded.tx_hash = tx_hash
    return recorded
