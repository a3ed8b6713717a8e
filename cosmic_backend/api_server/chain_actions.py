"""
FastAPI router: chain-backed cache refresh and action recording.

The browser wallet signs createProfile / claimDailyFortune itself and calls the
/actions endpoints once the transaction is confirmed. Refresh and match only
need read calls, so the server makes them directly.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from cosmic_backend.api_server.deps import get_contract, get_db
from cosmic_backend.api_server.wallet_cache import SessionOut
from cosmic_backend.chain.contract import CosmicContract
from cosmic_backend.cosmic_logging import get_logger
from cosmic_backend.database import Database
from cosmic_backend.services.profile_sync import (
    RecordedAction,
    compute_match,
    record_fortune_claimed,
    record_profile_created,
    refresh_profile,
)

logger = get_logger(__name__)

router = APIRouter(tags=["chain"])


class RecordActionRequest(BaseModel):
    """POST /actions/* body: the wallet whose transaction confirmed."""

    wallet_address: str
    sync_from_chain: bool = Field(True, description="Refresh the cached session from chain after logging")


class RecordActionResponse(BaseModel):
    id: int = Field(..., description="Activity entry id")
    session: SessionOut | None = None


class ComputeMatchRequest(BaseModel):
    wallet_address: str = Field(..., description="Requester; must have an on-chain profile")
    matched_with: str = Field(..., description="Counterpart EVM address")


class MatchOutcomeResponse(BaseModel):
    wallet_address: str
    matched_with: str
    compatibility: int
    match_id: int
    activity_id: int


def _to_response(recorded: RecordedAction) -> RecordActionResponse:
    return RecordActionResponse(
        id=recorded.activity_id,
        session=SessionOut.from_session(recorded.session) if recorded.session else None,
    )


@router.post("/sessions/{address}/refresh", response_model=SessionOut)
def refresh_session(
    address: str,
    db: Database = Depends(get_db),
    contract: CosmicContract = Depends(get_contract),
) -> SessionOut:
    """Read profile from chain and overwrite the cached session."""
    return SessionOut.from_session(refresh_profile(db, contract, address))


@router.post("/actions/profile-created", response_model=RecordActionResponse, status_code=201)
def profile_created(
    body: RecordActionRequest,
    db: Database = Depends(get_db),
    contract: CosmicContract = Depends(get_contract),
) -> RecordActionResponse:
    recorded = record_profile_created(db, body.wallet_address, contract if body.sync_from_chain else None)
    return _to_response(recorded)


@router.post("/actions/fortune-claimed", response_model=RecordActionResponse, status_code=201)
def fortune_claimed(
    body: RecordActionRequest,
    db: Database = Depends(get_db),
    contract: CosmicContract = Depends(get_contract),
) -> RecordActionResponse:
    recorded = record_fortune_claimed(db, body.wallet_address, contract if body.sync_from_chain else None)
    return _to_response(recorded)


@router.post("/matches/compute", response_model=MatchOutcomeResponse, status_code=201)
def match_compute(
    body: ComputeMatchRequest,
    db: Database = Depends(get_db),
    contract: CosmicContract = Depends(get_contract),
) -> MatchOutcomeResponse:
    """Compute compatibility on chain, then save it and log match_found."""
    outcome = compute_match(db, contract, body.wallet_address, body.matched_with)
    return MatchOutcomeResponse(
        wallet_address=outcome.wallet_address,
        matched_with=outcome.matched_with,
        compatibility=outcome.compatibility,
        match_id=outcome.match_id,
        activity_id=outcome.activity_id,
    )
