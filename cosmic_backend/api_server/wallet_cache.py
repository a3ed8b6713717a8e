"""
FastAPI router: wallet session cache, activity feed, match history, dashboard.

The six cache/ledger operations map one-to-one onto Database methods. Bodies are
checked for shape only; addresses are not validated and compatibility is not
range-checked.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from cosmic_backend.api_server.deps import get_db
from cosmic_backend.cosmic_logging import get_logger
from cosmic_backend.database import INT64_MAX, INT64_MIN, Database, WalletSession
from cosmic_backend.services.dashboard import build_dashboard
from cosmic_backend.utils.wallet_utils import normalize_wallet

logger = get_logger(__name__)

router = APIRouter(tags=["wallet-cache"])

# Any value the store can hold; no domain range checks.
StoredInt = Annotated[int, Field(ge=INT64_MIN, le=INT64_MAX)]


# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------


class SessionOut(BaseModel):
    """Cached wallet session (advisory copy of on-chain profile)."""

    id: int
    wallet_address: str = Field(..., description="Normalized (lower-case) address")
    last_seen: int = Field(..., description="Ingestion time of last upsert, epoch ms")
    has_profile: bool
    cached_element: int | None = None
    cached_level: int | None = None
    cached_xp: int | None = None
    cached_energy: int | None = None
    cached_lucky_number: int | None = None
    cached_win_streak: int | None = None
    cached_last_fortune: int | None = Field(None, description="Contract time, epoch seconds")

    @classmethod
    def from_session(cls, session: WalletSession) -> "SessionOut":
        return cls(**session.to_dict())


class UpsertSessionRequest(BaseModel):
    """
    POST /sessions body. Omitted cached fields are cleared, not kept.

    With has_profile false every cached field is stored unset, even when supplied.
    """

    wallet_address: str
    has_profile: bool
    cached_element: StoredInt | None = None
    cached_level: StoredInt | None = None
    cached_xp: StoredInt | None = None
    cached_energy: StoredInt | None = None
    cached_lucky_number: StoredInt | None = None
    cached_win_streak: StoredInt | None = None
    cached_last_fortune: StoredInt | None = None


class UpsertSessionResponse(BaseModel):
    id: int
    wallet_address: str


class SessionLookupResponse(BaseModel):
    """GET /sessions/{address}: found=False with session=null for an unseen address."""

    wallet_address: str
    found: bool
    session: SessionOut | None = None


class LogActivityRequest(BaseModel):
    wallet_address: str
    action: str = Field(..., description="Tag, e.g. profile_created, fortune_claimed, match_found")
    details: str = Field(..., description="Free text; stored with caller's casing")


class SaveMatchRequest(BaseModel):
    wallet_address: str
    matched_with: str
    compatibility: StoredInt = Field(..., description="Percentage as returned by the contract (0-100, not enforced)")


class CreatedResponse(BaseModel):
    id: int


class ActivityOut(BaseModel):
    id: int
    wallet_address: str
    action: str
    details: str
    timestamp: int


class MatchOut(BaseModel):
    id: int
    wallet_address: str
    matched_with: str
    compatibility: int
    timestamp: int


class ProfileSummaryOut(BaseModel):
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


class DashboardResponse(BaseModel):
    wallet_address: str
    session: SessionOut | None = None
    profile: ProfileSummaryOut | None = None
    match_results: list[MatchOut] = Field(default_factory=list)
    recent_activity: list[ActivityOut] = Field(default_factory=list)


# -----------------------------------------------------------------------------
# Session cache
# -----------------------------------------------------------------------------


@router.post("/sessions", response_model=UpsertSessionResponse)
def upsert_session(body: UpsertSessionRequest, db: Database = Depends(get_db)) -> UpsertSessionResponse:
    """Create or fully overwrite the cached session for a wallet."""
    session_id = db.upsert_session(
        body.wallet_address,
        body.has_profile,
        **body.model_dump(exclude={"wallet_address", "has_profile"}),
    )
    return UpsertSessionResponse(id=session_id, wallet_address=normalize_wallet(body.wallet_address))


@router.get("/sessions/{address}", response_model=SessionLookupResponse)
def get_session(address: str, db: Database = Depends(get_db)) -> SessionLookupResponse:
    """Cached session for an address, or found=False. Never 404."""
    session = db.get_session(address)
    return SessionLookupResponse(
        wallet_address=normalize_wallet(address),
        found=session is not None,
        session=SessionOut.from_session(session) if session else None,
    )


# -----------------------------------------------------------------------------
# Ledgers
# -----------------------------------------------------------------------------


@router.post("/activity", response_model=CreatedResponse, status_code=201)
def log_activity(body: LogActivityRequest, db: Database = Depends(get_db)) -> CreatedResponse:
    return CreatedResponse(id=db.log_activity(body.wallet_address, body.action, body.details))


@router.get("/activity/recent", response_model=list[ActivityOut])
def get_recent_activity(db: Database = Depends(get_db)) -> list[ActivityOut]:
    """Global feed, newest first, at most 20 entries."""
    return [ActivityOut(**e.to_dict()) for e in db.get_recent_activity()]


@router.post("/matches", response_model=CreatedResponse, status_code=201)
def save_match_result(body: SaveMatchRequest, db: Database = Depends(get_db)) -> CreatedResponse:
    return CreatedResponse(id=db.save_match_result(body.wallet_address, body.matched_with, body.compatibility))


@router.get("/matches/{address}", response_model=list[MatchOut])
def get_match_results(address: str, db: Database = Depends(get_db)) -> list[MatchOut]:
    """Matches requested by this address, newest first, at most 10."""
    return [MatchOut(**m.to_dict()) for m in db.get_match_results(address)]


# -----------------------------------------------------------------------------
# Dashboard
# -----------------------------------------------------------------------------


@router.get("/dashboard/{address}", response_model=DashboardResponse)
def get_dashboard(address: str, db: Database = Depends(get_db)) -> DashboardResponse:
    view = build_dashboard(db, address)
    logger.debug(
        "dashboard_built",
        wallet_id=view.wallet_address,
        matches=len(view.match_results),
        activity=len(view.recent_activity),
    )
    return DashboardResponse(**view.to_dict())
