"""
FastAPI server: wallet session cache and ledgers over HTTP.

Mounts the cache/ledger router and the chain-backed router. Backend errors map
to one status code per type with a {"detail": ...} body. Config via env (see
cosmic_backend.config).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from cosmic_backend import __version__
from cosmic_backend.api_server.chain_actions import router as chain_router
from cosmic_backend.api_server.deps import get_db
from cosmic_backend.api_server.wallet_cache import router as cache_router
from cosmic_backend.core.exceptions import (
    ChainCallError,
    CosmicBackendError,
    InvalidAddressError,
    ProfileRequiredError,
    SignerNotConfiguredError,
    StoreUnavailableError,
    ValueOutOfRangeError,
    WrongNetworkError,
)
from cosmic_backend.cosmic_logging import get_logger

logger = get_logger(__name__)


def status_for(exc: CosmicBackendError) -> int:
    """HTTP status for a backend error. Most specific type first."""
    if isinstance(exc, InvalidAddressError):
        return 400
    if isinstance(exc, (WrongNetworkError, ProfileRequiredError)):
        return 409
    if isinstance(exc, ValueOutOfRangeError):
        return 422
    if isinstance(exc, SignerNotConfiguredError):
        return 501
    if isinstance(exc, ChainCallError):
        return 502
    if isinstance(exc, StoreUnavailableError):
        return 503
    return 500


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Ensure the store schema exists before serving."""
    try:
        get_db()
        logger.info("api_store_ready")
    except StoreUnavailableError as e:
        # Serve anyway; store-backed endpoints answer 503 until it recovers.
        logger.warning("api_store_unavailable_at_startup", error=str(e))
    yield
    logger.info("api_shutdown")


app = FastAPI(
    title="Cosmic Astrology Backend",
    description="Wallet session cache, activity feed and match history for the on-chain astrology contract.",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(cache_router)
app.include_router(chain_router)


@app.get("/health")
def health() -> dict[str, str]:
    """Liveness probe: API is up."""
    return {"status": "ok"}


@app.exception_handler(CosmicBackendError)
def backend_error_handler(request: Any, exc: CosmicBackendError) -> JSONResponse:
    status = status_for(exc)
    log = logger.error if status >= 500 else logger.info
    log("api_backend_error", path=str(request.url.path), error_type=type(exc).__name__, error=str(exc))
    return JSONResponse(status_code=status, content={"detail": str(exc)})

