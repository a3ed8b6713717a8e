"""
Main entrypoint: FastAPI server for the Cosmic Astrology backend.

Env: COSMIC_DB_PATH or DATABASE_URL, BASE_RPC_URL, COSMIC_CONTRACT_ADDRESS, API_HOST, API_PORT, LOG_LEVEL.

Equivalent: uvicorn cosmic_backend.api_server.app:app --host 0.0.0.0 --port 8000
"""

import uvicorn

# Configure structured JSON logging before other imports that may log
from cosmic_backend.cosmic_logging import get_logger
from cosmic_backend.config import get_settings

logger = get_logger("main")


def main() -> None:
    """Load settings and run the API server in the main thread."""
    settings = get_settings()

    from cosmic_backend.api_server.app import app

    logger.info(
        "main_server_starting",
        host=settings.api_host,
        port=settings.api_port,
        store="sqlalchemy" if settings.database_url else str(settings.db_path),
    )
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level)


if __name__ == "__main__":
    main()
