"""
Structured logging for the Cosmic backend.

JSON logs with timestamp, wallet_id and event_type.
Use get_logger() in every module for aggregation-friendly output.
"""

from cosmic_backend.cosmic_logging.logger import bind_wallet, get_logger

__all__ = ["bind_wallet", "get_logger"]
