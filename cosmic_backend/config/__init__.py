"""
Configuration management for the Cosmic backend.

Loads settings from environment variables and the project .env file.
Exposes a single source of truth for all service configuration.
"""

from cosmic_backend.config.settings import Settings, get_settings  # noqa: F401

__all__ = ["Settings", "get_settings"]
