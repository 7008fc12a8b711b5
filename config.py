"""
config.py
Centralized configuration for the account dashboard client.

Loads settings from a .env file and defines the endpoint presets.
Separates configuration from application logic (SOLID's SRP).
"""

import os
import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple
from dotenv import load_dotenv

from accounts import ConfigError, normalize_endpoint

logger = logging.getLogger(__name__)

# --- Load .env file ---
# Create a file named .env in the working directory, for example:
# ACCOUNT_API_URL=http://127.0.0.1:5000
# ACCOUNT_API_TIMEOUT=5
# TRADER_USER_ID=demo_user
load_dotenv()

# The Flask account service's local-development address.
DEFAULT_API_URL = "http://127.0.0.1:5000"

ENDPOINT_PRESETS: List[Tuple[str, str, str]] = [
    ("Local Development", "http://127.0.0.1:5000", "Flask server running locally"),
    ("Localhost Alternative", "http://localhost:5000", "Alternative local address"),
]

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _optional_env(name: str) -> Optional[str]:
    value = os.getenv(name, "").strip()
    return value or None


@dataclass(frozen=True)
class Config:
    """
    Holds all configuration for the application, loaded from environment variables.
    """
    # Remote account service
    api_base_url: str = field(default_factory=lambda: os.getenv("ACCOUNT_API_URL", DEFAULT_API_URL))
    request_timeout_seconds: float = field(default_factory=lambda: float(os.getenv("ACCOUNT_API_TIMEOUT", 5.0)))

    # Identity used by the command line front end
    user_id: Optional[str] = field(default_factory=lambda: _optional_env("TRADER_USER_ID"))
    email: Optional[str] = field(default_factory=lambda: _optional_env("TRADER_EMAIL"))

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())


def load_config() -> Config:
    """Loads and validates the application configuration."""
    try:
        cfg = Config()
    except ValueError as e:
        raise ValueError(f"ACCOUNT_API_TIMEOUT must be a number: {e}") from e

    try:
        cfg = replace(cfg, api_base_url=normalize_endpoint(cfg.api_base_url))
    except ConfigError as e:
        raise ValueError(f"ACCOUNT_API_URL is invalid: {e.message}") from e
    if cfg.request_timeout_seconds <= 0:
        raise ValueError("ACCOUNT_API_TIMEOUT must be greater than zero")
    if cfg.log_level not in _LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}")
    if not cfg.user_id:
        logger.warning("TRADER_USER_ID is not set. Account commands will run signed out.")

    logger.info(f"Configuration loaded. API: {cfg.api_base_url}, Timeout: {cfg.request_timeout_seconds}s")
    return cfg
