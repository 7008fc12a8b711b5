"""
Utility Functions
-----------------

Stateless, pure helpers used throughout the package, mostly for
normalizing user input and sanitizing data before it is displayed
or logged.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from .errors import ConfigError

logger = logging.getLogger(__name__)


def normalize_endpoint(url: Optional[str]) -> str:
    """
    Trims whitespace and strips a single trailing slash.
    e.g., "  http://127.0.0.1:5000/ " -> "http://127.0.0.1:5000"
    e.g., "http://host//"            -> "http://host/"

    Only absolute http(s) URLs are accepted.
    """
    trimmed = (url or "").strip()
    if trimmed.endswith("/"):
        trimmed = trimmed[:-1]
    if not trimmed:
        raise ConfigError("Please enter a valid API URL", code=ConfigError.EMPTY_ENDPOINT)
    try:
        parsed = httpx.URL(trimmed)
    except httpx.InvalidURL:
        parsed = None
    if parsed is None or parsed.scheme not in ("http", "https") or not parsed.host:
        raise ConfigError(f"API URL must start with http:// or https://: {trimmed}",
                          code=ConfigError.INVALID_ENDPOINT)
    return trimmed


def derive_nickname(platform: str) -> str:
    return f"{platform} Account"


def mask_login(login: Optional[str]) -> str:
    """
    Keeps only the last 3 characters of an account login for log output.
    e.g., mask_login("12345678") -> "*****678"
    """
    if not login:
        return ""
    visible = login[-3:] if len(login) > 3 else login[-1:]
    return "*" * (len(login) - len(visible)) + visible


def truncate_secret(secret: Optional[str], keep: int = 4) -> Optional[str]:
    """Returns a short prefix of a secret, suitable for display."""
    if not secret:
        return None
    return f"{secret[:keep]}..."


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Parses the service's ISO-8601 timestamps. Naive values are taken as UTC."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, datetime):
        parsed = raw
    else:
        text = str(raw).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.warning(f"Unparseable timestamp from service: {raw!r}")
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def extract_error_message(response: httpx.Response, fallback: str) -> str:
    """Pulls the `error` string out of an error body, if there is one."""
    try:
        data = response.json()
    except ValueError:
        return fallback
    if isinstance(data, dict):
        message = data.get("error")
        if isinstance(message, str) and message.strip():
            return message
    return fallback


def clean(value: Optional[str]) -> str:
    return (value or "").strip()
