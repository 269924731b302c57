"""
Environment variable loading and validation for GeoGuard.

- LOCATION_ACCURACY_THRESHOLD: max accepted GPS accuracy in meters (default: 100)
- GEOFENCE_DEFAULT_RADIUS_M: default workplace radius in meters (default: 50)
- RISK_SCORE_THRESHOLD: risk score at or above which a clock event is invalid (default: 50)
- IP_MISMATCH_THRESHOLD_M: GPS vs IP location distance that fails verification (default: 10000)
- IP_CHECK_ENABLED: turn the IP cross-check on/off (default: true)
- IP_GEOLOCATION_URL / IP_GEOLOCATION_TIMEOUT_SEC: IP lookup endpoint and timeout
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from backend_geoguard.core.exceptions import ConfigurationError

# Project root: config is backend_geoguard/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_IP_GEOLOCATION_URL = "https://ipapi.co/{ip}/json/"
# Used when the reading carries no client IP: resolves the caller's own egress IP
DEFAULT_SELF_IP_GEOLOCATION_URL = "https://ipapi.co/json/"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def load_geoguard_env() -> None:
    """Load .env from project root. Safe to call multiple times; existing env wins."""
    load_dotenv(_ENV_PATH, override=False)


def env_str(name: str, default: str) -> str:
    return (os.getenv(name) or "").strip() or default


def env_float(name: str, default: float) -> float:
    """Read a float from env; empty means default, garbage raises ConfigurationError."""
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from e


def env_bool(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    if raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean flag, got {raw!r}")
