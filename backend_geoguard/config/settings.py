"""
Application settings and environment configuration.

Responsibilities:
- Load configuration from environment variables and the project .env file.
- Validate settings and provide defaults for optional ones.
- Expose typed settings (accuracy threshold, geofence radius, risk threshold,
  IP lookup, API bind) for use across the location engine and API server.

Settings are read once per process and cached; the engine never mutates them.
Tests call get_settings.cache_clear() after changing the environment.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from backend_geoguard.config.env import (
    DEFAULT_IP_GEOLOCATION_URL,
    env_bool,
    env_float,
    env_int,
    env_str,
    load_geoguard_env,
)
from backend_geoguard.core.exceptions import ConfigurationError

DEFAULT_ACCURACY_THRESHOLD_M = 100.0
DEFAULT_GEOFENCE_RADIUS_M = 50.0
DEFAULT_RISK_THRESHOLD = 50
DEFAULT_IP_MISMATCH_THRESHOLD_M = 10_000.0
DEFAULT_IP_LOOKUP_TIMEOUT_SEC = 5.0


@dataclass(frozen=True)
class Settings:
    """Typed, immutable view of the environment configuration."""

    accuracy_threshold_m: float = DEFAULT_ACCURACY_THRESHOLD_M
    geofence_default_radius_m: float = DEFAULT_GEOFENCE_RADIUS_M
    risk_threshold: int = DEFAULT_RISK_THRESHOLD
    ip_mismatch_threshold_m: float = DEFAULT_IP_MISMATCH_THRESHOLD_M
    ip_check_enabled: bool = True
    ip_geolocation_url: str = DEFAULT_IP_GEOLOCATION_URL
    ip_lookup_timeout_sec: float = DEFAULT_IP_LOOKUP_TIMEOUT_SEC
    log_level: str = "INFO"
    api_host: str = "0.0.0.0"
    api_port: int = 8000


def load_settings() -> Settings:
    """Build Settings from the environment (after loading .env). Uncached."""
    load_geoguard_env()
    settings = Settings(
        accuracy_threshold_m=env_float("LOCATION_ACCURACY_THRESHOLD", DEFAULT_ACCURACY_THRESHOLD_M),
        geofence_default_radius_m=env_float("GEOFENCE_DEFAULT_RADIUS_M", DEFAULT_GEOFENCE_RADIUS_M),
        risk_threshold=env_int("RISK_SCORE_THRESHOLD", DEFAULT_RISK_THRESHOLD),
        ip_mismatch_threshold_m=env_float("IP_MISMATCH_THRESHOLD_M", DEFAULT_IP_MISMATCH_THRESHOLD_M),
        ip_check_enabled=env_bool("IP_CHECK_ENABLED", True),
        ip_geolocation_url=env_str("IP_GEOLOCATION_URL", DEFAULT_IP_GEOLOCATION_URL),
        ip_lookup_timeout_sec=env_float("IP_GEOLOCATION_TIMEOUT_SEC", DEFAULT_IP_LOOKUP_TIMEOUT_SEC),
        log_level=env_str("LOG_LEVEL", "INFO").upper(),
        api_host=env_str("API_HOST", "0.0.0.0"),
        api_port=env_int("API_PORT", 8000),
    )
    if settings.accuracy_threshold_m <= 0:
        raise ConfigurationError("LOCATION_ACCURACY_THRESHOLD must be positive")
    if settings.geofence_default_radius_m <= 0:
        raise ConfigurationError("GEOFENCE_DEFAULT_RADIUS_M must be positive")
    if not 0 <= settings.risk_threshold <= 100:
        raise ConfigurationError("RISK_SCORE_THRESHOLD must be within 0-100")
    if settings.ip_lookup_timeout_sec <= 0:
        raise ConfigurationError("IP_GEOLOCATION_TIMEOUT_SEC must be positive")
    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the current application settings.

    Returns:
        Settings with accuracy_threshold_m, geofence_default_radius_m,
        risk_threshold, ip_* lookup options, log_level, api_host, api_port.
    """
    return load_settings()
