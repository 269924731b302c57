"""
Pytest fixtures for GeoGuard tests. Isolates settings from the host environment
and stubs the IP geolocation lookup so no test touches the network.
"""

from __future__ import annotations

import pytest

GEOGUARD_ENV_VARS = (
    "LOCATION_ACCURACY_THRESHOLD",
    "GEOFENCE_DEFAULT_RADIUS_M",
    "RISK_SCORE_THRESHOLD",
    "IP_MISMATCH_THRESHOLD_M",
    "IP_CHECK_ENABLED",
    "IP_GEOLOCATION_URL",
    "IP_GEOLOCATION_TIMEOUT_SEC",
    "API_HOST",
    "API_PORT",
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """
    Unset GeoGuard env vars and reset the cached settings around every test.
    Tests that need an override set it with monkeypatch and call get_settings.cache_clear().
    """
    from backend_geoguard.config.settings import get_settings

    for name in GEOGUARD_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def ip_calls():
    """Records the IP addresses the stubbed lookup was asked to resolve."""
    return []


@pytest.fixture
def client(ip_calls):
    """
    FastAPI TestClient with the IP lookup dependency replaced by a stub that
    records the requested IP and reports the lookup as unavailable.
    """
    from fastapi.testclient import TestClient

    from backend_geoguard.api_server.location_routes import get_ip_lookup
    from backend_geoguard.api_server.server import app

    def _unavailable(ip_address):
        ip_calls.append(ip_address)
        return None

    app.dependency_overrides[get_ip_lookup] = lambda: _unavailable
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
