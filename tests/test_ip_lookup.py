"""
Tests for the IP geolocation client (ip_lookup.IpGeolocationClient).

Uses mocked requests.get: success payloads, timeouts, connection errors,
HTTP errors, and malformed JSON. Every failure must degrade to None.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests

from backend_geoguard.location.ip_lookup import (
    IP_LOCATION_ACCURACY_M,
    IpGeolocationClient,
    default_ip_lookup,
    parse_ip_payload,
)
from backend_geoguard.location.models import Coordinate, IpCheckStatus, LocationReading, WorkplaceGeofence
from backend_geoguard.location.verifier import verify_location

TEMPLATE = "https://ipapi.co/{ip}/json/"
BANGKOK_PAYLOAD = {
    "ip": "203.0.113.7",
    "city": "Bangkok",
    "country_name": "Thailand",
    "latitude": 13.7563,
    "longitude": 100.5018,
}


def _response(payload=None, status_error: Exception | None = None, json_error: Exception | None = None):
    resp = MagicMock()
    if status_error is not None:
        resp.raise_for_status.side_effect = status_error
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    return resp


def _client() -> IpGeolocationClient:
    return IpGeolocationClient(url_template=TEMPLATE, timeout_sec=5.0)


def test_lookup_success():
    with patch("backend_geoguard.location.ip_lookup.requests.get", return_value=_response(BANGKOK_PAYLOAD)) as get:
        loc = _client().lookup("203.0.113.7")
    assert loc is not None
    assert loc.coordinate == Coordinate(13.7563, 100.5018)
    assert loc.city == "Bangkok"
    assert loc.country == "Thailand"
    assert loc.accuracy_meters == IP_LOCATION_ACCURACY_M
    args, kwargs = get.call_args
    assert args[0] == "https://ipapi.co/203.0.113.7/json/"
    assert kwargs["timeout"] == 5.0


def test_lookup_without_ip_uses_self_lookup_url():
    with patch("backend_geoguard.location.ip_lookup.requests.get", return_value=_response(BANGKOK_PAYLOAD)) as get:
        _client().lookup(None)
    assert get.call_args[0][0] == "https://ipapi.co/json/"


def test_lookup_string_coordinates_are_parsed():
    payload = dict(BANGKOK_PAYLOAD, latitude="13.7563", longitude="100.5018")
    with patch("backend_geoguard.location.ip_lookup.requests.get", return_value=_response(payload)):
        loc = _client().lookup("203.0.113.7")
    assert loc is not None
    assert loc.coordinate.latitude == 13.7563


@pytest.mark.parametrize(
    "error",
    [
        requests.Timeout("read timed out"),
        requests.ConnectionError("connection refused"),
        requests.RequestException("generic"),
    ],
)
def test_lookup_network_failures_return_none(error):
    with patch("backend_geoguard.location.ip_lookup.requests.get", side_effect=error) as get:
        assert _client().lookup("203.0.113.7") is None
    # Single attempt, never retried
    assert get.call_count == 1


def test_lookup_http_error_returns_none():
    resp = _response(BANGKOK_PAYLOAD, status_error=requests.HTTPError("429 Too Many Requests"))
    with patch("backend_geoguard.location.ip_lookup.requests.get", return_value=resp):
        assert _client().lookup("203.0.113.7") is None


def test_lookup_invalid_json_returns_none():
    resp = _response(json_error=ValueError("Expecting value"))
    with patch("backend_geoguard.location.ip_lookup.requests.get", return_value=resp):
        assert _client().lookup("203.0.113.7") is None


@pytest.mark.parametrize(
    "payload",
    [
        None,
        [],
        {"error": True, "reason": "RateLimited"},
        {"city": "Nowhere"},
        {"latitude": None, "longitude": 100.0},
        {"latitude": "abc", "longitude": 100.0},
        {"latitude": 123.0, "longitude": 100.0},
    ],
)
def test_parse_malformed_payloads(payload):
    assert parse_ip_payload(payload) is None


def test_client_from_settings(monkeypatch):
    from backend_geoguard.config.settings import get_settings

    monkeypatch.setenv("IP_GEOLOCATION_URL", "https://geo.example.com/{ip}")
    monkeypatch.setenv("IP_GEOLOCATION_TIMEOUT_SEC", "2.5")
    get_settings.cache_clear()
    client = IpGeolocationClient.from_settings()
    assert client.url_template == "https://geo.example.com/{ip}"
    assert client.timeout_sec == 2.5


def test_verify_location_skips_ip_check_on_timeout():
    """Default lookup wiring: a timing-out service leaves verification intact."""
    reading = LocationReading(Coordinate(13.7563, 100.5018), 10.0, 1_700_000_000.0, ip_address="203.0.113.7")
    geofence = WorkplaceGeofence(Coordinate(13.7563, 100.5018), 50.0)
    with patch("backend_geoguard.location.ip_lookup.requests.get", side_effect=requests.Timeout()) as get:
        result = verify_location(reading, geofence, ip_lookup=default_ip_lookup())
    assert result.verified is True
    assert result.ip_check == IpCheckStatus.SKIPPED
    assert get.call_args[1]["timeout"] == 5.0
