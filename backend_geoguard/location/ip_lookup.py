"""
Coarse IP-based geolocation used as a secondary cross-check against GPS spoofing.

Best effort only: a single HTTP attempt with a strict timeout. Every failure
(timeout, network error, HTTP error, malformed or out-of-range payload) is
logged and returns None so the caller skips the check instead of failing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Optional

import requests

from backend_geoguard.config.env import DEFAULT_SELF_IP_GEOLOCATION_URL
from backend_geoguard.config.settings import Settings, get_settings
from backend_geoguard.core.exceptions import InvalidCoordinateError
from backend_geoguard.geoguard_logging import get_logger
from backend_geoguard.location.models import Coordinate

logger = get_logger(__name__)

# IP geolocation is city-level at best
IP_LOCATION_ACCURACY_M = 10_000.0
USER_AGENT = "GeoGuard/0.1 (+location-verification)"


@dataclass(frozen=True)
class IpLocation:
    coordinate: Coordinate
    city: str | None = None
    country: str | None = None
    accuracy_meters: float = IP_LOCATION_ACCURACY_M


IpLookup = Callable[[Optional[str]], Optional[IpLocation]]


def parse_ip_payload(data: Any) -> IpLocation | None:
    """Turn an ipapi-style JSON payload into an IpLocation; None if unusable."""
    if not isinstance(data, dict):
        return None
    if data.get("error"):
        logger.warning("ip_geolocation_error_payload", reason=str(data.get("reason") or data.get("error")))
        return None
    try:
        coordinate = Coordinate(float(data["latitude"]), float(data["longitude"]))
    except (KeyError, TypeError, ValueError, InvalidCoordinateError) as e:
        logger.warning("ip_geolocation_malformed_payload", error=str(e))
        return None
    return IpLocation(
        coordinate=coordinate,
        city=data.get("city"),
        country=data.get("country_name") or data.get("country"),
    )


class IpGeolocationClient:
    """
    HTTP client for an ipapi-compatible lookup service.

    url_template must contain "{ip}"; when no IP is given the self-lookup
    URL is used, which resolves the egress IP of this process.
    """

    def __init__(
        self,
        url_template: str,
        timeout_sec: float,
        self_lookup_url: str = DEFAULT_SELF_IP_GEOLOCATION_URL,
    ) -> None:
        self.url_template = url_template
        self.timeout_sec = timeout_sec
        self.self_lookup_url = self_lookup_url

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> IpGeolocationClient:
        s = settings or get_settings()
        return cls(url_template=s.ip_geolocation_url, timeout_sec=s.ip_lookup_timeout_sec)

    def _url_for(self, ip_address: str | None) -> str:
        if ip_address:
            return self.url_template.format(ip=ip_address)
        return self.self_lookup_url

    def lookup(self, ip_address: str | None = None) -> IpLocation | None:
        url = self._url_for(ip_address)
        try:
            r = requests.get(url, timeout=self.timeout_sec, headers={"User-Agent": USER_AGENT})
            r.raise_for_status()
            data = r.json()
        except requests.Timeout:
            logger.warning("ip_geolocation_timeout", timeout_sec=self.timeout_sec)
            return None
        except requests.RequestException as e:
            logger.warning("ip_geolocation_request_failed", error=str(e))
            return None
        except ValueError as e:
            logger.warning("ip_geolocation_invalid_json", error=str(e))
            return None
        location = parse_ip_payload(data)
        if location is not None:
            logger.debug(
                "ip_geolocation_resolved",
                city=location.city,
                country=location.country,
            )
        return location


def default_ip_lookup(settings: Settings | None = None) -> IpLookup:
    """Lookup callable configured from environment settings."""
    return IpGeolocationClient.from_settings(settings).lookup
