"""
FastAPI router: POST /location/verify, /location/validate, /location/format.

Thin adapter between the time-tracking subsystem and the location engine.
Request payloads are range-checked by pydantic (422 on bad coordinates);
history is supplied by the caller on every request and never stored here.
"""

from __future__ import annotations

import ipaddress
import time
from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field

from backend_geoguard.geoguard_logging import get_logger
from backend_geoguard.location import (
    Coordinate,
    LocationReading,
    ValidationContext,
    WorkplaceGeofence,
    describe_flag,
    format_location,
    validate_with_anti_spoofing,
    verification_failure_message,
    verify_location,
)
from backend_geoguard.location.ip_lookup import IpLookup, default_ip_lookup

logger = get_logger(__name__)

router = APIRouter(prefix="/location", tags=["location"])


def get_ip_lookup() -> IpLookup:
    """Dependency: IP geolocation lookup configured from settings (overridable in tests)."""
    return default_ip_lookup()


def _valid_ip(value: str | None) -> str | None:
    if not value:
        return None
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return None
    return value


def _client_ip(request: Request) -> str | None:
    """
    Best guess at the employee's IP when the reading carries none.

    Behind a proxy the first X-Forwarded-For hop is used and the peer address
    is never consulted (it is the proxy). Without the header the peer address
    is used if it is a real IP (TestClient sends 'testclient').

    Server-to-server callers (the time-tracking backend) should always send
    reading.ip_address: their peer address is their own server, not the
    employee's device.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded is not None:
        return _valid_ip(forwarded.split(",")[0].strip())
    return _valid_ip(request.client.host if request.client else None)


# -----------------------------------------------------------------------------
# Request / response models
# -----------------------------------------------------------------------------

class ReadingIn(BaseModel):
    """One GPS fix as captured by the client device."""

    latitude: float = Field(..., ge=-90, le=90, description="Latitude (decimal degrees)")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude (decimal degrees)")
    accuracy: float = Field(..., ge=0, description="Device-reported accuracy radius (m)")
    timestamp: float | None = Field(None, description="Unix seconds; defaults to server time")
    device_id: str | None = Field(None, max_length=256)
    user_agent: str | None = Field(None, max_length=1024)
    ip_address: str | None = Field(None, max_length=64, description="Client IP for the IP cross-check")

    def to_reading(self, fallback_ip: str | None = None) -> LocationReading:
        return LocationReading(
            coordinate=Coordinate(self.latitude, self.longitude),
            accuracy_meters=self.accuracy,
            timestamp=self.timestamp if self.timestamp is not None else time.time(),
            device_id=self.device_id,
            user_agent=self.user_agent,
            ip_address=self.ip_address or fallback_ip,
        )


class HistoryEntryIn(ReadingIn):
    """Past reading from the caller's location log; its capture time is mandatory."""

    timestamp: float = Field(..., description="Unix seconds when the fix was taken")


class GeofenceIn(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    radius_meters: float | None = Field(None, gt=0, description="Defaults to GEOFENCE_DEFAULT_RADIUS_M")

    def to_geofence(self) -> WorkplaceGeofence:
        return WorkplaceGeofence(Coordinate(self.latitude, self.longitude), self.radius_meters)


class VerifyRequest(BaseModel):
    reading: ReadingIn
    geofence: GeofenceIn
    check_ip: bool | None = Field(None, description="Force the IP cross-check on/off")


class ValidateRequest(BaseModel):
    reading: ReadingIn
    geofence: GeofenceIn
    employee_id: str = Field(..., min_length=1, max_length=128)
    location_history: list[HistoryEntryIn] = Field(default_factory=list)
    previous_clock_ins: list[HistoryEntryIn] = Field(default_factory=list)
    check_ip: bool | None = None


class FormatRequest(BaseModel):
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    accuracy: float | None = Field(None, ge=0)


class FormatResponse(BaseModel):
    formatted: str


# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------

@router.post("/verify")
def verify(
    body: VerifyRequest,
    request: Request,
    ip_lookup: IpLookup = Depends(get_ip_lookup),
) -> dict[str, Any]:
    """Hard pass/fail gate. A failed result carries the user-facing message."""
    reading = body.reading.to_reading(_client_ip(request))
    result = verify_location(
        reading,
        body.geofence.to_geofence(),
        ip_lookup=ip_lookup,
        check_ip=body.check_ip,
    )
    payload = result.to_dict()
    payload["message"] = verification_failure_message(result.reason) if result.reason else None
    logger.info(
        "location_verify_called",
        verified=result.verified,
        reason=payload["reason"],
        ip_check=payload["ip_check"],
    )
    return payload


@router.post("/validate")
def validate(
    body: ValidateRequest,
    request: Request,
    ip_lookup: IpLookup = Depends(get_ip_lookup),
) -> dict[str, Any]:
    """Composite anti-spoofing evaluation (advisory risk score + flags)."""
    reading = body.reading.to_reading(_client_ip(request))
    context = ValidationContext(
        geofence=body.geofence.to_geofence(),
        employee_id=body.employee_id,
        location_history=[r.to_reading() for r in body.location_history],
        previously_accepted_clock_ins=[r.to_reading() for r in body.previous_clock_ins],
    )
    result = validate_with_anti_spoofing(reading, context, ip_lookup=ip_lookup, check_ip=body.check_ip)
    payload = result.to_dict()
    payload["flag_descriptions"] = {f.value: describe_flag(f) for f in result.flags}
    if result.verification.reason is not None:
        payload["message"] = verification_failure_message(result.verification.reason)
    return payload


@router.post("/format", response_model=FormatResponse)
def format_(body: FormatRequest) -> FormatResponse:
    return FormatResponse(
        formatted=format_location(Coordinate(body.latitude, body.longitude), body.accuracy)
    )
