"""
Data models for location verification input and output.

Responsibilities:
- Define immutable value types for coordinates, readings, and geofences.
- Define verification results, risk flags, per-analyzer outcomes, and the
  aggregated anti-spoofing result.
- Used by the verifier, analyzers, aggregator, API responses, and audit logs.

Validation happens at construction: out-of-range coordinates and negative
accuracy raise immediately instead of producing nonsensical distances.
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence, Union

from backend_geoguard.config.settings import get_settings
from backend_geoguard.core.exceptions import InvalidCoordinateError, InvalidReadingError


class RiskFlag(str, Enum):
    GPS_ACCURACY_LOW = "GPS_ACCURACY_LOW"
    OUTSIDE_RADIUS = "OUTSIDE_RADIUS"
    IP_LOCATION_MISMATCH = "IP_LOCATION_MISMATCH"
    SUSPICIOUS_MOVEMENT = "SUSPICIOUS_MOVEMENT"
    RAPID_LOCATION_CHANGES = "RAPID_LOCATION_CHANGES"
    IMPOSSIBLE_SPEED = "IMPOSSIBLE_SPEED"
    CONSISTENT_PERFECT_ACCURACY = "CONSISTENT_PERFECT_ACCURACY"
    LOCATION_CLUSTERING = "LOCATION_CLUSTERING"
    TIME_PATTERN_ANOMALY = "TIME_PATTERN_ANOMALY"
    DEVICE_INCONSISTENCY = "DEVICE_INCONSISTENCY"


class VerificationFailure(str, Enum):
    ACCURACY_TOO_LOW = "ACCURACY_TOO_LOW"
    OUTSIDE_RADIUS = "OUTSIDE_RADIUS"
    IP_MISMATCH = "IP_MISMATCH"


class IpCheckStatus(str, Enum):
    """What happened to the best-effort IP cross-check during one verification."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"
    """Lookup attempted but unavailable (timeout, network error, bad payload)."""
    DISABLED = "disabled"
    NOT_RUN = "not_run"
    """An earlier step already failed."""


def _require_finite(value: Any, name: str, error: type[Exception]) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise error(f"{name} must be a number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise error(f"{name} must be finite, got {value!r}")
    return value


@dataclass(frozen=True)
class Coordinate:
    """WGS84 point in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        lat = _require_finite(self.latitude, "latitude", InvalidCoordinateError)
        lng = _require_finite(self.longitude, "longitude", InvalidCoordinateError)
        if not -90.0 <= lat <= 90.0:
            raise InvalidCoordinateError(f"latitude must be between -90 and 90, got {lat}")
        if not -180.0 <= lng <= 180.0:
            raise InvalidCoordinateError(f"longitude must be between -180 and 180, got {lng}")
        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "longitude", lng)

    def to_dict(self) -> dict[str, float]:
        return {"latitude": self.latitude, "longitude": self.longitude}


@dataclass(frozen=True)
class LocationReading:
    """
    One untrusted GPS fix reported by a client device.

    Created once per clock attempt and never mutated. History slices passed
    to the engine are sequences of these, ordered by timestamp.
    """

    coordinate: Coordinate
    accuracy_meters: float
    """Device-reported uncertainty radius; lower is more precise."""
    timestamp: float
    """Unix epoch seconds when the fix was taken."""
    device_id: str | None = None
    user_agent: str | None = None
    ip_address: str | None = None
    """Client IP for the coarse IP cross-check; None resolves the caller's egress IP."""

    def __post_init__(self) -> None:
        accuracy = _require_finite(self.accuracy_meters, "accuracy_meters", InvalidReadingError)
        if accuracy < 0:
            raise InvalidReadingError(f"accuracy_meters must be >= 0, got {accuracy}")
        object.__setattr__(self, "accuracy_meters", accuracy)
        object.__setattr__(
            self, "timestamp", _require_finite(self.timestamp, "timestamp", InvalidReadingError)
        )

    @classmethod
    def create(
        cls,
        coordinate: Coordinate,
        accuracy: float,
        user_agent: str | None = None,
        device_id: str | None = None,
        ip_address: str | None = None,
    ) -> LocationReading:
        """Build a history entry stamped with the current time."""
        return cls(
            coordinate=coordinate,
            accuracy_meters=accuracy,
            timestamp=time.time(),
            device_id=device_id,
            user_agent=user_agent,
            ip_address=ip_address,
        )

    @property
    def has_device_metadata(self) -> bool:
        return bool(self.device_id) or bool(self.user_agent)

    def to_dict(self) -> dict[str, Any]:
        return {
            "latitude": self.coordinate.latitude,
            "longitude": self.coordinate.longitude,
            "accuracy": self.accuracy_meters,
            "timestamp": self.timestamp,
            "device_id": self.device_id,
            "user_agent": self.user_agent,
        }


@dataclass(frozen=True)
class WorkplaceGeofence:
    """Workplace reference point plus the radius a clock event must fall within."""

    coordinate: Coordinate
    radius_meters: float | None = None
    """None resolves to GEOFENCE_DEFAULT_RADIUS_M from settings (50 m unless configured)."""

    def __post_init__(self) -> None:
        if self.radius_meters is None:
            object.__setattr__(self, "radius_meters", get_settings().geofence_default_radius_m)
        radius = _require_finite(self.radius_meters, "radius_meters", InvalidReadingError)
        if radius <= 0:
            raise InvalidReadingError(f"radius_meters must be > 0, got {radius}")
        object.__setattr__(self, "radius_meters", radius)


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of the mandatory pass/fail location gate."""

    verified: bool
    accuracy: float
    reason: VerificationFailure | None = None
    distance: float | None = None
    """Meters from the geofence center; None when accuracy failed first."""
    ip_distance: float | None = None
    """Meters between GPS and IP coordinates when the IP lookup succeeded."""
    ip_check: IpCheckStatus = IpCheckStatus.NOT_RUN

    def to_dict(self) -> dict[str, Any]:
        return {
            "verified": self.verified,
            "reason": self.reason.value if self.reason else None,
            "distance": round(self.distance, 2) if self.distance is not None else None,
            "accuracy": self.accuracy,
            "ip_distance": round(self.ip_distance, 2) if self.ip_distance is not None else None,
            "ip_check": self.ip_check.value,
        }


@dataclass(frozen=True)
class ValidationContext:
    """
    Caller-supplied, read-only context for one anti-spoofing evaluation.

    Sequences are copied into tuples so the engine never keeps a reference
    to the caller's (append-only) location log.
    """

    geofence: WorkplaceGeofence
    employee_id: str
    radius_meters: float | None = None
    """Overrides geofence.radius_meters when set."""
    location_history: Sequence[LocationReading] = ()
    previously_accepted_clock_ins: Sequence[LocationReading] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "location_history", tuple(self.location_history))
        object.__setattr__(
            self, "previously_accepted_clock_ins", tuple(self.previously_accepted_clock_ins)
        )

    @property
    def effective_radius(self) -> float:
        if self.radius_meters is not None:
            return self.radius_meters
        return self.geofence.radius_meters


@dataclass(frozen=True)
class NotEnoughData:
    """Analyzer skipped: history too short to produce a signal."""

    analyzer: str
    required: int
    available: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "not_enough_data",
            "required": self.required,
            "available": self.available,
        }


@dataclass(frozen=True)
class Evaluated:
    """Analyzer ran; flags may be empty (clean signal) and risk may be 0."""

    analyzer: str
    flags: frozenset[RiskFlag]
    risk_score: int
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "evaluated",
            "flags": sorted(f.value for f in self.flags),
            "risk_score": self.risk_score,
            "details": self.details,
        }


AnalyzerOutcome = Union[NotEnoughData, Evaluated]


@dataclass(frozen=True)
class AntiSpoofingResult:
    """
    Composite anti-spoofing judgment for one clock event.

    risk_score is clamped to [0, 100]; uncapped_score keeps the raw sum so
    reviewers can see how far past saturation the signals went.
    """

    is_valid: bool
    risk_score: int
    flags: frozenset[RiskFlag]
    verification: VerificationResult
    analyses: dict[str, AnalyzerOutcome]
    uncapped_score: int = 0

    @property
    def details(self) -> dict[str, Any]:
        """Per-analyzer diagnostic payloads, preserved for audit and manual review."""
        out: dict[str, Any] = {"basic_verification": self.verification.to_dict()}
        for name, outcome in self.analyses.items():
            out[name] = outcome.to_dict()
        return out

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "risk_score": self.risk_score,
            "uncapped_score": self.uncapped_score,
            "flags": sorted(f.value for f in self.flags),
            "details": self.details,
        }
