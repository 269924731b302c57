"""
Application-level exceptions.

Responsibilities:
- Define domain exceptions (invalid coordinates, invalid readings, hard
  location-verification failures, bad configuration).
- Provide consistent error codes and messages for API error handling.
"""

from __future__ import annotations

from typing import Any


class GeoGuardError(Exception):
    """Base class for all GeoGuard errors. `code` is stable for API payloads."""

    code = "GEOGUARD_ERROR"

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": str(self)}


class InvalidCoordinateError(GeoGuardError, ValueError):
    """Latitude/longitude outside the valid range or not a finite number."""

    code = "INVALID_COORDINATE"


class InvalidReadingError(GeoGuardError, ValueError):
    """Location reading or geofence with an impossible value (e.g. negative accuracy)."""

    code = "INVALID_READING"


class ConfigurationError(GeoGuardError):
    """Environment configuration could not be parsed."""

    code = "CONFIGURATION_ERROR"


class LocationVerificationError(GeoGuardError):
    """
    Hard-gate failure: the clock action must be blocked.

    `reason` is the VerificationFailure value and `message` is the stable
    user-facing text surfaced verbatim to the UI.
    """

    code = "LOCATION_VERIFICATION_FAILED"

    def __init__(self, reason: Any, message: str, result: Any = None) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.result = result

    def to_dict(self) -> dict[str, Any]:
        reason = getattr(self.reason, "value", self.reason)
        out: dict[str, Any] = {"code": self.code, "reason": reason, "message": self.message}
        if self.result is not None and hasattr(self.result, "to_dict"):
            out["verification"] = self.result.to_dict()
        return out
