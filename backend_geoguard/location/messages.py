"""Display and audit text: formatted coordinates, flag descriptions, hard-failure messages."""

from __future__ import annotations

import math

from backend_geoguard.location.models import Coordinate, RiskFlag, VerificationFailure

FLAG_DESCRIPTIONS: dict[RiskFlag, str] = {
    RiskFlag.GPS_ACCURACY_LOW: "GPS accuracy is below acceptable threshold",
    RiskFlag.OUTSIDE_RADIUS: "Location is outside the permitted work area",
    RiskFlag.IP_LOCATION_MISMATCH: "GPS location does not match approximate IP location",
    RiskFlag.SUSPICIOUS_MOVEMENT: "Detected unusually fast movement between locations",
    RiskFlag.RAPID_LOCATION_CHANGES: "Multiple rapid location changes detected",
    RiskFlag.IMPOSSIBLE_SPEED: "Movement speed exceeds physically possible limits",
    RiskFlag.CONSISTENT_PERFECT_ACCURACY: "GPS accuracy is suspiciously consistent and perfect",
    RiskFlag.LOCATION_CLUSTERING: "Majority of check-ins from identical location",
    RiskFlag.TIME_PATTERN_ANOMALY: "Check-in timing follows suspicious regular pattern",
    RiskFlag.DEVICE_INCONSISTENCY: "Multiple different devices used recently",
}

# Surfaced verbatim to the employee when the hard gate blocks a clock action
FAILURE_MESSAGES: dict[VerificationFailure, str] = {
    VerificationFailure.ACCURACY_TOO_LOW: "GPS accuracy is too low. Please move to an area with better signal.",
    VerificationFailure.OUTSIDE_RADIUS: "You are not within the required distance of the workplace.",
    VerificationFailure.IP_MISMATCH: "Location verification failed. Please contact your manager.",
}


def describe_flag(flag: RiskFlag) -> str:
    return FLAG_DESCRIPTIONS.get(flag, "Unknown anti-spoofing flag")


def verification_failure_message(reason: VerificationFailure) -> str:
    return FAILURE_MESSAGES.get(reason, "An unknown location error occurred.")


def format_location(coordinate: Coordinate, accuracy: float | None = None) -> str:
    """
    Format a coordinate for UI and audit logs.

    >>> format_location(Coordinate(13.756789, 100.501834), 15.7)
    '13.756789, 100.501834 (±16m)'

    Accuracy rounds half up to whole meters; None or 0 omits the suffix.
    """
    text = f"{coordinate.latitude:.6f}, {coordinate.longitude:.6f}"
    if accuracy:
        text += f" (±{math.floor(accuracy + 0.5)}m)"
    return text
