"""
Movement / speed analysis: flag physically implausible travel between readings.

Each of the last N history readings is paired with the current reading and
the implied travel speed is computed. Zero elapsed time between two readings
counts as infinite speed, never as a division error.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from backend_geoguard.location.distance import distance
from backend_geoguard.location.models import (
    AnalyzerOutcome,
    Evaluated,
    LocationReading,
    NotEnoughData,
    RiskFlag,
)

ANALYZER_NAME = "movement_analysis"

SUSPICIOUS_SPEED_KMH = 100.0
IMPOSSIBLE_SPEED_KMH = 200.0


@dataclass(frozen=True)
class MovementConfig:
    history_window: int = 5
    """How many of the most recent history readings to compare against."""
    suspicious_speed_kmh: float = SUSPICIOUS_SPEED_KMH
    impossible_speed_kmh: float = IMPOSSIBLE_SPEED_KMH
    risk_per_rapid_change: int = 10
    max_rapid_change_risk: int = 30
    impossible_speed_risk: int = 40


def calculate_speed_kmh(previous: LocationReading, current: LocationReading) -> float:
    """Implied travel speed in km/h; math.inf when both readings share a timestamp."""
    meters = distance(previous.coordinate, current.coordinate)
    elapsed_sec = abs(current.timestamp - previous.timestamp)
    if elapsed_sec == 0:
        return math.inf
    return meters / elapsed_sec * 3.6


def detect_suspicious_movement(
    previous: LocationReading,
    current: LocationReading,
    *,
    max_speed_kmh: float = SUSPICIOUS_SPEED_KMH,
) -> bool:
    """True if moving from previous to current implies more than max_speed_kmh."""
    return calculate_speed_kmh(previous, current) > max_speed_kmh


def _speed_for_json(speed: float) -> float | None:
    return round(speed, 2) if math.isfinite(speed) else None


def analyze_movement(
    current: LocationReading,
    history: Sequence[LocationReading],
    config: MovementConfig | None = None,
) -> AnalyzerOutcome:
    """
    Count rapid location changes between recent history and the current reading.

    SUSPICIOUS_MOVEMENT adds risk_per_rapid_change per change (capped);
    IMPOSSIBLE_SPEED adds a flat penalty if any change exceeds the
    impossible-speed threshold.
    """
    cfg = config or MovementConfig()
    if not history:
        return NotEnoughData(ANALYZER_NAME, required=1, available=0)

    recent = list(history)[-cfg.history_window:]
    rapid_changes: list[dict] = []
    max_speed = 0.0
    for previous in recent:
        speed = calculate_speed_kmh(previous, current)
        max_speed = max(max_speed, speed)
        if speed > cfg.suspicious_speed_kmh:
            rapid_changes.append(
                {
                    "from": previous.to_dict(),
                    "distance_m": round(distance(previous.coordinate, current.coordinate), 2),
                    "elapsed_sec": abs(current.timestamp - previous.timestamp),
                    "speed_kmh": _speed_for_json(speed),
                    "instantaneous": math.isinf(speed),
                }
            )

    flags: set[RiskFlag] = set()
    risk = 0
    if rapid_changes:
        flags.add(RiskFlag.SUSPICIOUS_MOVEMENT)
        risk += min(len(rapid_changes) * cfg.risk_per_rapid_change, cfg.max_rapid_change_risk)

    # Teleportation: any single hop faster than any ground transport
    if max_speed > cfg.impossible_speed_kmh:
        flags.add(RiskFlag.IMPOSSIBLE_SPEED)
        risk += cfg.impossible_speed_risk

    return Evaluated(
        analyzer=ANALYZER_NAME,
        flags=frozenset(flags),
        risk_score=risk,
        details={
            "compared_readings": len(recent),
            "change_count": len(rapid_changes),
            "max_speed_kmh": _speed_for_json(max_speed),
            "rapid_changes": rapid_changes,
        },
    )
