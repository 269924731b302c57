"""
Time pattern analysis: mechanically regular intervals between events.

Humans clock in with minutes of jitter; scripted submissions tend to fire on
an exact cadence. Readings carry Unix seconds but intervals are compared in
milliseconds: the variance rule is unit-dependent and is calibrated on ms.
"""

from __future__ import annotations

import statistics
from dataclasses import dataclass
from typing import Sequence

from backend_geoguard.location.models import (
    AnalyzerOutcome,
    Evaluated,
    LocationReading,
    NotEnoughData,
    RiskFlag,
)

ANALYZER_NAME = "time_analysis"

MS_PER_SECOND = 1000.0


@dataclass(frozen=True)
class TimingConfig:
    min_history: int = 5
    min_intervals: int = 5
    """Flag only with more than this many intervals."""
    variance_ratio: float = 0.1
    """Flag when interval variance is below this fraction of the mean interval."""
    risk: int = 15
    interval_scale: float = MS_PER_SECOND
    """Multiplier from timestamp seconds to the unit the variance rule is applied in."""


def analyze_time_patterns(
    history: Sequence[LocationReading],
    config: TimingConfig | None = None,
) -> AnalyzerOutcome:
    cfg = config or TimingConfig()
    if len(history) < cfg.min_history:
        return NotEnoughData(ANALYZER_NAME, required=cfg.min_history, available=len(history))

    intervals = [
        (b.timestamp - a.timestamp) * cfg.interval_scale for a, b in zip(history, history[1:])
    ]
    avg_interval = statistics.fmean(intervals)
    variance = statistics.pvariance(intervals, mu=avg_interval)

    flags: set[RiskFlag] = set()
    risk = 0
    if variance < avg_interval * cfg.variance_ratio and len(intervals) > cfg.min_intervals:
        flags.add(RiskFlag.TIME_PATTERN_ANOMALY)
        risk += cfg.risk

    return Evaluated(
        analyzer=ANALYZER_NAME,
        flags=frozenset(flags),
        risk_score=risk,
        details={
            "interval_count": len(intervals),
            "avg_interval_ms": round(avg_interval, 3),
            "interval_variance": round(variance, 3),
            "intervals_ms": intervals,
        },
    )
