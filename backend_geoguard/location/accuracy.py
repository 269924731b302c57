"""
GPS accuracy pattern analysis.

Real GPS noise is rarely both near-perfect and invariant. Spoofing tools
typically report a fixed high-precision value, so a history dominated by
<= 5 m accuracy with almost no variance is flagged.
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

ANALYZER_NAME = "accuracy_analysis"


@dataclass(frozen=True)
class AccuracyConfig:
    min_history: int = 3
    window: int = 10
    perfect_accuracy_m: float = 5.0
    perfect_ratio_threshold: float = 0.8
    max_variance: float = 2.0
    risk: int = 20


def analyze_accuracy_patterns(
    current: LocationReading,
    history: Sequence[LocationReading],
    config: AccuracyConfig | None = None,
) -> AnalyzerOutcome:
    cfg = config or AccuracyConfig()
    if len(history) < cfg.min_history:
        return NotEnoughData(ANALYZER_NAME, required=cfg.min_history, available=len(history))

    samples = [h.accuracy_meters for h in list(history)[-cfg.window:]]
    samples.append(current.accuracy_meters)
    avg = statistics.fmean(samples)
    variance = statistics.pvariance(samples, mu=avg)
    perfect_count = sum(1 for acc in samples if acc <= cfg.perfect_accuracy_m)
    perfect_ratio = perfect_count / len(samples)

    flags: set[RiskFlag] = set()
    risk = 0
    if perfect_ratio > cfg.perfect_ratio_threshold and variance < cfg.max_variance:
        flags.add(RiskFlag.CONSISTENT_PERFECT_ACCURACY)
        risk += cfg.risk

    return Evaluated(
        analyzer=ANALYZER_NAME,
        flags=frozenset(flags),
        risk_score=risk,
        details={
            "sample_count": len(samples),
            "avg_accuracy": round(avg, 3),
            "variance": round(variance, 3),
            "perfect_accuracy_ratio": round(perfect_ratio, 3),
        },
    )
