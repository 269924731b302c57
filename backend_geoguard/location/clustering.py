"""
Location clustering analysis over previously accepted clock-ins.

Honest check-ins drift by several meters from day to day. A history where
nearly every accepted clock-in sits on the same spot points to a fixed,
replayed location.

Clustering is greedy: a point joins the first cluster whose seed lies within
the clustering radius, otherwise it seeds a new cluster.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from backend_geoguard.location.distance import distance
from backend_geoguard.location.models import (
    AnalyzerOutcome,
    Coordinate,
    Evaluated,
    LocationReading,
    NotEnoughData,
    RiskFlag,
)

ANALYZER_NAME = "clustering_analysis"


@dataclass(frozen=True)
class ClusteringConfig:
    min_clock_ins: int = 5
    radius_m: float = 10.0
    dominant_ratio: float = 0.9
    """Largest cluster must hold more than this share of all points."""
    min_cluster_size: int = 10
    """Largest cluster must have more than this many members."""
    risk: int = 25


def cluster_locations(points: Sequence[Coordinate], radius_m: float) -> list[list[Coordinate]]:
    """Greedy seed clustering; cluster order follows first appearance."""
    clusters: list[list[Coordinate]] = []
    for point in points:
        for cluster in clusters:
            if distance(cluster[0], point) <= radius_m:
                cluster.append(point)
                break
        else:
            clusters.append([point])
    return clusters


def analyze_location_clustering(
    current: LocationReading,
    previous_clock_ins: Sequence[LocationReading],
    config: ClusteringConfig | None = None,
) -> AnalyzerOutcome:
    cfg = config or ClusteringConfig()
    if len(previous_clock_ins) < cfg.min_clock_ins:
        return NotEnoughData(
            ANALYZER_NAME, required=cfg.min_clock_ins, available=len(previous_clock_ins)
        )

    clusters = cluster_locations([c.coordinate for c in previous_clock_ins], cfg.radius_m)
    # max() keeps the first of equally sized clusters
    largest = max(clusters, key=len)
    ratio = len(largest) / len(previous_clock_ins)

    flags: set[RiskFlag] = set()
    risk = 0
    if ratio > cfg.dominant_ratio and len(largest) > cfg.min_cluster_size:
        flags.add(RiskFlag.LOCATION_CLUSTERING)
        risk += cfg.risk

    return Evaluated(
        analyzer=ANALYZER_NAME,
        flags=frozenset(flags),
        risk_score=risk,
        details={
            "clusters": len(clusters),
            "largest_cluster_size": len(largest),
            "clustering_ratio": round(ratio, 3),
            "current_in_largest_cluster": distance(largest[0], current.coordinate) <= cfg.radius_m,
        },
    )
