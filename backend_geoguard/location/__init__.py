"""
Location package: verification gate and anti-spoofing analyzers.

Consumes an untrusted GPS reading plus caller-supplied history, applies the
hard location gate and rule-based heuristics, and produces a bounded risk
score with explainable flags. Pure functions; no persistence.
"""

from backend_geoguard.location.models import (
    AnalyzerOutcome,
    AntiSpoofingResult,
    Coordinate,
    Evaluated,
    IpCheckStatus,
    LocationReading,
    NotEnoughData,
    RiskFlag,
    ValidationContext,
    VerificationFailure,
    VerificationResult,
    WorkplaceGeofence,
)
from backend_geoguard.location.distance import distance
from backend_geoguard.location.ip_lookup import IpGeolocationClient, IpLocation
from backend_geoguard.location.messages import (
    describe_flag,
    format_location,
    verification_failure_message,
)
from backend_geoguard.location.verifier import VerifierConfig, enforce_location, verify_location
from backend_geoguard.location.movement import (
    MovementConfig,
    analyze_movement,
    calculate_speed_kmh,
    detect_suspicious_movement,
)
from backend_geoguard.location.accuracy import AccuracyConfig, analyze_accuracy_patterns
from backend_geoguard.location.clustering import (
    ClusteringConfig,
    analyze_location_clustering,
    cluster_locations,
)
from backend_geoguard.location.timing import TimingConfig, analyze_time_patterns
from backend_geoguard.location.device import DeviceConfig, analyze_device_consistency
from backend_geoguard.location.aggregator import (
    RiskConfig,
    VerificationWeights,
    validate_with_anti_spoofing,
)

__all__ = [
    "AnalyzerOutcome",
    "AntiSpoofingResult",
    "Coordinate",
    "Evaluated",
    "IpCheckStatus",
    "LocationReading",
    "NotEnoughData",
    "RiskFlag",
    "ValidationContext",
    "VerificationFailure",
    "VerificationResult",
    "WorkplaceGeofence",
    "distance",
    "IpGeolocationClient",
    "IpLocation",
    "describe_flag",
    "format_location",
    "verification_failure_message",
    "VerifierConfig",
    "enforce_location",
    "verify_location",
    "MovementConfig",
    "analyze_movement",
    "calculate_speed_kmh",
    "detect_suspicious_movement",
    "AccuracyConfig",
    "analyze_accuracy_patterns",
    "ClusteringConfig",
    "analyze_location_clustering",
    "cluster_locations",
    "TimingConfig",
    "analyze_time_patterns",
    "DeviceConfig",
    "analyze_device_consistency",
    "RiskConfig",
    "VerificationWeights",
    "validate_with_anti_spoofing",
]
