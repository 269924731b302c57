"""
Risk aggregator: composite anti-spoofing judgment for one clock event.

Runs the location verifier and the five heuristic analyzers, sums their
weighted contributions, clamps to [0, 100], and compares the result with
the risk threshold. Fully explainable: every contribution is kept in the
result details for audit and manual review.

Location spoofing cannot be prevented, only detected. The result is
advisory; blocking on a high score is a policy decision made by the caller.
The engine holds no state: every call is (reading, context) -> result.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from backend_geoguard.config.settings import DEFAULT_RISK_THRESHOLD, Settings, get_settings
from backend_geoguard.geoguard_logging import bind_employee
from backend_geoguard.location.accuracy import AccuracyConfig, analyze_accuracy_patterns
from backend_geoguard.location.clustering import ClusteringConfig, analyze_location_clustering
from backend_geoguard.location.device import DeviceConfig, analyze_device_consistency
from backend_geoguard.location.ip_lookup import IpLookup
from backend_geoguard.location.models import (
    AnalyzerOutcome,
    AntiSpoofingResult,
    Evaluated,
    LocationReading,
    RiskFlag,
    ValidationContext,
    VerificationFailure,
)
from backend_geoguard.location.movement import MovementConfig, analyze_movement
from backend_geoguard.location.timing import TimingConfig, analyze_time_patterns
from backend_geoguard.location.verifier import VerifierConfig, verify_location

MIN_RISK_SCORE = 0
MAX_RISK_SCORE = 100

VERIFICATION_FLAGS = {
    VerificationFailure.ACCURACY_TOO_LOW: RiskFlag.GPS_ACCURACY_LOW,
    VerificationFailure.OUTSIDE_RADIUS: RiskFlag.OUTSIDE_RADIUS,
    VerificationFailure.IP_MISMATCH: RiskFlag.IP_LOCATION_MISMATCH,
}


@dataclass(frozen=True)
class VerificationWeights:
    """Risk added when the hard gate fails, per failure reason."""

    accuracy_too_low: int = 15
    outside_radius: int = 30
    ip_mismatch: int = 25

    def for_reason(self, reason: VerificationFailure) -> int:
        return {
            VerificationFailure.ACCURACY_TOO_LOW: self.accuracy_too_low,
            VerificationFailure.OUTSIDE_RADIUS: self.outside_radius,
            VerificationFailure.IP_MISMATCH: self.ip_mismatch,
        }[reason]


@dataclass(frozen=True)
class RiskConfig:
    """
    All tunables of the engine in one place.

    Defaults reproduce the documented behaviour; override per deployment
    without code changes. Scores saturate at max_score, so several strong
    signals collapse to the same value as one (kept deliberately, see
    uncapped_score on the result for the raw sum).
    """

    verifier: VerifierConfig = field(default_factory=VerifierConfig)
    verification_weights: VerificationWeights = field(default_factory=VerificationWeights)
    movement: MovementConfig = field(default_factory=MovementConfig)
    accuracy: AccuracyConfig = field(default_factory=AccuracyConfig)
    clustering: ClusteringConfig = field(default_factory=ClusteringConfig)
    timing: TimingConfig = field(default_factory=TimingConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)
    risk_threshold: int = DEFAULT_RISK_THRESHOLD
    """is_valid is True only when risk_score < risk_threshold."""
    min_score: int = MIN_RISK_SCORE
    max_score: int = MAX_RISK_SCORE

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> RiskConfig:
        s = settings or get_settings()
        return cls(
            verifier=VerifierConfig.from_settings(s),
            risk_threshold=s.risk_threshold,
        )


def validate_with_anti_spoofing(
    reading: LocationReading,
    context: ValidationContext,
    *,
    config: RiskConfig | None = None,
    ip_lookup: IpLookup | None = None,
    check_ip: bool | None = None,
) -> AntiSpoofingResult:
    """
    Evaluate a clock event against the workplace geofence and the employee's history.

    Args:
        reading: Current GPS reading.
        context: Geofence, employee id, recent location history, and
            previously accepted clock-ins (read-only, supplied by the caller).
        config: Engine tunables; loaded from environment settings if None.
        ip_lookup: Override for the IP geolocation lookup (see verify_location).
        check_ip: Force the IP cross-check on/off; config decides if None.

    Returns:
        AntiSpoofingResult with clamped risk_score, union of flags, and
        per-analyzer details.
    """
    cfg = config or RiskConfig.from_settings()
    flags: set[RiskFlag] = set()
    score = 0

    verification = verify_location(
        reading,
        context.geofence,
        context.effective_radius,
        config=cfg.verifier,
        ip_lookup=ip_lookup,
        check_ip=check_ip,
    )
    if not verification.verified and verification.reason is not None:
        flags.add(VERIFICATION_FLAGS[verification.reason])
        score += cfg.verification_weights.for_reason(verification.reason)

    history = context.location_history
    outcomes: list[AnalyzerOutcome] = [
        analyze_movement(reading, history, cfg.movement),
        analyze_accuracy_patterns(reading, history, cfg.accuracy),
        analyze_location_clustering(reading, context.previously_accepted_clock_ins, cfg.clustering),
        analyze_time_patterns(history, cfg.timing),
        analyze_device_consistency(history, cfg.device),
    ]
    analyses: dict[str, AnalyzerOutcome] = {}
    for outcome in outcomes:
        analyses[outcome.analyzer] = outcome
        if isinstance(outcome, Evaluated):
            flags |= outcome.flags
            score += outcome.risk_score

    risk_score = max(cfg.min_score, min(cfg.max_score, score))
    result = AntiSpoofingResult(
        is_valid=risk_score < cfg.risk_threshold,
        risk_score=risk_score,
        flags=frozenset(flags),
        verification=verification,
        analyses=analyses,
        uncapped_score=score,
    )
    bind_employee(context.employee_id).info(
        "anti_spoofing_evaluated",
        risk_score=risk_score,
        uncapped_score=score,
        is_valid=result.is_valid,
        risk_flags=sorted(f.value for f in flags),
        verified=verification.verified,
    )
    return result
