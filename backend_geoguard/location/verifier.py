"""
Location verifier: the mandatory pass/fail gate for a clock event.

Checks run in order and stop at the first failure:
1. GPS accuracy must be within the accuracy threshold.
2. The reading must fall inside the workplace geofence radius.
3. Best-effort IP cross-check: the GPS fix must lie within the IP-mismatch
   threshold of the coarse IP location. Unavailable lookups skip this step.

Usable standalone (hard gate) or as the first signal of the risk aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass

from backend_geoguard.config.settings import (
    DEFAULT_ACCURACY_THRESHOLD_M,
    DEFAULT_IP_MISMATCH_THRESHOLD_M,
    Settings,
    get_settings,
)
from backend_geoguard.core.exceptions import LocationVerificationError
from backend_geoguard.geoguard_logging import get_logger
from backend_geoguard.location.distance import distance
from backend_geoguard.location.ip_lookup import IpLookup, default_ip_lookup
from backend_geoguard.location.messages import verification_failure_message
from backend_geoguard.location.models import (
    IpCheckStatus,
    LocationReading,
    VerificationFailure,
    VerificationResult,
    WorkplaceGeofence,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class VerifierConfig:
    """Thresholds for the hard location gate."""

    accuracy_threshold_m: float = DEFAULT_ACCURACY_THRESHOLD_M
    # IP geolocation is imprecise, so the mismatch threshold is wide
    ip_mismatch_threshold_m: float = DEFAULT_IP_MISMATCH_THRESHOLD_M
    ip_check_enabled: bool = True

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> VerifierConfig:
        s = settings or get_settings()
        return cls(
            accuracy_threshold_m=s.accuracy_threshold_m,
            ip_mismatch_threshold_m=s.ip_mismatch_threshold_m,
            ip_check_enabled=s.ip_check_enabled,
        )


def _ip_cross_check(
    reading: LocationReading,
    ip_lookup: IpLookup,
    threshold_m: float,
) -> tuple[IpCheckStatus, float | None]:
    """Single lookup attempt; any failure in the lookup degrades to SKIPPED."""
    try:
        ip_location = ip_lookup(reading.ip_address)
    except Exception as e:
        logger.warning("ip_cross_check_failed", error=str(e))
        return IpCheckStatus.SKIPPED, None
    if ip_location is None:
        return IpCheckStatus.SKIPPED, None
    ip_distance = distance(reading.coordinate, ip_location.coordinate)
    if ip_distance > threshold_m:
        return IpCheckStatus.FAILED, ip_distance
    return IpCheckStatus.PASSED, ip_distance


def verify_location(
    reading: LocationReading,
    geofence: WorkplaceGeofence,
    radius: float | None = None,
    *,
    config: VerifierConfig | None = None,
    ip_lookup: IpLookup | None = None,
    check_ip: bool | None = None,
) -> VerificationResult:
    """
    Verify a reading against a workplace geofence.

    Args:
        reading: Current GPS reading (coordinate + accuracy).
        geofence: Workplace center and default radius.
        radius: Overrides geofence.radius_meters when given.
        config: Thresholds; loaded from environment settings if None.
        ip_lookup: Callable resolving an IP to a coarse location; the
            environment-configured HTTP client is used if None.
        check_ip: Force the IP cross-check on/off; config decides if None.

    Returns:
        VerificationResult; reason is set on failure.
    """
    cfg = config or VerifierConfig.from_settings()
    accuracy = reading.accuracy_meters

    # GPS accuracy can vary from 10m to 1000m+
    if accuracy > cfg.accuracy_threshold_m:
        return VerificationResult(
            verified=False,
            reason=VerificationFailure.ACCURACY_TOO_LOW,
            accuracy=accuracy,
        )

    allowed_radius = radius if radius is not None else geofence.radius_meters
    dist = distance(reading.coordinate, geofence.coordinate)
    if dist > allowed_radius:
        return VerificationResult(
            verified=False,
            reason=VerificationFailure.OUTSIDE_RADIUS,
            distance=dist,
            accuracy=accuracy,
        )

    run_ip_check = cfg.ip_check_enabled if check_ip is None else check_ip
    if not run_ip_check:
        return VerificationResult(
            verified=True,
            distance=dist,
            accuracy=accuracy,
            ip_check=IpCheckStatus.DISABLED,
        )

    lookup = ip_lookup or default_ip_lookup()
    ip_status, ip_distance = _ip_cross_check(reading, lookup, cfg.ip_mismatch_threshold_m)
    if ip_status is IpCheckStatus.FAILED:
        return VerificationResult(
            verified=False,
            reason=VerificationFailure.IP_MISMATCH,
            distance=dist,
            accuracy=accuracy,
            ip_distance=ip_distance,
            ip_check=ip_status,
        )
    return VerificationResult(
        verified=True,
        distance=dist,
        accuracy=accuracy,
        ip_distance=ip_distance,
        ip_check=ip_status,
    )


def enforce_location(
    reading: LocationReading,
    geofence: WorkplaceGeofence,
    radius: float | None = None,
    **kwargs,
) -> VerificationResult:
    """
    Hard-gate variant of verify_location: raise instead of returning a failure.

    Raises:
        LocationVerificationError: with the failure reason and the stable
            user-facing message for it.
    """
    result = verify_location(reading, geofence, radius, **kwargs)
    if not result.verified and result.reason is not None:
        logger.info(
            "location_gate_blocked",
            reason=result.reason.value,
            distance=round(result.distance, 2) if result.distance is not None else None,
            accuracy=result.accuracy,
        )
        raise LocationVerificationError(
            result.reason,
            verification_failure_message(result.reason),
            result,
        )
    return result
