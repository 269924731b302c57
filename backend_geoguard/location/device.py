"""
Device consistency analysis over recent history.

An employee normally clocks in from one or two phones. Many distinct device
ids (or browser user agents) in a short history suggests shared credentials
or an emulator farm.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from backend_geoguard.location.models import (
    AnalyzerOutcome,
    Evaluated,
    LocationReading,
    NotEnoughData,
    RiskFlag,
)

ANALYZER_NAME = "device_analysis"


@dataclass(frozen=True)
class DeviceConfig:
    min_entries: int = 3
    """History entries carrying a device id or user agent needed to evaluate."""
    max_distinct_devices: int = 3
    max_distinct_user_agents: int = 2
    device_risk: int = 20
    user_agent_risk: int = 10


def analyze_device_consistency(
    history: Sequence[LocationReading],
    config: DeviceConfig | None = None,
) -> AnalyzerOutcome:
    cfg = config or DeviceConfig()
    with_metadata = [h for h in history if h.has_device_metadata]
    if len(with_metadata) < cfg.min_entries:
        return NotEnoughData(ANALYZER_NAME, required=cfg.min_entries, available=len(with_metadata))

    device_ids = {h.device_id for h in with_metadata if h.device_id}
    user_agents = {h.user_agent for h in with_metadata if h.user_agent}

    flags: set[RiskFlag] = set()
    risk = 0
    if len(device_ids) > cfg.max_distinct_devices:
        flags.add(RiskFlag.DEVICE_INCONSISTENCY)
        risk += cfg.device_risk

    # No dedicated flag; reported through details only
    user_agent_inconsistency = len(user_agents) > cfg.max_distinct_user_agents
    if user_agent_inconsistency:
        risk += cfg.user_agent_risk

    return Evaluated(
        analyzer=ANALYZER_NAME,
        flags=frozenset(flags),
        risk_score=risk,
        details={
            "entries_with_metadata": len(with_metadata),
            "unique_device_ids": len(device_ids),
            "unique_user_agents": len(user_agents),
            "user_agent_inconsistency": user_agent_inconsistency,
        },
    )
