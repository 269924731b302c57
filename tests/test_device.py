"""
Tests for device consistency analysis (device ids and user agents across history).
"""

from __future__ import annotations

from backend_geoguard.location.device import DeviceConfig, analyze_device_consistency
from backend_geoguard.location.models import Coordinate, Evaluated, LocationReading, NotEnoughData, RiskFlag

OFFICE = Coordinate(13.756789, 100.501834)
T0 = 1_700_000_000.0
UA_IOS = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X)"
UA_ANDROID = "Mozilla/5.0 (Linux; Android 14; Pixel 8)"
UA_DESKTOP = "Mozilla/5.0 (Windows NT 10.0; Win64; x64)"


def _entry(i: int, device_id=None, user_agent=None) -> LocationReading:
    return LocationReading(OFFICE, 10.0, T0 + 86_400 * i, device_id=device_id, user_agent=user_agent)


def test_entries_without_metadata_do_not_count():
    history = [_entry(0), _entry(1), _entry(2, device_id="a"), _entry(3, device_id="b")]
    outcome = analyze_device_consistency(history)
    assert isinstance(outcome, NotEnoughData)
    assert outcome.available == 2


def test_single_device_is_clean():
    history = [_entry(i, "phone-1", UA_IOS) for i in range(5)]
    outcome = analyze_device_consistency(history)
    assert isinstance(outcome, Evaluated)
    assert outcome.risk_score == 0
    assert outcome.details["unique_device_ids"] == 1


def test_three_devices_is_tolerated():
    history = [_entry(i, f"phone-{i}", UA_IOS) for i in range(3)]
    outcome = analyze_device_consistency(history)
    assert outcome.flags == frozenset()
    assert outcome.risk_score == 0


def test_four_devices_is_flagged():
    history = [_entry(i, f"phone-{i}", UA_IOS) for i in range(4)]
    outcome = analyze_device_consistency(history)
    assert outcome.flags == frozenset({RiskFlag.DEVICE_INCONSISTENCY})
    assert outcome.risk_score == 20


def test_user_agent_churn_adds_risk_without_flag():
    history = [
        _entry(0, "phone-1", UA_IOS),
        _entry(1, "phone-1", UA_ANDROID),
        _entry(2, "phone-1", UA_DESKTOP),
    ]
    outcome = analyze_device_consistency(history)
    assert outcome.flags == frozenset()
    assert outcome.risk_score == 10
    assert outcome.details["user_agent_inconsistency"] is True


def test_device_and_user_agent_churn_combine():
    agents = [UA_IOS, UA_ANDROID, UA_DESKTOP, UA_IOS]
    history = [_entry(i, f"phone-{i}", ua) for i, ua in enumerate(agents)]
    outcome = analyze_device_consistency(history)
    assert outcome.flags == frozenset({RiskFlag.DEVICE_INCONSISTENCY})
    assert outcome.risk_score == 30


def test_user_agent_only_history_is_evaluated():
    history = [_entry(i, user_agent=UA_IOS) for i in range(3)]
    outcome = analyze_device_consistency(history)
    assert isinstance(outcome, Evaluated)
    assert outcome.details["unique_device_ids"] == 0
    assert outcome.risk_score == 0


def test_custom_limits():
    history = [_entry(i, f"phone-{i % 2}") for i in range(4)]
    outcome = analyze_device_consistency(history, DeviceConfig(max_distinct_devices=1, device_risk=35))
    assert outcome.risk_score == 35
