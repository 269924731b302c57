"""
Tests for time pattern analysis (mechanically regular clock-in intervals).
"""

from __future__ import annotations

from backend_geoguard.location.models import Coordinate, Evaluated, LocationReading, NotEnoughData, RiskFlag
from backend_geoguard.location.timing import TimingConfig, analyze_time_patterns

OFFICE = Coordinate(13.756789, 100.501834)
T0 = 1_700_000_000.0
DAY = 86_400.0


def _at(timestamps):
    return [LocationReading(OFFICE, 10.0, t) for t in timestamps]


def test_short_history_is_not_enough_data():
    outcome = analyze_time_patterns(_at([T0 + DAY * i for i in range(4)]))
    assert isinstance(outcome, NotEnoughData)
    assert outcome.required == 5
    assert outcome.available == 4


def test_exact_daily_cadence_is_flagged():
    """Seven entries exactly a day apart: six identical intervals."""
    outcome = analyze_time_patterns(_at([T0 + DAY * i for i in range(7)]))
    assert isinstance(outcome, Evaluated)
    assert outcome.flags == frozenset({RiskFlag.TIME_PATTERN_ANOMALY})
    assert outcome.risk_score == 15
    assert outcome.details["interval_count"] == 6
    assert outcome.details["avg_interval_ms"] == DAY * 1000
    assert outcome.details["interval_variance"] == 0


def test_interval_count_must_exceed_minimum():
    """Six entries give only five intervals: evaluated but not flagged."""
    outcome = analyze_time_patterns(_at([T0 + DAY * i for i in range(6)]))
    assert isinstance(outcome, Evaluated)
    assert outcome.flags == frozenset()
    assert outcome.risk_score == 0


def test_human_jitter_is_clean():
    """Twenty minutes either way around the same time of day."""
    timestamps = [T0 + DAY * i + (1_200 if i % 2 else -1_200) for i in range(8)]
    outcome = analyze_time_patterns(_at(timestamps))
    assert outcome.flags == frozenset()


def test_sub_minute_jitter_is_clean():
    """Clocking in within a minute of the same time every day is still human."""
    jitter = [0, 40, -30, 35, -20, 40, -40]
    outcome = analyze_time_patterns(_at([T0 + DAY * i + j for i, j in enumerate(jitter)]))
    assert isinstance(outcome, Evaluated)
    assert outcome.flags == frozenset()
    assert outcome.risk_score == 0


def test_one_second_jitter_is_flagged():
    """Scripted submissions drift by about a second at most."""
    timestamps = [T0 + DAY * i + (1 if i % 2 else -1) for i in range(8)]
    outcome = analyze_time_patterns(_at(timestamps))
    assert RiskFlag.TIME_PATTERN_ANOMALY in outcome.flags


def test_intervals_are_reported_in_milliseconds():
    outcome = analyze_time_patterns(_at([T0 + 60.5 * i for i in range(5)]))
    assert outcome.details["intervals_ms"] == [60_500.0] * 4


def test_interval_scale_changes_the_rule():
    """Applied to raw seconds the same jitter falls under the variance cut-off."""
    jitter = [0, 40, -30, 35, -20, 40, -40]
    timestamps = [T0 + DAY * i + j for i, j in enumerate(jitter)]
    outcome = analyze_time_patterns(_at(timestamps), TimingConfig(interval_scale=1.0))
    assert RiskFlag.TIME_PATTERN_ANOMALY in outcome.flags
