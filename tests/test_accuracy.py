"""
Tests for GPS accuracy pattern analysis (suspiciously perfect, invariant accuracy).
"""

from __future__ import annotations

from backend_geoguard.location.accuracy import AccuracyConfig, analyze_accuracy_patterns
from backend_geoguard.location.models import Coordinate, Evaluated, LocationReading, NotEnoughData, RiskFlag

OFFICE = Coordinate(13.756789, 100.501834)
T0 = 1_700_000_000.0


def _history(accuracies):
    n = len(accuracies)
    return [LocationReading(OFFICE, acc, T0 - 3_600 * (n - i)) for i, acc in enumerate(accuracies)]


def _current(accuracy: float) -> LocationReading:
    return LocationReading(OFFICE, accuracy, T0)


def test_short_history_is_not_enough_data():
    outcome = analyze_accuracy_patterns(_current(3.0), _history([3.0, 3.0]))
    assert isinstance(outcome, NotEnoughData)
    assert outcome.required == 3
    assert outcome.available == 2


def test_constant_perfect_accuracy_is_flagged():
    outcome = analyze_accuracy_patterns(_current(3.0), _history([3.0, 3.0, 3.0]))
    assert isinstance(outcome, Evaluated)
    assert outcome.flags == frozenset({RiskFlag.CONSISTENT_PERFECT_ACCURACY})
    assert outcome.risk_score == 20
    assert outcome.details["variance"] == 0
    assert outcome.details["perfect_accuracy_ratio"] == 1.0


def test_realistic_noise_is_clean():
    outcome = analyze_accuracy_patterns(_current(12.0), _history([8.0, 25.0, 14.0, 40.0, 9.5]))
    assert isinstance(outcome, Evaluated)
    assert outcome.flags == frozenset()
    assert outcome.risk_score == 0


def test_perfect_but_varying_accuracy_is_clean():
    """All <= 5 m but alternating 1/5 has variance ~3.9, above the limit."""
    outcome = analyze_accuracy_patterns(_current(1.0), _history([1.0, 5.0, 1.0, 5.0, 1.0, 5.0]))
    assert outcome.details["perfect_accuracy_ratio"] == 1.0
    assert outcome.details["variance"] > 2.0
    assert outcome.risk_score == 0


def test_ratio_must_exceed_threshold():
    """Exactly 80% perfect samples does not flag."""
    outcome = analyze_accuracy_patterns(_current(5.5), _history([5.0, 5.0, 5.0, 5.0]))
    assert outcome.details["perfect_accuracy_ratio"] == 0.8
    assert outcome.flags == frozenset()


def test_only_recent_window_counts():
    """Old noisy readings fall out of the ten-sample window."""
    history = _history([50.0] * 5 + [3.0] * 10)
    outcome = analyze_accuracy_patterns(_current(3.0), history)
    assert outcome.details["sample_count"] == 11
    assert RiskFlag.CONSISTENT_PERFECT_ACCURACY in outcome.flags

    wide = analyze_accuracy_patterns(_current(3.0), history, AccuracyConfig(window=15))
    assert wide.flags == frozenset()
