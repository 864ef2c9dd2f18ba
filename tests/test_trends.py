"""Tests del historial acotado, tendencias y estadísticos."""

import pytest

from oee_engine.models import MetricRecord, TrendLabel
from oee_engine.trends import TrendTracker, classify_trend, compute_stats, fill_target_deltas


# =============================================================================
# CLASIFICACIÓN
# =============================================================================

class TestClassifyTrend:
    """Escalera de umbrales ±2 / ±0.5."""

    def test_insufficient_data(self):
        assert classify_trend([]) == TrendLabel.INSUFFICIENT_DATA
        assert classify_trend([50.0]) == TrendLabel.INSUFFICIENT_DATA

    @pytest.mark.parametrize(
        "values,expected",
        [
            ([50.0, 53.0], TrendLabel.RISING_STRONGLY),
            ([50.0, 50.6], TrendLabel.RISING),
            ([50.0, 50.2], TrendLabel.STABLE),
            ([50.0, 49.0], TrendLabel.FALLING),
            ([50.0, 40.0, 47.0], TrendLabel.FALLING_STRONGLY),
            ([50.0, 99.0, 0.0, 50.0], TrendLabel.STABLE),
        ],
    )
    def test_short_history_uses_first_and_last(self, values, expected):
        assert classify_trend(values) == expected

    def test_long_history_compares_half_means(self):
        assert classify_trend([10.0, 10.0, 10.0, 20.0, 20.0]) == TrendLabel.RISING_STRONGLY
        assert classify_trend([20.0, 20.0, 20.0, 19.0, 19.0, 19.2]) == TrendLabel.FALLING

    @pytest.mark.parametrize("n", [2, 3, 5, 17, 60])
    def test_identical_values_are_stable(self, n):
        tracker = TrendTracker()
        for _ in range(n):
            tracker.push("oee", 72.7)
        assert tracker.trend("oee") == TrendLabel.STABLE


# =============================================================================
# HISTORIAL
# =============================================================================

class TestTrendTracker:
    """Cola FIFO de capacidad fija por métrica."""

    def test_capacity_and_fifo_eviction(self):
        tracker = TrendTracker(capacity=60)
        for i in range(61):
            tracker.push("quality", float(i))

        history = tracker.history("quality")
        assert len(history) == 60
        assert history[0] == 1.0
        assert history[-1] == 60.0

    def test_apply_pushes_only_with_activity(self):
        tracker = TrendTracker()
        record = MetricRecord(quality=90.0, performance=80.0, availability=70.0, oee=50.4)

        tracker.apply(record, active=False)
        assert tracker.lengths() == {"quality": 0, "performance": 0, "availability": 0, "oee": 0}
        assert record.quality_trend == TrendLabel.INSUFFICIENT_DATA.value

        tracker.apply(record, active=True)
        tracker.apply(record, active=True)
        assert tracker.lengths()["oee"] == 2
        assert record.oee_trend == TrendLabel.STABLE.value
        assert record.min_quality == 90.0
        assert record.avg_availability == 70.0

    def test_stats_over_window(self):
        stats = compute_stats([10.0, 20.0, 30.0])
        assert stats.min == 10.0
        assert stats.max == 30.0
        assert stats.avg == 20.0
        assert stats.count == 3
        assert compute_stats([]).count == 0

    def test_target_deltas(self):
        record = MetricRecord(quality=96.0, performance=80.0, availability=90.0, oee=70.0)
        fill_target_deltas(record, 95.0, 85.0, 90.0, 72.7)

        assert record.quality_vs_target == pytest.approx(1.0)
        assert record.performance_vs_target == pytest.approx(-5.0)
        assert record.availability_vs_target == 0.0
        assert record.oee_vs_target == pytest.approx(-2.7)
