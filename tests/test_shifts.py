"""Tests del cálculo de turnos (wraparound, throttle, cambio por flanco)."""

from datetime import datetime, time, timedelta

import pytest

from oee_engine.conventions import EdgeCaseConventions
from oee_engine.shifts import ShiftScheduler, clamp_shift_count, compute_shift

DAY = datetime(2024, 5, 10)


def at(hour, minute=0, second=0, microsecond=0):
    return DAY.replace(hour=hour, minute=minute, second=second, microsecond=microsecond)


# =============================================================================
# CÁLCULO PURO
# =============================================================================

class TestComputeShift:
    """Turno activo para una hora dada."""

    def test_scenario_c_early_in_shift(self):
        shift = compute_shift(at(7, 30), 3, time(6, 0))

        assert shift.shift_number == 1
        assert shift.elapsed_seconds == 5400
        assert shift.remaining_seconds == 23400
        assert shift.change_imminent is False
        assert shift.start == at(6, 0)
        assert shift.end == at(14, 0)

    def test_scenario_c_imminent(self):
        shift = compute_shift(at(13, 56), 3, time(6, 0))

        assert shift.shift_number == 1
        assert shift.remaining_seconds == 240
        assert shift.change_imminent is True

    def test_midnight_wraparound(self):
        shift = compute_shift(at(3, 0), 3, time(6, 0))

        assert shift.shift_number == 3
        assert shift.start == at(22, 0) - timedelta(days=1)
        assert shift.elapsed_seconds == 5 * 3600
        assert shift.remaining_seconds == 3 * 3600

    def test_before_first_start_with_single_shift(self):
        shift = compute_shift(at(5, 0), 1, time(6, 0))

        assert shift.shift_number == 1
        assert shift.start == at(6, 0) - timedelta(days=1)
        assert shift.remaining_seconds == 3600
        assert shift.hours_per_shift == 24.0

    def test_progress(self):
        shift = compute_shift(at(10, 0), 3, time(6, 0))
        assert shift.progress == pytest.approx(50.0)

    @pytest.mark.parametrize("n", [1, 2, 3, 4, 5, 7])
    def test_shift_number_in_range(self, n):
        for minute in range(0, 24 * 60, 7):
            now = DAY + timedelta(minutes=minute, seconds=13)
            shift = compute_shift(now, n, time(6, 15))
            assert 1 <= shift.shift_number <= n
            assert 0 <= shift.elapsed_seconds < shift.duration_seconds
            assert shift.start <= now < shift.end

    def test_configurable_imminent_window(self):
        shift = compute_shift(at(13, 59, 59, 600000), 3, time(6, 0), imminent_window_seconds=0.5)
        assert shift.change_imminent is True
        shift = compute_shift(at(13, 59, 58), 3, time(6, 0), imminent_window_seconds=0.5)
        assert shift.change_imminent is False


class TestClampShiftCount:
    """Límite del número de turnos."""

    def test_clamped_to_limit(self):
        assert clamp_shift_count(5, 3) == 3
        assert clamp_shift_count(0, 3) == 1
        assert clamp_shift_count(-2, None) == 1

    def test_unbounded(self):
        assert clamp_shift_count(5, None) == 5


# =============================================================================
# SCHEDULER CON ESTADO
# =============================================================================

class TestShiftScheduler:
    """Throttle interno y flag de cambio de turno."""

    def test_first_evaluation_is_not_a_change(self):
        scheduler = ShiftScheduler(EdgeCaseConventions())
        shift = scheduler.update(at(7, 30), 3, time(6, 0))
        assert shift.change_occurred is False
        assert scheduler.current_shift == 1

    def test_change_is_edge_triggered(self):
        scheduler = ShiftScheduler(EdgeCaseConventions())

        assert scheduler.update(at(13, 59, 59), 3, time(6, 0)).shift_number == 1

        changed = scheduler.update(at(14, 0, 0), 3, time(6, 0))
        assert changed.shift_number == 2
        assert changed.change_occurred is True

        # Dentro del throttle: descriptor en caché, pero el flag ya no se repite
        throttled = scheduler.update(at(14, 0, 0, 500000), 3, time(6, 0))
        assert throttled.shift_number == 2
        assert throttled.change_occurred is False

        after = scheduler.update(at(14, 0, 1), 3, time(6, 0))
        assert after.change_occurred is False
        assert scheduler.changes == 1

    def test_throttle_reuses_cached_descriptor(self):
        scheduler = ShiftScheduler(EdgeCaseConventions())
        first = scheduler.update(at(7, 30), 3, time(6, 0))
        second = scheduler.update(at(7, 30, 0, 400000), 3, time(6, 0))
        assert second is first

        third = scheduler.update(at(7, 30, 1), 3, time(6, 0))
        assert third is not first
        assert third.elapsed_seconds == 5401

    def test_config_change_bypasses_throttle(self):
        scheduler = ShiftScheduler(EdgeCaseConventions())
        scheduler.update(at(7, 30), 3, time(6, 0))
        shift = scheduler.update(at(7, 30, 0, 100000), 2, time(6, 0))
        assert shift.shift_count == 2

    def test_shift_limit_from_conventions(self):
        assert ShiftScheduler(EdgeCaseConventions()).update(at(7), 6, time(6, 0)).shift_count == 3
        unbounded = ShiftScheduler(EdgeCaseConventions(max_shifts=0))
        assert unbounded.update(at(7), 6, time(6, 0)).shift_count == 6
