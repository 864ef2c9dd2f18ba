"""Tests del reconciliador de salidas (diffs y cooldown tras fallo)."""

from datetime import datetime, timedelta

import pytest

from oee_engine.binding import resolve_instance
from oee_engine.conventions import EdgeCaseConventions
from oee_engine.memory_binding import InMemoryBinding
from oee_engine.models import MetricRecord
from oee_engine.reconciler import OutputReconciler, values_equal
from oee_engine.variables import OUTPUTS

T0 = datetime(2024, 5, 10, 12, 0, 0)
OEE_PATH = "Outputs/OEE"


@pytest.fixture
def binding() -> InMemoryBinding:
    return InMemoryBinding()


@pytest.fixture
def reconciler(binding) -> OutputReconciler:
    return OutputReconciler(binding, "Line1", EdgeCaseConventions())


class TestValuesEqual:
    """Igualdad con tolerancia para floats."""

    def test_float_tolerance(self):
        assert values_equal(95.0, 95.0005)
        assert not values_equal(95.0, 95.01)
        assert values_equal(3, 3.0)

    def test_exact_for_other_types(self):
        assert values_equal("Running", "Running")
        assert not values_equal("Running", "Stopped")
        assert not values_equal(True, 1)
        assert values_equal(False, False)


class TestOutputReconciler:
    """Escritura solo de diffs y supresión de reintentos."""

    def test_absent_handle_is_skipped(self, reconciler):
        assert reconciler.write_if_changed(None, 1.0, T0) == "absent"

    def test_unchanged_value_not_rewritten(self, binding, reconciler):
        handle = binding.resolve(OEE_PATH)

        assert reconciler.write_if_changed(handle, 79.1667, T0) == "written"
        assert reconciler.write_if_changed(handle, 79.1669, T0) == "unchanged"
        assert binding.write_count == 1

        assert reconciler.write_if_changed(handle, 79.5, T0) == "written"
        assert binding.get(OEE_PATH) == 79.5

    def test_cooldown_suppresses_same_value_only(self, binding, reconciler):
        handle = binding.resolve(OEE_PATH)
        binding.fail_writes(OEE_PATH)

        assert reconciler.write_if_changed(handle, 50.0, T0) == "failed"
        assert reconciler.write_if_changed(handle, 50.0, T0 + timedelta(seconds=10)) == "cooldown"
        assert reconciler.write_if_changed(handle, 50.0, T0 + timedelta(seconds=29)) == "cooldown"

        # Un valor distinto se intenta de inmediato
        assert reconciler.write_if_changed(handle, 60.0, T0 + timedelta(seconds=30)) == "failed"
        assert reconciler.stats.failed == 2

        binding.fail_writes(OEE_PATH, failing=False)
        assert reconciler.write_if_changed(handle, 60.0, T0 + timedelta(seconds=45)) == "cooldown"
        assert reconciler.write_if_changed(handle, 60.0, T0 + timedelta(seconds=60)) == "written"

        state = reconciler.state_for(handle)
        assert state.failed_at is None
        assert state.last_written == 60.0
        assert reconciler.pending_failures == 0

    def test_alternating_failed_values_each_keep_their_cooldown(self, binding, reconciler):
        handle = binding.resolve(OEE_PATH)
        binding.fail_writes(OEE_PATH)
        attempts = []
        original = binding.write_raw

        def spy(h, value):
            attempts.append(value)
            return original(h, value)

        binding.write_raw = spy

        assert reconciler.write_if_changed(handle, 10.0, T0) == "failed"
        assert reconciler.write_if_changed(handle, 20.0, T0 + timedelta(seconds=1)) == "failed"
        assert reconciler.write_if_changed(handle, 10.0, T0 + timedelta(seconds=2)) == "cooldown"
        assert reconciler.write_if_changed(handle, 20.0, T0 + timedelta(seconds=3)) == "cooldown"
        assert attempts == [10.0, 20.0]

        # Pasado el cooldown del primer valor se vuelve a intentar
        assert reconciler.write_if_changed(handle, 10.0, T0 + timedelta(seconds=30)) == "failed"
        assert attempts.count(10.0) == 2

    def test_failed_write_leaves_last_written(self, binding, reconciler):
        handle = binding.resolve(OEE_PATH)
        reconciler.write_if_changed(handle, 10.0, T0)
        binding.fail_writes(OEE_PATH)

        reconciler.write_if_changed(handle, 20.0, T0)
        assert reconciler.state_for(handle).last_written == 10.0
        assert binding.get(OEE_PATH) == 10.0

    def test_reconcile_record(self, binding, reconciler):
        bound = resolve_instance(binding)
        record = MetricRecord(quality=95.0, oee=79.17, system_status="Running")

        first = reconciler.reconcile(record, bound.outputs, T0)
        assert first.written == len(OUTPUTS)
        assert binding.get("Outputs/SystemStatus") == "Running"

        second = reconciler.reconcile(record, bound.outputs, T0 + timedelta(seconds=1))
        assert second.written == 0
        assert second.unchanged == len(OUTPUTS)

    def test_reconcile_reports_errors(self, binding, reconciler):
        bound = resolve_instance(binding)
        binding.fail_writes("Outputs/Quality")

        result = reconciler.reconcile(MetricRecord(quality=90.0), bound.outputs, T0)
        assert result.failed == 1
        assert result.errors == {"quality": "Outputs/Quality"}
