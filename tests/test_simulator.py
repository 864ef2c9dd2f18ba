"""Tests del simulador de máquina."""

import pytest

from jobs.simulator import MachineSimulator
from oee_engine.memory_binding import InMemoryBinding


@pytest.fixture
def binding() -> InMemoryBinding:
    return InMemoryBinding()


class TestMachineSimulator:
    """Producción de piezas según ciclo, performance y calidad."""

    def test_produces_at_cycle_rate(self, binding):
        sim = MachineSimulator(binding, cycle_time_seconds=30.0, performance_percent=100.0,
                               quality_percent=100.0, seed=1)
        produced = sim.step(300.0)

        assert produced == 10
        assert binding.get("Inputs/GoodPartCount") == 10
        assert binding.get("Inputs/BadPartCount") == 0
        assert binding.get("Inputs/TotalRuntimeSeconds") == 300.0
        assert sim.parts_per_hour == pytest.approx(120.0)

    def test_performance_scales_inter_arrival(self, binding):
        sim = MachineSimulator(binding, cycle_time_seconds=30.0, performance_percent=50.0,
                               quality_percent=0.0, seed=1)
        sim.step(600.0)

        assert sim.total == 10
        assert sim.bad == 10

    def test_zero_performance_pauses_production(self, binding):
        sim = MachineSimulator(binding, performance_percent=0.0, seed=1)
        assert sim.step(120.0) == 0
        assert binding.get("Inputs/TotalRuntimeSeconds") == 120.0

    def test_continues_from_existing_counters(self, binding):
        binding.set("Inputs/GoodPartCount", 40)
        binding.set("Inputs/BadPartCount", 2)
        sim = MachineSimulator(binding, seed=1)
        assert sim.total == 42

        sim.reset()
        assert binding.get("Inputs/GoodPartCount") == 0
        assert binding.get("Inputs/TotalRuntimeSeconds") == 0.0

    def test_from_binding_uses_configured_cycle_time(self, binding):
        binding.set("Inputs/IdealCycleTimeSeconds", 12.0)
        sim = MachineSimulator.from_binding(binding, name="Line1", seed=1)

        assert sim.cycle_time_seconds == 12.0
        assert sim.name == "Line1"
        assert sim.inter_arrival_seconds == pytest.approx(12.0 * 100.0 / 85.0)

    def test_from_binding_falls_back_without_cycle_time(self, binding):
        sim = MachineSimulator.from_binding(binding, seed=1)
        assert sim.cycle_time_seconds == 30.0
