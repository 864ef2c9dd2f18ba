"""Fixtures compartidas: reloj controlable, settings y bindings en memoria."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from common.config import Settings
from oee_engine.conventions import EdgeCaseConventions
from oee_engine.memory_binding import InMemoryBinding


class FakeClock:
    """Reloj manual: hora local y UTC avanzan juntas."""

    def __init__(self, start: datetime):
        self._now = start

    def now(self) -> datetime:
        return self._now

    def utcnow(self) -> datetime:
        return self._now

    def set(self, value: datetime) -> None:
        self._now = value

    def advance(self, seconds: float) -> None:
        self._now = self._now + timedelta(seconds=seconds)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 5, 10, 7, 30, 0))


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite://",
        update_interval_ms=1000,
        log_level="INFO",
        config_refresh_ticks=30,
        join_timeout_seconds=0.5,
    )


@pytest.fixture
def conventions() -> EdgeCaseConventions:
    return EdgeCaseConventions()


@pytest.fixture
def scenario_a_binding() -> InMemoryBinding:
    """Línea con 95 buenas, 5 malas, 3000 s de runtime, ciclo 30 s, 1 h planificada."""
    return InMemoryBinding(
        values={
            "Inputs/TotalRuntimeSeconds": 3000.0,
            "Inputs/GoodPartCount": 95,
            "Inputs/BadPartCount": 5,
            "Inputs/IdealCycleTimeSeconds": 30.0,
            "Inputs/PlannedProductionTimeHours": 1.0,
        }
    )
