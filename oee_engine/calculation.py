"""Cálculo de Quality / Performance / Availability / OEE y métricas derivadas.

Transformación pura salvo por ``CalculationState``: los pocos escalares del
tick anterior (runtime previo y strings formateados) que el motor conserva
entre ticks.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from .conventions import DEFAULT_CONVENTIONS, EdgeCaseConventions
from .conversions import format_duration, safe_float
from .instance_config import ConfigSnapshot
from .models import MetricRecord, SystemStatus

# Cambio mínimo de runtime para considerar que la máquina avanza
RUNTIME_EPSILON = 0.001
# Cambio mínimo (s) para volver a formatear runtime/downtime
FORMAT_EPSILON = 0.1

_UNSET: Any = object()


@dataclass(frozen=True)
class ProductionInputs:
    """Entradas crudas de un tick."""
    runtime_seconds: float
    good_count: int
    bad_count: int
    ideal_cycle_raw: Any = None
    planned_hours_raw: Any = None

    @property
    def total_count(self) -> int:
        return self.good_count + self.bad_count

    @property
    def has_activity(self) -> bool:
        return self.total_count > 0 or self.runtime_seconds > 0


class DerivedConstantCache:
    """Memoiza el parseo de ciclo ideal y horas planificadas.

    Solo re-parsea cuando el valor crudo difiere del último visto.
    """

    def __init__(self) -> None:
        self._ideal_raw: Any = _UNSET
        self._ideal_seconds = 0.0
        self._planned_raw: Any = _UNSET
        self._planned_seconds = 0.0
        self.parse_count = 0

    def ideal_cycle_seconds(self, raw: Any) -> float:
        if self._ideal_raw is _UNSET or raw != self._ideal_raw:
            self._ideal_raw = raw
            self._ideal_seconds = safe_float(raw, 0.0)
            self.parse_count += 1
        return self._ideal_seconds

    def planned_seconds(self, raw: Any) -> float:
        if self._planned_raw is _UNSET or raw != self._planned_raw:
            self._planned_raw = raw
            self._planned_seconds = safe_float(raw, 0.0) * 3600.0
            self.parse_count += 1
        return self._planned_seconds


@dataclass
class CalculationState:
    """Escalares del tick anterior usados para status y supresión de formateo."""
    previous_runtime: Optional[float] = None
    last_runtime_change: Optional[datetime] = None
    first_seen: Optional[datetime] = None
    ever_ran: bool = False
    status: str = SystemStatus.STARTING.value

    formatted_runtime_value: float = -1.0
    runtime_formatted: str = "00:00:00"
    formatted_downtime_value: float = -1.0
    downtime_formatted: str = "00:00:00"
    format_count: int = 0


# ---------------------------------------------------------------------------
# Métricas base
# ---------------------------------------------------------------------------

def _clamp_percent(value: float) -> float:
    return max(0.0, min(100.0, value))


def compute_quality(good: int, bad: int, runtime_seconds: float, ideal_cycle_seconds: float) -> float:
    """good / total * 100; 0 si no hay piezas o si runtime/ciclo ideal no son válidos."""
    total = good + bad
    if total <= 0 or runtime_seconds <= 0 or ideal_cycle_seconds <= 0:
        return 0.0
    return _clamp_percent(good / total * 100.0)


def compute_performance(
    total_count: int,
    ideal_cycle_seconds: float,
    runtime_seconds: float,
    conventions: EdgeCaseConventions = DEFAULT_CONVENTIONS,
) -> float:
    if runtime_seconds <= 0:
        return conventions.idle_performance.percent
    if ideal_cycle_seconds <= 0:
        return 0.0
    return _clamp_percent(total_count * ideal_cycle_seconds / runtime_seconds * 100.0)


def compute_availability(
    runtime_seconds: float,
    planned_seconds: float,
    conventions: EdgeCaseConventions = DEFAULT_CONVENTIONS,
) -> float:
    if planned_seconds <= 0:
        return conventions.unplanned_availability.percent
    return _clamp_percent(runtime_seconds / planned_seconds * 100.0)


def compute_oee(quality: float, performance: float, availability: float) -> float:
    return quality * performance * availability / 10000.0


# ---------------------------------------------------------------------------
# Estado del sistema y strings formateados
# ---------------------------------------------------------------------------

def update_system_status(
    state: CalculationState,
    runtime_seconds: float,
    now: datetime,
    conventions: EdgeCaseConventions = DEFAULT_CONVENTIONS,
) -> str:
    if state.previous_runtime is None:
        state.previous_runtime = runtime_seconds
        state.first_seen = now
        state.status = SystemStatus.STARTING.value
        return state.status

    if runtime_seconds > state.previous_runtime + RUNTIME_EPSILON:
        state.last_runtime_change = now
        state.ever_ran = True
        state.status = SystemStatus.RUNNING.value
    else:
        since = state.last_runtime_change or state.first_seen or now
        idle_for = (now - since).total_seconds()
        if idle_for > conventions.stale_idle_seconds:
            state.status = SystemStatus.IDLE.value
        elif idle_for > conventions.stale_stopped_seconds:
            state.status = SystemStatus.STOPPED.value
        elif state.ever_ran:
            state.status = SystemStatus.RUNNING.value
        else:
            state.status = SystemStatus.STARTING.value

    state.previous_runtime = runtime_seconds
    return state.status


def refresh_formatted_durations(
    state: CalculationState,
    runtime_seconds: float,
    downtime_seconds: float,
) -> None:
    """Re-formatea runtime/downtime solo si cambiaron más de 0.1 s."""
    if abs(runtime_seconds - state.formatted_runtime_value) > FORMAT_EPSILON:
        state.formatted_runtime_value = runtime_seconds
        state.runtime_formatted = format_duration(runtime_seconds)
        state.format_count += 1
    if abs(downtime_seconds - state.formatted_downtime_value) > FORMAT_EPSILON:
        state.formatted_downtime_value = downtime_seconds
        state.downtime_formatted = format_duration(downtime_seconds)
        state.format_count += 1


# ---------------------------------------------------------------------------
# Planificación de producción y calidad de datos
# ---------------------------------------------------------------------------

def fill_production_planning(
    record: MetricRecord,
    runtime_seconds: float,
    planned_seconds: float,
    production_target: int,
) -> None:
    total = record.total_count
    target = production_target

    record.production_progress = min(100.0, total / target * 100.0) if target > 0 else 0.0
    record.target_vs_actual_parts = total - target

    if planned_seconds > 0 and runtime_seconds > 0:
        expected_so_far = target * min(1.0, runtime_seconds / planned_seconds)
        record.production_behind_schedule = total < expected_so_far
    else:
        record.production_behind_schedule = total < target

    if runtime_seconds <= 0:
        record.remaining_time_at_current_rate = "N/A"
    elif record.parts_per_hour <= 0:
        record.remaining_time_at_current_rate = "∞"
    else:
        remaining_parts = max(0, target - total)
        record.remaining_time_at_current_rate = format_duration(
            remaining_parts / record.parts_per_hour * 3600.0
        )

    if planned_seconds > 0:
        record.projected_total_count = int(record.parts_per_hour * planned_seconds / 3600.0)
    else:
        record.projected_total_count = 0

    remaining_parts = target - total
    remaining_hours = (planned_seconds - runtime_seconds) / 3600.0
    if remaining_parts > 0 and remaining_hours > 0 and runtime_seconds > 0:
        record.required_rate_to_target = remaining_parts / remaining_hours
    else:
        record.required_rate_to_target = 0.0


def compute_data_quality_score(
    record: MetricRecord,
    runtime_seconds: float,
    poor_oee_threshold: float,
) -> float:
    score = 100.0
    if record.total_count == 0:
        score -= 10.0
    if runtime_seconds <= 0:
        score -= 10.0
    if record.production_behind_schedule:
        score -= 5.0
    if record.oee < poor_oee_threshold:
        score -= 10.0
    return max(0.0, score)


def rate_oee(oee: float, good_threshold: float, poor_threshold: float) -> str:
    if oee >= good_threshold:
        return "Good"
    if oee >= poor_threshold:
        return "Fair"
    return "Poor"


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def calculate(
    inputs: ProductionInputs,
    cache: DerivedConstantCache,
    state: CalculationState,
    config: ConfigSnapshot,
    now: datetime,
    conventions: EdgeCaseConventions = DEFAULT_CONVENTIONS,
) -> MetricRecord:
    """Calcula el registro de métricas de un tick (sin turnos ni tendencias)."""
    runtime = inputs.runtime_seconds
    ideal = cache.ideal_cycle_seconds(inputs.ideal_cycle_raw)
    planned = cache.planned_seconds(inputs.planned_hours_raw)

    record = MetricRecord(
        good_count=inputs.good_count,
        bad_count=inputs.bad_count,
        total_count=inputs.total_count,
    )
    total = record.total_count

    record.quality = compute_quality(inputs.good_count, inputs.bad_count, runtime, ideal)
    record.performance = compute_performance(total, ideal, runtime, conventions)
    record.availability = compute_availability(runtime, planned, conventions)
    record.oee = compute_oee(record.quality, record.performance, record.availability)

    record.avg_cycle_time = runtime / total if total > 0 else 0.0
    record.parts_per_hour = total / runtime * 3600.0 if runtime > 0 else 0.0
    record.expected_part_count = planned / ideal if planned > 0 and ideal > 0 else 0.0

    downtime = max(0.0, planned - runtime) if planned > 0 else 0.0
    refresh_formatted_durations(state, runtime, downtime)
    record.runtime_formatted = state.runtime_formatted
    record.downtime_formatted = state.downtime_formatted

    record.system_status = update_system_status(state, runtime, now, conventions)

    fill_production_planning(record, runtime, planned, config.production_target)
    record.data_quality_score = compute_data_quality_score(record, runtime, config.poor_oee_threshold)
    record.oee_rating = rate_oee(record.oee, config.good_oee_threshold, config.poor_oee_threshold)

    record.calculation_valid = True
    record.last_update_time = now.strftime("%Y-%m-%d %H:%M:%S")
    return record
