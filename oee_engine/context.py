"""Contexto por instancia: binding resuelto más todo el estado propio.

Historial, write-state, caches y snapshot de configuración pertenecen en
exclusiva a este contexto; el loop garantiza que solo un tick lo usa a la vez.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from .binding import Binding, InstanceBinding, resolve_instance
from .calculation import CalculationState, DerivedConstantCache, ProductionInputs, calculate
from .conventions import DEFAULT_CONVENTIONS, EdgeCaseConventions
from .conversions import format_duration, format_time_of_day
from .instance_config import DEFAULT_CONFIG, ConfigSnapshot, read_config_snapshot
from .models import MetricRecord, ShiftDescriptor
from .reconciler import OutputReconciler, ReconcileResult
from .seeder import seed_defaults
from .shifts import ShiftScheduler
from .trends import TRACKED_METRICS, TrendTracker, fill_target_deltas

logger = logging.getLogger(__name__)

# Cada cuántos ticks se loguea el resumen con verbosidad >= 2
SUMMARY_EVERY_TICKS = 60


def apply_shift(record: MetricRecord, shift: ShiftDescriptor) -> None:
    record.current_shift = shift.shift_number
    record.shift_start_time = format_time_of_day(shift.start)
    record.shift_end_time = format_time_of_day(shift.end)
    record.time_into_shift = format_duration(shift.elapsed_seconds)
    record.time_remaining_in_shift = format_duration(shift.remaining_seconds)
    record.shift_change_occurred = shift.change_occurred
    record.shift_change_imminent = shift.change_imminent
    record.shift_progress = shift.progress
    record.hours_per_shift = shift.hours_per_shift


class InstanceContext:
    """Estado y pipeline de cálculo de una instancia monitorizada."""

    def __init__(
        self,
        name: str,
        binding: Binding,
        conventions: EdgeCaseConventions = DEFAULT_CONVENTIONS,
        config_refresh_ticks: int = 30,
    ):
        self.name = name
        self.binding = binding
        self.conventions = conventions
        self.config_refresh_ticks = max(1, config_refresh_ticks)

        self.bound: InstanceBinding = resolve_instance(binding)
        self.config: ConfigSnapshot = DEFAULT_CONFIG
        self.defaults_initialized = False

        self.cache = DerivedConstantCache()
        self.calc_state = CalculationState()
        self.shifts = ShiftScheduler(conventions)
        self.trends = TrendTracker(conventions.history_capacity)
        self.reconciler = OutputReconciler(binding, name, conventions)

        self.ticks = 0
        self.failures = 0
        self.last_error: Optional[str] = None
        self.last_tick_at: Optional[datetime] = None
        self.last_result: Optional[ReconcileResult] = None

        missing = self.bound.missing
        if missing:
            logger.warning(
                "[OEE_CONTEXT] instance=%s missing_handles=%d names=%s",
                name,
                len(missing),
                ",".join(sorted(missing)),
            )

    # ------------------------------------------------------------------
    # Inicialización y configuración
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Seed de defaults (una sola vez) y primera lectura de configuración."""
        if not self.defaults_initialized:
            seed_defaults(self.bound, self.name)
            self.defaults_initialized = True
        self.refresh_config()

    def refresh_config(self) -> ConfigSnapshot:
        previous = self.config
        self.config = read_config_snapshot(self.bound)

        verbose = self.config.logging_verbosity >= 3
        self.binding.verbose_reads = verbose
        self.reconciler.verbose = verbose

        if self.config != previous:
            logger.info(
                "[OEE_CONTEXT] config_refreshed instance=%s shifts=%d start=%s target=%d update_ms=%d",
                self.name,
                self.config.number_of_shifts,
                self.config.shift_start_time.strftime("%H:%M"),
                self.config.production_target,
                self.config.update_rate_ms,
            )
        return self.config

    def read_inputs(self) -> ProductionInputs:
        b = self.binding
        h = self.bound.inputs
        return ProductionInputs(
            runtime_seconds=b.read_number(h.get("runtime_seconds"), 0.0),
            good_count=b.read_int(h.get("good_count"), 0),
            bad_count=b.read_int(h.get("bad_count"), 0),
            ideal_cycle_raw=b.read_value(h.get("ideal_cycle_time")),
            planned_hours_raw=b.read_value(h.get("planned_hours")),
        )

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def process_tick(self, now: datetime, now_utc: datetime) -> MetricRecord:
        """Lee entradas, calcula, actualiza turnos/tendencias y reconcilia salidas."""
        if not self.defaults_initialized:
            self.initialize()
        elif self.ticks > 0 and self.ticks % self.config_refresh_ticks == 0:
            self.refresh_config()

        cfg = self.config
        inputs = self.read_inputs()

        record = calculate(inputs, self.cache, self.calc_state, cfg, now, self.conventions)

        shift = self.shifts.update(now, cfg.number_of_shifts, cfg.shift_start_time)
        apply_shift(record, shift)

        self.trends.apply(record, inputs.has_activity)
        fill_target_deltas(
            record,
            cfg.quality_target,
            cfg.performance_target,
            cfg.availability_target,
            cfg.oee_target,
        )

        self.last_result = self.reconciler.reconcile(record, self.bound.outputs, now_utc)
        self.ticks += 1
        self.last_tick_at = now_utc

        if cfg.logging_verbosity >= 2 and self.ticks % SUMMARY_EVERY_TICKS == 1:
            logger.info(
                "[OEE_CONTEXT] instance=%s oee=%.2f q=%.2f p=%.2f a=%.2f shift=%d status=%s written=%d",
                self.name,
                record.oee,
                record.quality,
                record.performance,
                record.availability,
                record.current_shift,
                record.system_status,
                self.last_result.written,
            )
        return record

    def record_failure(self, error: BaseException) -> None:
        self.failures += 1
        self.last_error = f"{error.__class__.__name__}: {error}"

    # ------------------------------------------------------------------
    # Diagnóstico
    # ------------------------------------------------------------------

    def summary(self) -> Dict[str, Any]:
        stats = {}
        for name in TRACKED_METRICS:
            s = self.trends.stats(name)
            stats[name] = {"min": s.min, "max": s.max, "avg": s.avg, "count": s.count}
        return {
            "name": self.name,
            "ticks": self.ticks,
            "failures": self.failures,
            "last_error": self.last_error,
            "last_tick_at": self.last_tick_at.isoformat() if self.last_tick_at else None,
            "status": self.calc_state.status,
            "current_shift": self.shifts.current_shift,
            "config": self.config.to_dict(),
            "history_lengths": self.trends.lengths(),
            "trends": {name: self.trends.trend(name).value for name in TRACKED_METRICS},
            "statistics": stats,
            "missing_handles": sorted(self.bound.missing),
            "bound_outputs": self.bound.bound_outputs,
            "writes": self.reconciler.stats.to_dict(),
            "pending_write_failures": self.reconciler.pending_failures,
        }
