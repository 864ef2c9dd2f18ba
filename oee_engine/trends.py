"""Historial acotado por métrica, clasificación de tendencia y estadísticos."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from statistics import mean
from typing import Deque, Dict, Iterable, Sequence

from .models import MetricRecord, TrendLabel

TRACKED_METRICS = ("quality", "performance", "availability", "oee")

STRONG_DELTA = 2.0
WEAK_DELTA = 0.5


@dataclass(frozen=True)
class HistoryStats:
    """Estadísticos de la ventana completa de una métrica."""
    min: float
    max: float
    avg: float
    count: int


EMPTY_STATS = HistoryStats(min=0.0, max=0.0, avg=0.0, count=0)


def _label_for_delta(delta: float) -> TrendLabel:
    if delta >= STRONG_DELTA:
        return TrendLabel.RISING_STRONGLY
    if delta >= WEAK_DELTA:
        return TrendLabel.RISING
    if delta <= -STRONG_DELTA:
        return TrendLabel.FALLING_STRONGLY
    if delta <= -WEAK_DELTA:
        return TrendLabel.FALLING
    return TrendLabel.STABLE


def classify_trend(history: Sequence[float]) -> TrendLabel:
    """Clasifica la tendencia de una serie.

    - Menos de 2 muestras: datos insuficientes.
    - Hasta 4 muestras: último - primero.
    - Más de 4: media de los últimos ``L // 2`` menos media de los primeros ``L // 2``.
    """
    values = list(history)
    length = len(values)
    if length < 2:
        return TrendLabel.INSUFFICIENT_DATA
    if length <= 4:
        return _label_for_delta(values[-1] - values[0])

    half = length // 2
    first_avg = mean(values[:half])
    last_avg = mean(values[-half:])
    return _label_for_delta(last_avg - first_avg)


def compute_stats(history: Iterable[float]) -> HistoryStats:
    values = list(history)
    if not values:
        return EMPTY_STATS
    return HistoryStats(min=min(values), max=max(values), avg=mean(values), count=len(values))


class TrendTracker:
    """Historial FIFO (capacidad fija) por métrica de una instancia."""

    def __init__(self, capacity: int = 60, metrics: Iterable[str] = TRACKED_METRICS) -> None:
        self.capacity = int(capacity)
        self._histories: Dict[str, Deque[float]] = {
            name: deque(maxlen=self.capacity) for name in metrics
        }

    def push(self, name: str, value: float) -> None:
        self._histories[name].append(float(value))

    def push_record(self, record: MetricRecord) -> None:
        for name in self._histories:
            self.push(name, getattr(record, name))

    def history(self, name: str) -> Sequence[float]:
        return tuple(self._histories[name])

    def lengths(self) -> Dict[str, int]:
        return {name: len(buf) for name, buf in self._histories.items()}

    def trend(self, name: str) -> TrendLabel:
        return classify_trend(self._histories[name])

    def stats(self, name: str) -> HistoryStats:
        return compute_stats(self._histories[name])

    def apply(self, record: MetricRecord, active: bool) -> None:
        """Actualiza el historial (si hay actividad) y rellena tendencias y estadísticos."""
        if active:
            self.push_record(record)

        for name in self._histories:
            setattr(record, f"{name}_trend", self.trend(name).value)
            stats = self.stats(name)
            if stats.count:
                setattr(record, f"min_{name}", stats.min)
                setattr(record, f"max_{name}", stats.max)
                setattr(record, f"avg_{name}", stats.avg)

    def clear(self) -> None:
        for buf in self._histories.values():
            buf.clear()


def fill_target_deltas(
    record: MetricRecord,
    quality_target: float,
    performance_target: float,
    availability_target: float,
    oee_target: float,
) -> None:
    record.quality_vs_target = record.quality - quality_target
    record.performance_vs_target = record.performance - performance_target
    record.availability_vs_target = record.availability - availability_target
    record.oee_vs_target = record.oee - oee_target
