"""Simulador de máquina: genera piezas buenas/malas y runtime en las entradas.

Producción:
    inter_arrival_s = cycle_time_seconds * 100 / performance_percent
Cada pieza es buena con probabilidad quality_percent / 100.
performance_percent <= 0 pausa la producción (el runtime sigue avanzando).
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from oee_engine.binding import Binding, resolve_instance

logger = logging.getLogger(__name__)


class MachineSimulator:
    """Simula una máquina escribiendo contadores en un binding."""

    def __init__(
        self,
        binding: Binding,
        cycle_time_seconds: float = 30.0,
        performance_percent: float = 85.0,
        quality_percent: float = 95.0,
        seed: Optional[int] = None,
        name: str = "",
    ):
        self.binding = binding
        self.name = name
        self.cycle_time_seconds = cycle_time_seconds
        self.performance_percent = performance_percent
        self.quality_percent = quality_percent
        self.running = True
        self._rand = random.Random(seed)
        self._accumulator = 0.0

        self._handles = resolve_instance(binding).inputs
        # Continuar desde los contadores existentes (best-effort)
        self.good = binding.read_int(self._handles.get("good_count"), 0)
        self.bad = binding.read_int(self._handles.get("bad_count"), 0)
        self.runtime_seconds = binding.read_number(self._handles.get("runtime_seconds"), 0.0)

    @classmethod
    def from_binding(cls, binding: Binding, name: str = "", seed: Optional[int] = None) -> "MachineSimulator":
        """Crea un simulador con el ciclo ideal configurado en la instancia."""
        handle = resolve_instance(binding).inputs.get("ideal_cycle_time")
        cycle_time = binding.read_number(handle, 30.0)
        logger.info("[SIMULATOR] created instance=%s cycle_time_s=%.2f", name, cycle_time)
        return cls(binding, cycle_time_seconds=cycle_time, seed=seed, name=name)

    @property
    def total(self) -> int:
        return self.good + self.bad

    @property
    def inter_arrival_seconds(self) -> Optional[float]:
        if self.performance_percent <= 0 or self.cycle_time_seconds <= 0:
            return None
        return self.cycle_time_seconds * 100.0 / self.performance_percent

    @property
    def parts_per_hour(self) -> float:
        interval = self.inter_arrival_seconds
        return 3600.0 / interval if interval else 0.0

    def step(self, dt_seconds: float) -> int:
        """Avanza la simulación ``dt_seconds`` y escribe las entradas.

        Returns:
            Piezas producidas en el paso.
        """
        if not self.running or dt_seconds <= 0:
            return 0

        self.runtime_seconds += dt_seconds
        produced = 0
        interval = self.inter_arrival_seconds
        if interval is not None:
            self._accumulator += dt_seconds
            while self._accumulator >= interval:
                self._accumulator -= interval
                produced += 1
                if self._rand.random() * 100.0 < self.quality_percent:
                    self.good += 1
                else:
                    self.bad += 1

        self._publish()
        return produced

    def reset(self) -> None:
        self.good = 0
        self.bad = 0
        self.runtime_seconds = 0.0
        self._accumulator = 0.0
        self._publish()
        logger.info("[SIMULATOR] counters_reset instance=%s", self.name)

    def _publish(self) -> None:
        for name, value in (
            ("good_count", self.good),
            ("bad_count", self.bad),
            ("runtime_seconds", self.runtime_seconds),
        ):
            result = self.binding.write(self._handles.get(name), value)
            if not result.ok:
                logger.warning("[SIMULATOR] write_failed instance=%s name=%s err=%s", self.name, name, result.error)
