"""Convenciones de casos borde y constantes de temporización del motor.

Las variantes históricas del cálculo no coincidían en algunos casos borde
(performance con runtime 0, availability sin tiempo planificado, límite de
turnos). Aquí son elecciones con nombre, configurables por entorno.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

logger = logging.getLogger(__name__)


class IdleFill(str, Enum):
    """Valor de un porcentaje cuando no hay base para calcularlo."""
    ZERO = "zero"
    FULL = "full"

    @property
    def percent(self) -> float:
        return 100.0 if self is IdleFill.FULL else 0.0


def _env_choice(name: str, default: IdleFill) -> IdleFill:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return IdleFill(raw.strip().lower())
    except ValueError:
        logger.warning("[CONFIG] invalid value %s=%r, using %s", name, raw, default.value)
        return default


def _env_number(name: str, default: float, cast=float):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning("[CONFIG] invalid value %s=%r, using %s", name, raw, default)
        return default


@dataclass(frozen=True)
class EdgeCaseConventions:
    """Convenciones de casos borde y ventanas de tiempo."""
    # Performance cuando runtime <= 0
    idle_performance: IdleFill = IdleFill.ZERO
    # Availability cuando el tiempo planificado no es un positivo válido
    unplanned_availability: IdleFill = IdleFill.ZERO
    # Límite superior de turnos; 0 = sin límite
    max_shifts: int = 3
    imminent_window_seconds: float = 300.0
    shift_throttle_seconds: float = 1.0
    write_cooldown_seconds: float = 30.0
    history_capacity: int = 60
    stale_stopped_seconds: float = 30.0
    stale_idle_seconds: float = 300.0

    @property
    def shift_limit(self) -> Optional[int]:
        return self.max_shifts if self.max_shifts > 0 else None

    @classmethod
    def from_env(cls) -> "EdgeCaseConventions":
        return cls(
            idle_performance=_env_choice("OEE_IDLE_PERFORMANCE", IdleFill.ZERO),
            unplanned_availability=_env_choice("OEE_UNPLANNED_AVAILABILITY", IdleFill.ZERO),
            max_shifts=_env_number("OEE_MAX_SHIFTS", 3, int),
            imminent_window_seconds=_env_number("OEE_SHIFT_IMMINENT_WINDOW_S", 300.0),
            write_cooldown_seconds=_env_number("OEE_WRITE_COOLDOWN_S", 30.0),
        )


DEFAULT_CONVENTIONS = EdgeCaseConventions()
