"""Seed de valores por defecto en entradas y configuración vacías.

Se ejecuta una vez por instancia tras resolver el binding. Es best-effort:
un fallo de escritura se registra y se continúa con el siguiente punto.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Callable, List, Optional

from .binding import Handle, InstanceBinding

logger = logging.getLogger(__name__)

FLOAT_EPSILON = 0.0001


@dataclass(frozen=True)
class SeedDefault:
    """Punto a sembrar: grupo ('inputs'/'configuration'), nombre lógico y default."""
    group: str
    name: str
    default: Any


DEFAULT_SEEDS: List[SeedDefault] = [
    SeedDefault("inputs", "runtime_seconds", 0.0),
    SeedDefault("inputs", "good_count", 0),
    SeedDefault("inputs", "bad_count", 0),
    SeedDefault("inputs", "ideal_cycle_time", 30.0),
    SeedDefault("inputs", "planned_hours", 8.0),
    SeedDefault("configuration", "number_of_shifts", 3),
    SeedDefault("configuration", "shift_start_time", time(6, 0)),
    SeedDefault("configuration", "production_target", 1000),
    SeedDefault("configuration", "update_rate_ms", 1000),
    SeedDefault("configuration", "logging_verbosity", 1),
    SeedDefault("configuration", "quality_target", 95.0),
    SeedDefault("configuration", "performance_target", 85.0),
    SeedDefault("configuration", "availability_target", 90.0),
    SeedDefault("configuration", "oee_target", 72.7),
    SeedDefault("configuration", "good_oee_threshold", 80.0),
    SeedDefault("configuration", "poor_oee_threshold", 60.0),
]


def _as_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def is_empty(current: Any, default: Any) -> bool:
    """Decide si el valor actual cuenta como "vacío" para el tipo del default."""
    if current is None:
        return True
    if isinstance(default, bool):
        return False
    if isinstance(default, float):
        f = _as_float(current)
        return f is not None and abs(f) < FLOAT_EPSILON
    if isinstance(default, int):
        f = _as_float(current)
        return f is not None and f == 0
    if isinstance(default, str):
        return isinstance(current, str) and not current.strip()
    if isinstance(default, (datetime, time)):
        if isinstance(current, datetime):
            return current == datetime.min
        if isinstance(current, str):
            return not current.strip()
        return False
    return False


def matches_default(current: Any, default: Any) -> bool:
    """True si el punto ya contiene el default (p.ej. un contador a 0)."""
    if current is None:
        return False
    if isinstance(default, (int, float)) and not isinstance(default, bool):
        f = _as_float(current)
        return f is not None and abs(f - float(default)) < FLOAT_EPSILON
    return current == default


def seed_defaults(
    bound: InstanceBinding,
    instance_name: str,
    seeds: Optional[List[SeedDefault]] = None,
    is_empty_fn: Callable[[Any, Any], bool] = is_empty,
) -> int:
    """Escribe los defaults en los puntos vacíos.

    Returns:
        Número de puntos sembrados.
    """
    seeded = 0
    for seed in seeds if seeds is not None else DEFAULT_SEEDS:
        handles = getattr(bound, seed.group)
        handle: Optional[Handle] = handles.get(seed.name)
        if handle is None:
            continue

        current = bound.binding.read_value(handle)
        if not is_empty_fn(current, seed.default):
            continue
        if matches_default(current, seed.default):
            continue

        result = bound.binding.write(handle, seed.default)
        if result.ok:
            seeded += 1
        else:
            logger.warning(
                "[SEEDER] write_failed instance=%s path=%s err=%s",
                instance_name,
                handle.path,
                result.error,
            )

    logger.info("[SEEDER] defaults_initialized instance=%s seeded=%d", instance_name, seeded)
    return seeded
