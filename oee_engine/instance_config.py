"""Snapshot de configuración por instancia, leído desde el binding."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import time
from typing import Any, Dict

from .binding import InstanceBinding

DEFAULT_SHIFT_START = time(6, 0)


@dataclass(frozen=True)
class ConfigSnapshot:
    """Valores de configuración tipados de una instancia."""
    update_rate_ms: int = 1000
    number_of_shifts: int = 3
    shift_start_time: time = DEFAULT_SHIFT_START
    quality_target: float = 95.0
    performance_target: float = 85.0
    availability_target: float = 90.0
    oee_target: float = 72.7
    production_target: int = 1000
    logging_verbosity: int = 1
    good_oee_threshold: float = 80.0
    poor_oee_threshold: float = 60.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["shift_start_time"] = self.shift_start_time.strftime("%H:%M:%S")
        return data


DEFAULT_CONFIG = ConfigSnapshot()


def read_config_snapshot(bound: InstanceBinding) -> ConfigSnapshot:
    """Lee la configuración; valores ausentes o inválidos toman el default."""
    b = bound.binding
    h = bound.configuration
    d = DEFAULT_CONFIG
    return ConfigSnapshot(
        update_rate_ms=b.read_int(h.get("update_rate_ms"), d.update_rate_ms),
        number_of_shifts=b.read_int(h.get("number_of_shifts"), d.number_of_shifts),
        shift_start_time=b.read_time_of_day(h.get("shift_start_time"), d.shift_start_time),
        quality_target=b.read_number(h.get("quality_target"), d.quality_target),
        performance_target=b.read_number(h.get("performance_target"), d.performance_target),
        availability_target=b.read_number(h.get("availability_target"), d.availability_target),
        oee_target=b.read_number(h.get("oee_target"), d.oee_target),
        production_target=b.read_int(h.get("production_target"), d.production_target),
        logging_verbosity=b.read_int(h.get("logging_verbosity"), d.logging_verbosity),
        good_oee_threshold=b.read_number(h.get("good_oee_threshold"), d.good_oee_threshold),
        poor_oee_threshold=b.read_number(h.get("poor_oee_threshold"), d.poor_oee_threshold),
    )
