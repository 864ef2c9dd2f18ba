"""Estadísticas de ejecución del motor."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass
class EngineStats:
    """Contadores acumulados del loop."""

    ticks: int = 0
    skipped_ticks: int = 0
    instances_processed: int = 0
    instance_failures: int = 0
    writes: int = 0
    write_failures: int = 0
    last_tick_ms: float = 0.0
    last_tick_at: Optional[datetime] = None
    started_at: datetime = field(default_factory=datetime.utcnow)

    def __str__(self) -> str:
        return (
            f"EngineStats: ticks={self.ticks} processed={self.instances_processed} "
            f"failures={self.instance_failures}"
        )

    def to_dict(self) -> dict:
        """Convierte a diccionario."""
        return {
            "ticks": self.ticks,
            "skipped_ticks": self.skipped_ticks,
            "instances_processed": self.instances_processed,
            "instance_failures": self.instance_failures,
            "writes": self.writes,
            "write_failures": self.write_failures,
            "last_tick_ms": round(self.last_tick_ms, 3),
            "last_tick_at": self.last_tick_at.isoformat() if self.last_tick_at else None,
            "started_at": self.started_at.isoformat(),
            "success_rate": self._success_rate(),
        }

    def _success_rate(self) -> float:
        """Calcula tasa de éxito."""
        total = self.instances_processed + self.instance_failures
        if total == 0:
            return 1.0
        return self.instances_processed / total

    def reset(self):
        """Reinicia estadísticas."""
        self.ticks = 0
        self.skipped_ticks = 0
        self.instances_processed = 0
        self.instance_failures = 0
        self.writes = 0
        self.write_failures = 0
        self.last_tick_ms = 0.0
        self.last_tick_at = None
        self.started_at = datetime.utcnow()
