"""Fuente de tiempo inyectable."""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Hora local (naive) usada para turnos y timestamps visibles."""
        ...

    def utcnow(self) -> datetime:
        """Hora UTC usada para cooldowns."""
        ...


class SystemClock:
    def now(self) -> datetime:
        return datetime.now()

    def utcnow(self) -> datetime:
        return datetime.utcnow()
