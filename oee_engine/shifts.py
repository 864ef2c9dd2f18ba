"""Cálculo del turno activo a partir de la hora del día.

N turnos de igual duración (24h / N) empezando en la hora de inicio del
turno 1, con wraparound a medianoche.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, time, timedelta
from typing import Optional

from .conventions import DEFAULT_CONVENTIONS, EdgeCaseConventions
from .conversions import SECONDS_PER_DAY, time_to_seconds
from .models import ShiftDescriptor

logger = logging.getLogger(__name__)


def clamp_shift_count(number_of_shifts: int, limit: Optional[int]) -> int:
    n = max(1, int(number_of_shifts))
    if limit is not None:
        n = min(n, limit)
    return n


def compute_shift(
    now: datetime,
    number_of_shifts: int,
    first_shift_start: time,
    imminent_window_seconds: float = 300.0,
    previous_shift: Optional[int] = None,
) -> ShiftDescriptor:
    """Turno activo en ``now`` (sin throttle).

    ``number_of_shifts`` ya debe venir acotado a >= 1.
    """
    n = max(1, number_of_shifts)
    duration = SECONDS_PER_DAY / n

    now_tod = time_to_seconds(now.time())
    start_tod = time_to_seconds(first_shift_start)
    since_first = (now_tod - start_tod) % SECONDS_PER_DAY
    index = int(since_first // duration) % n
    shift_number = index + 1

    midnight = datetime.combine(now.date(), time(0, 0), tzinfo=now.tzinfo)
    start = midnight + timedelta(seconds=start_tod + index * duration)
    # Puede caer en el futuro (turno que empezó ayer) o más de un día atrás.
    while start > now:
        start -= timedelta(days=1)
    while (now - start).total_seconds() >= SECONDS_PER_DAY:
        start += timedelta(days=1)

    end = start + timedelta(seconds=duration)
    elapsed = (now - start).total_seconds()
    remaining = max(0.0, duration - elapsed)

    return ShiftDescriptor(
        shift_number=shift_number,
        shift_count=n,
        start=start,
        end=end,
        elapsed_seconds=elapsed,
        remaining_seconds=remaining,
        duration_seconds=duration,
        change_occurred=previous_shift is not None and previous_shift != shift_number,
        change_imminent=0.0 <= remaining <= imminent_window_seconds,
    )


class ShiftScheduler:
    """Scheduler de turnos con throttle interno y detección de cambio por flanco.

    ``change_occurred`` es True solo en la primera evaluación tras el cambio;
    las llamadas throttled reutilizan el descriptor en caché con el flag en False.
    """

    def __init__(self, conventions: EdgeCaseConventions = DEFAULT_CONVENTIONS):
        self.conventions = conventions
        self._last_calc: Optional[datetime] = None
        self._last_shift: Optional[int] = None
        self._cached: Optional[ShiftDescriptor] = None
        self._cached_key: Optional[tuple] = None
        self.changes = 0

    @property
    def current_shift(self) -> Optional[int]:
        return self._last_shift

    def update(self, now: datetime, number_of_shifts: int, first_shift_start: time) -> ShiftDescriptor:
        n = clamp_shift_count(number_of_shifts, self.conventions.shift_limit)
        key = (n, first_shift_start)

        if (
            self._cached is not None
            and self._last_calc is not None
            and self._cached_key == key
            and 0 <= (now - self._last_calc).total_seconds() < self.conventions.shift_throttle_seconds
        ):
            if self._cached.change_occurred:
                self._cached = replace(self._cached, change_occurred=False)
            return self._cached

        descriptor = compute_shift(
            now,
            n,
            first_shift_start,
            self.conventions.imminent_window_seconds,
            previous_shift=self._last_shift,
        )
        if descriptor.change_occurred:
            self.changes += 1
            logger.info(
                "[SHIFT] change from=%s to=%d start=%s",
                self._last_shift,
                descriptor.shift_number,
                descriptor.start.strftime("%H:%M:%S"),
            )

        self._last_shift = descriptor.shift_number
        self._last_calc = now
        self._cached = descriptor
        self._cached_key = key
        return descriptor

