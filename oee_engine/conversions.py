"""Conversiones tolerantes para valores leídos del tag store.

Los puntos de datos pueden venir como tipos numéricos nativos, strings
parseables o None. Ninguna función de este módulo lanza excepciones: ante
un valor no convertible devuelven el default.
"""

from __future__ import annotations

import math
from datetime import datetime, time, timedelta
from typing import Any, Optional

SECONDS_PER_DAY = 86400

_TRUE_STRINGS = {"true", "1", "yes", "on", "si", "sí"}
_FALSE_STRINGS = {"false", "0", "no", "off"}


def safe_float(value: Any, default: float = 0.0) -> float:
    """Convierte un valor a float con validación de NaN/Infinity.

    Args:
        value: Valor a convertir (puede ser None, str, Decimal, etc.)
        default: Valor por defecto si es inválido

    Returns:
        Float válido o default si el valor es None, NaN o Infinity
    """
    if value is None:
        return default
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return default
    try:
        f = float(value)
        if not math.isfinite(f):
            return default
        return f
    except (TypeError, ValueError):
        return default


def safe_int(value: Any, default: int = 0) -> int:
    """Convierte a int; los floats se truncan hacia cero."""
    if value is None:
        return default
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        try:
            return int(text)
        except ValueError:
            pass
    f = safe_float(value, math.nan)
    if math.isnan(f):
        return default
    return int(f)


def safe_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return default
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_STRINGS:
            return True
        if text in _FALSE_STRINGS:
            return False
    return default


def seconds_to_time(seconds: float) -> time:
    """Segundos desde medianoche -> time (acotado a [0, 86400))."""
    total = int(max(0.0, min(float(seconds), SECONDS_PER_DAY - 1)))
    return time(total // 3600, (total % 3600) // 60, total % 60)


def time_to_seconds(value: time) -> float:
    return value.hour * 3600 + value.minute * 60 + value.second + value.microsecond / 1e6


def parse_time_of_day(value: Any, default: Optional[time] = None) -> Optional[time]:
    """Interpreta una hora del día desde representaciones heterogéneas.

    Acepta datetime, time, timedelta, strings "HH:MM", "HH:MM:SS", "HHMM"
    o ISO datetime, y números (segundos desde medianoche).
    """
    if value is None:
        return default
    if isinstance(value, datetime):
        if value == datetime.min:
            return default
        return value.time()
    if isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        return seconds_to_time(value.total_seconds() % SECONDS_PER_DAY)
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value < 0 or value > SECONDS_PER_DAY:
            return default
        return seconds_to_time(value)
    if isinstance(value, str):
        return _parse_time_string(value.strip(), default)
    return default


def _parse_time_string(text: str, default: Optional[time]) -> Optional[time]:
    if not text:
        return default

    # "0600" / "630"
    if text.isdigit() and len(text) in (3, 4):
        hours, minutes = int(text[:-2]), int(text[-2:])
        if hours < 24 and minutes < 60:
            return time(hours, minutes)
        return default

    for fmt in ("%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(text).time()
    except ValueError:
        return default


def format_duration(seconds: float) -> str:
    """Formatea segundos como HH:MM:SS con horas totales (pueden superar 24).

    Duraciones negativas o no finitas se muestran como 00:00:00.
    """
    if seconds is None or not math.isfinite(seconds) or seconds < 0:
        return "00:00:00"
    total = int(seconds)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_time_of_day(value: datetime) -> str:
    return value.strftime("%H:%M:%S")
