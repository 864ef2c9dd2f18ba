"""Modelos del motor OEE."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict


class TrendLabel(str, Enum):
    INSUFFICIENT_DATA = "Insufficient Data"
    RISING_STRONGLY = "Rising Strongly"
    RISING = "Rising"
    STABLE = "Stable"
    FALLING = "Falling"
    FALLING_STRONGLY = "Falling Strongly"


class SystemStatus(str, Enum):
    STARTING = "Starting"
    RUNNING = "Running"
    STOPPED = "Stopped"
    IDLE = "Idle"


@dataclass(frozen=True)
class ShiftDescriptor:
    """Turno activo en un instante dado."""
    shift_number: int
    shift_count: int
    start: datetime
    end: datetime
    elapsed_seconds: float
    remaining_seconds: float
    duration_seconds: float
    change_occurred: bool
    change_imminent: bool

    @property
    def progress(self) -> float:
        if self.duration_seconds <= 0:
            return 0.0
        return min(100.0, max(0.0, self.elapsed_seconds / self.duration_seconds * 100.0))

    @property
    def hours_per_shift(self) -> float:
        return self.duration_seconds / 3600.0


@dataclass
class MetricRecord:
    """Registro plano producido en cada tick.

    Los nombres de atributo coinciden con las claves de ``variables.OUTPUTS``.
    """
    # Counts
    good_count: int = 0
    bad_count: int = 0
    total_count: int = 0

    # Core percentages
    quality: float = 0.0
    performance: float = 0.0
    availability: float = 0.0
    oee: float = 0.0

    # Rates and durations
    avg_cycle_time: float = 0.0
    parts_per_hour: float = 0.0
    expected_part_count: float = 0.0
    runtime_formatted: str = "00:00:00"
    downtime_formatted: str = "00:00:00"

    # Status
    system_status: str = SystemStatus.STARTING.value
    calculation_valid: bool = False
    last_update_time: str = ""
    data_quality_score: float = 100.0
    oee_rating: str = ""

    # Shift
    current_shift: int = 1
    shift_start_time: str = ""
    shift_end_time: str = ""
    time_into_shift: str = "00:00:00"
    time_remaining_in_shift: str = "00:00:00"
    shift_change_occurred: bool = False
    shift_change_imminent: bool = False
    shift_progress: float = 0.0
    hours_per_shift: float = 0.0

    # Production planning
    production_progress: float = 0.0
    projected_total_count: int = 0
    remaining_time_at_current_rate: str = "N/A"
    production_behind_schedule: bool = False
    required_rate_to_target: float = 0.0
    target_vs_actual_parts: int = 0

    # Trends
    quality_trend: str = TrendLabel.INSUFFICIENT_DATA.value
    performance_trend: str = TrendLabel.INSUFFICIENT_DATA.value
    availability_trend: str = TrendLabel.INSUFFICIENT_DATA.value
    oee_trend: str = TrendLabel.INSUFFICIENT_DATA.value

    # Statistics over the rolling window
    min_quality: float = 0.0
    max_quality: float = 0.0
    avg_quality: float = 0.0
    min_performance: float = 0.0
    max_performance: float = 0.0
    avg_performance: float = 0.0
    min_availability: float = 0.0
    max_availability: float = 0.0
    avg_availability: float = 0.0
    min_oee: float = 0.0
    max_oee: float = 0.0
    avg_oee: float = 0.0

    # Target deltas
    quality_vs_target: float = 0.0
    performance_vs_target: float = 0.0
    availability_vs_target: float = 0.0
    oee_vs_target: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
