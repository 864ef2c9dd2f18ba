"""Tabla fija nombre lógico -> ruta relativa dentro de una instancia.

Las salidas usan como nombre lógico el atributo correspondiente de
``MetricRecord``; el reconciliador las recorre en este orden.
"""

from __future__ import annotations

from typing import Dict, List

INPUTS: Dict[str, str] = {
    "runtime_seconds": "Inputs/TotalRuntimeSeconds",
    "good_count": "Inputs/GoodPartCount",
    "bad_count": "Inputs/BadPartCount",
    "ideal_cycle_time": "Inputs/IdealCycleTimeSeconds",
    "planned_hours": "Inputs/PlannedProductionTimeHours",
}

CONFIGURATION: Dict[str, str] = {
    "update_rate_ms": "Configuration/UpdateRateMs",
    "number_of_shifts": "Configuration/NumberOfShifts",
    "shift_start_time": "Configuration/ShiftStartTime",
    "quality_target": "Configuration/QualityTarget",
    "performance_target": "Configuration/PerformanceTarget",
    "availability_target": "Configuration/AvailabilityTarget",
    "oee_target": "Configuration/OEETarget",
    "production_target": "Configuration/ProductionTarget",
    "logging_verbosity": "Configuration/LoggingVerbosity",
    "good_oee_threshold": "Configuration/GoodOEE_Threshold",
    "poor_oee_threshold": "Configuration/PoorOEE_Threshold",
}

OUTPUTS: Dict[str, str] = {
    # Core
    "total_count": "Outputs/TotalCount",
    "quality": "Outputs/Quality",
    "performance": "Outputs/Performance",
    "availability": "Outputs/Availability",
    "oee": "Outputs/OEE",
    "avg_cycle_time": "Outputs/AvgCycleTime",
    "parts_per_hour": "Outputs/PartsPerHour",
    "expected_part_count": "Outputs/ExpectedPartCount",
    "runtime_formatted": "Outputs/TotalRuntimeFormatted",
    "downtime_formatted": "Outputs/DowntimeFormatted",
    "system_status": "Outputs/SystemStatus",
    "calculation_valid": "Outputs/CalculationValid",
    "last_update_time": "Outputs/LastUpdateTime",
    "data_quality_score": "Outputs/DataQualityScore",
    "oee_rating": "Outputs/OEERating",
    # Shift
    "current_shift": "Outputs/CurrentShiftNumber",
    "shift_start_time": "Outputs/ShiftStartTime",
    "shift_end_time": "Outputs/ShiftEndTime",
    "time_into_shift": "Outputs/TimeIntoShift",
    "time_remaining_in_shift": "Outputs/TimeRemainingInShift",
    "shift_change_occurred": "Outputs/ShiftChangeOccurred",
    "shift_change_imminent": "Outputs/ShiftChangeImminent",
    "shift_progress": "Outputs/ShiftProgress",
    "hours_per_shift": "Outputs/HoursPerShift",
    # Production planning
    "production_progress": "Outputs/ProductionProgress",
    "projected_total_count": "Outputs/ProjectedTotalCount",
    "remaining_time_at_current_rate": "Outputs/RemainingTimeAtCurrentRate",
    "production_behind_schedule": "Outputs/ProductionBehindSchedule",
    "required_rate_to_target": "Outputs/RequiredRateToTarget",
    "target_vs_actual_parts": "Outputs/TargetVsActualParts",
    # Trends
    "quality_trend": "Outputs/QualityTrend",
    "performance_trend": "Outputs/PerformanceTrend",
    "availability_trend": "Outputs/AvailabilityTrend",
    "oee_trend": "Outputs/OEETrend",
    # Statistics
    "min_quality": "Outputs/MinQuality",
    "max_quality": "Outputs/MaxQuality",
    "avg_quality": "Outputs/AvgQuality",
    "min_performance": "Outputs/MinPerformance",
    "max_performance": "Outputs/MaxPerformance",
    "avg_performance": "Outputs/AvgPerformance",
    "min_availability": "Outputs/MinAvailability",
    "max_availability": "Outputs/MaxAvailability",
    "avg_availability": "Outputs/AvgAvailability",
    "min_oee": "Outputs/MinOEE",
    "max_oee": "Outputs/MaxOEE",
    "avg_oee": "Outputs/AvgOEE",
    # Target deltas
    "quality_vs_target": "Outputs/QualityVsTarget",
    "performance_vs_target": "Outputs/PerformanceVsTarget",
    "availability_vs_target": "Outputs/AvailabilityVsTarget",
    "oee_vs_target": "Outputs/OEEVsTarget",
}


def all_paths() -> List[str]:
    """Todas las rutas de una instancia: entradas, configuración y salidas."""
    return [*INPUTS.values(), *CONFIGURATION.values(), *OUTPUTS.values()]
