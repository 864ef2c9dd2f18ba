from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class MetricStatistics(BaseModel):
    min: float
    max: float
    avg: float
    count: int


class WriteCounters(BaseModel):
    written: int = 0
    unchanged: int = 0
    cooldown: int = 0
    failed: int = 0
    absent: int = 0


class InstanceSummary(BaseModel):
    name: str
    ticks: int
    failures: int
    status: str
    current_shift: Optional[int] = None
    last_tick_at: Optional[str] = None


class InstanceDetail(InstanceSummary):
    last_error: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)
    history_lengths: Dict[str, int] = Field(default_factory=dict)
    trends: Dict[str, str] = Field(default_factory=dict)
    statistics: Dict[str, MetricStatistics] = Field(default_factory=dict)
    missing_handles: List[str] = Field(default_factory=list)
    bound_outputs: int = 0
    writes: WriteCounters = Field(default_factory=WriteCounters)
    pending_write_failures: int = 0


class EngineMetrics(BaseModel):
    running: bool
    instances: int
    ticks: int
    skipped_ticks: int
    instances_processed: int
    instance_failures: int
    writes: int = 0
    write_failures: int = 0
    last_tick_ms: float
    last_tick_at: Optional[str] = None
    started_at: str
    success_rate: float
