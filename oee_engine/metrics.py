"""Métricas Prometheus del motor OEE."""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

OEE_TICKS = Counter(
    "oee_engine_ticks_total",
    "Total engine ticks",
    ["status"],  # completed, skipped
)
OEE_INSTANCE_RESULTS = Counter(
    "oee_engine_instance_results_total",
    "Per-instance tick outcomes",
    ["status"],  # success, error
)
OEE_TICK_LATENCY = Histogram(
    "oee_engine_tick_seconds",
    "Engine tick processing latency",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0],
)
OEE_OUTPUT_WRITES = Counter(
    "oee_engine_output_writes_total",
    "Output write attempts",
    ["status"],  # written, failed
)
OEE_ENGINE_RUNNING = Gauge(
    "oee_engine_running",
    "Engine loop running status",
)
