"""Motor de cálculo OEE: binding, cálculo, turnos, tendencias y escritura de salidas."""

from .binding import Binding, Handle, InstanceBinding, WriteResult, resolve_instance
from .context import InstanceContext
from .conventions import EdgeCaseConventions, IdleFill
from .exceptions import BindingError, EngineStartupError, OEEEngineError
from .memory_binding import InMemoryBinding
from .models import MetricRecord, ShiftDescriptor, SystemStatus, TrendLabel
from .runtime import OEEEngine, TickReport

__all__ = [
    "Binding",
    "BindingError",
    "EdgeCaseConventions",
    "EngineStartupError",
    "Handle",
    "IdleFill",
    "InMemoryBinding",
    "InstanceBinding",
    "InstanceContext",
    "MetricRecord",
    "OEEEngine",
    "OEEEngineError",
    "ShiftDescriptor",
    "SystemStatus",
    "TickReport",
    "TrendLabel",
    "WriteResult",
    "resolve_instance",
]
