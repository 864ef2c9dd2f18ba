"""Escritura de salidas solo cuando cambian, con cooldown tras fallos."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .binding import Binding, Handle
from .conventions import DEFAULT_CONVENTIONS, EdgeCaseConventions
from .metrics import OEE_OUTPUT_WRITES
from .models import MetricRecord

logger = logging.getLogger(__name__)

FLOAT_TOLERANCE = 0.001

_NOTHING: Any = object()


def values_equal(a: Any, b: Any) -> bool:
    """Floats con tolerancia 0.001; el resto por igualdad exacta."""
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, float) or isinstance(b, float):
        if not isinstance(a, (int, float)) or not isinstance(b, (int, float)):
            return False
        if math.isnan(a) or math.isnan(b):
            return math.isnan(a) and math.isnan(b)
        return abs(a - b) < FLOAT_TOLERANCE
    return a == b


@dataclass
class WriteState:
    """Estado de escritura de un handle.

    ``failures`` guarda (valor, instante UTC) de cada valor fallido aún en cooldown.
    """
    last_written: Any = _NOTHING
    failures: List[Tuple[Any, datetime]] = field(default_factory=list)

    @property
    def has_written(self) -> bool:
        return self.last_written is not _NOTHING

    @property
    def failed_at(self) -> Optional[datetime]:
        """Instante del fallo más reciente, o None."""
        if not self.failures:
            return None
        return max(at for _, at in self.failures)

    def prune(self, now_utc: datetime, cooldown_seconds: float) -> None:
        self.failures = [
            (v, at) for v, at in self.failures if (now_utc - at).total_seconds() < cooldown_seconds
        ]

    def in_cooldown(self, value: Any) -> bool:
        return any(values_equal(v, value) for v, _ in self.failures)

    def record_failure(self, value: Any, now_utc: datetime) -> None:
        self.failures = [(v, at) for v, at in self.failures if not values_equal(v, value)]
        self.failures.append((value, now_utc))


@dataclass
class ReconcileStats:
    written: int = 0
    unchanged: int = 0
    cooldown: int = 0
    failed: int = 0
    absent: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "written": self.written,
            "unchanged": self.unchanged,
            "cooldown": self.cooldown,
            "failed": self.failed,
            "absent": self.absent,
        }


@dataclass
class ReconcileResult:
    written: int = 0
    unchanged: int = 0
    cooldown: int = 0
    failed: int = 0
    absent: int = 0
    errors: Dict[str, str] = field(default_factory=dict)


class OutputReconciler:
    """Compara cada salida con el último valor escrito con éxito y escribe diffs.

    Si un intento falla, se guarda el instante (UTC) y el valor; reintentar el
    mismo valor queda suprimido hasta que pase el cooldown. Un valor distinto
    se intenta de inmediato.
    """

    def __init__(
        self,
        binding: Binding,
        instance_name: str = "",
        conventions: EdgeCaseConventions = DEFAULT_CONVENTIONS,
    ):
        self.binding = binding
        self.instance_name = instance_name
        self.cooldown_seconds = conventions.write_cooldown_seconds
        self._states: Dict[int, WriteState] = {}
        self.stats = ReconcileStats()
        self.verbose = False

    def state_for(self, handle: Handle) -> Optional[WriteState]:
        return self._states.get(handle.key)

    @property
    def tracked(self) -> int:
        return len(self._states)

    @property
    def pending_failures(self) -> int:
        return sum(1 for s in self._states.values() if s.failed_at is not None)

    def write_if_changed(self, handle: Optional[Handle], value: Any, now_utc: datetime) -> str:
        """Escribe un valor si cambió.

        Returns:
            "absent" | "unchanged" | "cooldown" | "written" | "failed"
        """
        if handle is None:
            self.stats.absent += 1
            return "absent"

        state = self._states.get(handle.key)
        if state is None:
            state = WriteState()
            self._states[handle.key] = state

        if state.has_written and values_equal(state.last_written, value):
            self.stats.unchanged += 1
            return "unchanged"

        state.prune(now_utc, self.cooldown_seconds)
        if state.in_cooldown(value):
            self.stats.cooldown += 1
            return "cooldown"

        result = self.binding.write(handle, value)
        if result.ok:
            state.last_written = value
            state.failures.clear()
            self.stats.written += 1
            OEE_OUTPUT_WRITES.labels(status="written").inc()
            if self.verbose:
                logger.info("[RECONCILER] write instance=%s path=%s value=%r", self.instance_name, handle.path, value)
            return "written"

        state.record_failure(value, now_utc)
        self.stats.failed += 1
        OEE_OUTPUT_WRITES.labels(status="failed").inc()
        logger.error(
            "[RECONCILER] write_failed instance=%s path=%s err=%s",
            self.instance_name,
            handle.path,
            result.error,
        )
        return "failed"

    def reconcile(
        self,
        record: MetricRecord,
        outputs: Mapping[str, Optional[Handle]],
        now_utc: datetime,
    ) -> ReconcileResult:
        result = ReconcileResult()
        for name, handle in outputs.items():
            outcome = self.write_if_changed(handle, getattr(record, name), now_utc)
            setattr(result, outcome, getattr(result, outcome) + 1)
            if outcome == "failed" and handle is not None:
                result.errors[name] = handle.path
        return result
