"""Capa de binding: nombres lógicos -> handles legibles/escribibles.

El motor no sabe cómo se mapean los handles al almacén subyacente. Cada
backend (memoria, tabla SQL, ...) implementa ``Binding`` con tres
operaciones crudas; las lecturas tipadas y el manejo de errores viven aquí.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import time
from typing import Any, Dict, Mapping, Optional

from .conversions import parse_time_of_day, safe_bool, safe_float, safe_int
from .variables import CONFIGURATION, INPUTS, OUTPUTS

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass(frozen=True)
class Handle:
    """Referencia opaca a un punto de datos.

    ``key`` es la identidad estable usada por los mapas de estado
    (write-state, caches); ``path`` solo sirve para logs.
    """
    key: int
    path: str


@dataclass(frozen=True)
class WriteResult:
    ok: bool
    error: Optional[str] = None


class Binding(ABC):
    """Interfaz de acceso a los puntos de datos de una instancia.

    Implementations:
    - InMemoryBinding: diccionario en proceso (tests, simulador)
    - SqlTagBinding: tabla oee_tags vía SQLAlchemy
    """

    #: Con True, los fallbacks de lectura se registran a nivel INFO.
    verbose_reads: bool = False

    @abstractmethod
    def resolve(self, path: str) -> Optional[Handle]:
        """Devuelve el handle de la ruta o None si no existe."""

    @abstractmethod
    def read_raw(self, handle: Handle) -> Any:
        """Lee el valor crudo. Puede lanzar BindingError."""

    @abstractmethod
    def write_raw(self, handle: Handle, value: Any) -> None:
        """Escribe el valor. Lanza BindingError si el almacén lo rechaza."""

    # ------------------------------------------------------------------
    # Lecturas tipadas: nunca lanzan, siempre devuelven el fallback
    # ------------------------------------------------------------------

    def read_value(self, handle: Optional[Handle]) -> Any:
        if handle is None:
            return None
        try:
            return self.read_raw(handle)
        except Exception as e:
            self._log_fallback(handle, "read_failed err=%s" % e)
            return None

    def read_number(self, handle: Optional[Handle], fallback: float) -> float:
        raw = self.read_value(handle)
        if raw is None:
            return fallback
        value = safe_float(raw, _MISSING)  # type: ignore[arg-type]
        if value is _MISSING:
            self._log_fallback(handle, "not_a_number raw=%r" % (raw,))
            return fallback
        return value

    def read_int(self, handle: Optional[Handle], fallback: int) -> int:
        raw = self.read_value(handle)
        if raw is None:
            return fallback
        value = safe_int(raw, _MISSING)  # type: ignore[arg-type]
        if value is _MISSING:
            self._log_fallback(handle, "not_an_int raw=%r" % (raw,))
            return fallback
        return value

    def read_bool(self, handle: Optional[Handle], fallback: bool) -> bool:
        raw = self.read_value(handle)
        if raw is None:
            return fallback
        value = safe_bool(raw, _MISSING)  # type: ignore[arg-type]
        if value is _MISSING:
            self._log_fallback(handle, "not_a_bool raw=%r" % (raw,))
            return fallback
        return value

    def read_time_of_day(self, handle: Optional[Handle], fallback: time) -> time:
        raw = self.read_value(handle)
        if raw is None:
            return fallback
        value = parse_time_of_day(raw, None)
        if value is None:
            self._log_fallback(handle, "not_a_time raw=%r" % (raw,))
            return fallback
        return value

    def write(self, handle: Optional[Handle], value: Any) -> WriteResult:
        """Escribe y reporta el resultado; un handle ausente es un no-op exitoso."""
        if handle is None:
            return WriteResult(ok=True)
        try:
            self.write_raw(handle, value)
            return WriteResult(ok=True)
        except Exception as e:
            return WriteResult(ok=False, error=str(e) or e.__class__.__name__)

    def _log_fallback(self, handle: Optional[Handle], detail: str) -> None:
        level = logging.INFO if self.verbose_reads else logging.DEBUG
        path = handle.path if handle is not None else "-"
        logger.log(level, "[BINDING] fallback path=%s %s", path, detail)


# ---------------------------------------------------------------------------
# Binding resuelto de una instancia
# ---------------------------------------------------------------------------

@dataclass
class InstanceBinding:
    """Handles resueltos una sola vez al registrar la instancia.

    Un nombre sin handle queda registrado como ausente (None): toda lectura
    devuelve el fallback y toda escritura es un no-op.
    """
    binding: Binding
    inputs: Dict[str, Optional[Handle]] = field(default_factory=dict)
    configuration: Dict[str, Optional[Handle]] = field(default_factory=dict)
    outputs: Dict[str, Optional[Handle]] = field(default_factory=dict)

    @property
    def missing(self) -> Dict[str, str]:
        """Nombre lógico -> ruta de cada handle ausente."""
        absent: Dict[str, str] = {}
        for table, handles in (
            (INPUTS, self.inputs),
            (CONFIGURATION, self.configuration),
            (OUTPUTS, self.outputs),
        ):
            for name, handle in handles.items():
                if handle is None:
                    absent[name] = table[name]
        return absent

    @property
    def bound_outputs(self) -> int:
        return sum(1 for h in self.outputs.values() if h is not None)


def _resolve_table(binding: Binding, table: Mapping[str, str]) -> Dict[str, Optional[Handle]]:
    return {name: binding.resolve(path) for name, path in table.items()}


def resolve_instance(binding: Binding) -> InstanceBinding:
    """Resuelve la tabla completa de variables contra un binding."""
    return InstanceBinding(
        binding=binding,
        inputs=_resolve_table(binding, INPUTS),
        configuration=_resolve_table(binding, CONFIGURATION),
        outputs=_resolve_table(binding, OUTPUTS),
    )
