"""Binding en memoria (tests, simulador, demos sin base de datos)."""

from __future__ import annotations

import itertools
import threading
from typing import Any, Dict, Iterable, Optional, Set

from .binding import Binding, Handle
from .exceptions import BindingError
from .variables import all_paths


class InMemoryBinding(Binding):
    """Puntos de datos en un dict ruta -> valor.

    Solo las rutas declaradas existen: ``resolve`` devuelve None para el
    resto, igual que un nodo ausente en el almacén real.
    """

    _keys = itertools.count(1)

    def __init__(self, values: Optional[Dict[str, Any]] = None, paths: Optional[Iterable[str]] = None):
        self._lock = threading.Lock()
        self._values: Dict[str, Any] = {}
        self._handles: Dict[str, Handle] = {}
        self._by_key: Dict[int, str] = {}
        self._failing: Set[str] = set()
        self.write_count = 0

        for path in paths if paths is not None else all_paths():
            self.declare(path)
        for path, value in (values or {}).items():
            self.declare(path, value)

    def declare(self, path: str, value: Any = None) -> Handle:
        with self._lock:
            handle = self._handles.get(path)
            if handle is None:
                handle = Handle(key=next(self._keys), path=path)
                self._handles[path] = handle
                self._by_key[handle.key] = path
            self._values[path] = value
            return handle

    def remove(self, path: str) -> None:
        with self._lock:
            handle = self._handles.pop(path, None)
            self._values.pop(path, None)
            if handle is not None:
                self._by_key.pop(handle.key, None)

    def fail_writes(self, path: str, failing: bool = True) -> None:
        """Simula un almacén que rechaza escrituras en ``path``."""
        with self._lock:
            if failing:
                self._failing.add(path)
            else:
                self._failing.discard(path)

    def get(self, path: str) -> Any:
        with self._lock:
            return self._values.get(path)

    def set(self, path: str, value: Any) -> None:
        with self._lock:
            if path not in self._handles:
                raise KeyError(path)
            self._values[path] = value

    # ------------------------------------------------------------------
    # Binding
    # ------------------------------------------------------------------

    def resolve(self, path: str) -> Optional[Handle]:
        with self._lock:
            return self._handles.get(path)

    def read_raw(self, handle: Handle) -> Any:
        with self._lock:
            path = self._by_key.get(handle.key)
            if path is None:
                raise BindingError(handle.path, "unknown handle")
            return self._values.get(path)

    def write_raw(self, handle: Handle, value: Any) -> None:
        with self._lock:
            path = self._by_key.get(handle.key)
            if path is None:
                raise BindingError(handle.path, "unknown handle")
            if path in self._failing:
                raise BindingError(path, "write rejected")
            self._values[path] = value
            self.write_count += 1
