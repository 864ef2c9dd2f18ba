"""Excepciones del motor OEE."""

from __future__ import annotations

from typing import Optional


class OEEEngineError(Exception):
    """Base de errores del motor."""


class EngineStartupError(OEEEngineError):
    """La instancia no pudo inicializarse (binding, seed o configuración)."""

    def __init__(self, instance_name: str, reason: str):
        self.instance_name = instance_name
        self.reason = reason
        super().__init__(f"Instance '{instance_name}' failed to start: {reason}")


class BindingError(OEEEngineError):
    """Fallo del almacén subyacente al leer o escribir un punto."""

    def __init__(self, path: str, reason: str, cause: Optional[BaseException] = None):
        self.path = path
        self.reason = reason
        self.cause = cause
        super().__init__(f"{path}: {reason}")
