"""Binding sobre una tabla de tags en SQL (SQLAlchemy Core).

Esquema:
    oee_tags(id, instance_name, path, value, value_type, updated_at)

Los valores se guardan como texto con un tag de tipo y se decodifican a
tipos nativos al leer. El id de la fila es la clave opaca del handle.
"""

from __future__ import annotations

import logging
from datetime import datetime, time
from typing import Any, List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.engine import Engine

from .binding import Binding, Handle
from .exceptions import BindingError
from .variables import all_paths

logger = logging.getLogger(__name__)


_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS oee_tags (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    instance_name VARCHAR(200) NOT NULL,
    path VARCHAR(200) NOT NULL,
    value TEXT NULL,
    value_type VARCHAR(16) NOT NULL DEFAULT 'null',
    updated_at TIMESTAMP NULL,
    UNIQUE (instance_name, path)
)
"""


def ensure_schema(engine: Engine) -> None:
    with engine.begin() as conn:
        conn.execute(text(_CREATE_TABLE))


def provision_instance(engine: Engine, instance_name: str) -> int:
    """Crea (vacías) las filas que falten para todas las rutas de una instancia.

    Returns:
        Número de filas creadas.
    """
    created = 0
    with engine.begin() as conn:
        existing = {
            row[0]
            for row in conn.execute(
                text("SELECT path FROM oee_tags WHERE instance_name = :name"),
                {"name": instance_name},
            )
        }
        for path in all_paths():
            if path in existing:
                continue
            conn.execute(
                text(
                    "INSERT INTO oee_tags (instance_name, path, value, value_type) "
                    "VALUES (:name, :path, NULL, 'null')"
                ),
                {"name": instance_name, "path": path},
            )
            created += 1
    logger.info("[TAG_STORE] provisioned instance=%s rows_created=%d", instance_name, created)
    return created


def list_instances(engine: Engine) -> List[str]:
    with engine.connect() as conn:
        rows = conn.execute(
            text("SELECT DISTINCT instance_name FROM oee_tags ORDER BY instance_name")
        ).fetchall()
    return [row[0] for row in rows]


# ---------------------------------------------------------------------------
# Codec texto <-> valor nativo
# ---------------------------------------------------------------------------

def encode_value(value: Any) -> Tuple[Optional[str], str]:
    if value is None:
        return None, "null"
    if isinstance(value, bool):
        return ("true" if value else "false"), "bool"
    if isinstance(value, int):
        return str(value), "int"
    if isinstance(value, float):
        return repr(value), "float"
    if isinstance(value, datetime):
        return value.isoformat(), "datetime"
    if isinstance(value, time):
        return value.isoformat(), "time"
    return str(value), "str"


def decode_value(raw: Optional[str], value_type: str) -> Any:
    if raw is None or value_type == "null":
        return None
    if value_type == "bool":
        return raw.strip().lower() == "true"
    if value_type == "int":
        return int(raw)
    if value_type == "float":
        return float(raw)
    if value_type == "datetime":
        return datetime.fromisoformat(raw)
    if value_type == "time":
        return time.fromisoformat(raw)
    return raw


class SqlTagBinding(Binding):
    """Binding de una instancia sobre la tabla oee_tags."""

    def __init__(self, engine: Engine, instance_name: str):
        self.engine = engine
        self.instance_name = instance_name

    def resolve(self, path: str) -> Optional[Handle]:
        with self.engine.connect() as conn:
            row = conn.execute(
                text("SELECT id FROM oee_tags WHERE instance_name = :name AND path = :path"),
                {"name": self.instance_name, "path": path},
            ).fetchone()
        if row is None:
            return None
        return Handle(key=int(row[0]), path=path)

    def read_raw(self, handle: Handle) -> Any:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    text("SELECT value, value_type FROM oee_tags WHERE id = :id"),
                    {"id": handle.key},
                ).fetchone()
        except Exception as e:
            raise BindingError(handle.path, "select failed", e) from e
        if row is None:
            raise BindingError(handle.path, "row not found")
        try:
            return decode_value(row[0], row[1])
        except ValueError as e:
            raise BindingError(handle.path, "undecodable value %r" % (row[0],), e) from e

    def write_raw(self, handle: Handle, value: Any) -> None:
        encoded, value_type = encode_value(value)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    text(
                        "UPDATE oee_tags SET value = :value, value_type = :value_type, "
                        "updated_at = :updated_at WHERE id = :id"
                    ),
                    {
                        "value": encoded,
                        "value_type": value_type,
                        "updated_at": datetime.utcnow().isoformat(),
                        "id": handle.key,
                    },
                )
        except Exception as e:
            raise BindingError(handle.path, "update failed", e) from e
        if result.rowcount == 0:
            raise BindingError(handle.path, "row not found")
