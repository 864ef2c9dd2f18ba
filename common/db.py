from __future__ import annotations

from typing import Optional
import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from .config import Settings, get_settings


logger = logging.getLogger(__name__)


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


def get_engine(settings: Optional[Settings] = None, url: Optional[str] = None) -> Engine:
    settings = settings or get_settings()
    url = url or settings.database_url

    # Log básico de parámetros de conexión (sin credenciales)
    logger.info("[DB] Crear engine tag store dialect=%s", url.split(":", 1)[0])

    if _is_memory_sqlite(url):
        # Una sola conexión compartida: la BD en memoria vive mientras viva el engine.
        engine = create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            future=True,
        )
    elif url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False}, future=True)
    else:
        engine = create_engine(url, pool_pre_ping=True, future=True)

    # Test de conexión: ayuda a ver en logs si el proceso realmente llega a la BD
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("[DB] Test de conexión OK")
    except Exception:
        logger.exception("[DB] Test de conexión FALLÓ")

    return engine
