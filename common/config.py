from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


def _default_env_file() -> str:
    # .env del directorio de trabajo, igual que en despliegues con docker-compose.
    return str(Path.cwd() / ".env")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    database_url: str
    update_interval_ms: int
    log_level: str

    config_refresh_ticks: int
    join_timeout_seconds: float


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("OEE_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    database_url = os.getenv("OEE_DATABASE_URL", "sqlite:///oee_tags.db")
    update_interval_ms = _env_int("OEE_UPDATE_INTERVAL_MS", 1000)
    log_level = os.getenv("OEE_LOG_LEVEL", "INFO").upper()

    # Cada cuántos ticks se vuelve a leer la configuración de cada instancia.
    config_refresh_ticks = max(1, _env_int("OEE_CONFIG_REFRESH_TICKS", 30))
    join_timeout_seconds = _env_float("OEE_JOIN_TIMEOUT_S", 0.5)

    return Settings(
        database_url=database_url,
        update_interval_ms=update_interval_ms,
        log_level=log_level,
        config_refresh_ticks=config_refresh_ticks,
        join_timeout_seconds=join_timeout_seconds,
    )
