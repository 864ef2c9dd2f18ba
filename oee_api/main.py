from __future__ import annotations

import logging

from fastapi import FastAPI

from oee_engine.runtime import OEEEngine

from .endpoints import health, instances

logger = logging.getLogger(__name__)


def create_app(engine: OEEEngine) -> FastAPI:
    """App de diagnóstico ligada a un motor ya construido."""
    app = FastAPI(title="OEE Calculation Service", version="0.1.0")
    app.state.engine = engine
    app.include_router(health.router)
    app.include_router(instances.router)
    logger.info("[API] diagnostics app created engine=%s", engine.name)
    return app
