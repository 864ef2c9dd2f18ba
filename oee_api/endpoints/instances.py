"""Diagnóstico del motor OEE: métricas del loop y estado por instancia.

Solo expone estado retenido por el motor (config, historial, contadores);
los registros de métricas de cada tick no se conservan.
"""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, HTTPException, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ..schemas import EngineMetrics, InstanceDetail, InstanceSummary

router = APIRouter(tags=["diagnostics"])
logger = logging.getLogger(__name__)


@router.get("/metrics", response_model=EngineMetrics)
def get_engine_metrics(request: Request):
    engine = request.app.state.engine
    return EngineMetrics(
        running=engine.is_running,
        instances=len(engine.instance_names),
        **engine.stats.to_dict(),
    )


@router.get("/instances", response_model=List[InstanceSummary])
def list_instances(request: Request):
    engine = request.app.state.engine
    return [InstanceSummary(**summary) for summary in engine.snapshot()]


@router.get("/instances/{name}", response_model=InstanceDetail)
def get_instance(name: str, request: Request):
    engine = request.app.state.engine
    ctx = engine.get_context(name)
    if ctx is None:
        raise HTTPException(status_code=404, detail="instance not found")
    return InstanceDetail(**ctx.summary())


@router.get("/metrics/prometheus")
def get_prometheus_metrics():
    """Exposición en formato texto de Prometheus."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
