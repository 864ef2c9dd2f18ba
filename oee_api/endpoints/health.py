"""Health and readiness endpoints."""

from fastapi import APIRouter, HTTPException, Request

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """Liveness probe: always returns ok if process is running."""
    return {"status": "ok"}


@router.get("/ready")
def ready(request: Request):
    """Readiness probe: el loop del motor debe estar corriendo."""
    engine = request.app.state.engine
    if not engine.is_running:
        raise HTTPException(status_code=503, detail="not ready")
    return {"status": "ready", "instances": len(engine.instance_names)}
