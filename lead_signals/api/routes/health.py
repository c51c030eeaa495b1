"""
Health and Readiness Endpoints

Kubernetes-compatible health checks for load balancers and orchestration.
"""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from loguru import logger

from lead_signals import __version__
from lead_signals.config import settings
from lead_signals.repositories import db_manager

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint.

    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": "lead-signals",
        "version": __version__
    }


@router.get("/ready")
async def readiness_check(request: Request):
    """
    Readiness check - verifies if service can handle requests.

    Verifies:
    - Signal pipeline is initialized
    - MongoDB answers a ping (mongodb backend only)

    Returns 200 if ready, 503 if not ready.
    """
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": "Pipeline not initialized"}
        )

    if settings.storage_backend == "memory":
        return {"status": "ready", "storage": "memory", "pipeline": "initialized"}

    if not await db_manager.ping():
        logger.error("Readiness check failed: MongoDB unreachable")
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": "MongoDB unreachable"}
        )

    return {"status": "ready", "storage": "mongodb", "pipeline": "initialized"}


@router.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Lead Signals API",
        "version": __version__,
        "endpoints": {
            "health": "/health",
            "ready": "/ready",
            "metrics": "/metrics",
            "process_message": "/v1/messages (POST)",
            "monthly_summary": "/v1/tenants/{tenant_id}/summary",
            "recent_events": "/v1/tenants/{tenant_id}/events",
            "alert_history": "/v1/tenants/{tenant_id}/alerts"
        }
    }
