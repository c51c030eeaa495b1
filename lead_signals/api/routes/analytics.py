"""
Dashboard Read Endpoints

Per-tenant monthly summary, recent events and owner alert history.
Tenants without activity get zero-valued responses.
"""
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from loguru import logger

from lead_signals.exceptions import PersistenceError
from lead_signals.services.analytics_service import AnalyticsService, MAX_PAGE_SIZE

router = APIRouter(prefix="/v1/tenants", tags=["Analytics"])


def _analytics(request: Request) -> AnalyticsService:
    return request.app.state.pipeline.analytics


def _error(tenant_id: str, e: Exception) -> JSONResponse:
    logger.bind(tenant_id=tenant_id).error(f"Analytics read failed for {tenant_id}: {e}")
    return JSONResponse(status_code=500, content={"status": "error", "error": str(e)})


@router.get("/{tenant_id}/summary")
async def monthly_summary(
    tenant_id: str,
    request: Request,
    month: Optional[str] = Query(None, pattern=r"^\d{4}-(0[1-9]|1[0-2])$", description="YYYY-MM, defaults to current UTC month")
):
    try:
        summary = await _analytics(request).get_monthly_summary(tenant_id, month)
    except PersistenceError as e:
        return _error(tenant_id, e)
    return summary.model_dump(mode="json", by_alias=True)


@router.get("/{tenant_id}/events")
async def recent_events(
    tenant_id: str,
    request: Request,
    limit: Optional[int] = Query(None, ge=1, le=MAX_PAGE_SIZE)
):
    try:
        events = await _analytics(request).list_recent_events(tenant_id, limit)
    except PersistenceError as e:
        return _error(tenant_id, e)
    return {
        "tenant_id": tenant_id,
        "count": len(events),
        "events": [event.model_dump(mode="json", by_alias=True) for event in events]
    }


@router.get("/{tenant_id}/alerts")
async def alert_history(
    tenant_id: str,
    request: Request,
    owner_contact: str = Query(..., min_length=1),
    limit: int = Query(50, ge=1, le=MAX_PAGE_SIZE)
):
    try:
        history = await _analytics(request).get_alert_history(tenant_id, owner_contact, limit)
    except PersistenceError as e:
        return _error(tenant_id, e)
    return history.model_dump(mode="json", by_alias=True)
