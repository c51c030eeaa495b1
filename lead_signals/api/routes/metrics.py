"""
Metrics Endpoint

Prometheus-compatible metrics for observability.
"""
from fastapi import APIRouter
from fastapi.responses import Response
from loguru import logger

from lead_signals.utils.metrics import metrics

router = APIRouter(tags=["Metrics"])


@router.get("/metrics")
async def prometheus_metrics():
    """
    Prometheus metrics endpoint.

    Includes:
    - Message pairs processed by channel and processing latency
    - Signals detected by kind and hot leads
    - Event writes, write failures and summary refresh failures
    - Alert decisions by outcome

    Content-Type: text/plain; version=0.0.4; charset=utf-8
    """
    try:
        output = metrics.export()
        return Response(
            content=output,
            media_type="text/plain; version=0.0.4; charset=utf-8"
        )

    except Exception as e:
        logger.opt(exception=e).error(f"Failed to export metrics: {e}")
        return Response(
            content=f"# Error exporting metrics: {e}\n",
            media_type="text/plain",
            status_code=500
        )
