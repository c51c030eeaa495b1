"""
API Routes

Modular route definitions for the lead signals API.
"""
from lead_signals.api.routes.health import router as health_router
from lead_signals.api.routes.messages import router as messages_router
from lead_signals.api.routes.analytics import router as analytics_router
from lead_signals.api.routes.metrics import router as metrics_router

__all__ = [
    "health_router",
    "messages_router",
    "analytics_router",
    "metrics_router",
]
