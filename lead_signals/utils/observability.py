"""
Structured Logging & Observability
Human-readable in development, machine-parseable JSON in production.
"""
import sys
from loguru import logger
from typing import Any
from lead_signals.config import get_settings


def configure_logging():
    """
    Configure loguru for the service.

    In development: colorized console output
    In production: structured JSON logs for ingestion (ELK, Datadog, etc.)
    """
    settings = get_settings()

    logger.remove()

    if not settings.enable_structured_logging:
        logger.add(
            sys.stderr,
            format=(
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "{message}"
            ),
            level=settings.log_level,
            colorize=True,
        )
    else:
        logger.add(
            sys.stderr,
            format="{message}",
            level=settings.log_level,
            serialize=True,
        )

    logger.info(f"Logging configured: level={settings.log_level}, structured={settings.enable_structured_logging}")


def log_business_event(
    event_type: str,
    tenant_id: str,
    **details: Any
):
    """
    Log business-critical events for analytics.

    Examples:
        - hot lead detected
        - alert sent / suppressed
        - monthly summary refreshed

    Args:
        event_type: Type of event (e.g., "hot_lead_detected", "alert_sent")
        tenant_id: The tenant involved
        **details: Event-specific data
    """
    log_data = {
        "event_type": event_type,
        "tenant_id": tenant_id,
        **details
    }

    logger.bind(**log_data).success(f"Business Event: {event_type}")
