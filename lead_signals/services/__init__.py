"""Services package."""
from lead_signals.services.summary_aggregator import SummaryAggregator
from lead_signals.services.event_recorder import EventRecorder
from lead_signals.services.alert_dispatcher import AlertDispatcher
from lead_signals.services.analytics_service import AnalyticsService
from lead_signals.services.notifiers import (
    AlertTransport,
    TwilioAlertTransport,
    SlackAlertTransport,
    LogOnlyTransport,
    build_transport,
)

__all__ = [
    "SummaryAggregator",
    "EventRecorder",
    "AlertDispatcher",
    "AnalyticsService",
    "AlertTransport",
    "TwilioAlertTransport",
    "SlackAlertTransport",
    "LogOnlyTransport",
    "build_transport",
]
