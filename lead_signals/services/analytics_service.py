"""
Analytics Read Service

Dashboard-facing reads. A tenant with no activity gets zero-valued
responses, never an error.
"""
import datetime as dt
from typing import Callable, List, Optional

from lead_signals.config import get_settings
from lead_signals.models.alerts import AlertHistory
from lead_signals.models.base import utcnow
from lead_signals.models.events import BehaviorEvent, MonthlySummary, month_key
from lead_signals.repositories.stores import AlertHistoryStore, EventStore, SummaryStore

MAX_PAGE_SIZE = 500


class AnalyticsService:

    def __init__(
        self,
        event_store: EventStore,
        summary_store: SummaryStore,
        history_store: AlertHistoryStore,
        clock: Callable[[], dt.datetime] = utcnow
    ):
        self.event_store = event_store
        self.summary_store = summary_store
        self.history_store = history_store
        self._clock = clock

    async def get_monthly_summary(self, tenant_id: str, month: Optional[str] = None) -> MonthlySummary:
        """Stored summary for the month (current UTC month by default), or all zeros."""
        month = month or month_key(self._clock())
        summary = await self.summary_store.get_summary(tenant_id, month)
        if summary is None:
            return MonthlySummary(tenant_id=tenant_id, month=month)
        return summary

    async def list_recent_events(self, tenant_id: str, limit: Optional[int] = None) -> List[BehaviorEvent]:
        """Newest first; page size defaults to settings.recent_events_limit."""
        if limit is None:
            limit = get_settings().recent_events_limit
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        return await self.event_store.list_recent(tenant_id, limit)

    async def get_alert_history(self, tenant_id: str, owner_contact: str, limit: int = 50) -> AlertHistory:
        """Latest alerts sent to the owner plus stats over all of them."""
        limit = max(1, min(limit, MAX_PAGE_SIZE))
        events = await self.history_store.list_alerts(tenant_id, owner_contact, limit)
        stats = await self.history_store.alert_stats(tenant_id, owner_contact, self._clock())
        return AlertHistory(events=events, stats=stats)
