"""
Summary Aggregator

Recomputes a tenant's MonthlySummary from the event log. Counters are
never incremented in place, so replayed or out-of-order events cannot
drift the summary away from a recount.
"""
from typing import Optional

from lead_signals.models.events import MonthlySummary
from lead_signals.repositories.stores import EventStore, SummaryStore
from lead_signals.utils.keyed_lock import KeyedLock
from lead_signals.utils.observability import log_business_event, logger


class SummaryAggregator:
    """
    Usage:
        aggregator = SummaryAggregator(event_store, summary_store)
        summary = await aggregator.refresh("tenant-1", "2025-06")
    """

    def __init__(
        self,
        event_store: EventStore,
        summary_store: SummaryStore,
        locks: Optional[KeyedLock] = None
    ):
        self.event_store = event_store
        self.summary_store = summary_store
        self._locks = locks or KeyedLock()

    async def refresh(self, tenant_id: str, month: str) -> MonthlySummary:
        """
        Recount the tenant/month and upsert the summary row.

        Refreshes for the same (tenant_id, month) are serialized so a stale
        recount can never overwrite a newer one; other keys run freely.

        Raises:
            PersistenceError: If the recount or upsert fails
        """
        async with self._locks.hold((tenant_id, month)):
            counts = await self.event_store.count_by_type(tenant_id, month)
            summary = MonthlySummary.from_counts(tenant_id, month, counts)
            summary = await self.summary_store.upsert_summary(summary)

        logger.bind(tenant_id=tenant_id, month=month, counts=counts).debug(
            f"Refreshed summary for {tenant_id} {month}"
        )
        log_business_event(
            "summary_refreshed",
            tenant_id,
            month=month,
            ai_responses_sent=summary.ai_responses_sent,
            hot_leads=summary.hot_leads_detected_count
        )
        return summary
