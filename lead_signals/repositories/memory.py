"""
In-Memory Stores

Same contracts as the MongoDB stores, kept in process memory.
For tests and single-process development (STORAGE_BACKEND=memory);
all state is lost on restart.
"""
import asyncio
import datetime as dt
import uuid
from collections import Counter
from typing import Callable, Dict, List, Optional, Tuple

from .stores import AlertHistoryStore, EventStore, SummaryStore, ThrottleStore
from ..models.alerts import AlertRecord, AlertStats, AlertThrottleState
from ..models.base import utcnow
from ..models.events import BehaviorEvent, MonthlySummary


class InMemoryEventStore(EventStore):

    def __init__(self):
        self._events: List[BehaviorEvent] = []
        self._lock = asyncio.Lock()

    async def save_event(self, event: BehaviorEvent) -> BehaviorEvent:
        async with self._lock:
            event.id = uuid.uuid4().hex
            event.updated_at = utcnow()
            self._events.append(event)
        return event

    async def count_by_type(self, tenant_id: str, month: str) -> Dict[str, int]:
        counts = Counter(
            e.event_type.value for e in self._events
            if e.tenant_id == tenant_id and e.month == month
        )
        return dict(counts)

    async def list_recent(self, tenant_id: str, limit: int) -> List[BehaviorEvent]:
        events = [e for e in self._events if e.tenant_id == tenant_id]
        events.sort(key=lambda e: e.created_at, reverse=True)
        return events[:limit]

    def all_events(self) -> List[BehaviorEvent]:
        return list(self._events)


class InMemorySummaryStore(SummaryStore):

    def __init__(self):
        self._summaries: Dict[Tuple[str, str], MonthlySummary] = {}

    async def upsert_summary(self, summary: MonthlySummary) -> MonthlySummary:
        key = (summary.tenant_id, summary.month)
        existing = self._summaries.get(key)
        if existing is not None:
            summary.id = existing.id
            summary.created_at = existing.created_at
        else:
            summary.id = uuid.uuid4().hex
        summary.updated_at = utcnow()
        self._summaries[key] = summary
        return summary

    async def get_summary(self, tenant_id: str, month: str) -> Optional[MonthlySummary]:
        return self._summaries.get((tenant_id, month))


class InMemoryThrottleStore(ThrottleStore):
    """Expired entries are evicted lazily on lookup."""

    def __init__(self, clock: Callable[[], dt.datetime] = utcnow):
        self._states: Dict[Tuple[str, str], AlertThrottleState] = {}
        self._clock = clock

    async def get_last_alert_at(self, tenant_id: str, lead_contact: str) -> Optional[dt.datetime]:
        key = (tenant_id, lead_contact)
        state = self._states.get(key)
        if state is None:
            return None

        if state.expires_at <= self._clock():
            del self._states[key]
            return None

        return state.last_alert_at

    async def mark_alerted(
        self,
        tenant_id: str,
        lead_contact: str,
        at: dt.datetime,
        window: dt.timedelta
    ) -> AlertThrottleState:
        state = AlertThrottleState(
            tenant_id=tenant_id,
            lead_contact=lead_contact,
            last_alert_at=at,
            expires_at=at + window
        )
        self._states[(tenant_id, lead_contact)] = state
        return state

    def __len__(self) -> int:
        return len(self._states)


class InMemoryAlertHistoryStore(AlertHistoryStore):

    def __init__(self):
        self._records: List[AlertRecord] = []

    async def record_alert(self, record: AlertRecord) -> AlertRecord:
        record.id = uuid.uuid4().hex
        self._records.append(record)
        return record

    def _for_owner(self, tenant_id: str, owner_contact: str) -> List[AlertRecord]:
        return [
            r for r in self._records
            if r.tenant_id == tenant_id and r.owner_contact == owner_contact
        ]

    async def list_alerts(self, tenant_id: str, owner_contact: str, limit: int) -> List[AlertRecord]:
        records = sorted(self._for_owner(tenant_id, owner_contact), key=lambda r: r.sent_at, reverse=True)
        return records[:limit]

    async def alert_stats(self, tenant_id: str, owner_contact: str, now: dt.datetime) -> AlertStats:
        records = self._for_owner(tenant_id, owner_contact)
        if not records:
            return AlertStats()

        scores = [r.lead_score for r in records]
        return AlertStats(
            total=len(records),
            last_24h=sum(1 for r in records if r.sent_at >= now - dt.timedelta(hours=24)),
            last_7d=sum(1 for r in records if r.sent_at >= now - dt.timedelta(days=7)),
            avg_score=round(sum(scores) / len(scores), 1),
            max_score=max(scores)
        )
