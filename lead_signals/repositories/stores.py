"""
Store Interfaces

Abstract persistence seams used by the services. MongoDB implementations
live beside this module; in-memory ones are in memory.py.
"""
import datetime as dt
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..models.alerts import AlertRecord, AlertStats, AlertThrottleState, TenantAlertConfig
from ..models.events import BehaviorEvent, MonthlySummary


class EventStore(ABC):
    """Append-only behavior event log."""

    @abstractmethod
    async def save_event(self, event: BehaviorEvent) -> BehaviorEvent:
        """
        Persist one event.

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    async def count_by_type(self, tenant_id: str, month: str) -> Dict[str, int]:
        """event_type -> number of events for the tenant/month."""
        pass

    @abstractmethod
    async def list_recent(self, tenant_id: str, limit: int) -> List[BehaviorEvent]:
        """Newest first."""
        pass


class SummaryStore(ABC):

    @abstractmethod
    async def upsert_summary(self, summary: MonthlySummary) -> MonthlySummary:
        """Replace the counters for (tenant_id, month), creating the row if needed."""
        pass

    @abstractmethod
    async def get_summary(self, tenant_id: str, month: str) -> Optional[MonthlySummary]:
        pass


class ThrottleStore(ABC):
    """Per (tenant_id, lead_contact) last delivered alert time."""

    @abstractmethod
    async def get_last_alert_at(self, tenant_id: str, lead_contact: str) -> Optional[dt.datetime]:
        pass

    @abstractmethod
    async def mark_alerted(
        self,
        tenant_id: str,
        lead_contact: str,
        at: dt.datetime,
        window: dt.timedelta
    ) -> AlertThrottleState:
        """Record a delivered alert; the entry may be evicted once the window passes."""
        pass


class AlertHistoryStore(ABC):

    @abstractmethod
    async def record_alert(self, record: AlertRecord) -> AlertRecord:
        pass

    @abstractmethod
    async def list_alerts(self, tenant_id: str, owner_contact: str, limit: int) -> List[AlertRecord]:
        """Newest first."""
        pass

    @abstractmethod
    async def alert_stats(self, tenant_id: str, owner_contact: str, now: dt.datetime) -> AlertStats:
        """Aggregates over every alert sent to the owner, not just the listed page."""
        pass


class TenantConfigProvider(ABC):
    """Read-only source of per-tenant alert settings."""

    @abstractmethod
    async def get_config(self, tenant_id: str) -> Optional[TenantAlertConfig]:
        pass
