"""
Analytics Service Tests
"""
import datetime as dt
import pytest

from conftest import BUSINESS_NOON, OWNER_PHONE
from lead_signals.models.alerts import AlertRecord
from lead_signals.models.events import BehaviorEvent, MonthlySummary
from lead_signals.models.signals import Channel, SignalKind
from lead_signals.repositories import (
    InMemoryAlertHistoryStore,
    InMemoryEventStore,
    InMemorySummaryStore,
)
from lead_signals.services.analytics_service import MAX_PAGE_SIZE, AnalyticsService


@pytest.fixture
def service(clock):
    return AnalyticsService(
        InMemoryEventStore(), InMemorySummaryStore(), InMemoryAlertHistoryStore(), clock=clock
    )


def alert(score: int, sent_at: dt.datetime, owner: str = OWNER_PHONE) -> AlertRecord:
    return AlertRecord(
        tenant_id="tenant-1",
        owner_contact=owner,
        lead_contact="+16502530000",
        lead_score=score,
        channel=Channel.SMS,
        message="🔥 HOT LEAD ALERT",
        delivery_id=f"SM{score}",
        sent_at=sent_at
    )


class TestMonthlySummary:

    async def test_unknown_tenant_gets_zeros(self, service):
        summary = await service.get_monthly_summary("nobody")

        assert summary.month == "2025-06"
        assert summary.ai_responses_sent == 0
        assert summary.id is None

    async def test_returns_stored_row(self, service):
        await service.summary_store.upsert_summary(
            MonthlySummary(tenant_id="tenant-1", month="2025-05", phone_requests_count=3)
        )

        summary = await service.get_monthly_summary("tenant-1", "2025-05")

        assert summary.phone_requests_count == 3


class TestRecentEvents:

    async def test_newest_first_and_capped(self, service):
        for minutes in range(5):
            at = BUSINESS_NOON + dt.timedelta(minutes=minutes)
            await service.event_store.save_event(BehaviorEvent(
                tenant_id="tenant-1", event_type=SignalKind.CTA_INCLUDED, channel=Channel.CHAT,
                confidence_score=0.7, created_at=at, updated_at=at
            ))

        events = await service.list_recent_events("tenant-1", limit=3)

        assert len(events) == 3
        assert events[0].created_at == BUSINESS_NOON + dt.timedelta(minutes=4)

    async def test_limit_is_clamped(self, service):
        assert await service.list_recent_events("tenant-1", limit=0) == []
        assert MAX_PAGE_SIZE == 500


class TestAlertHistory:

    async def test_stats_windows(self, service):
        await service.history_store.record_alert(alert(90, BUSINESS_NOON - dt.timedelta(hours=1)))
        await service.history_store.record_alert(alert(60, BUSINESS_NOON - dt.timedelta(days=3)))
        await service.history_store.record_alert(alert(45, BUSINESS_NOON - dt.timedelta(days=20)))
        await service.history_store.record_alert(alert(99, BUSINESS_NOON, owner="+16505550199"))

        history = await service.get_alert_history("tenant-1", OWNER_PHONE)

        assert [r.lead_score for r in history.events] == [90, 60, 45]
        assert history.stats.total == 3
        assert history.stats.last_24h == 1
        assert history.stats.last_7d == 2
        assert history.stats.avg_score == 65.0
        assert history.stats.max_score == 90

    async def test_empty_history(self, service):
        history = await service.get_alert_history("tenant-1", OWNER_PHONE)

        assert history.events == []
        assert history.stats.total == 0
