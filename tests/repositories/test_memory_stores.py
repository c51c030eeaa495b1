"""
In-Memory Store Tests
"""
import datetime as dt
import pytest

from conftest import FakeClock
from lead_signals.models.alerts import TenantAlertConfig
from lead_signals.models.events import BehaviorEvent, MonthlySummary
from lead_signals.models.signals import Channel, SignalKind
from lead_signals.repositories import (
    InMemoryEventStore,
    InMemorySummaryStore,
    InMemoryThrottleStore,
    StaticTenantConfigProvider,
)

JUNE = dt.datetime(2025, 6, 30, 23, 0, tzinfo=dt.UTC)
JULY = dt.datetime(2025, 7, 1, 0, 30, tzinfo=dt.UTC)


def event(at: dt.datetime, kind=SignalKind.PHONE_REQUESTED, tenant_id="tenant-1") -> BehaviorEvent:
    return BehaviorEvent(
        tenant_id=tenant_id, event_type=kind, channel=Channel.EMAIL,
        confidence_score=0.7, created_at=at, updated_at=at
    )


class TestInMemoryEventStore:

    async def test_counts_are_month_scoped(self):
        store = InMemoryEventStore()
        await store.save_event(event(JUNE))
        await store.save_event(event(JULY))
        await store.save_event(event(JULY, kind=SignalKind.CTA_INCLUDED))

        assert await store.count_by_type("tenant-1", "2025-06") == {"phone_requested": 1}
        assert await store.count_by_type("tenant-1", "2025-07") == {"phone_requested": 1, "cta_included": 1}

    async def test_save_assigns_id_and_keeps_created_at(self):
        saved = await InMemoryEventStore().save_event(event(JUNE))

        assert saved.id
        assert saved.created_at == JUNE

    async def test_list_recent_is_tenant_scoped(self):
        store = InMemoryEventStore()
        await store.save_event(event(JUNE))
        await store.save_event(event(JULY, tenant_id="tenant-2"))

        recent = await store.list_recent("tenant-1", 10)

        assert [e.tenant_id for e in recent] == ["tenant-1"]


class TestInMemorySummaryStore:

    async def test_upsert_keeps_identity(self):
        store = InMemorySummaryStore()
        first = await store.upsert_summary(MonthlySummary(tenant_id="tenant-1", month="2025-06"))
        created_at = first.created_at

        second = await store.upsert_summary(
            MonthlySummary(tenant_id="tenant-1", month="2025-06", ai_responses_sent=5)
        )

        assert second.id == first.id
        assert second.created_at == created_at
        assert (await store.get_summary("tenant-1", "2025-06")).ai_responses_sent == 5


class TestInMemoryThrottleStore:

    async def test_entries_expire_with_window(self):
        clock = FakeClock(JUNE)
        store = InMemoryThrottleStore(clock=clock)
        await store.mark_alerted("tenant-1", "+16502530000", JUNE, dt.timedelta(minutes=30))

        assert await store.get_last_alert_at("tenant-1", "+16502530000") == JUNE

        clock.advance(minutes=30)
        assert await store.get_last_alert_at("tenant-1", "+16502530000") is None
        assert len(store) == 0

    async def test_keys_are_per_tenant(self):
        store = InMemoryThrottleStore(clock=FakeClock(JUNE))
        await store.mark_alerted("tenant-1", "+16502530000", JUNE, dt.timedelta(minutes=30))

        assert await store.get_last_alert_at("tenant-2", "+16502530000") is None


class TestStaticTenantConfigProvider:

    async def test_set_config_replaces(self):
        provider = StaticTenantConfigProvider([TenantAlertConfig(tenant_id="tenant-1")])
        provider.set_config(TenantAlertConfig(tenant_id="tenant-1", alerts_enabled=True))

        config = await provider.get_config("tenant-1")

        assert config.alerts_enabled is True
        assert await provider.get_config("tenant-2") is None
