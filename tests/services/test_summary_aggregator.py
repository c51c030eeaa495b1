"""
Summary Aggregator Tests
Recount semantics and per-key serialization.
"""
import asyncio
import datetime as dt
import pytest
from unittest.mock import AsyncMock

from lead_signals.exceptions import PersistenceError
from lead_signals.models.events import BehaviorEvent
from lead_signals.models.signals import Channel, SignalKind
from lead_signals.repositories import InMemoryEventStore, InMemorySummaryStore
from lead_signals.services.summary_aggregator import SummaryAggregator
from lead_signals.utils.keyed_lock import KeyedLock

JUNE = dt.datetime(2025, 6, 11, 14, 0, tzinfo=dt.UTC)


def event(kind: SignalKind, tenant_id: str = "tenant-1", at: dt.datetime = JUNE) -> BehaviorEvent:
    return BehaviorEvent(
        tenant_id=tenant_id,
        event_type=kind,
        channel=Channel.SMS,
        confidence_score=0.7,
        created_at=at,
        updated_at=at
    )


@pytest.fixture
def stores():
    return InMemoryEventStore(), InMemorySummaryStore()


class TestRefresh:

    async def test_counts_match_event_log(self, stores):
        events, summaries = stores
        for kind in (SignalKind.PHONE_REQUESTED, SignalKind.PHONE_REQUESTED,
                     SignalKind.APPOINTMENT_OFFERED, SignalKind.CTA_INCLUDED):
            await events.save_event(event(kind))
        await events.save_event(event(SignalKind.PHONE_REQUESTED, tenant_id="tenant-2"))

        summary = await SummaryAggregator(events, summaries).refresh("tenant-1", "2025-06")

        assert summary.phone_requests_count == 2
        assert summary.appointments_offered_count == 1
        assert summary.hot_leads_detected_count == 0
        assert summary.ai_responses_sent == 4
        assert summary.event_counts["cta_included"] == 1
        assert await summaries.get_summary("tenant-1", "2025-06") == summary

    async def test_refresh_is_idempotent(self, stores):
        events, summaries = stores
        await events.save_event(event(SignalKind.PHONE_REQUESTED))
        aggregator = SummaryAggregator(events, summaries)

        first = await aggregator.refresh("tenant-1", "2025-06")
        second = await aggregator.refresh("tenant-1", "2025-06")

        assert first.id == second.id
        assert second.phone_requests_count == 1

    async def test_empty_month_upserts_zero_row(self, stores):
        events, summaries = stores

        summary = await SummaryAggregator(events, summaries).refresh("tenant-1", "2025-07")

        assert summary.ai_responses_sent == 0
        assert summary.event_counts == {}

    async def test_store_errors_propagate(self, stores):
        _, summaries = stores
        failing = AsyncMock()
        failing.count_by_type = AsyncMock(side_effect=PersistenceError("aggregate failed"))

        with pytest.raises(PersistenceError):
            await SummaryAggregator(failing, summaries).refresh("tenant-1", "2025-06")


class TestSerialization:

    async def test_same_key_refreshes_do_not_overlap(self, stores):
        events, summaries = stores
        active = 0
        peak = 0
        original = events.count_by_type

        async def slow_count(tenant_id, month):
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return await original(tenant_id, month)

        events.count_by_type = slow_count
        aggregator = SummaryAggregator(events, summaries)

        await asyncio.gather(*(aggregator.refresh("tenant-1", "2025-06") for _ in range(5)))

        assert peak == 1

    async def test_different_keys_run_concurrently(self, stores):
        events, summaries = stores
        locks = KeyedLock()
        aggregator = SummaryAggregator(events, summaries, locks=locks)

        async with locks.hold(("tenant-1", "2025-06")):
            # A different month is not blocked by the held key
            summary = await asyncio.wait_for(aggregator.refresh("tenant-1", "2025-07"), timeout=1)

        assert summary.month == "2025-07"
