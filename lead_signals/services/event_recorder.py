"""
Event Recorder

Turns detected signals (and a hot lead score) into persisted BehaviorEvents,
then refreshes the month's summary. Write failures are isolated per event
and reported back; they never abort sibling writes or the caller.
"""
from typing import Callable, List, Optional, Sequence
import datetime as dt

from lead_signals.exceptions import PersistenceError
from lead_signals.models.base import utcnow
from lead_signals.models.events import BehaviorEvent, RawExcerpts, month_key
from lead_signals.models.results import EventWriteFailure, RecordResult
from lead_signals.models.scoring import LeadScore
from lead_signals.models.signals import BehaviorSignal, Channel, SignalKind
from lead_signals.repositories.stores import EventStore
from lead_signals.services.summary_aggregator import SummaryAggregator
from lead_signals.utils.metrics import metrics
from lead_signals.utils.observability import logger


class EventRecorder:

    def __init__(
        self,
        event_store: EventStore,
        aggregator: SummaryAggregator,
        clock: Callable[[], dt.datetime] = utcnow
    ):
        self.event_store = event_store
        self.aggregator = aggregator
        self._clock = clock

    def build_events(
        self,
        tenant_id: str,
        signals: Sequence[BehaviorSignal],
        lead_score: Optional[LeadScore],
        ai_response: str,
        user_message: str,
        channel: Channel,
        lead_contact: Optional[str] = None
    ) -> List[BehaviorEvent]:
        """One event per signal, plus a hot_lead_detected event when the score is hot."""
        now = self._clock()
        excerpts = RawExcerpts(ai_response=ai_response, user_message=user_message)

        events = [
            BehaviorEvent(
                tenant_id=tenant_id,
                event_type=signal.kind,
                event_data=dict(signal.attributes),
                channel=channel,
                confidence_score=signal.confidence,
                raw_excerpts=excerpts,
                lead_contact=lead_contact,
                created_at=now,
                updated_at=now
            )
            for signal in signals
        ]

        if lead_score is not None and lead_score.is_hot:
            events.append(BehaviorEvent(
                tenant_id=tenant_id,
                event_type=SignalKind.HOT_LEAD_DETECTED,
                event_data={
                    "score": lead_score.score,
                    "signals": list(lead_score.signals_matched),
                    "reasoning": lead_score.reasoning,
                    "channel": Channel(channel).value,
                },
                channel=channel,
                confidence_score=lead_score.confidence,
                raw_excerpts=excerpts,
                lead_contact=lead_contact,
                created_at=now,
                updated_at=now
            ))

        return events

    async def record(
        self,
        tenant_id: str,
        signals: Sequence[BehaviorSignal],
        lead_score: Optional[LeadScore],
        ai_response: str,
        user_message: str,
        channel: Channel,
        lead_contact: Optional[str] = None
    ) -> RecordResult:
        """
        Persist events for one message pair and refresh the current month.

        Returns:
            RecordResult listing what was written, what failed, and the
            refreshed summary (None if nothing was written or the refresh failed)
        """
        events = self.build_events(
            tenant_id, signals, lead_score, ai_response, user_message, channel, lead_contact
        )
        result = RecordResult()

        for event in events:
            try:
                await self.event_store.save_event(event)
            except PersistenceError as e:
                metrics.event_write_failures.inc()
                logger.bind(tenant_id=tenant_id, event_type=event.event_type.value, error=str(e)).error(
                    f"Failed to persist {event.event_type} event for {tenant_id}: {e}"
                )
                result.failures.append(EventWriteFailure(kind=event.event_type, error=str(e)))
                continue

            metrics.events_persisted.inc()
            result.persisted_count += 1
            result.persisted_kinds.append(event.event_type)

        if result.persisted_count == 0:
            return result

        month = month_key(events[0].created_at)
        try:
            result.summary = await self.aggregator.refresh(tenant_id, month)
        except PersistenceError as e:
            metrics.summary_refresh_failures.inc()
            logger.bind(tenant_id=tenant_id, month=month, error=str(e)).error(
                f"Summary refresh failed for {tenant_id} {month}: {e}"
            )
            result.summary_error = str(e)

        return result
