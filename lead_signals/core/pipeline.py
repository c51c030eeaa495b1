"""
Signal Pipeline
The single entry point that ties the processing stages together.

Architecture:
    Message pair → Signal Extractor → Lead Scorer → Event Recorder → Alert Dispatcher
"""
import datetime as dt
from typing import Callable, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase

from lead_signals.config import Settings, get_settings
from lead_signals.core import lead_scorer, signal_extractor
from lead_signals.core.rules import RuleTable, get_rule_table
from lead_signals.models.base import utcnow
from lead_signals.models.results import ProcessResult
from lead_signals.models.signals import Channel
from lead_signals.repositories import (
    InMemoryAlertHistoryStore,
    InMemoryEventStore,
    InMemorySummaryStore,
    InMemoryThrottleStore,
    MongoAlertHistoryStore,
    MongoEventStore,
    MongoSummaryStore,
    MongoTenantConfigProvider,
    MongoThrottleStore,
    StaticTenantConfigProvider,
)
from lead_signals.repositories.stores import (
    AlertHistoryStore,
    EventStore,
    SummaryStore,
    TenantConfigProvider,
    ThrottleStore,
)
from lead_signals.services.alert_dispatcher import AlertDispatcher
from lead_signals.services.analytics_service import AnalyticsService
from lead_signals.services.event_recorder import EventRecorder
from lead_signals.services.notifiers import AlertTransport, build_transport
from lead_signals.services.summary_aggregator import SummaryAggregator
from lead_signals.utils.contact_normalizer import ContactNormalizer
from lead_signals.utils.metrics import metrics
from lead_signals.utils.observability import log_business_event, logger


class SignalPipeline:
    """
    Processes one (user_message, ai_response) pair end to end.

    Responsibilities:
    1. Extract signals and score the pair (pure, never fails)
    2. Persist events and refresh the month summary (failures reported, not raised)
    3. Evaluate the owner alert for the scored pair

    Usage:
        >>> pipeline = SignalPipeline.in_memory(StaticTenantConfigProvider([config]), transport)
        >>> result = await pipeline.process_message(
        ...     tenant_id="tenant-1",
        ...     channel=Channel.SMS,
        ...     user_message="I need this ASAP",
        ...     ai_response="Could you share your phone number?",
        ...     lead_contact="+16502530000"
        ... )
        >>> result.alert.status
    """

    def __init__(
        self,
        event_store: EventStore,
        summary_store: SummaryStore,
        throttle_store: ThrottleStore,
        history_store: AlertHistoryStore,
        config_provider: TenantConfigProvider,
        transport: AlertTransport,
        rule_table: Optional[RuleTable] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], dt.datetime] = utcnow
    ):
        settings = settings or get_settings()
        self.rule_table = rule_table if rule_table is not None else get_rule_table()
        self.event_store = event_store
        self.summary_store = summary_store
        self.history_store = history_store

        self.aggregator = SummaryAggregator(event_store, summary_store)
        self.recorder = EventRecorder(event_store, self.aggregator, clock=clock)
        self.dispatcher = AlertDispatcher(
            config_provider,
            throttle_store,
            history_store,
            transport,
            throttle_window=dt.timedelta(minutes=settings.alert_throttle_minutes),
            default_threshold=settings.hot_lead_threshold,
            default_timezone=settings.business_timezone,
            normalizer=ContactNormalizer(settings.default_phone_region),
            clock=clock
        )
        self.analytics = AnalyticsService(event_store, summary_store, history_store, clock=clock)

        logger.info(
            "Signal pipeline initialized",
            extra={"rule_table": self.rule_table.version, "transport": type(transport).__name__}
        )

    @classmethod
    def for_mongodb(
        cls,
        database: AsyncIOMotorDatabase,
        transport: Optional[AlertTransport] = None,
        settings: Optional[Settings] = None
    ) -> "SignalPipeline":
        settings = settings or get_settings()
        return cls(
            event_store=MongoEventStore(database),
            summary_store=MongoSummaryStore(database),
            throttle_store=MongoThrottleStore(database),
            history_store=MongoAlertHistoryStore(database),
            config_provider=MongoTenantConfigProvider(database),
            transport=transport or build_transport(settings),
            settings=settings
        )

    @classmethod
    def in_memory(
        cls,
        config_provider: Optional[TenantConfigProvider] = None,
        transport: Optional[AlertTransport] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], dt.datetime] = utcnow,
        rule_table: Optional[RuleTable] = None
    ) -> "SignalPipeline":
        """Process-local stores; state is lost on restart."""
        settings = settings or get_settings()
        return cls(
            event_store=InMemoryEventStore(),
            summary_store=InMemorySummaryStore(),
            throttle_store=InMemoryThrottleStore(clock=clock),
            history_store=InMemoryAlertHistoryStore(),
            config_provider=config_provider or StaticTenantConfigProvider(),
            transport=transport or build_transport(settings),
            rule_table=rule_table,
            settings=settings,
            clock=clock
        )

    async def process_message(
        self,
        tenant_id: str,
        channel: Channel,
        user_message: Optional[str],
        ai_response: Optional[str],
        lead_contact: Optional[str] = None
    ) -> ProcessResult:
        """
        Run the full pipeline for one message pair.

        Args:
            tenant_id: Owning tenant
            channel: email, sms or chat
            user_message: What the lead wrote
            ai_response: What the AI replied
            lead_contact: Lead phone/email/session id, used as the throttle key

        Returns:
            ProcessResult with signals, score, persisted count and alert outcome
        """
        channel = Channel(channel)
        user_message = user_message or ""
        ai_response = ai_response or ""
        if lead_contact:
            lead_contact = self.dispatcher.normalizer.normalize(lead_contact)

        with metrics.process_duration.time() as timer:
            signals = signal_extractor.extract(ai_response, user_message, channel, table=self.rule_table)
            lead_score = lead_scorer.score(user_message, ai_response, table=self.rule_table)

            record = await self.recorder.record(
                tenant_id, signals, lead_score, ai_response, user_message, channel, lead_contact
            )

            alert = await self.dispatcher.dispatch(
                tenant_id, lead_score, lead_contact, user_message, channel, signals
            )

        metrics.messages_processed.inc(channel=channel.value)
        for signal in signals:
            metrics.signals_detected.inc(kind=signal.kind.value)

        if lead_score.is_hot:
            metrics.hot_leads.inc()
            log_business_event(
                "hot_lead_detected",
                tenant_id,
                score=lead_score.score,
                signals=lead_score.signals_matched,
                channel=channel.value,
                alert_status=alert.status.value
            )

        logger.bind(
            tenant_id=tenant_id,
            signals=[s.kind.value for s in signals],
            score=lead_score.score,
            events_persisted=record.persisted_count,
            alert=alert.status.value,
            duration_ms=round(timer.elapsed * 1000, 2)
        ).info(f"Processed {channel.value} message for {tenant_id}")

        return ProcessResult(
            tenant_id=tenant_id,
            signals=signals,
            lead_score=lead_score,
            events_persisted=record.persisted_count,
            record=record,
            alert=alert
        )
