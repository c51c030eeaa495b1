"""
Alert Dispatcher

Decides whether a scored message should alert the business owner and, if
so, delivers it. Throttle state per (tenant_id, lead contact) moves to
"throttled" only after the transport accepts the alert.

Decision order:
    no tenant config               -> not_applicable
    score below tenant threshold   -> not_applicable
    alerts disabled                -> suppressed
    missing owner contact          -> not_applicable
    outside business hours         -> suppressed
    alerted within throttle window -> suppressed (with next_eligible_at)
    transport error                -> failed (throttle untouched)
    otherwise                      -> sent
"""
import datetime as dt
import re
from typing import Callable, Optional, Sequence

from lead_signals.config import get_settings
from lead_signals.exceptions import AlertDeliveryError, PersistenceError
from lead_signals.models.alerts import AlertOutcome, AlertRecord, AlertStatus, TenantAlertConfig
from lead_signals.models.base import utcnow
from lead_signals.models.scoring import LeadScore
from lead_signals.models.signals import BehaviorSignal, Channel, SignalKind
from lead_signals.repositories.stores import AlertHistoryStore, TenantConfigProvider, ThrottleStore
from lead_signals.services.notifiers import AlertTransport
from lead_signals.utils.business_hours import is_within_business_hours, resolve_timezone
from lead_signals.utils.contact_normalizer import ContactNormalizer
from lead_signals.utils.keyed_lock import KeyedLock
from lead_signals.utils.metrics import metrics
from lead_signals.utils.observability import log_business_event, logger

MAX_TRIGGER_LENGTH = 100
_PLACEHOLDER = re.compile(r"\{(\w+)\}")

# First matching signal kind decides the suggested next step
NEXT_ACTIONS = (
    (SignalKind.PHONE_REQUESTED, "Call the lead now"),
    (SignalKind.APPOINTMENT_OFFERED, "Confirm the appointment slot"),
    (SignalKind.PRICING_DISCUSSED, "Send a quote"),
    (SignalKind.EMAIL_REQUESTED, "Follow up by email"),
)
URGENT_INDICATOR_ACTION = ("urgency", "Reply within the hour")

CHANNEL_EMOJI = {
    Channel.SMS: "📱",
    Channel.EMAIL: "📧",
    Channel.CHAT: "💬",
}


def recommended_action(signals: Sequence[BehaviorSignal], lead_score: LeadScore) -> Optional[str]:
    kinds = {signal.kind for signal in signals}
    for kind, action in NEXT_ACTIONS:
        if kind in kinds:
            return action

    indicator, action = URGENT_INDICATOR_ACTION
    if indicator in lead_score.signals_matched:
        return action
    return None


def truncate_trigger(message: str) -> str:
    message = message or ""
    if len(message) > MAX_TRIGGER_LENGTH:
        return message[:MAX_TRIGGER_LENGTH] + "..."
    return message


def render_template(
    template: str,
    config: TenantAlertConfig,
    lead_score: LeadScore,
    contact_display: str,
    trigger_message: str,
    channel: Channel,
    next_action: Optional[str] = None
) -> str:
    """Fill a tenant's custom alert template. Unknown placeholders are left as written."""
    values = {
        "score": str(lead_score.score),
        "lead_contact": contact_display,
        "last_message": truncate_trigger(trigger_message),
        "channel": Channel(channel).value,
        "reasoning": lead_score.reasoning,
        "next_step": next_action or "",
        "business_name": config.business_name,
    }
    return _PLACEHOLDER.sub(lambda m: values.get(m.group(1), m.group(0)), template)


def compose_message(
    config: TenantAlertConfig,
    lead_score: LeadScore,
    contact_display: str,
    trigger_message: str,
    channel: Channel,
    next_action: Optional[str] = None
) -> str:
    """Owner alert body; trigger text is capped at MAX_TRIGGER_LENGTH characters."""
    if config.alert_template:
        return render_template(
            config.alert_template, config, lead_score, contact_display, trigger_message, channel, next_action
        )

    fire = "🔥🔥🔥" if lead_score.score >= 90 else "🔥🔥" if lead_score.score >= 80 else "🔥"
    lines = [
        f"{fire} HOT LEAD ALERT {CHANNEL_EMOJI.get(channel, '💬')}",
        "",
        f"Score: {lead_score.score}/100",
        f"From: {contact_display}",
        f'Message: "{truncate_trigger(trigger_message)}"',
        "",
        f"Reason: {lead_score.reasoning}",
    ]
    if next_action:
        lines.append(f"Next step: {next_action}")
    lines += ["", f"{config.business_name} AI Assistant"]
    return "\n".join(lines)


class AlertDispatcher:
    """
    Usage:
        dispatcher = AlertDispatcher(config_provider, throttle_store, history_store, transport)
        outcome = await dispatcher.dispatch("tenant-1", lead_score, "+16502530000", text, Channel.SMS)
    """

    def __init__(
        self,
        config_provider: TenantConfigProvider,
        throttle_store: ThrottleStore,
        history_store: AlertHistoryStore,
        transport: AlertTransport,
        throttle_window: Optional[dt.timedelta] = None,
        default_threshold: Optional[int] = None,
        default_timezone: Optional[str] = None,
        normalizer: Optional[ContactNormalizer] = None,
        clock: Callable[[], dt.datetime] = utcnow,
        locks: Optional[KeyedLock] = None
    ):
        settings = get_settings()
        self.config_provider = config_provider
        self.throttle_store = throttle_store
        self.history_store = history_store
        self.transport = transport
        self.throttle_window = throttle_window or dt.timedelta(minutes=settings.alert_throttle_minutes)
        self.default_threshold = default_threshold if default_threshold is not None else settings.hot_lead_threshold
        self.default_timezone = default_timezone or settings.business_timezone
        self.normalizer = normalizer or ContactNormalizer(settings.default_phone_region)
        self._clock = clock
        self._locks = locks or KeyedLock()

    async def dispatch(
        self,
        tenant_id: str,
        lead_score: Optional[LeadScore],
        lead_contact: Optional[str],
        trigger_message: str,
        channel: Channel,
        signals: Sequence[BehaviorSignal] = ()
    ) -> AlertOutcome:
        """
        Evaluate and, when eligible, send one owner alert.
        Never raises; every path ends in an AlertOutcome.
        """
        outcome = await self._decide(tenant_id, lead_score, lead_contact, trigger_message, channel, signals)
        metrics.alerts.inc(outcome=outcome.status.value)

        if outcome.status == AlertStatus.SENT:
            log_business_event(
                "alert_sent",
                tenant_id,
                lead_contact=self.normalizer.normalize(lead_contact),
                score=lead_score.score,
                delivery_id=outcome.delivery_id
            )
        elif outcome.status == AlertStatus.SUPPRESSED:
            logger.bind(tenant_id=tenant_id, reason=outcome.reason).info(
                f"Alert suppressed for {tenant_id}: {outcome.reason}"
            )
        return outcome

    async def _load_config(self, tenant_id: str) -> Optional[TenantAlertConfig]:
        try:
            return await self.config_provider.get_config(tenant_id)
        except PersistenceError as e:
            logger.bind(tenant_id=tenant_id, error=str(e)).error(
                f"Tenant alert config unavailable for {tenant_id}: {e}"
            )
            return None

    def _outside_business_hours(self, config: TenantAlertConfig, now: dt.datetime) -> bool:
        if not config.business_hours_only:
            return False

        tz = resolve_timezone(config.timezone, fallback=self.default_timezone)
        return not is_within_business_hours(
            now,
            tz,
            start_hour=config.business_hours_start,
            end_hour=config.business_hours_end,
            business_days=config.business_days
        )

    async def _decide(
        self,
        tenant_id: str,
        lead_score: Optional[LeadScore],
        lead_contact: Optional[str],
        trigger_message: str,
        channel: Channel,
        signals: Sequence[BehaviorSignal]
    ) -> AlertOutcome:
        config = await self._load_config(tenant_id)
        if config is None:
            return AlertOutcome.not_applicable("no alert config")

        threshold = config.hot_lead_score_threshold
        if threshold is None:
            threshold = self.default_threshold
        if lead_score is None or lead_score.score < threshold:
            return AlertOutcome.not_applicable("not a hot lead")

        if not config.alerts_enabled:
            return AlertOutcome.suppressed("alerts disabled")

        if not config.owner_contact:
            return AlertOutcome.not_applicable("missing owner contact")

        if self._outside_business_hours(config, self._clock()):
            return AlertOutcome.suppressed("outside business hours")

        contact = self.normalizer.normalize(lead_contact)

        # Check, send and commit are atomic per (tenant, contact)
        async with self._locks.hold((tenant_id, contact)):
            now = self._clock()
            try:
                last_alert_at = await self.throttle_store.get_last_alert_at(tenant_id, contact)
            except PersistenceError as e:
                logger.bind(tenant_id=tenant_id, lead_contact=contact, error=str(e)).error(
                    f"Throttle lookup failed for {tenant_id}/{contact}: {e}"
                )
                return AlertOutcome(status=AlertStatus.FAILED, reason="throttle state unavailable", error=str(e))

            if last_alert_at is not None and now - last_alert_at < self.throttle_window:
                return AlertOutcome.suppressed("throttled", next_eligible_at=last_alert_at + self.throttle_window)

            body = compose_message(
                config,
                lead_score,
                self.normalizer.display(contact),
                trigger_message,
                channel,
                recommended_action(signals, lead_score)
            )

            try:
                delivery_id = await self.transport.send_alert(config.owner_contact, body)
            except AlertDeliveryError as e:
                logger.bind(tenant_id=tenant_id, lead_contact=contact, error=str(e)).error(
                    f"Alert delivery failed for {tenant_id}: {e}"
                )
                return AlertOutcome(status=AlertStatus.FAILED, reason="delivery failed", error=str(e))

            try:
                await self.throttle_store.mark_alerted(tenant_id, contact, now, self.throttle_window)
            except PersistenceError as e:
                logger.bind(tenant_id=tenant_id, lead_contact=contact, error=str(e)).error(
                    f"Alert sent but throttle state not saved for {tenant_id}/{contact}: {e}"
                )

        await self._record_history(tenant_id, config, contact, lead_score, channel, body, delivery_id, now)
        return AlertOutcome(status=AlertStatus.SENT, delivery_id=delivery_id)

    async def _record_history(
        self,
        tenant_id: str,
        config: TenantAlertConfig,
        contact: str,
        lead_score: LeadScore,
        channel: Channel,
        body: str,
        delivery_id: str,
        sent_at: dt.datetime
    ) -> None:
        record = AlertRecord(
            tenant_id=tenant_id,
            owner_contact=config.owner_contact,
            lead_contact=contact,
            lead_score=lead_score.score,
            channel=channel,
            message=body,
            delivery_id=delivery_id,
            sent_at=sent_at,
            created_at=sent_at,
            updated_at=sent_at
        )
        try:
            await self.history_store.record_alert(record)
        except PersistenceError as e:
            logger.bind(tenant_id=tenant_id, delivery_id=delivery_id, error=str(e)).error(
                f"Alert sent but history not saved for {tenant_id}: {e}"
            )
