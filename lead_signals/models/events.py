import datetime as dt
from typing import Annotated, Any, Dict, Optional
from pydantic import BaseModel, BeforeValidator, Field, model_validator

from lead_signals.models.base import MongoBaseModel
from lead_signals.models.signals import Channel, SignalKind

MAX_AI_RESPONSE_EXCERPT = 2000
MAX_USER_MESSAGE_EXCERPT = 1000


def _truncate(limit: int):
    def truncate(value: Any) -> str:
        if value is None:
            return ""
        return str(value)[:limit]
    return truncate


def month_key(moment: dt.datetime) -> str:
    """UTC month partition key, e.g. '2025-06'."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=dt.UTC)
    return moment.astimezone(dt.UTC).strftime("%Y-%m")


class RawExcerpts(BaseModel):
    """Audit copies of the triggering texts, truncated on construction."""
    ai_response: Annotated[str, BeforeValidator(_truncate(MAX_AI_RESPONSE_EXCERPT))] = ""
    user_message: Annotated[str, BeforeValidator(_truncate(MAX_USER_MESSAGE_EXCERPT))] = ""


class BehaviorEvent(MongoBaseModel):
    """
    The persisted unit of work.
    Written once by the EventRecorder, never updated or deleted here.
    """
    tenant_id: str
    event_type: SignalKind
    event_data: Dict[str, Any] = Field(default_factory=dict)
    channel: Channel
    confidence_score: Annotated[float, Field(ge=0, le=1.0)]
    raw_excerpts: RawExcerpts = Field(default_factory=RawExcerpts)
    lead_contact: Optional[str] = None
    month: str = Field("", description="UTC 'YYYY-MM' derived from created_at")

    @model_validator(mode="after")
    def derive_month(self) -> "BehaviorEvent":
        if not self.month:
            self.month = month_key(self.created_at)
        return self


# Typed counters and the event kind each one recounts
SUMMARY_COUNTERS: Dict[str, SignalKind] = {
    "phone_requests_count": SignalKind.PHONE_REQUESTED,
    "appointments_offered_count": SignalKind.APPOINTMENT_OFFERED,
    "hot_leads_detected_count": SignalKind.HOT_LEAD_DETECTED,
}


class MonthlySummary(MongoBaseModel):
    """
    One row per (tenant_id, month).
    Counters always equal a recount of BehaviorEvents for the same key.
    """
    tenant_id: str
    month: str
    phone_requests_count: int = 0
    appointments_offered_count: int = 0
    hot_leads_detected_count: int = 0
    ai_responses_sent: int = 0
    event_counts: Dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_counts(cls, tenant_id: str, month: str, counts: Dict[str, int]) -> "MonthlySummary":
        """Build a summary from a group-by-count over event_type."""
        typed = {
            counter: counts.get(kind.value, 0)
            for counter, kind in SUMMARY_COUNTERS.items()
        }
        return cls(
            tenant_id=tenant_id,
            month=month,
            ai_responses_sent=sum(counts.values()),
            event_counts={k: v for k, v in sorted(counts.items()) if v},
            **typed
        )
