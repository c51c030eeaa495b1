import datetime as dt
from enum import StrEnum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from lead_signals.models.base import MongoBaseModel, utcnow
from lead_signals.models.signals import Channel


class TenantAlertConfig(BaseModel):
    """
    Per-tenant alert settings.
    Owned by the account/settings system; this service only reads it.
    """
    model_config = ConfigDict(frozen=True, extra="ignore")

    tenant_id: str
    alerts_enabled: bool = False
    owner_contact: Optional[str] = None
    business_hours_only: bool = True
    hot_lead_score_threshold: Optional[int] = Field(None, ge=0, le=100)
    business_name: str = "Your business"
    timezone: Optional[str] = None
    business_hours_start: int = Field(8, ge=0, le=23)
    business_hours_end: int = Field(18, ge=1, le=24)
    business_days: List[int] = Field(default_factory=lambda: [0, 1, 2, 3, 4])
    # Placeholders: {score} {lead_contact} {last_message} {channel} {reasoning} {next_step} {business_name}
    alert_template: Optional[str] = None


class AlertThrottleState(BaseModel):
    """Last delivered alert for one (tenant_id, lead_contact) key."""
    tenant_id: str
    lead_contact: str
    last_alert_at: dt.datetime
    expires_at: dt.datetime


class AlertRecord(MongoBaseModel):
    """Delivered owner alert, kept for the alert history read API."""
    tenant_id: str
    owner_contact: str
    lead_contact: str
    lead_score: int
    channel: Channel
    message: str
    delivery_id: str
    sent_at: dt.datetime = Field(default_factory=utcnow)


class AlertStatus(StrEnum):
    SENT = "sent"
    SUPPRESSED = "suppressed"
    NOT_APPLICABLE = "not_applicable"
    FAILED = "failed"


class AlertOutcome(BaseModel):
    """Result of one Alert Dispatcher decision."""
    status: AlertStatus
    reason: Optional[str] = None
    delivery_id: Optional[str] = None
    next_eligible_at: Optional[dt.datetime] = None
    error: Optional[str] = None

    @property
    def sent(self) -> bool:
        return self.status == AlertStatus.SENT

    @classmethod
    def not_applicable(cls, reason: str) -> "AlertOutcome":
        return cls(status=AlertStatus.NOT_APPLICABLE, reason=reason)

    @classmethod
    def suppressed(cls, reason: str, next_eligible_at: Optional[dt.datetime] = None) -> "AlertOutcome":
        return cls(status=AlertStatus.SUPPRESSED, reason=reason, next_eligible_at=next_eligible_at)


class AlertStats(BaseModel):
    total: int = 0
    last_24h: int = 0
    last_7d: int = 0
    avg_score: float = 0.0
    max_score: int = 0


class AlertHistory(BaseModel):
    events: List[AlertRecord] = Field(default_factory=list)
    stats: AlertStats = Field(default_factory=AlertStats)
