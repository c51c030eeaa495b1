from enum import StrEnum
from typing import Annotated, Any
from pydantic import BaseModel, ConfigDict, Field


class SignalKind(StrEnum):
    PHONE_REQUESTED = "phone_requested"
    APPOINTMENT_OFFERED = "appointment_offered"
    HOT_LEAD_DETECTED = "hot_lead_detected"
    PRICING_DISCUSSED = "pricing_discussed"
    CTA_INCLUDED = "cta_included"
    ADVANTAGES_HIGHLIGHTED = "advantages_highlighted"
    EMAIL_REQUESTED = "email_requested"
    FOLLOWUP_OFFERED = "followup_offered"
    QUALIFYING_QUESTION_ASKED = "qualifying_question_asked"
    URGENCY_CREATED = "urgency_created"


class Channel(StrEnum):
    EMAIL = "email"
    SMS = "sms"
    CHAT = "chat"


class BehaviorSignal(BaseModel):
    """One detected pattern match in a message pair. Immutable."""
    model_config = ConfigDict(frozen=True)

    kind: SignalKind
    confidence: Annotated[float, Field(ge=0, le=1.0)]
    attributes: dict[str, Any] = Field(default_factory=dict)
