"""
Pydantic models for the message processing endpoint.
"""
from pydantic import BaseModel, Field
from typing import Optional

from lead_signals.models.signals import Channel


class MessagePayload(BaseModel):
    """
    One exchange between a lead and the AI assistant, posted by a channel transport.
    """
    tenant_id: str = Field(..., min_length=1, description="Owning tenant/business account")
    channel: Channel = Field(..., description="email, sms or chat")
    user_message: str = Field("", description="What the lead wrote")
    ai_response: str = Field("", description="What the AI replied")
    lead_contact: Optional[str] = Field(
        None,
        description="Lead phone number, email or session id; keys alert throttling"
    )
