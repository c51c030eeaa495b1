"""Request payloads for the HTTP API."""
from lead_signals.api.models.messages import MessagePayload

__all__ = ["MessagePayload"]
