"""
Owner Alert Transports

Pluggable delivery channels for hot-lead alerts. A transport either
returns a provider delivery id or raises AlertDeliveryError; it never
retries (callers own retry policy).
"""
import asyncio
import uuid
from typing import Optional, Protocol

import httpx
from twilio.rest import Client

from lead_signals.config import Settings, get_settings
from lead_signals.exceptions import AlertDeliveryError
from lead_signals.utils.observability import logger


class AlertTransport(Protocol):
    """
    Protocol for alert delivery channels.

    Implement this to add new channels (email, push, etc.)
    """

    async def send_alert(self, contact: str, body: str) -> str:
        """
        Deliver an alert body to the owner contact.

        Returns:
            Provider delivery id

        Raises:
            AlertDeliveryError: If the provider rejects or fails the send
        """
        ...


class TwilioAlertTransport:
    """
    SMS alerts via the Twilio Messages API.
    The SDK is synchronous, so the call runs in a worker thread.
    """

    def __init__(
        self,
        account_sid: Optional[str] = None,
        auth_token: Optional[str] = None,
        from_number: Optional[str] = None,
        client: Optional[Client] = None
    ):
        settings = get_settings()
        account_sid = account_sid or settings.twilio_account_sid
        auth_token = auth_token or settings.twilio_auth_token
        self.from_number = from_number or settings.twilio_alert_from

        if client is not None:
            self.client = client
        elif account_sid and auth_token:
            self.client = Client(account_sid, auth_token)
        else:
            self.client = None
            logger.warning("Twilio credentials not configured - alert transport will not be functional")

    @property
    def is_configured(self) -> bool:
        return self.client is not None and bool(self.from_number)

    async def send_alert(self, contact: str, body: str) -> str:
        if not self.is_configured:
            raise AlertDeliveryError("Twilio client not configured - missing credentials or sender")

        logger.info(
            "📤 Sending owner alert SMS",
            extra={"to": contact, "message_length": len(body), "from": self.from_number}
        )

        try:
            message = await asyncio.to_thread(
                self.client.messages.create,
                body=body,
                from_=self.from_number,
                to=contact
            )
        except Exception as e:
            logger.bind(to=contact, error=str(e)).error(
                f"❌ Failed to send owner alert: {e}"
            )
            raise AlertDeliveryError(f"Twilio send failed: {e}") from e

        logger.info(
            "✅ Owner alert accepted by Twilio",
            extra={"message_sid": message.sid, "to": contact, "status": message.status}
        )
        return message.sid


class SlackAlertTransport:
    """
    Slack incoming-webhook alerts.
    The contact is included in the message since the webhook fixes the channel.
    """

    def __init__(self, webhook_url: Optional[str] = None, timeout: float = 10.0):
        settings = get_settings()
        self._webhook_url = webhook_url or settings.slack_alert_webhook_url
        self._timeout = timeout

    @property
    def is_configured(self) -> bool:
        return self._webhook_url is not None

    async def send_alert(self, contact: str, body: str) -> str:
        if not self._webhook_url:
            raise AlertDeliveryError("Slack webhook not configured")

        payload = self._build_slack_payload(contact, body)

        try:
            async with httpx.AsyncClient() as client:
                response = await client.post(self._webhook_url, json=payload, timeout=self._timeout)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.bind(owner_contact=contact, error=str(e)).error(
                f"Failed to send Slack alert: {e}"
            )
            raise AlertDeliveryError(f"Slack webhook failed: {e}") from e

        delivery_id = f"slack-{uuid.uuid4().hex}"
        logger.info(
            "Slack owner alert sent",
            extra={"owner_contact": contact, "delivery_id": delivery_id}
        )
        return delivery_id

    def _build_slack_payload(self, contact: str, body: str) -> dict:
        """Build Slack Block Kit message payload."""
        return {
            "text": body,
            "blocks": [
                {
                    "type": "header",
                    "text": {"type": "plain_text", "text": ":fire: Hot Lead Alert", "emoji": True}
                },
                {
                    "type": "section",
                    "text": {"type": "mrkdwn", "text": f"```{body}```"}
                },
                {
                    "type": "context",
                    "elements": [{"type": "mrkdwn", "text": f"Owner contact: {contact}"}]
                }
            ]
        }


class LogOnlyTransport:
    """
    Fallback transport that only logs alerts.

    Used when no external channel is configured.
    """

    async def send_alert(self, contact: str, body: str) -> str:
        delivery_id = f"log-{uuid.uuid4().hex}"
        logger.bind(owner_contact=contact, body=body, delivery_id=delivery_id).warning(
            f"Owner alert (no transport configured) for {contact}"
        )
        return delivery_id


def build_transport(settings: Optional[Settings] = None) -> AlertTransport:
    """
    Select the transport named by settings.alert_transport.
    'auto' prefers Twilio, then Slack, then log-only, depending on what is configured.
    """
    settings = settings or get_settings()
    choice = settings.alert_transport

    if choice == "log":
        return LogOnlyTransport()

    slack = SlackAlertTransport(webhook_url=settings.slack_alert_webhook_url)
    if choice == "slack":
        return slack

    twilio = TwilioAlertTransport(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_alert_from
    )
    if choice == "twilio" or twilio.is_configured:
        return twilio
    if slack.is_configured:
        return slack
    return LogOnlyTransport()
