"""
Alert Transport Tests
Twilio, Slack and log-only delivery plus transport selection.
"""
import httpx
import pytest
import requests
from unittest.mock import AsyncMock, MagicMock, patch
from twilio.base.exceptions import TwilioException

from lead_signals.config import Settings
from lead_signals.exceptions import AlertDeliveryError
from lead_signals.services.notifiers import (
    LogOnlyTransport,
    SlackAlertTransport,
    TwilioAlertTransport,
    build_transport,
)

OWNER = "+16502531111"
WEBHOOK = "https://hooks.slack.com/services/T000/B000/XXXX"


def isolated_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


@pytest.fixture(autouse=True)
def no_ambient_settings():
    """Transports fall back to get_settings(); keep real env vars out of it."""
    with patch("lead_signals.services.notifiers.get_settings", return_value=isolated_settings()):
        yield


def mock_http_client(post: AsyncMock) -> AsyncMock:
    instance = AsyncMock()
    instance.post = post
    instance.__aenter__ = AsyncMock(return_value=instance)
    instance.__aexit__ = AsyncMock(return_value=None)
    return instance


class TestTwilioAlertTransport:

    async def test_send_returns_message_sid(self):
        client = MagicMock()
        client.messages.create.return_value = MagicMock(sid="SM123", status="queued")
        transport = TwilioAlertTransport(from_number="+16505550100", client=client)

        delivery_id = await transport.send_alert(OWNER, "🔥 HOT LEAD ALERT")

        assert delivery_id == "SM123"
        client.messages.create.assert_called_once_with(
            body="🔥 HOT LEAD ALERT", from_="+16505550100", to=OWNER
        )

    async def test_provider_error_becomes_delivery_error(self):
        client = MagicMock()
        client.messages.create.side_effect = TwilioException("21211 invalid 'To' number")
        transport = TwilioAlertTransport(from_number="+16505550100", client=client)

        with pytest.raises(AlertDeliveryError, match="Twilio send failed"):
            await transport.send_alert(OWNER, "body")

    async def test_network_error_becomes_delivery_error(self):
        """Transport failures below the Twilio SDK are wrapped too."""
        client = MagicMock()
        client.messages.create.side_effect = requests.exceptions.ConnectionError("connection reset")
        transport = TwilioAlertTransport(from_number="+16505550100", client=client)

        with pytest.raises(AlertDeliveryError, match="connection reset"):
            await transport.send_alert(OWNER, "body")

    async def test_unconfigured_raises(self):
        transport = TwilioAlertTransport()

        assert transport.is_configured is False
        with pytest.raises(AlertDeliveryError, match="not configured"):
            await transport.send_alert(OWNER, "body")

    def test_missing_sender_is_not_configured(self):
        assert TwilioAlertTransport(client=MagicMock()).is_configured is False


class TestSlackAlertTransport:

    async def test_posts_to_webhook(self):
        post = AsyncMock(return_value=MagicMock(status_code=200))
        transport = SlackAlertTransport(webhook_url=WEBHOOK)

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value = mock_http_client(post)
            delivery_id = await transport.send_alert(OWNER, "🔥 HOT LEAD ALERT")

        assert delivery_id.startswith("slack-")
        post.assert_called_once()
        assert post.call_args[0][0] == WEBHOOK
        assert post.call_args[1]["json"]["text"] == "🔥 HOT LEAD ALERT"

    async def test_http_error_becomes_delivery_error(self):
        post = AsyncMock(side_effect=httpx.HTTPError("Connection failed"))
        transport = SlackAlertTransport(webhook_url=WEBHOOK)

        with patch("httpx.AsyncClient") as mock_client:
            mock_client.return_value = mock_http_client(post)
            with pytest.raises(AlertDeliveryError, match="Slack webhook failed"):
                await transport.send_alert(OWNER, "body")

    async def test_unconfigured_raises(self):
        with pytest.raises(AlertDeliveryError):
            await SlackAlertTransport().send_alert(OWNER, "body")

    def test_payload_blocks(self):
        payload = SlackAlertTransport(webhook_url=WEBHOOK)._build_slack_payload(OWNER, "alert body")

        assert [b["type"] for b in payload["blocks"]] == ["header", "section", "context"]
        assert OWNER in payload["blocks"][2]["elements"][0]["text"]


class TestLogOnlyTransport:

    async def test_returns_log_id(self):
        assert (await LogOnlyTransport().send_alert(OWNER, "body")).startswith("log-")


class TestBuildTransport:

    def test_log_choice(self):
        assert isinstance(build_transport(isolated_settings(alert_transport="log")), LogOnlyTransport)

    def test_slack_choice(self):
        transport = build_transport(isolated_settings(alert_transport="slack", slack_alert_webhook_url=WEBHOOK))
        assert isinstance(transport, SlackAlertTransport)

    def test_twilio_choice_even_when_unconfigured(self):
        transport = build_transport(isolated_settings(alert_transport="twilio"))
        assert isinstance(transport, TwilioAlertTransport)
        assert transport.is_configured is False

    def test_auto_prefers_twilio(self):
        settings = isolated_settings(
            alert_transport="auto",
            twilio_account_sid="AC" + "0" * 32,
            twilio_auth_token="token",
            twilio_alert_from="+16505550100",
            slack_alert_webhook_url=WEBHOOK
        )
        assert isinstance(build_transport(settings), TwilioAlertTransport)

    def test_auto_falls_back_to_slack(self):
        settings = isolated_settings(alert_transport="auto", slack_alert_webhook_url=WEBHOOK)
        assert isinstance(build_transport(settings), SlackAlertTransport)

    def test_auto_falls_back_to_log(self):
        assert isinstance(build_transport(isolated_settings(alert_transport="auto")), LogOnlyTransport)
