import pytest
import datetime as dt
from typing import List, Optional, Tuple

from lead_signals.config import Settings
from lead_signals.core.pipeline import SignalPipeline
from lead_signals.exceptions import AlertDeliveryError
from lead_signals.models.alerts import TenantAlertConfig
from lead_signals.repositories import StaticTenantConfigProvider

# Wednesday, inside default business hours (08:00-18:00 UTC)
BUSINESS_NOON = dt.datetime(2025, 6, 11, 14, 0, tzinfo=dt.UTC)
LEAD_PHONE = "+16502530000"
OWNER_PHONE = "+16502531111"


class FakeClock:
    """Manually advanced clock for time-dependent services."""

    def __init__(self, start: dt.datetime = BUSINESS_NOON):
        self.now = start

    def __call__(self) -> dt.datetime:
        return self.now

    def advance(self, **delta) -> dt.datetime:
        self.now = self.now + dt.timedelta(**delta)
        return self.now


class FakeTransport:
    """Records sends; optionally fails them."""

    def __init__(self, fail_with: Optional[str] = None):
        self.sent: List[Tuple[str, str]] = []
        self.fail_with = fail_with

    async def send_alert(self, contact: str, body: str) -> str:
        if self.fail_with:
            raise AlertDeliveryError(self.fail_with)
        self.sent.append((contact, body))
        return f"SM{len(self.sent):04d}"


@pytest.fixture
def test_settings():
    """Settings isolated from any local .env file."""
    return Settings(_env_file=None, storage_backend="memory", alert_transport="log")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def alert_config():
    """Tenant with alerts on and no business hours restriction."""
    return TenantAlertConfig(
        tenant_id="tenant-1",
        alerts_enabled=True,
        owner_contact=OWNER_PHONE,
        business_hours_only=False,
        business_name="Acme Plumbing"
    )


@pytest.fixture
def config_provider(alert_config):
    return StaticTenantConfigProvider([alert_config])


@pytest.fixture
def pipeline(config_provider, transport, test_settings, clock):
    """In-memory pipeline wired to the fake transport and clock."""
    return SignalPipeline.in_memory(
        config_provider=config_provider,
        transport=transport,
        settings=test_settings,
        clock=clock
    )
