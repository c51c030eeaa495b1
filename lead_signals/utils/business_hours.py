"""
Business hours evaluation for owner alerts.
"""
import datetime as dt
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from lead_signals.utils.observability import logger


def resolve_timezone(name: str | None, fallback: str = "UTC") -> ZoneInfo:
    """Return the IANA zone for ``name``, falling back when unknown or unset."""
    for candidate in (name, fallback, "UTC"):
        if not candidate:
            continue
        try:
            return ZoneInfo(candidate)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone '{candidate}', trying fallback")
    return ZoneInfo("UTC")


def is_within_business_hours(
    now: dt.datetime,
    tz: ZoneInfo,
    start_hour: int = 8,
    end_hour: int = 18,
    business_days: frozenset[int] | set[int] | list[int] = (0, 1, 2, 3, 4),
) -> bool:
    """
    True when ``now`` falls inside [start_hour, end_hour) local time on a business day.

    Args:
        now: Aware datetime (naive values are treated as UTC)
        tz: Business timezone
        start_hour: First hour that counts as open (inclusive)
        end_hour: Closing hour (exclusive)
        business_days: Weekday numbers, Monday == 0
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt.UTC)
    local = now.astimezone(tz)

    if local.weekday() not in business_days:
        return False

    return start_hour <= local.hour < end_hour
