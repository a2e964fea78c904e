"""Cron schedule computation with timezone support."""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from croniter import croniter

from hookified.utils.time import ensure_utc


def resolve_timezone(tz: Optional[str]) -> Optional[ZoneInfo]:
    """Resolve an IANA timezone name, returning None when unknown."""
    try:
        return ZoneInfo(tz or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        return None


def is_valid_expression(expression: Optional[str]) -> bool:
    if not isinstance(expression, str) or not expression.strip():
        return False
    return croniter.is_valid(expression.strip())


def next_occurrence(expression: str, timezone: Optional[str], after: datetime) -> datetime:
    """Next fire time strictly after `after`, returned in UTC.

    Raises:
        ValueError: if the expression or timezone cannot be parsed
    """
    tz = resolve_timezone(timezone)
    if tz is None:
        raise ValueError(f"Unknown timezone: {timezone}")
    if not is_valid_expression(expression):
        raise ValueError(f"Invalid cron expression: {expression!r}")

    base = ensure_utc(after).astimezone(tz)
    next_local = croniter(expression.strip(), base).get_next(datetime)
    return ensure_utc(next_local)


def is_due(
    expression: str,
    timezone: Optional[str],
    now: datetime,
    last_executed_at: Optional[datetime] = None,
    reference: Optional[datetime] = None,
) -> bool:
    """Whether a schedule should fire at `now`.

    The next occurrence is computed from the last execution when there is
    one, otherwise from `reference` (last check or creation time). Without
    either, nothing has been scheduled yet and the hook is not due.
    """
    anchor = last_executed_at or reference
    if anchor is None:
        return False
    return ensure_utc(now) >= next_occurrence(expression, timezone, anchor)
