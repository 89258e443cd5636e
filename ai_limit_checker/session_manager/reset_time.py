"""Turn human reset expressions into absolute epoch-millisecond instants.

Recognized forms:
    "2h 39m", "1d 2h 30m", "in 45m"   relative to the reference time
    "4pm", "10:30am"                  next occurrence of that clock time
    "Jan 10, 12pm", "Jan 10"          that calendar date (see below)
    1767225600000, "1767225600000"    absolute epoch, returned unchanged

Anything else resolves to "Unknown", which callers read as "reset time not
determined" rather than an error.

Date expressions carry no year. They are placed in the reference year, and
moved to the following year when that lands more than a day in the past.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..constants import UNKNOWN

_EPOCH = re.compile(r"^\d{10,}$")
_RELATIVE = re.compile(
    r"^(?:in\s+)?(?:(\d+)\s*d)?\s*(?:(\d+)\s*h)?\s*(?:(\d+)\s*m)?$", re.IGNORECASE
)
_CLOCK = re.compile(r"\b(\d{1,2})(?::(\d{2}))?\s*(am|pm)\b", re.IGNORECASE)
_DATE = re.compile(
    r"\b(jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?\s+(\d{1,2})\b",
    re.IGNORECASE,
)

_MONTHS = ["jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"]


def to_epoch_ms(moment: datetime) -> int:
    return int(round(moment.timestamp() * 1000))


def format_epoch_ms(epoch_ms: int) -> str:
    """ISO-8601 in UTC with millisecond precision, e.g. 2026-01-10T11:00:00.000Z."""
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _reference(reference_now: Optional[datetime], tz: Optional[str]) -> datetime:
    now = reference_now or datetime.now(timezone.utc).astimezone()
    if tz:
        try:
            return now.astimezone(ZoneInfo(tz))
        except (ZoneInfoNotFoundError, ValueError):
            pass
    return now


def _clock_parts(match: re.Match) -> Optional[tuple[int, int]]:
    hour = int(match.group(1))
    minute = int(match.group(2) or 0)
    if not 1 <= hour <= 12 or minute > 59:
        return None
    meridiem = match.group(3).lower()
    if meridiem == "pm" and hour != 12:
        hour += 12
    elif meridiem == "am" and hour == 12:
        hour = 0
    return hour, minute


def _next_clock_time(now: datetime, hour: int, minute: int) -> datetime:
    candidate = now.replace(hour=hour, minute=minute, second=0, microsecond=0)
    if candidate < now:
        candidate += timedelta(days=1)
    return candidate


def _calendar_date(now: datetime, month: int, day: int, hour: int, minute: int) -> Optional[datetime]:
    try:
        candidate = now.replace(month=month, day=day, hour=hour, minute=minute, second=0, microsecond=0)
    except ValueError:
        return None
    if candidate < now - timedelta(days=1):
        try:
            candidate = candidate.replace(year=now.year + 1)
        except ValueError:
            return None
    return candidate


def to_absolute_instant(
    expression: Union[str, int, float, None],
    reference_now: Optional[datetime] = None,
    tz: Optional[str] = None,
) -> Union[int, str]:
    """Resolve ``expression`` to epoch milliseconds, or "Unknown".

    Args:
        expression: Reset text as shown by a provider, or an epoch value.
        reference_now: The instant relative forms are measured from.
            Defaults to the current local time.
        tz: Optional IANA zone the provider printed next to a clock time.
            Clock and date forms are read in that zone when it is valid.
    """
    if isinstance(expression, bool) or expression is None:
        return UNKNOWN
    if isinstance(expression, (int, float)):
        return int(expression)

    text = expression.strip()
    if not text or text == UNKNOWN:
        return UNKNOWN
    if _EPOCH.match(text):
        return int(text)

    now = _reference(reference_now, tz)

    relative = _RELATIVE.match(text)
    if relative and any(relative.groups()):
        days, hours, minutes = (int(part or 0) for part in relative.groups())
        # Elapsed time: added in UTC, not zone-local wall time
        elapsed = timedelta(days=days, hours=hours, minutes=minutes)
        return to_epoch_ms(now.astimezone(timezone.utc) + elapsed)

    clock = _CLOCK.search(text)
    clock_parts = _clock_parts(clock) if clock else None
    if clock and clock_parts is None:
        return UNKNOWN

    date = _DATE.search(text)
    if date:
        month = _MONTHS.index(date.group(1).lower()) + 1
        hour, minute = clock_parts or (0, 0)
        resolved = _calendar_date(now, month, int(date.group(2)), hour, minute)
        return to_epoch_ms(resolved) if resolved else UNKNOWN

    if clock_parts:
        return to_epoch_ms(_next_clock_time(now, *clock_parts))

    return UNKNOWN
