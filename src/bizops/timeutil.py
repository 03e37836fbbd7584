"""Time and date helpers for clock-in/out records.

All functions here are total: malformed input yields ``None`` (or the
caller-supplied default) instead of an exception, so callers can fall back
to a placeholder.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

HOURS_PRECISION = Decimal("0.0001")
MINUTES_PER_DAY = 24 * 60

_HHMM_RE = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?\s*$")
_YMD_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")


def parse_hhmm(value: str | None) -> tuple[int, int] | None:
    """Parse ``HH:MM`` into ``(hours, minutes)``.

    A trailing seconds part (as returned by SQL ``time`` columns) is ignored.
    """
    if value is None:
        return None
    match = _HHMM_RE.match(str(value))
    if not match:
        return None
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return None
    return hours, minutes


def format_hhmm(hours: int, minutes: int) -> str:
    return f"{hours:02d}:{minutes:02d}"


def minutes_to_hhmm(total_minutes: int) -> str:
    """Render minutes past midnight, wrapping at 24h."""
    total_minutes %= MINUTES_PER_DAY
    return format_hhmm(total_minutes // 60, total_minutes % 60)


def normalize_hhmm(value: str | None) -> str | None:
    """Return zero-padded ``HH:MM`` or ``None`` when unparseable."""
    parsed = parse_hhmm(value)
    if parsed is None:
        return None
    return format_hhmm(*parsed)


def finalize_time_input(raw: str | None, default: str) -> str:
    """Finalize a free-typed time field, as on blur.

    Well-formed ``HH:MM`` is kept. Otherwise only digits count: four digits
    read as ``HHMM``, three digits get a trailing zero first. Any other digit
    count, or an out-of-range result, resets to ``default``.
    """
    normalized = normalize_hhmm(raw)
    if normalized is not None:
        return normalized

    digits = re.sub(r"\D", "", raw or "")
    if len(digits) == 3:
        digits += "0"
    if len(digits) != 4:
        return default

    candidate = f"{digits[:2]}:{digits[2:]}"
    return normalize_hhmm(candidate) or default


@dataclass(frozen=True)
class TimeInputConfig:
    """Fallback values for the start and end fields of a time form."""

    default_start: str = "08:00"
    default_end: str = "17:00"

    def __post_init__(self) -> None:
        for name in ("default_start", "default_end"):
            if normalize_hhmm(getattr(self, name)) is None:
                raise ValueError(f"{name} must be HH:MM")

    def finalize_start(self, raw: str | None) -> str:
        return finalize_time_input(raw, self.default_start)

    def finalize_end(self, raw: str | None) -> str:
        return finalize_time_input(raw, self.default_end)


def diff_hours(start: str | None, end: str | None) -> Decimal | None:
    """Hours between two ``HH:MM`` times, wrapping past midnight.

    An end earlier than the start is read as the next day, so the result is
    never negative. Equal times give zero.
    """
    start_parsed = parse_hhmm(start)
    end_parsed = parse_hhmm(end)
    if start_parsed is None or end_parsed is None:
        return None

    start_minutes = start_parsed[0] * 60 + start_parsed[1]
    end_minutes = end_parsed[0] * 60 + end_parsed[1]
    if end_minutes < start_minutes:
        end_minutes += MINUTES_PER_DAY

    hours = Decimal(end_minutes - start_minutes) / Decimal(60)
    return hours.quantize(HOURS_PRECISION, rounding=ROUND_HALF_UP)


def get_zone(tz: str | None) -> ZoneInfo | None:
    if not tz:
        return None
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError):
        return None


def now_in_zone(tz: str | None, now: datetime | None = None) -> datetime:
    """Current wall-clock time in ``tz`` (falls back to local time)."""
    zone = get_zone(tz)
    current = now or datetime.now(zone)
    if zone is not None and current.tzinfo is not None:
        current = current.astimezone(zone)
    return current


def today_ymd(tz: str | None = None, now: datetime | None = None) -> str:
    """Today's date as ``YYYY-MM-DD`` in the given IANA time zone."""
    return now_in_zone(tz, now).date().isoformat()


def current_hhmm(tz: str | None = None, now: datetime | None = None) -> str:
    current = now_in_zone(tz, now)
    return format_hhmm(current.hour, current.minute)


def parse_work_date(value: str | date | None) -> date | None:
    """Calendar date from a date, ``YYYY-MM-DD`` or ISO timestamp.

    Only the first ``YYYY-MM-DD`` in a string is read, so a UTC timestamp
    never shifts the day.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    match = _YMD_RE.search(str(value))
    if not match:
        return None
    try:
        return date(int(match.group(1)), int(match.group(2)), int(match.group(3)))
    except ValueError:
        return None


def format_us_date(value: str | date | None) -> str:
    """Format as US ``M/D/YY`` without time-zone shifts.

    Strings with no recognisable date are returned unchanged.
    """
    if value is None or value == "":
        return ""
    parsed = parse_work_date(value)
    if parsed is None:
        return str(value)
    return f"{parsed.month}/{parsed.day}/{parsed.year % 100:02d}"


def week_bounds(anchor: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing ``anchor``."""
    start = anchor - timedelta(days=anchor.weekday())
    end = start + timedelta(days=6)
    return start, end


def end_of_business_day(day: date, tz: str | None) -> datetime:
    """Last second of ``day`` in the business zone, as an aware datetime."""
    zone = get_zone(tz) or ZoneInfo("UTC")
    return datetime.combine(day, time(23, 59, 59), tzinfo=zone)
