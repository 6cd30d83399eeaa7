"""Calendar normalization for Gregorian and Buddhist-Era date strings.

Responsibilities:
  - Parse raw date strings into timezone-aware UTC instants.
  - Detect Buddhist-Era years (> 2400), shift them by 543 and keep the original year text.
  - Provide the day-count and interval arithmetic shared by every classifier.

Invariants:
  - Pure functions; "now" is always an explicit argument.
  - Unparseable or empty input is DateParseError, never epoch or now.
"""

from __future__ import annotations

import calendar
import math
import re
from datetime import MAXYEAR, MINYEAR, datetime, timedelta, timezone
from typing import Optional

from fleetwatch.core.domain.models import NormalizedDate, RecurrenceRule

BUDDHIST_ERA_THRESHOLD = 2400
BUDDHIST_ERA_OFFSET = 543
SECONDS_PER_DAY = 86_400

LATEST_INSTANT = datetime.max.replace(tzinfo=timezone.utc)
EARLIEST_INSTANT = datetime.min.replace(tzinfo=timezone.utc)

_YEAR_PREFIX = re.compile(r"^(\d{4})")


class DateParseError(ValueError):
    """Raised when a raw value cannot be turned into a usable date."""


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_iso(text: str) -> datetime:
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(text))


def normalize(raw: Optional[str]) -> NormalizedDate:
    if raw is None:
        raise DateParseError("empty date")
    text = str(raw).strip()
    if not text:
        raise DateParseError("empty date")

    match = _YEAR_PREFIX.match(text)
    if match is None:
        raise DateParseError(f"missing 4-digit year prefix: {text!r}")
    original_year = match.group(1)
    year = int(original_year)

    is_buddhist_era = year > BUDDHIST_ERA_THRESHOLD
    if is_buddhist_era:
        gregorian = f"{year - BUDDHIST_ERA_OFFSET:04d}{text[4:]}"
    else:
        gregorian = text

    try:
        instant = _parse_iso(gregorian)
    except ValueError as exc:
        raise DateParseError(f"unparseable date: {text!r}") from exc

    return NormalizedDate(
        instant=instant,
        original_year=original_year,
        is_buddhist_era=is_buddhist_era,
        raw=text,
    )


def parse_or_none(raw: Optional[str]) -> Optional[NormalizedDate]:
    try:
        return normalize(raw)
    except DateParseError:
        return None


def days_until(target: datetime, now: datetime) -> int:
    """Whole calendar days from now to target, ceil-truncated (negative when past)."""
    delta = ensure_utc(target) - ensure_utc(now)
    return math.ceil(delta.total_seconds() / SECONDS_PER_DAY)


def add_months(instant: datetime, months: int) -> datetime:
    month_index = instant.month - 1 + months
    year = instant.year + month_index // 12
    if not MINYEAR <= year <= MAXYEAR:
        raise OverflowError(f"year {year} is out of range")
    month = month_index % 12 + 1
    day = min(instant.day, calendar.monthrange(year, month)[1])
    return instant.replace(year=year, month=month, day=day)


def add_interval(instant: datetime, rule: RecurrenceRule) -> datetime:
    """Advance by one interval; results beyond the datetime range saturate at its bounds."""
    if rule.unit not in ("days", "weeks", "months", "years"):
        raise ValueError(f"unsupported interval unit: {rule.unit}")
    try:
        if rule.unit == "days":
            return instant + timedelta(days=rule.interval)
        if rule.unit == "weeks":
            return instant + timedelta(days=rule.interval * 7)
        if rule.unit == "months":
            return add_months(instant, rule.interval)
        return add_months(instant, rule.interval * 12)
    except OverflowError:
        return LATEST_INSTANT if rule.interval >= 0 else EARLIEST_INSTANT


def display_days(days: int, cap: int = 999) -> str:
    magnitude = abs(days)
    if magnitude > cap:
        return f"{cap}+"
    return str(magnitude)
