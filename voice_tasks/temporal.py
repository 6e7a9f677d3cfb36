"""Due date resolution for spoken task transcripts.

Resolution walks :data:`DATE_RULES` in order. Each rule pairs a compiled
pattern with a resolver; the first rule whose pattern matches and whose
resolver produces a datetime decides the due date. Every rule resolves against
an explicit anchor instant so results never depend on the wall clock.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, Dict, Optional, Tuple


Resolver = Callable[[re.Match[str], str, datetime], Optional[datetime]]


@dataclass(frozen=True)
class DateRule:
    """A named due date rule.

    ``resolve`` receives the pattern match, the lower-cased transcript and the
    anchor instant. Rules flagged ``on_original`` match against the transcript
    as typed rather than its lower-cased view.
    """

    name: str
    pattern: re.Pattern[str]
    resolve: Resolver
    on_original: bool = False

    def apply(self, original: str, lowered: str, now: datetime) -> Optional[datetime]:
        match = self.pattern.search(original if self.on_original else lowered)
        if match is None:
            return None
        return self.resolve(match, lowered, now)


WEEKDAYS: Dict[str, int] = {
    "monday": 0, "mon": 0,
    "tuesday": 1, "tues": 1, "tue": 1,
    "wednesday": 2, "wed": 2,
    "thursday": 3, "thurs": 3, "thur": 3, "thu": 3,
    "friday": 4, "fri": 4,
    "saturday": 5, "sat": 5,
    "sunday": 6, "sun": 6,
}

MONTHS: Dict[str, int] = {
    "january": 1, "jan": 1,
    "february": 2, "feb": 2,
    "march": 3, "mar": 3,
    "april": 4, "apr": 4,
    "may": 5,
    "june": 6, "jun": 6,
    "july": 7, "jul": 7,
    "august": 8, "aug": 8,
    "september": 9, "sep": 9, "sept": 9,
    "october": 10, "oct": 10,
    "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}

_FULL_MONTHS = "january|february|march|april|may|june|july|august|september|october|november|december"
_SHORT_MONTHS = "jan|feb|mar|apr|may|jun|jul|aug|sept|sep|oct|nov|dec"
_ORDINAL = r"(?:st|nd|rd|th)?"

_MERIDIEM_TIME_RE = re.compile(
    r"(?:\bat\s+)?\b(\d{1,2})(?::(\d{2}))?\s*(a\.?m\.?|p\.?m\.?)(?![a-z])"
)
_24H_TIME_RE = re.compile(r"\b(\d{1,2}):(\d{2})\b")
_AT_HOUR_RE = re.compile(r"\bat\s+(\d{1,2})\b(?![:/])")
_TODAY_HOUR_RE = re.compile(r"\btoday\s+(\d{1,2})\b(?![:/]|\.\d)")

_DAY_PARTS: Dict[str, time] = {
    "evening": time(18, 0),
    "morning": time(9, 0),
    "afternoon": time(14, 0),
}

ClockTime = Tuple[time, Optional[str]]


def _midnight(day: date) -> datetime:
    return datetime(day.year, day.month, day.day)


def _to_clock(hour: int, minute: int, meridiem: Optional[str]) -> Optional[time]:
    """Convert a spoken clock reading to a 24-hour :class:`time`."""

    if minute > 59:
        return None
    if meridiem is None:
        return time(hour, minute) if hour < 24 else None
    if not 1 <= hour <= 12:
        return None
    if meridiem == "pm" and hour != 12:
        hour += 12
    elif meridiem == "am" and hour == 12:
        hour = 0
    return time(hour, minute)


def meridiem_time(lowered: str) -> Optional[ClockTime]:
    """Return the first valid ``H[:MM] am/pm`` reading and its meridiem."""

    for match in _MERIDIEM_TIME_RE.finditer(lowered):
        meridiem = "pm" if match.group(3).startswith("p") else "am"
        clock = _to_clock(int(match.group(1)), int(match.group(2) or 0), meridiem)
        if clock is not None:
            return clock, meridiem
    return None


def twenty_four_hour_time(lowered: str) -> Optional[time]:
    """Return the first valid ``H:MM`` reading."""

    for match in _24H_TIME_RE.finditer(lowered):
        clock = _to_clock(int(match.group(1)), int(match.group(2)), None)
        if clock is not None:
            return clock
    return None


def clock_time(lowered: str) -> Optional[time]:
    """Return an explicit clock time, preferring 12-hour readings."""

    reading = meridiem_time(lowered)
    if reading is not None:
        return reading[0]
    return twenty_four_hour_time(lowered)


def qualified_time(lowered: str) -> Optional[time]:
    """Resolve time-of-day qualifiers for day-level phrases.

    Order: evening, explicit pm time, morning, afternoon, explicit am time,
    then a bare 24-hour reading.
    """

    reading = meridiem_time(lowered)
    if re.search(r"\bevening\b", lowered):
        return _DAY_PARTS["evening"]
    if reading is not None and reading[1] == "pm":
        return reading[0]
    for part in ("morning", "afternoon"):
        if re.search(rf"\b{part}\b", lowered):
            return _DAY_PARTS[part]
    if reading is not None:
        return reading[0]
    return twenty_four_hour_time(lowered)


def _at_time(day: date, clock: Optional[time]) -> datetime:
    return datetime.combine(day, clock) if clock is not None else _midnight(day)


def _resolve_today(match: re.Match[str], lowered: str, now: datetime) -> Optional[datetime]:
    clock = clock_time(lowered)
    if clock is None:
        bare = _AT_HOUR_RE.search(lowered) or _TODAY_HOUR_RE.search(lowered)
        if bare is not None:
            hour = int(bare.group(1))
            if hour < 12 and re.search(r"\b(?:evening|afternoon|tonight)\b", lowered):
                hour += 12
            clock = _to_clock(hour, 0, None)
    if clock is None:
        # "today" alone keeps the anchor's time of day
        return now
    return datetime.combine(now.date(), clock)


def _resolve_tomorrow(match: re.Match[str], lowered: str, now: datetime) -> Optional[datetime]:
    return _at_time(now.date() + timedelta(days=1), qualified_time(lowered))


def _resolve_next_week(match: re.Match[str], lowered: str, now: datetime) -> Optional[datetime]:
    return _midnight(now.date() + timedelta(days=7))


def _resolve_in_days(match: re.Match[str], lowered: str, now: datetime) -> Optional[datetime]:
    try:
        return _midnight(now.date() + timedelta(days=int(match.group(1))))
    except OverflowError:
        return None


def _resolve_weekday(match: re.Match[str], lowered: str, now: datetime) -> Optional[datetime]:
    target = WEEKDAYS[match.group(1)]
    days_until = (target - now.weekday() + 7) % 7
    if days_until == 0:
        days_until = 7
    return _at_time(now.date() + timedelta(days=days_until), qualified_time(lowered))


def _expand_year(raw: Optional[str], now: datetime) -> int:
    if not raw:
        return now.year
    if len(raw) == 2:
        return int("20" + raw)
    return int(raw)


def _push_forward(candidate: datetime, now: datetime) -> Optional[datetime]:
    """Move an absolute date that already passed into the following year."""

    if candidate > now:
        return candidate
    # February 29 only exists in leap years, at most eight years apart
    for year in range(candidate.year + 1, candidate.year + 9):
        try:
            return candidate.replace(year=year)
        except ValueError:
            continue
    return None


def _compose_absolute(year: int, month: int, day: int, lowered: str, now: datetime) -> Optional[datetime]:
    try:
        calendar_day = date(year, month, day)
    except ValueError:
        return None
    return _push_forward(_at_time(calendar_day, clock_time(lowered)), now)


def _resolve_numeric(match: re.Match[str], lowered: str, now: datetime) -> Optional[datetime]:
    month, day = int(match.group(1)), int(match.group(2))
    return _compose_absolute(_expand_year(match.group(3), now), month, day, lowered, now)


def _resolve_month_first(match: re.Match[str], lowered: str, now: datetime) -> Optional[datetime]:
    month = MONTHS[match.group(1).lower()]
    return _compose_absolute(now.year, month, int(match.group(2)), lowered, now)


def _resolve_day_first(match: re.Match[str], lowered: str, now: datetime) -> Optional[datetime]:
    month = MONTHS[match.group(2).lower()]
    return _compose_absolute(now.year, month, int(match.group(1)), lowered, now)


def _resolve_iso(match: re.Match[str], lowered: str, now: datetime) -> Optional[datetime]:
    year, month, day = (int(part) for part in match.groups())
    return _compose_absolute(year, month, day, lowered, now)


_WEEKDAY_ALTERNATION = "|".join(sorted(WEEKDAYS, key=len, reverse=True))

DATE_RULES: Tuple[DateRule, ...] = (
    DateRule("today", re.compile(r"\btoday\b"), _resolve_today),
    DateRule("tomorrow", re.compile(r"\btomorrow\b"), _resolve_tomorrow),
    DateRule("next_week", re.compile(r"\bnext\s+week\b"), _resolve_next_week),
    DateRule("in_days", re.compile(r"\bin\s+(\d{1,5})\s+days?\b"), _resolve_in_days),
    DateRule("weekday", re.compile(rf"\b({_WEEKDAY_ALTERNATION})\b"), _resolve_weekday),
    DateRule(
        "numeric_date",
        re.compile(r"\b(\d{1,2})/(\d{1,2})(?:/(\d{4}|\d{2}))?\b"),
        _resolve_numeric,
        on_original=True,
    ),
    DateRule(
        "month_name_day",
        re.compile(rf"\b({_FULL_MONTHS})\s+(\d{{1,2}}){_ORDINAL}\b", re.IGNORECASE),
        _resolve_month_first,
        on_original=True,
    ),
    DateRule(
        "month_abbrev_day",
        re.compile(rf"\b({_SHORT_MONTHS})\.?\s+(\d{{1,2}}){_ORDINAL}\b", re.IGNORECASE),
        _resolve_month_first,
        on_original=True,
    ),
    DateRule(
        "day_month_name",
        re.compile(rf"\b(\d{{1,2}}){_ORDINAL}\s+(?:of\s+)?({_FULL_MONTHS})\b", re.IGNORECASE),
        _resolve_day_first,
        on_original=True,
    ),
    DateRule(
        "iso_date",
        re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b"),
        _resolve_iso,
        on_original=True,
    ),
)


def resolve_due_date(original: str, lowered: str, now: datetime) -> Optional[datetime]:
    """Return the due date mentioned in a transcript, or ``None``."""

    for rule in DATE_RULES:
        resolved = rule.apply(original, lowered, now)
        if resolved is not None:
            return resolved
    return None

