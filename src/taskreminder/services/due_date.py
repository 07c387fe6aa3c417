"""Resolve due dates from natural-language time expressions.

Each rule in ``DUE_DATE_RULES`` pairs a regex with a builder that turns the
match into a typed expression (``RelativeOffset``, ``NamedDay``,
``WeekdayRef``, ``ClockTime``, ``CalendarDate`` or ``Keyword``). Rules are
tried in table order and the first one that matches anywhere in the text
wins. ``materialize`` then turns the expression into a concrete datetime.

All arithmetic is done on wall-clock time. If ``now`` is timezone-aware the
result is re-attached to the same zone.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Union

logger = logging.getLogger(__name__)

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)

MONTHS = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

DEFAULT_HOUR = 9

# Hours used when a keyword carries no explicit clock time
KEYWORD_HOURS: dict[str, int] = {
    "this morning": 9,
    "this afternoon": 14,
    "this evening": 18,
    "tonight": 20,
}


@dataclass(frozen=True)
class ClockTime:
    """A time of day in 24-hour form. On its own it means "next occurrence"."""

    hour: int
    minute: int = 0


@dataclass(frozen=True)
class RelativeOffset:
    amount: int
    unit: str  # minute, hour, day, week


@dataclass(frozen=True)
class NamedDay:
    days_ahead: int  # 0 = today, 1 = tomorrow
    clock: ClockTime | None = None


@dataclass(frozen=True)
class WeekdayRef:
    weekday: int  # Monday = 0, as datetime.weekday()
    clock: ClockTime | None = None


@dataclass(frozen=True)
class CalendarDate:
    month: int
    day: int
    year: int | None = None
    clock: ClockTime | None = None


@dataclass(frozen=True)
class Keyword:
    name: str
    hour: int


DueExpression = Union[RelativeOffset, NamedDay, WeekdayRef, ClockTime, CalendarDate, Keyword]


@dataclass(frozen=True)
class DueDateRule:
    name: str
    pattern: re.Pattern[str]
    build: Callable[[re.Match[str]], DueExpression]
    accept: Callable[[re.Match[str]], bool] | None = None

    def search(self, text: str) -> re.Match[str] | None:
        for match in self.pattern.finditer(text):
            if self.accept is None or self.accept(match):
                return match
        return None


@dataclass(frozen=True)
class DueDateResult:
    due_at: datetime
    matched_phrase: str
    remaining_text: str
    expression: DueExpression | None = None


def to_24_hour(hour: int, period: str | None) -> int:
    """Convert a 12-hour clock reading to 24-hour form.

    12 PM is noon, 12 AM is midnight. Without a period the hour is kept.
    """
    if not period:
        return hour
    period = period.lower()
    if period == "pm" and hour != 12:
        return hour + 12
    if period == "am" and hour == 12:
        return 0
    return hour


def next_weekday(weekday: int, today: datetime) -> datetime:
    """Return the next date falling on ``weekday``, always strictly after today."""
    days_ahead = weekday - today.weekday()
    if days_ahead <= 0:
        days_ahead += 7
    return today + timedelta(days=days_ahead)


def _clock(hour: str | None, minute: str | None, period: str | None) -> ClockTime | None:
    if hour is None:
        return None
    return ClockTime(to_24_hour(int(hour), period), int(minute or 0))


def _day_word(word: str, clock: ClockTime | None) -> DueExpression:
    word = word.lower()
    if word == "today":
        return NamedDay(0, clock)
    if word == "tomorrow":
        return NamedDay(1, clock)
    return WeekdayRef(WEEKDAYS.index(word), clock)


def _build_clock_then_day(match: re.Match[str]) -> DueExpression:
    return _day_word(match.group(4), _clock(match.group(1), match.group(2), match.group(3)))


def _build_named_day_clock(match: re.Match[str]) -> DueExpression:
    return _day_word(match.group(1), _clock(match.group(2), match.group(3), match.group(4)))


def _build_weekday(match: re.Match[str]) -> DueExpression:
    return WeekdayRef(
        WEEKDAYS.index(match.group(1).lower()),
        _clock(match.group(2), match.group(3), match.group(4)),
    )


def _build_relative(match: re.Match[str]) -> DueExpression:
    unit = match.group(2).lower()
    if unit in ("min", "minute"):
        unit = "minute"
    elif unit in ("hr", "hour"):
        unit = "hour"
    return RelativeOffset(int(match.group(1)), unit)


def _build_clock(match: re.Match[str]) -> DueExpression:
    return ClockTime(to_24_hour(int(match.group(1)), match.group(3)), int(match.group(2) or 0))


def _expand_year(year: str | None) -> int | None:
    if year is None:
        return None
    value = int(year)
    return 2000 + value if len(year) == 2 else value


def _build_numeric_date(match: re.Match[str]) -> DueExpression:
    return CalendarDate(
        month=int(match.group(1)),
        day=int(match.group(2)),
        year=_expand_year(match.group(3)),
        clock=_clock(match.group(4), match.group(5), match.group(6)),
    )


def _build_month_date(match: re.Match[str]) -> DueExpression:
    return CalendarDate(
        month=MONTHS.index(match.group(1).lower()) + 1,
        day=int(match.group(2)),
        year=_expand_year(match.group(3)),
        clock=_clock(match.group(4), match.group(5), match.group(6)),
    )


def _build_keyword(match: re.Match[str]) -> DueExpression:
    word = re.sub(r"\s+", " ", match.group(1).lower())
    if word in ("today", "tomorrow"):
        return _day_word(word, None)
    return Keyword(word, KEYWORD_HOURS[word])


_DAY = "(" + "|".join(WEEKDAYS) + ")"
_MONTH = "(" + "|".join(MONTHS) + ")"
# hour, minute, period; period optional
_OPT_CLOCK = r"(\d{1,2})(?::(\d{2}))?(?:\s*(am|pm)\b)?"
# hour, minute, period; period required
_CLOCK = r"(\d{1,2})(?::(\d{2}))?\s*(am|pm)\b"
_AT_CLOCK = r"(?:\s*,?\s*at\s+" + _OPT_CLOCK + r")?"

# A date the numeric_date/month_date rules will claim, right before an
# "at <clock>" reading ("on 3/15 at 2 PM")
_DATE_TAIL = re.compile(
    r"\b(?:on|by|due)\s+(?:\d{1,2}[/-]\d{1,2}(?:[/-](?:\d{4}|\d{2}))?"
    + r"|"
    + _MONTH
    + r"\s+\d{1,2}(?:st|nd|rd|th)?(?:,?\s+\d{4})?)\s*,?\s*$",
    re.IGNORECASE,
)


def _is_bare_clock(match: re.Match[str]) -> bool:
    if not match.group(0).lower().startswith("at"):
        return True
    return not _DATE_TAIL.search(match.string[: match.start()])

# First match wins; order is significant.
DUE_DATE_RULES: tuple[DueDateRule, ...] = (
    DueDateRule(
        "clock_then_day",
        re.compile(
            r"\b(?:at|on|by|due)\s+"
            + _OPT_CLOCK
            + r"\s*(?:on\s+)?"
            + "("
            + "|".join(WEEKDAYS)
            + r"|today|tomorrow)\b",
            re.IGNORECASE,
        ),
        _build_clock_then_day,
    ),
    DueDateRule(
        "named_day_clock",
        re.compile(r"\b(today|tomorrow)\s+(?:at\s+)?" + _CLOCK, re.IGNORECASE),
        _build_named_day_clock,
    ),
    DueDateRule(
        "weekday",
        re.compile(r"\b(?:on\s+|next\s+)?" + _DAY + r"\b" + _AT_CLOCK, re.IGNORECASE),
        _build_weekday,
    ),
    DueDateRule(
        "relative",
        re.compile(r"\b(?:in|after)\s+(\d+)\s*(minute|min|hour|hr|day|week)s?\b", re.IGNORECASE),
        _build_relative,
    ),
    DueDateRule(
        "clock",
        re.compile(r"\b(?:at|by)\s+" + _CLOCK, re.IGNORECASE),
        _build_clock,
        accept=_is_bare_clock,
    ),
    DueDateRule(
        "numeric_date",
        re.compile(
            r"\b(?:on|by|due)\s+(\d{1,2})[/-](\d{1,2})(?:[/-](\d{4}|\d{2}))?\b" + _AT_CLOCK,
            re.IGNORECASE,
        ),
        _build_numeric_date,
    ),
    DueDateRule(
        "month_date",
        re.compile(
            r"\b(?:on|by|due)\s+"
            + _MONTH
            + r"\s+(\d{1,2})(?:st|nd|rd|th)?\b(?:,?\s+(\d{4}))?"
            + _AT_CLOCK,
            re.IGNORECASE,
        ),
        _build_month_date,
    ),
    DueDateRule(
        "keyword",
        re.compile(
            r"\b(today|tomorrow|tonight|this\s+morning|this\s+afternoon|this\s+evening)\b",
            re.IGNORECASE,
        ),
        _build_keyword,
    ),
)


def _at(day: datetime, clock: ClockTime | None, default_hour: int = DEFAULT_HOUR) -> datetime:
    if clock is None:
        return day.replace(hour=default_hour, minute=0, second=0, microsecond=0)
    return day.replace(hour=clock.hour, minute=clock.minute, second=0, microsecond=0)


def materialize(expression: DueExpression, now: datetime) -> datetime:
    """Turn a parsed time expression into a datetime relative to ``now``.

    ``now`` must be naive wall-clock time. Raises ``ValueError`` for
    impossible dates or clock readings such as "2/30" or "13 pm".
    """
    if isinstance(expression, RelativeOffset):
        return now + timedelta(**{f"{expression.unit}s": expression.amount})

    if isinstance(expression, NamedDay):
        day = now + timedelta(days=expression.days_ahead)
        if expression.clock is None and expression.days_ahead == 0:
            return now
        return _at(day, expression.clock)

    if isinstance(expression, WeekdayRef):
        return _at(next_weekday(expression.weekday, now), expression.clock)

    if isinstance(expression, ClockTime):
        candidate = _at(now, expression)
        if candidate <= now:
            candidate += timedelta(days=1)
        return candidate

    if isinstance(expression, CalendarDate):
        clock = expression.clock or ClockTime(DEFAULT_HOUR)
        return datetime(
            now.year if expression.year is None else expression.year,
            expression.month,
            expression.day,
            clock.hour,
            clock.minute,
        )

    if isinstance(expression, Keyword):
        return _at(now, None, default_hour=expression.hour)

    raise TypeError(f"Unknown due expression: {expression!r}")


def attach_zone(wall: datetime, now: datetime) -> datetime:
    if now.tzinfo is None:
        return wall
    # pytz zones need localize() to pick the right UTC offset for the date
    localize = getattr(now.tzinfo, "localize", None)
    if localize is not None:
        return localize(wall)
    return wall.replace(tzinfo=now.tzinfo)


_ANY_CLOCK = re.compile(
    r"\b(\d{1,2}):(\d{2})\s*(am|pm)?\b|\b(\d{1,2})\s*(am|pm)\b",
    re.IGNORECASE,
)


def extract_clock_time(text: str) -> ClockTime | None:
    """Find the first "3:30", "3:30 pm" or "3pm" style clock reading in ``text``."""
    match = _ANY_CLOCK.search(text)
    if not match:
        return None
    if match.group(1) is not None:
        return ClockTime(to_24_hour(int(match.group(1)), match.group(3)), int(match.group(2)))
    return ClockTime(to_24_hour(int(match.group(4)), match.group(5)), 0)


def match_due_expression(text: str) -> tuple[DueDateRule, re.Match[str]] | None:
    """Return the first rule (in table order) that matches ``text``."""
    for rule in DUE_DATE_RULES:
        match = rule.search(text)
        if match:
            return rule, match
    return None


def resolve_due_date(
    text: str,
    now: datetime,
    working_text: str | None = None,
) -> DueDateResult:
    """Find the due date expressed in ``text``.

    The matched phrase is removed from ``working_text`` (``text`` itself when
    omitted) so the title stage does not see it. Never raises: an expression
    that cannot be turned into a date resolves to ``now``.
    """
    found = match_due_expression(text)
    if found is None:
        return DueDateResult(now, "", working_text if working_text is not None else text)

    rule, match = found
    phrase = match.group(0)
    logger.debug("Due date rule %s matched %r", rule.name, phrase)

    if working_text is None:
        remaining = text[: match.start()] + " " + text[match.end() :]
    else:
        remaining = working_text.replace(phrase, " ", 1)

    expression: DueExpression | None = None
    try:
        expression = rule.build(match)
        wall_now = now.replace(tzinfo=None)
        due_at = attach_zone(materialize(expression, wall_now), now)
    except Exception as exc:
        logger.warning("Could not build due date from %r: %s", phrase, exc)
        due_at = now

    return DueDateResult(due_at, phrase, remaining.strip(), expression)
