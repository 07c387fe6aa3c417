"""Extract "remind me N minutes before" style reminder offsets from text."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from taskreminder.services.draft import DEFAULT_REMINDER_MINUTES

logger = logging.getLogger(__name__)

_UNIT = r"(\d+)\s*(minute|min|hour|hr)s?\b"
_ADVANCE = r"\s+(?:before|ahead)\b"
_NOT_ADVANCE = r"(?!\s+(?:before|ahead)\b)"
# "to" left dangling after "remind me in 1 hour to check emails"
_DANGLING_TO = re.compile(r"^\s+to\b", re.IGNORECASE)


@dataclass(frozen=True)
class OffsetRule:
    name: str
    pattern: re.Pattern[str]
    direct: bool


@dataclass(frozen=True)
class ReminderOffset:
    minutes_before: int
    is_direct_timing: bool
    remaining_text: str
    matched_phrase: str = ""


# Order matters: advance-notice phrasing must be tried before the bare
# "in/after N minutes" phrasing, and the first rule that matches wins.
OFFSET_RULES: tuple[OffsetRule, ...] = (
    OffsetRule(
        "remind_before",
        re.compile(r"\bremind me (?:in |after )?" + _UNIT + _ADVANCE, re.IGNORECASE),
        direct=False,
    ),
    OffsetRule(
        "set_reminder_before",
        re.compile(r"\bset (?:a |the )?reminder (?:for )?" + _UNIT + _ADVANCE, re.IGNORECASE),
        direct=False,
    ),
    OffsetRule(
        "alert_before",
        re.compile(r"\b(?:alert|notify) me " + _UNIT + _ADVANCE, re.IGNORECASE),
        direct=False,
    ),
    OffsetRule(
        "remind_in",
        re.compile(r"\bremind me (?:in |after )?" + _UNIT + _NOT_ADVANCE, re.IGNORECASE),
        direct=True,
    ),
    OffsetRule(
        "set_reminder_in",
        re.compile(
            r"\bset (?:a |the )?reminder (?:for |in )?" + _UNIT + _NOT_ADVANCE, re.IGNORECASE
        ),
        direct=True,
    ),
    OffsetRule(
        "alert_in",
        re.compile(r"\b(?:alert|notify) me (?:in |after )?" + _UNIT + _NOT_ADVANCE, re.IGNORECASE),
        direct=True,
    ),
    OffsetRule(
        "notification_in",
        re.compile(r"\bnotification (?:in |after )?" + _UNIT, re.IGNORECASE),
        direct=True,
    ),
)


def to_minutes(amount: int, unit: str) -> int:
    if unit.lower().startswith(("hour", "hr")):
        return amount * 60
    return amount


def extract_reminder_offset(
    text: str,
    default_minutes: int = DEFAULT_REMINDER_MINUTES,
) -> ReminderOffset:
    """Find how far ahead of the due time the user wants to be reminded.

    "remind me 30 minutes before" yields a 30 minute offset. "remind me in
    30 minutes" is direct timing: the due time absorbs the delay, so the
    offset is 0. The matched phrase is cut out of ``remaining_text``.
    """
    for rule in OFFSET_RULES:
        match = rule.pattern.search(text)
        if not match:
            continue

        logger.debug("Reminder rule %s matched %r", rule.name, match.group(0))
        after = text[match.end() :]
        if rule.direct:
            after = _DANGLING_TO.sub("", after)
            minutes = 0
        else:
            minutes = to_minutes(int(match.group(1)), match.group(2))
        return ReminderOffset(
            minutes_before=minutes,
            is_direct_timing=rule.direct,
            remaining_text=(text[: match.start()] + " " + after).strip(),
            matched_phrase=match.group(0),
        )

    return ReminderOffset(
        minutes_before=default_minutes,
        is_direct_timing=False,
        remaining_text=text,
    )
