"""Text-generation enhanced task parsing with rule-based fallback."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import TYPE_CHECKING

from taskreminder.services.draft import ParsedTaskDraft
from taskreminder.services.due_date import (
    NamedDay,
    attach_zone,
    extract_clock_time,
    materialize,
)
from taskreminder.services.reminder_offset import to_minutes

if TYPE_CHECKING:
    from taskreminder.services.llm_client import LLMClient
    from taskreminder.services.parser import TaskParser

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = (
    "Extract a reminder task from the message below. "
    "Answer with exactly four lines and nothing else:\n"
    "task: <short task title>\n"
    "description: <extra details, or none>\n"
    "due: <today HH:MM, tomorrow HH:MM, or YYYY-MM-DD HH:MM>\n"
    "reminder: <minutes before the due time>\n"
    "\n"
    "Message: {message}"
)

LABELS = ("task", "description", "due", "reminder")

_LABEL_PATTERNS: dict[str, re.Pattern[str]] = {
    label: re.compile(rf"^\s*{label}\s*:\s*(.+?)\s*$", re.IGNORECASE | re.MULTILINE)
    for label in LABELS
}

_EMPTY_VALUES = {"", "none", "n/a", "na", "-", "null"}

_ABSOLUTE_FORMATS = (
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
)


def build_prompt(message: str) -> str:
    return PROMPT_TEMPLATE.format(message=message.strip())


def extract_labeled_fields(generated: str) -> dict[str, str]:
    """Pull ``task:``/``description:``/``due:``/``reminder:`` lines out of generated text.

    Labels whose value is blank or a placeholder such as "none" are left out.

    Raises:
        ValueError: If the text is empty or carries none of the labels.
    """
    if not generated or not generated.strip():
        raise ValueError("No generated text returned")

    fields: dict[str, str] = {}
    for label, pattern in _LABEL_PATTERNS.items():
        match = pattern.search(generated)
        if match and match.group(1).strip().lower() not in _EMPTY_VALUES:
            fields[label] = match.group(1).strip()

    if not fields:
        raise ValueError("Generated text contains no task labels")
    return fields


def _parse_absolute(value: str) -> datetime | None:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass
    for fmt in _ABSOLUTE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def parse_due_value(value: str, now: datetime) -> datetime | None:
    """Resolve a generated ``due:`` value. Returns None when it can't be read."""
    lowered = value.lower()
    if "tomorrow" in lowered or "today" in lowered:
        days_ahead = 1 if "tomorrow" in lowered else 0
        try:
            wall = materialize(
                NamedDay(days_ahead, extract_clock_time(value)), now.replace(tzinfo=None)
            )
        except ValueError:
            return None
        return attach_zone(wall, now)

    parsed = _parse_absolute(value)
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        return attach_zone(parsed, now)
    if now.tzinfo is None:
        return parsed.astimezone().replace(tzinfo=None)
    return parsed.astimezone(now.tzinfo)


def parse_reminder_value(value: str) -> int | None:
    match = re.search(r"(\d+)\s*(minute|min|hour|hr)?", value, re.IGNORECASE)
    if not match:
        return None
    return to_minutes(int(match.group(1)), match.group(2) or "minute")


class LLMTaskParser:
    """Parse tasks with a text-generation model, falling back to rules on failure."""

    def __init__(
        self,
        *,
        llm_client: LLMClient | None = None,
        base_parser: TaskParser | None = None,
    ) -> None:
        if llm_client is None:
            from taskreminder.services.llm_client import get_llm_client

            llm_client = get_llm_client()
        if base_parser is None:
            from taskreminder.services.parser import get_task_parser

            base_parser = get_task_parser()
        self.llm_client = llm_client
        self.base_parser = base_parser

    def parse(self, text: str, now: datetime | None = None) -> ParsedTaskDraft:
        if now is None:
            now = self.base_parser.now()

        base_result = self.base_parser.parse(text, now)
        if not self.llm_client.is_available:
            return base_result

        try:
            response = self.llm_client.complete(build_prompt(text))
            fields = extract_labeled_fields(response.text)
            return self._merge_with_base(base_result, fields, now)
        except Exception as exc:
            logger.warning("Task enrichment failed; falling back to rule-based parse: %s", exc)
            return base_result

    def _merge_with_base(
        self,
        base: ParsedTaskDraft,
        fields: dict[str, str],
        now: datetime,
    ) -> ParsedTaskDraft:
        title = fields.get("task") or base.title
        description = fields.get("description", base.description)

        due_at = base.due_at
        if "due" in fields:
            due_at = parse_due_value(fields["due"], now) or base.due_at

        reminder = base.reminder_offset_minutes
        if "reminder" in fields:
            parsed_reminder = parse_reminder_value(fields["reminder"])
            if parsed_reminder is not None:
                reminder = parsed_reminder

        return ParsedTaskDraft(
            title=title[:1].upper() + title[1:],
            description=description[:1].upper() + description[1:],
            due_at=due_at,
            reminder_offset_minutes=reminder,
        )


_parser: LLMTaskParser | None = None


def get_enriched_parser() -> LLMTaskParser:
    global _parser
    if _parser is None:
        _parser = LLMTaskParser()
    return _parser
