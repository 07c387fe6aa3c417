import logging
from datetime import datetime

import pytz

from taskreminder import sentry
from taskreminder.config import settings
from taskreminder.services.draft import ParsedTaskDraft
from taskreminder.services.due_date import RelativeOffset, resolve_due_date
from taskreminder.services.reminder_offset import extract_reminder_offset
from taskreminder.services.title_splitter import split_title_and_description

logger = logging.getLogger(__name__)


class TaskParser:
    """Rule-based parser turning a free-text message into a task draft.

    Runs three stages over the message: reminder offset, due date, then
    title/description. "now" is read once per parse so every stage sees the
    same instant.
    """

    def __init__(
        self,
        timezone: str | None = None,
        default_reminder_minutes: int | None = None,
    ):
        tz_name = timezone if timezone is not None else settings.user_timezone
        self.timezone = pytz.timezone(tz_name) if tz_name else None
        if default_reminder_minutes is None:
            default_reminder_minutes = settings.default_reminder_minutes
        self.default_reminder_minutes = default_reminder_minutes

    def now(self) -> datetime:
        if self.timezone is None:
            return datetime.now()
        return datetime.now(self.timezone)

    def parse(self, text: str, now: datetime | None = None) -> ParsedTaskDraft:
        if now is None:
            now = self.now()

        try:
            return self._parse(text, now)
        except Exception:
            # logged at ERROR, which the Sentry logging integration reports
            logger.exception("Task parsing failed, using default draft for %r", text)
            return ParsedTaskDraft.fallback(text, now, self.default_reminder_minutes)

    def _parse(self, text: str, now: datetime) -> ParsedTaskDraft:
        original = text.strip()

        offset = extract_reminder_offset(original, self.default_reminder_minutes)
        reminder_minutes = offset.minutes_before

        # Advance-notice phrases are consumed before date resolution. Direct
        # timing phrases ("remind me in 1 hour") define the due time, so the
        # resolver still searches the full message in that case.
        if offset.is_direct_timing:
            due = resolve_due_date(original, now, working_text=offset.remaining_text)
        else:
            due = resolve_due_date(offset.remaining_text, now)

        if isinstance(due.expression, RelativeOffset) and offset.is_direct_timing:
            reminder_minutes = 0

        split = split_title_and_description(due.remaining_text, text)

        sentry.add_breadcrumb(
            "Parsed task message",
            data={"due_phrase": due.matched_phrase, "reminder_phrase": offset.matched_phrase},
        )

        return ParsedTaskDraft(
            title=split.title or original,
            description=split.description,
            due_at=due.due_at,
            reminder_offset_minutes=max(0, reminder_minutes),
        )


_parser: TaskParser | None = None


def get_task_parser() -> TaskParser:
    global _parser
    if _parser is None:
        _parser = TaskParser()
    return _parser


def parse_task_from_text(text: str, now: datetime | None = None) -> ParsedTaskDraft:
    """Parse ``text`` with the shared rule-based parser."""
    return get_task_parser().parse(text, now)
