"""The structured result of parsing a natural-language task message."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

DEFAULT_REMINDER_MINUTES = 10


@dataclass(frozen=True)
class ParsedTaskDraft:
    """A task extracted from free text, ready for a caller to persist.

    The draft carries no owner: attaching a user id is the persistence
    collaborator's job.
    """

    title: str
    description: str
    due_at: datetime
    reminder_offset_minutes: int = DEFAULT_REMINDER_MINUTES

    def __post_init__(self) -> None:
        if self.reminder_offset_minutes < 0:
            raise ValueError("reminder_offset_minutes must be >= 0")

    @classmethod
    def fallback(
        cls,
        message: str,
        now: datetime,
        reminder_minutes: int = DEFAULT_REMINDER_MINUTES,
    ) -> ParsedTaskDraft:
        """Minimal draft used when parsing fails outright."""
        return cls(
            title=message,
            description="",
            due_at=now,
            reminder_offset_minutes=reminder_minutes,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "dueDate": self.due_at.isoformat(),
            "reminderTime": self.reminder_offset_minutes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ParsedTaskDraft:
        due = data["dueDate"]
        if isinstance(due, str):
            due = datetime.fromisoformat(due)
        return cls(
            title=data["title"],
            description=data.get("description") or "",
            due_at=due,
            reminder_offset_minutes=int(data.get("reminderTime", DEFAULT_REMINDER_MINUTES)),
        )
