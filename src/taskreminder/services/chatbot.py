"""Chatbot message handling: parse a message and store the resulting task.

The HTTP layer owns authentication and maps ``MessageRequiredError`` to a
400 response. Everything else degrades to a reply instead of raising.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Protocol

from taskreminder.services.draft import ParsedTaskDraft

if TYPE_CHECKING:
    from taskreminder.services.llm_parser import LLMTaskParser
    from taskreminder.services.parser import TaskParser

logger = logging.getLogger(__name__)

EXAMPLE_MESSAGES: tuple[str, ...] = (
    "Remind me to call mom at 3 PM",
    "Set a reminder to take out trash tomorrow at 7 AM",
    "Buy groceries this evening",
    "Meeting with team on Monday at 2:30 PM, remind me 30 minutes before",
)


class MessageRequiredError(ValueError):
    """Raised when the chatbot receives an empty message."""


@dataclass
class StoredTask:
    user_id: str
    title: str
    description: str
    due_date: datetime
    reminder_time: int
    is_completed: bool = False
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @classmethod
    def from_draft(cls, draft: ParsedTaskDraft, user_id: str) -> StoredTask:
        return cls(
            user_id=user_id,
            title=draft.title,
            description=draft.description,
            due_date=draft.due_at,
            reminder_time=draft.reminder_offset_minutes,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "dueDate": self.due_date.isoformat(),
            "reminderTime": self.reminder_time,
            "isCompleted": self.is_completed,
        }


class TaskRepository(Protocol):
    """Task persistence, scoped per owner."""

    def save(self, task: StoredTask) -> StoredTask:
        """Persist the task and return the stored copy."""
        ...

    def list_for_user(self, user_id: str) -> list[StoredTask]:
        """Return the user's tasks ordered by due date."""
        ...


class InMemoryTaskRepository:
    def __init__(self) -> None:
        self._tasks: dict[str, StoredTask] = {}

    def save(self, task: StoredTask) -> StoredTask:
        self._tasks[task.id] = task
        return task

    def list_for_user(self, user_id: str) -> list[StoredTask]:
        tasks = [task for task in self._tasks.values() if task.user_id == user_id]
        return sorted(tasks, key=lambda task: task.due_date)


@dataclass
class ChatbotReply:
    success: bool
    message: str
    parsed: ParsedTaskDraft
    task: StoredTask | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "parsedData": self.parsed.to_dict(),
        }
        if self.task is not None:
            data["task"] = self.task.to_dict()
        if self.error is not None:
            data["error"] = self.error
        return data


class ChatbotService:
    def __init__(
        self,
        parser: TaskParser | LLMTaskParser,
        repository: TaskRepository,
    ) -> None:
        self.parser = parser
        self.repository = repository

    def handle(
        self,
        message: str | None,
        user_id: str,
        *,
        create_task: bool = True,
        now: datetime | None = None,
    ) -> ChatbotReply:
        if not message or not message.strip():
            raise MessageRequiredError("Message is required")

        draft = self.parser.parse(message, now)
        logger.info("Parsed chatbot message for user %s: %s", user_id, draft.to_dict())

        if not create_task:
            return ChatbotReply(True, "Task parsed successfully", draft)

        try:
            task = self.repository.save(StoredTask.from_draft(draft, user_id))
        except Exception as exc:
            logger.error("Failed to save task for user %s: %s", user_id, exc)
            return ChatbotReply(
                False,
                "Task parsing successful, but failed to save task",
                draft,
                error=str(exc),
            )

        logger.info("Task %s created via chatbot", task.id)
        return ChatbotReply(True, "Task created successfully!", draft, task=task)
