"""Task reminder services.

Natural-language task parsing (rule-based pipeline and text-generation
enrichment) plus the chatbot seam that stores parsed tasks. Imports are lazy
so the HTTP client is only loaded when enrichment is used.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

_EXPORTS: dict[str, tuple[str, str]] = {
    # Draft
    "ParsedTaskDraft": ("taskreminder.services.draft", "ParsedTaskDraft"),
    # Rule-based pipeline
    "TaskParser": ("taskreminder.services.parser", "TaskParser"),
    "get_task_parser": ("taskreminder.services.parser", "get_task_parser"),
    "parse_task_from_text": ("taskreminder.services.parser", "parse_task_from_text"),
    "ReminderOffset": ("taskreminder.services.reminder_offset", "ReminderOffset"),
    "extract_reminder_offset": (
        "taskreminder.services.reminder_offset",
        "extract_reminder_offset",
    ),
    "DueDateResult": ("taskreminder.services.due_date", "DueDateResult"),
    "resolve_due_date": ("taskreminder.services.due_date", "resolve_due_date"),
    "next_weekday": ("taskreminder.services.due_date", "next_weekday"),
    "to_24_hour": ("taskreminder.services.due_date", "to_24_hour"),
    "TitleSplit": ("taskreminder.services.title_splitter", "TitleSplit"),
    "split_title_and_description": (
        "taskreminder.services.title_splitter",
        "split_title_and_description",
    ),
    # Enrichment
    "LLMClient": ("taskreminder.services.llm_client", "LLMClient"),
    "get_llm_client": ("taskreminder.services.llm_client", "get_llm_client"),
    "LLMTaskParser": ("taskreminder.services.llm_parser", "LLMTaskParser"),
    "get_enriched_parser": ("taskreminder.services.llm_parser", "get_enriched_parser"),
    # Chatbot
    "ChatbotService": ("taskreminder.services.chatbot", "ChatbotService"),
    "ChatbotReply": ("taskreminder.services.chatbot", "ChatbotReply"),
    "InMemoryTaskRepository": ("taskreminder.services.chatbot", "InMemoryTaskRepository"),
    "MessageRequiredError": ("taskreminder.services.chatbot", "MessageRequiredError"),
}

__all__ = list(_EXPORTS.keys())


def __getattr__(name: str) -> Any:
    if name not in _EXPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = _EXPORTS[name]
    module = import_module(module_name)
    value = getattr(module, attr_name)
    globals()[name] = value
    return value


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_EXPORTS.keys()))
