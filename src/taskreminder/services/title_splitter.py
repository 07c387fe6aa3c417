"""Split what is left of a message into a task title and description."""

from __future__ import annotations

import re
from dataclasses import dataclass

LEAD_IN_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"^(?:please remind me to|can you remind me to|remind me to|remind me\b"
        r"|set (?:a |the )?reminder to|set reminder to|alert me to|notify me to"
        r"|i need to|i should)\s*",
        re.IGNORECASE,
    ),
    re.compile(r"^(?:task|todo|to do):\s*", re.IGNORECASE),
)

SEPARATORS: tuple[str, ...] = (" - ", " | ", ": ", " about ", " regarding ")

LONG_TEXT_CHARS = 50
LONG_TEXT_WORDS = 8
TITLE_WORDS = 5


@dataclass(frozen=True)
class TitleSplit:
    title: str
    description: str


def _tidy(text: str) -> str:
    text = re.sub(r"\s+([,;])(?=\s|$)", r"\1", text)
    text = re.sub(r"\s+", " ", text)
    return text.strip(" ,;.")


def strip_lead_ins(text: str) -> str:
    """Remove "remind me to"-style lead-ins and task label prefixes."""
    for pattern in LEAD_IN_PATTERNS:
        text = pattern.sub("", text).strip()
    return text


def _capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


def split_title_and_description(remaining_text: str, original_text: str) -> TitleSplit:
    cleaned = strip_lead_ins(_tidy(remaining_text))

    title = ""
    description = ""
    if cleaned:
        for separator in SEPARATORS:
            if separator in cleaned:
                title, description = (part.strip() for part in cleaned.split(separator, 1))
                break
        else:
            words = cleaned.split()
            if len(cleaned) > LONG_TEXT_CHARS and len(words) > LONG_TEXT_WORDS:
                title = " ".join(words[:TITLE_WORDS])
                description = " ".join(words[TITLE_WORDS:])
            else:
                title = cleaned

    if not title:
        title = original_text

    return TitleSplit(_capitalize_first(title), _capitalize_first(description))
