from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List

LINE_BREAK_RE = re.compile(r"\r\n|\r")
PARAGRAPH_RE = re.compile(r"\n{2,}")
WHITESPACE_RE = re.compile(r"\s+")
EDGE_PUNCTUATION_RE = re.compile(r"^[^\w]+|[^\w]+$")


@dataclass(slots=True, frozen=True)
class TextValidation:
    """Outcome of checking whether text is usable for RSVP reading."""

    is_valid: bool
    error: str | None = None
    warning: str | None = None


def normalize_text(raw: str) -> str:
    """Unify line endings, keep paragraph breaks as markers, collapse the rest."""
    if not raw:
        return ""
    text = LINE_BREAK_RE.sub("\n", raw)
    text = PARAGRAPH_RE.sub("\n\n", text)
    text = text.replace("\n", " ")
    text = WHITESPACE_RE.sub(" ", text)
    return text.strip()


def segment(cleaned: str) -> List[str]:
    """Split normalized text into words; punctuation stays attached."""
    return [word for word in cleaned.split() if word]


def parse_words(text: str) -> List[str]:
    """Normalize and segment raw text into the RSVP word sequence."""
    if not text or not text.strip():
        return []
    return segment(normalize_text(text))


def word_count(text: str) -> int:
    return len(parse_words(text))


def calculate_progress(current_index: int, total_words: int) -> float:
    """Percentage read (0-100) when ``current_index`` is the word on screen."""
    if total_words <= 0:
        return 0.0
    progress = (current_index + 1) / total_words * 100
    return min(100.0, max(0.0, progress))


def progress_to_index(percentage: float, total_words: int) -> int:
    """Word index corresponding to a percentage through the document."""
    if total_words <= 0:
        return 0
    clamped = min(100.0, max(0.0, percentage))
    return min(int(clamped / 100 * total_words), total_words - 1)


def validate_text(text: str) -> TextValidation:
    if not text or not text.strip():
        return TextValidation(False, error="Text is empty or contains only whitespace")
    words = parse_words(text)
    if not words:
        return TextValidation(False, error="No readable words found in text")
    if len(words) == 1:
        return TextValidation(True, warning="Text contains only one word")
    return TextValidation(True)


def strip_punctuation(word: str) -> str:
    """Remove leading and trailing punctuation, keeping internal characters."""
    return EDGE_PUNCTUATION_RE.sub("", word)
