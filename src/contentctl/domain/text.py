"""Body-text derivations: excerpts, word counts, and read time."""

from __future__ import annotations

import math
import re

WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 150

_MARKDOWN_STRIPS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"#{1,6}\s+"), ""),
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"`(.*?)`"), r"\1"),
    (re.compile(r"\[(.*?)\]\(.*?\)"), r"\1"),
    (re.compile(r"<[^>]*>"), ""),
]


def word_count(text: str) -> int:
    """Count whitespace-separated words. Empty text has zero words."""
    return len(text.split())


def read_time(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    """Estimated reading time in whole minutes: ``ceil(words / wpm)``."""
    if not text:
        return 0
    return math.ceil(word_count(text) / words_per_minute)


def plain_text(markdown: str) -> str:
    """Strip heading markers, emphasis, code, links, and HTML tags."""
    text = markdown
    for pattern, replacement in _MARKDOWN_STRIPS:
        text = pattern.sub(replacement, text)
    return text.strip()


def make_excerpt(markdown: str, max_length: int = EXCERPT_LENGTH) -> str:
    """Plain-text excerpt, hard-truncated with ``...`` when over *max_length*."""
    text = plain_text(markdown)
    if len(text) > max_length:
        return text[:max_length] + "..."
    return text
