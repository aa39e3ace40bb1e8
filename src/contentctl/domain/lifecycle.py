"""Publication status lifecycle.

Records move ``draft -> published -> archived``. Articles may also be
``scheduled`` for a future publish time. Transitions are advisory: the
record methods never refuse a transition, and ``archived`` is terminal by
convention only. The maps below describe the normal flow so callers can
warn about unusual jumps.
"""

from __future__ import annotations

from enum import StrEnum


class RecordStatus(StrEnum):
    """Status shared by every record kind."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class ArticleStatus(StrEnum):
    """Article status adds a scheduled state."""

    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    SCHEDULED = "scheduled"


RECORD_TRANSITIONS: dict[str, list[str]] = {
    "draft": ["published", "archived"],
    "published": ["draft", "archived"],
    "archived": [],
}

ARTICLE_TRANSITIONS: dict[str, list[str]] = {
    "draft": ["published", "scheduled", "archived"],
    "scheduled": ["published", "draft", "archived"],
    "published": ["draft", "archived"],
    "archived": [],
}


def is_valid_transition(
    current: str,
    target: str,
    transitions: dict[str, list[str]],
) -> bool:
    """Check if transitioning from *current* to *target* is part of the normal flow."""
    allowed = transitions.get(current, [])
    return target in allowed
