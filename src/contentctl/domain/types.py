"""Content kinds and the record type registry."""

from __future__ import annotations

from enum import StrEnum

from contentctl.domain.article import Article
from contentctl.domain.course import Course
from contentctl.domain.project import Project
from contentctl.domain.records import Record


class ContentKind(StrEnum):
    """Top-level kinds of stored content."""

    ARTICLE = "article"
    COURSE = "course"
    PROJECT = "project"


# Flat kinds keep one file per record; courses are directories.
FLAT_KINDS = frozenset({ContentKind.ARTICLE, ContentKind.PROJECT})

_RECORD_TYPES: dict[str, type[Record]] = {
    ContentKind.ARTICLE: Article,
    ContentKind.COURSE: Course,
    ContentKind.PROJECT: Project,
}


def get_record_type(kind: str) -> type[Record]:
    """Return the record class for *kind*.

    Raises:
        KeyError: If *kind* is not a known content kind.
    """
    try:
        return _RECORD_TYPES[kind]
    except KeyError:
        msg = f"Unknown content kind: {kind!r}"
        raise KeyError(msg) from None
