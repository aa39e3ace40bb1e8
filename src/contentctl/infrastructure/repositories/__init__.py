"""File-backed repositories: flat (one file per record) and composite (one directory per course)."""

from contentctl.infrastructure.repositories.composite import (
    LESSON_ORDERS,
    CompositeRepository,
    lexicographic_lesson_order,
    natural_lesson_order,
)
from contentctl.infrastructure.repositories.flat import FlatRepository
from contentctl.infrastructure.repositories.query import Page, RecordQuery

__all__ = [
    "LESSON_ORDERS",
    "CompositeRepository",
    "FlatRepository",
    "Page",
    "RecordQuery",
    "lexicographic_lesson_order",
    "natural_lesson_order",
]
