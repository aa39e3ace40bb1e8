"""Course and Lesson records.

A course is stored as a directory: one description file for the course
metadata plus one ``lesson<N>.md`` file per lesson. On disk the course's
``lessons`` key holds the lesson *count*; in memory it holds the
:class:`Lesson` records themselves. A lesson's ``order`` is stored under
the ``lesson`` key.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterator
from typing import Any, ClassVar, Self

from pydantic import AliasChoices, Field

from contentctl.domain.records import Record
from contentctl.domain.text import WORDS_PER_MINUTE, word_count
from contentctl.domain.validation import FieldRule

LEVELS: tuple[str, ...] = ("Beginner", "Intermediate", "Advanced")
DIFFICULTIES: tuple[str, ...] = ("beginner", "intermediate", "advanced")

_SLUG_RULE = FieldRule(
    required=True,
    pattern=re.compile(r"^[a-z0-9-]+$"),
    min_length=3,
    max_length=100,
)


def lesson_file_name(order: int) -> str:
    return f"lesson{order}.md"


class Lesson(Record):
    """One lesson inside a course directory."""

    KIND: ClassVar[str] = "lesson"
    RULES: ClassVar[dict[str, FieldRule]] = {
        "title": FieldRule(required=True, min_length=3, max_length=100),
        "content": FieldRule(required=True, min_length=50),
        "duration": FieldRule(required=True, pattern=re.compile(r"^\d+\s+(minutes|hours)$")),
        "slug": _SLUG_RULE,
        "order": FieldRule(required=True, number=True, minimum=1),
        "difficulty": FieldRule(required=True, choices=DIFFICULTIES),
    }
    STORED_FIELDS: ClassVar[tuple[str, ...]] = (
        "slug",
        "title",
        "order",
        "duration",
        "difficulty",
        "objectives",
        "prerequisites",
        "estimated_time",
        "status",
        "created_at",
        "updated_at",
    )
    SEARCH_FIELDS: ClassVar[tuple[str, ...]] = ("title", "content")
    FIELD_SCHEMA: ClassVar[dict[str, type]] = {
        **Record.FIELD_SCHEMA,
        "lesson": int,
        "duration": str,
        "difficulty": str,
        "objectives": list,
        "prerequisites": list,
        "estimatedTime": int,
    }

    course_id: str | None = None
    duration: str = "30 minutes"
    order: int = Field(default=1, validation_alias=AliasChoices("order", "lesson"))
    objectives: list[str] = Field(default_factory=list)
    prerequisites: list[str] = Field(default_factory=list)
    difficulty: str = "beginner"
    estimated_time: int = 30

    def add_objective(self, objective: str) -> Self:
        if objective.strip():
            self.objectives.append(objective.strip())
            self.touch()
        return self

    def add_prerequisite(self, prerequisite: str) -> Self:
        if prerequisite.strip():
            self.prerequisites.append(prerequisite.strip())
            self.touch()
        return self

    def assign_order(self, order: int) -> Self:
        """Set the position and the file identity that follows from it."""
        self.order = order
        self.file_name = lesson_file_name(order)
        self.id = self.file_name.removesuffix(".md")
        return self

    def to_frontmatter(self) -> dict[str, Any]:
        fm = super().to_frontmatter()
        return {("lesson" if key == "order" else key): value for key, value in fm.items()}

    def get_stats(self) -> dict[str, Any]:
        words = word_count(self.content)
        return {
            "wordCount": words,
            "estimatedReadTime": math.ceil(words / WORDS_PER_MINUTE),
            "objectives": len(self.objectives),
            "prerequisites": len(self.prerequisites),
            "difficulty": self.difficulty,
            "status": self.status,
        }


class Course(Record):
    """A course: description metadata plus an ordered list of lessons."""

    KIND: ClassVar[str] = "course"
    RULES: ClassVar[dict[str, FieldRule]] = {
        "title": FieldRule(required=True, min_length=3, max_length=100),
        "description": FieldRule(required=True, min_length=10, max_length=500),
        "level": FieldRule(required=True, choices=LEVELS),
        "tag": FieldRule(required=True, min_length=2, max_length=50),
        "duration": FieldRule(required=True, pattern=re.compile(r"^\d+-\d+\s+(minutes|hours)$")),
        "slug": _SLUG_RULE,
    }
    STORED_FIELDS: ClassVar[tuple[str, ...]] = (
        "slug",
        "title",
        "level",
        "tag",
        "description",
        "duration",
        "lessons",
        "image",
        "image_alt",
        "featured",
        "status",
        "author",
        "created_at",
        "updated_at",
    )
    SEARCH_FIELDS: ClassVar[tuple[str, ...]] = ("title", "description", "tag")
    FIELD_SCHEMA: ClassVar[dict[str, type]] = {
        **Record.FIELD_SCHEMA,
        "level": str,
        "tag": str,
        "description": str,
        "duration": str,
        "lessons": int,
        "image": str,
        "imageAlt": str,
    }

    description: str = ""
    level: str = "Beginner"
    tag: str = "Programming"
    duration: str = ""
    image: str = ""
    image_alt: str = ""
    lessons: list[Lesson] = Field(default_factory=list)

    @classmethod
    def from_markdown(cls, metadata: dict[str, Any], body: str) -> Self:
        # The stored ``lessons`` value is only a count; lessons load separately.
        fields = {key: value for key, value in metadata.items() if key != "lessons"}
        return super().from_markdown(fields, body)

    def add_lesson(self, lesson: Lesson) -> Self:
        """Append *lesson* as the next lesson of this course."""
        lesson.course_id = self.id
        lesson.assign_order(len(self.lessons) + 1)
        self.lessons.append(lesson)
        return self.touch()

    def remove_lesson(self, lesson_id: str) -> Self:
        self.lessons = [lesson for lesson in self.lessons if lesson.id != lesson_id]
        self.reorder_lessons()
        return self.touch()

    def reorder_lessons(self) -> Self:
        """Renumber lessons ``1..n`` in their current list order."""
        for index, lesson in enumerate(self.lessons, start=1):
            lesson.assign_order(index)
        return self

    def search_values(self) -> Iterator[Any]:
        yield from super().search_values()
        for lesson in self.lessons:
            yield from lesson.search_values()

    def get_lesson(self, lesson_id: str) -> Lesson | None:
        for lesson in self.lessons:
            if lesson.id == lesson_id or lesson.slug == lesson_id:
                return lesson
        return None

    def _extra_errors(self) -> list[str]:
        errors = super()._extra_errors()
        if not self.lessons:
            errors.append("Course must have at least one lesson")
        return errors

    def to_frontmatter(self) -> dict[str, Any]:
        fm = super().to_frontmatter()
        fm["lessons"] = len(self.lessons)
        return fm

    def get_stats(self) -> dict[str, Any]:
        return {
            "totalLessons": len(self.lessons),
            "estimatedDuration": self.duration,
            "level": self.level,
            "status": self.status,
            "lastUpdated": self.updated_at,
        }

    def to_json(self, *, include_stats: bool = True) -> dict[str, Any]:
        data = super().to_json(include_stats=include_stats)
        data["lessons"] = [lesson.to_json(include_stats=include_stats) for lesson in self.lessons]
        return data
