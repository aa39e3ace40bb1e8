"""Project record: a portfolio entry stored as one markdown file."""

from __future__ import annotations

import re
from typing import ClassVar

from pydantic import Field

from contentctl.domain.records import Record
from contentctl.domain.validation import FieldRule


class Project(Record):
    """Showcase project with its technology stack and links."""

    KIND: ClassVar[str] = "project"
    RULES: ClassVar[dict[str, FieldRule]] = {
        "title": FieldRule(required=True, min_length=3, max_length=200),
        "slug": FieldRule(required=True, pattern=re.compile(r"^[a-z0-9-]+$"), min_length=3),
        "stack": FieldRule(required=True),
        "description": FieldRule(max_length=500),
    }
    STORED_FIELDS: ClassVar[tuple[str, ...]] = (
        "slug",
        "title",
        "description",
        "stack",
        "github",
        "demo",
        "difficulty",
        "category",
        "image",
        "image_alt",
        "featured",
        "status",
        "author",
        "created_at",
        "updated_at",
    )
    SEARCH_FIELDS: ClassVar[tuple[str, ...]] = ("title", "description", "stack", "category")
    FIELD_SCHEMA: ClassVar[dict[str, type]] = {
        **Record.FIELD_SCHEMA,
        "description": str,
        "stack": list,
        "github": str,
        "demo": str,
        "difficulty": str,
        "category": str,
        "image": str,
        "imageAlt": str,
    }

    description: str = ""
    stack: list[str] = Field(default_factory=list)
    github: str = ""
    demo: str = ""
    difficulty: str = "Intermediate"
    category: str = ""
    image: str = ""
    image_alt: str = ""

    def _extra_errors(self) -> list[str]:
        errors = super()._extra_errors()
        if self.stack and not all(item.strip() for item in self.stack):
            errors.append("stack entries must not be blank")
        return errors
