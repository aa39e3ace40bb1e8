"""Record base model: typed view over a decoded metadata map plus body.

Record attributes use snake_case in Python and camelCase on disk
(``created_at`` <-> ``createdAt``), via a pydantic alias generator. The
same camelCase keys make up the JSON projection handed to presentation
code, which is the only shape external callers may depend on.

Each kind declares, at class level:

- ``KIND``: registry name.
- ``RULES``: declarative rule table keyed by on-disk field name.
- ``STATUSES``: allowed status values.
- ``STORED_FIELDS``: attribute names written to frontmatter, in order.
- ``SEARCH_FIELDS``: JSON keys matched by free-text search.
- ``FIELD_SCHEMA``: declared codec types, passed to ``decode(schema=...)``.

Lifecycle methods mutate the record in place and return it, so calls can
be chained while the caller's reference sees every change.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import UTC, datetime
from typing import Any, ClassVar, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from contentctl.domain.ids import generate_slug
from contentctl.domain.lifecycle import RecordStatus
from contentctl.domain.text import WORDS_PER_MINUTE, make_excerpt, read_time, word_count
from contentctl.domain.validation import FieldRule, ValidationResult, validate_fields

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(UTC).isoformat()


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp, returning None when absent or malformed.

    Naive values are treated as UTC.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


class Record(BaseModel):
    """Base for every stored record kind."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    KIND: ClassVar[str] = ""
    RULES: ClassVar[dict[str, FieldRule]] = {}
    STATUSES: ClassVar[tuple[str, ...]] = tuple(s.value for s in RecordStatus)
    STORED_FIELDS: ClassVar[tuple[str, ...]] = ()
    SEARCH_FIELDS: ClassVar[tuple[str, ...]] = ("title", "excerpt", "description", "tags")
    FIELD_SCHEMA: ClassVar[dict[str, type]] = {
        "slug": str,
        "title": str,
        "status": str,
        "author": str,
        "featured": bool,
        "createdAt": str,
        "updatedAt": str,
    }

    id: str | None = None
    slug: str = ""
    title: str = ""
    status: str = RecordStatus.DRAFT.value
    featured: bool = False
    author: str = ""
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)
    metadata: dict[str, Any] = Field(default_factory=dict)
    content: str = ""
    content_html: str = ""
    file_name: str | None = None

    # --- Construction ---

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> Self:
        """Build a record from loosely typed data, dropping fields that do not fit.

        Reads must never fail on one bad value, so invalid fields fall back
        to their defaults and are logged.
        """
        payload = dict(data)
        spellings: dict[str, set[str]] = {}
        for name, info in cls.model_fields.items():
            keys = {name, info.alias or name}
            for key in keys:
                spellings[key] = keys

        for _ in range(len(payload) + 1):
            try:
                return cls.model_validate(payload)
            except ValidationError as exc:
                bad: set[str] = set()
                for err in exc.errors():
                    if err["loc"]:
                        loc = str(err["loc"][0])
                        bad |= spellings.get(loc, {loc})
                if not bad & payload.keys():
                    raise
                for key in bad & payload.keys():
                    logger.debug("Dropping invalid %s field %r", cls.KIND, key)
                    payload.pop(key)
        return cls.model_validate(payload)

    @classmethod
    def from_markdown(cls, metadata: dict[str, Any], body: str) -> Self:
        """Build a record from decoded frontmatter and body text.

        Derives the slug from the title when the metadata has none.
        """
        record = cls.from_data({**metadata, "content": body, "contentHtml": body})
        if not record.slug and record.title:
            record.generate_slug()
        return record

    # --- Derivations ---

    def generate_slug(self) -> str:
        """Set and return a slug derived from the title."""
        if not self.title:
            return ""
        self.slug = generate_slug(self.title)
        return self.slug

    def word_count(self) -> int:
        return word_count(self.content)

    def calculate_read_time(self, words_per_minute: int = WORDS_PER_MINUTE) -> int:
        """Whole minutes to read the body; zero for an empty body."""
        return read_time(self.content, words_per_minute)

    def touch(self) -> Self:
        """Stamp ``updated_at`` with the current time."""
        self.updated_at = utc_now_iso()
        return self

    # --- Lifecycle ---

    def publish(self) -> Self:
        self.status = RecordStatus.PUBLISHED.value
        return self.touch()

    def unpublish(self) -> Self:
        self.status = RecordStatus.DRAFT.value
        return self.touch()

    def archive(self) -> Self:
        self.status = RecordStatus.ARCHIVED.value
        return self.touch()

    def is_published(self) -> bool:
        return self.status == RecordStatus.PUBLISHED.value

    # --- Validation ---

    def validate_record(self) -> ValidationResult:
        """Check the record against its rule table and kind-specific rules."""
        result = validate_fields(self.to_json(include_stats=False), self.RULES)
        errors = list(result.errors)
        errors.extend(self._extra_errors())
        return ValidationResult(valid=not errors, errors=errors)

    def _extra_errors(self) -> list[str]:
        errors: list[str] = []
        if self.status and self.status not in self.STATUSES:
            errors.append(f"Status must be one of: {', '.join(self.STATUSES)}")
        return errors

    # --- Serialization ---

    def to_frontmatter(self) -> dict[str, Any]:
        """Stored fields as an ordered dict keyed by on-disk name."""
        fields = type(self).model_fields
        fm: dict[str, Any] = {}
        for name in self.STORED_FIELDS:
            alias = fields[name].alias or name
            fm[alias] = getattr(self, name)
        return fm

    def get_stats(self) -> dict[str, Any]:
        return {
            "wordCount": self.word_count(),
            "readTime": read_time(self.content),
            "status": self.status,
            "lastUpdated": self.updated_at,
        }

    def to_json(self, *, include_stats: bool = True) -> dict[str, Any]:
        """Flat camelCase projection of every stored and derived field."""
        data = self.model_dump(by_alias=True, exclude={"file_name"})
        if include_stats:
            data["stats"] = self.get_stats()
        return data

    def body_excerpt(self, max_length: int) -> str:
        return make_excerpt(self.content, max_length)

    def search_values(self) -> Iterator[Any]:
        """Yield the values free-text search looks at, per ``SEARCH_FIELDS``."""
        data = self.to_json(include_stats=False)
        for key in self.SEARCH_FIELDS:
            yield data.get(key)
