"""Article record: a blog post stored as one markdown file."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Any, ClassVar, Self

from pydantic import Field, field_validator

from contentctl.domain.lifecycle import ArticleStatus
from contentctl.domain.records import Record, parse_timestamp, utc_now_iso
from contentctl.domain.text import EXCERPT_LENGTH
from contentctl.domain.validation import FieldRule

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

CATEGORIES: tuple[str, ...] = (
    "Technology",
    "Programming",
    "Web Development",
    "Mobile Development",
    "Data Science",
    "AI & Machine Learning",
    "DevOps",
    "Design",
    "Business",
    "Tutorial",
    "News",
    "General",
)

DEFAULT_CATEGORY = "General"


class Article(Record):
    """Blog post with editorial metadata and engagement counters."""

    KIND: ClassVar[str] = "article"
    STATUSES: ClassVar[tuple[str, ...]] = tuple(s.value for s in ArticleStatus)
    RULES: ClassVar[dict[str, FieldRule]] = {
        "title": FieldRule(required=True, min_length=5, max_length=200),
        "excerpt": FieldRule(required=True, min_length=20, max_length=300),
        "content": FieldRule(required=True, min_length=100),
        "author": FieldRule(required=True, min_length=2, max_length=100),
        "authorEmail": FieldRule(required=True, pattern=EMAIL_PATTERN),
        "category": FieldRule(required=True, min_length=2, max_length=50),
        "slug": FieldRule(
            required=True,
            pattern=re.compile(r"^[a-z0-9-]+$"),
            min_length=3,
            max_length=200,
        ),
        "seoTitle": FieldRule(max_length=60),
        "seoDescription": FieldRule(max_length=160),
    }
    STORED_FIELDS: ClassVar[tuple[str, ...]] = (
        "slug",
        "title",
        "excerpt",
        "author",
        "author_email",
        "category",
        "tags",
        "featured_image",
        "featured_image_alt",
        "status",
        "featured",
        "published_at",
        "read_time",
        "views",
        "likes",
        "seo_title",
        "seo_description",
        "created_at",
        "updated_at",
    )
    SEARCH_FIELDS: ClassVar[tuple[str, ...]] = (
        "title",
        "excerpt",
        "content",
        "author",
        "category",
        "tags",
    )
    FIELD_SCHEMA: ClassVar[dict[str, type]] = {
        **Record.FIELD_SCHEMA,
        "excerpt": str,
        "authorEmail": str,
        "category": str,
        "tags": list,
        "featuredImage": str,
        "featuredImageAlt": str,
        "publishedAt": str,
        "readTime": int,
        "views": int,
        "likes": int,
        "seoTitle": str,
        "seoDescription": str,
    }

    excerpt: str = ""
    author_email: str = ""
    category: str = DEFAULT_CATEGORY
    tags: list[str] = Field(default_factory=list)
    featured_image: str = ""
    featured_image_alt: str = ""
    published_at: str | None = None
    read_time: int = 0
    views: int = 0
    likes: int = 0
    seo_title: str = ""
    seo_description: str = ""

    @field_validator("published_at", mode="before")
    @classmethod
    def _null_timestamp(cls, value: Any) -> Any:
        # Hand-written files spell an unset timestamp as ``null``.
        if value in ("", "null"):
            return None
        return value

    @classmethod
    def from_markdown(cls, metadata: dict[str, Any], body: str) -> Self:
        article = super().from_markdown(metadata, body)
        if not article.excerpt:
            article.generate_excerpt()
        article.read_time = article.calculate_read_time()
        return article

    # --- Derivations ---

    def generate_excerpt(self, max_length: int = EXCERPT_LENGTH) -> str:
        """Fill ``excerpt`` from the body unless one is already set."""
        if self.excerpt:
            return self.excerpt
        if not self.content:
            return ""
        self.excerpt = self.body_excerpt(max_length)
        return self.excerpt

    # --- Tags and counters ---

    def add_tag(self, tag: str) -> Self:
        normalized = tag.strip().lower()
        if normalized and normalized not in self.tags:
            self.tags.append(normalized)
            self.touch()
        return self

    def remove_tag(self, tag: str) -> Self:
        normalized = tag.strip().lower()
        self.tags = [t for t in self.tags if t != normalized]
        return self.touch()

    def increment_views(self) -> Self:
        self.views += 1
        return self

    def increment_likes(self) -> Self:
        self.likes += 1
        return self

    # --- Lifecycle ---

    def publish(self) -> Self:
        self.status = ArticleStatus.PUBLISHED.value
        self.published_at = utc_now_iso()
        return self.touch()

    def unpublish(self) -> Self:
        self.status = ArticleStatus.DRAFT.value
        self.published_at = None
        return self.touch()

    def schedule(self, at: datetime | str) -> Self:
        """Mark the article for publication at *at*."""
        self.status = ArticleStatus.SCHEDULED.value
        self.published_at = at.isoformat() if isinstance(at, datetime) else at
        return self.touch()

    def is_published(self) -> bool:
        return self.status == ArticleStatus.PUBLISHED.value and bool(self.published_at)

    def is_scheduled(self) -> bool:
        if self.status != ArticleStatus.SCHEDULED.value:
            return False
        when = parse_timestamp(self.published_at)
        return when is not None and when > datetime.now(UTC)

    # --- Validation and projection ---

    def _extra_errors(self) -> list[str]:
        errors: list[str] = []
        if self.category and self.category not in CATEGORIES:
            errors.append(f"Category must be one of: {', '.join(CATEGORIES)}")
        errors.extend(super()._extra_errors())
        return errors

    def get_stats(self) -> dict[str, Any]:
        return {
            "wordCount": self.word_count(),
            "readTime": self.read_time,
            "views": self.views,
            "likes": self.likes,
            "tags": len(self.tags),
            "status": self.status,
            "published": self.status == ArticleStatus.PUBLISHED.value,
            "lastUpdated": self.updated_at,
        }
