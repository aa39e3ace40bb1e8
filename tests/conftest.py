"""Shared pytest fixtures and test helpers for contentctl tests."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from contentctl.config.settings import ContentSettings
from contentctl.infrastructure.store import ContentStore
from contentctl.services.telemetry import disable_telemetry

# Long enough to satisfy every body-length rule (articles need 100 chars).
BODY = (
    "Python makes it easy to write small tools. This post walks through a "
    "complete example, from the first line of code to a packaged release."
)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def content_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary content root with the default directory layout.

    This is the single source of truth for the content layout. All
    store-related fixtures (settings, store, _isolated_root) build on this.
    """
    monkeypatch.delenv("CONTENTCTL_CONFIG", raising=False)
    (tmp_path / "content" / "blog").mkdir(parents=True)
    (tmp_path / "content" / "courses").mkdir(parents=True)
    (tmp_path / "content" / "projects").mkdir(parents=True)
    return tmp_path


@pytest.fixture
def settings(content_root: Path) -> ContentSettings:
    return ContentSettings.from_cli(content_root=content_root)


@pytest.fixture
def store(settings: ContentSettings) -> ContentStore:
    """Content store over the temporary root."""
    return ContentStore(settings)


@pytest.fixture
def _isolated_root(content_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the temp content root so the CLI picks it up.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes. Tests that need the path can also request ``content_root``.
    """
    monkeypatch.chdir(content_root)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Iterator[None]:
    """Keep ``-v`` runs from leaving telemetry switched on for later tests."""
    yield
    disable_telemetry()


# ---------------------------------------------------------------------------
# Shared test helpers (used across service and command test modules)
# ---------------------------------------------------------------------------


def article_data(title: str = "Getting Started with Python", **overrides: Any) -> dict[str, Any]:
    """Payload for a valid article."""
    data: dict[str, Any] = {
        "title": title,
        "content": BODY,
        "author": "Ada Lovelace",
        "authorEmail": "ada@example.com",
        "category": "Programming",
        "tags": ["python"],
    }
    data.update(overrides)
    return data


def lesson_data(title: str, **overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "title": title,
        "content": f"{title}. " + "Every lesson needs a little substance to read. " * 2,
        "duration": "30 minutes",
        "difficulty": "beginner",
    }
    data.update(overrides)
    return data


def course_data(title: str = "Python Basics", lessons: int = 2, **overrides: Any) -> dict[str, Any]:
    """Payload for a valid course with *lessons* lessons."""
    data: dict[str, Any] = {
        "title": title,
        "description": "A gentle introduction to the Python language.",
        "level": "Beginner",
        "tag": "Python",
        "duration": "2-3 hours",
        "content": "An overview of the course and what it covers.",
        "lessons": [lesson_data(f"Lesson Number {i}") for i in range(1, lessons + 1)],
    }
    data.update(overrides)
    return data


def create_article(store: ContentStore, title: str = "Getting Started with Python", **kwargs: Any) -> dict[str, Any]:
    """Create an article via ArticleService, asserting success."""
    from contentctl.services.article import ArticleService

    result = ArticleService(store).create_article(article_data(title, **kwargs))
    assert result.ok, result.error
    return result.data


def publish_article(store: ContentStore, slug: str) -> dict[str, Any]:
    from contentctl.services.article import ArticleService

    result = ArticleService(store).publish(slug)
    assert result.ok, result.error
    return result.data


def create_course(store: ContentStore, title: str = "Python Basics", **kwargs: Any) -> dict[str, Any]:
    """Create a course via CourseService, asserting success."""
    from contentctl.services.course import CourseService

    result = CourseService(store).create_course(course_data(title, **kwargs))
    assert result.ok, result.error
    return result.data
