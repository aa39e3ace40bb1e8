"""Tests for the configuration section models."""

import pytest
from pydantic import ValidationError

from contentctl.config.models import (
    ArticlesConfig,
    CodecConfig,
    ContentConfig,
    ContentctlConfig,
    CoursesConfig,
)


class TestSectionDefaults:
    def test_content(self) -> None:
        cfg = ContentConfig()
        assert (cfg.articles_dir, cfg.courses_dir, cfg.projects_dir) == (
            "content/blog",
            "content/courses",
            "content/projects",
        )
        assert cfg.default_author == ""

    def test_courses(self) -> None:
        cfg = CoursesConfig()
        assert cfg.lesson_order == "lexicographic"
        assert cfg.description_file == "course_description.md"

    def test_articles_and_codec(self) -> None:
        assert ArticlesConfig().related_limit == 5
        assert ArticlesConfig().words_per_minute == 200
        assert CodecConfig().fold_threshold == 50

    def test_root_composes_sections(self) -> None:
        cfg = ContentctlConfig.model_validate({"courses": {"lesson_order": "natural"}})
        assert cfg.courses.lesson_order == "natural"
        assert cfg.content == ContentConfig()


class TestConstraints:
    def test_lesson_order_literal(self) -> None:
        with pytest.raises(ValidationError):
            CoursesConfig(lesson_order="random")  # type: ignore[arg-type]

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            CodecConfig().fold_threshold = 10  # type: ignore[misc]
