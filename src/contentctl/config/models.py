"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, contentctl.toml only contains
overrides. A fresh content root needs no config file at all.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

# --- contentctl.toml sections ---


class ContentConfig(BaseModel):
    """[content] section: directory layout relative to the content root."""

    model_config = {"frozen": True}

    articles_dir: str = "content/blog"
    courses_dir: str = "content/courses"
    projects_dir: str = "content/projects"
    default_author: str = ""


class CodecConfig(BaseModel):
    """[codec] section."""

    model_config = {"frozen": True}

    fold_threshold: int = 50


class CoursesConfig(BaseModel):
    """[courses] section."""

    model_config = {"frozen": True}

    lesson_order: Literal["lexicographic", "natural"] = "lexicographic"
    description_file: str = "course_description.md"


class ArticlesConfig(BaseModel):
    """[articles] section."""

    model_config = {"frozen": True}

    excerpt_length: int = 150
    words_per_minute: int = 200
    related_limit: int = 5
    default_featured_image: str = ""


class ContentctlConfig(BaseModel):
    """Root configuration composing all sections."""

    model_config = {"frozen": True}

    content: ContentConfig = Field(default_factory=ContentConfig)
    codec: CodecConfig = Field(default_factory=CodecConfig)
    courses: CoursesConfig = Field(default_factory=CoursesConfig)
    articles: ArticlesConfig = Field(default_factory=ArticlesConfig)
