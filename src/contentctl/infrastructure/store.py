"""ContentStore: the single dependency injected into every service.

The store owns one repository per content kind, each rooted at the
directory the settings configure for it. Repositories are explicit
instances, so two stores over two content roots never share state.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from contentctl.domain.article import Article
from contentctl.domain.project import Project
from contentctl.infrastructure.repositories import (
    LESSON_ORDERS,
    CompositeRepository,
    FlatRepository,
)

if TYPE_CHECKING:
    from contentctl.config.settings import ContentSettings

logger = logging.getLogger(__name__)


class ContentStore:
    """Repositories for every content kind under one content root."""

    def __init__(self, settings: ContentSettings) -> None:
        self._settings = settings
        fold = settings.codec.fold_threshold
        self.articles: FlatRepository[Article] = FlatRepository(
            settings.articles_path,
            Article,
            fold_threshold=fold,
            default_sort="publishedAt",
        )
        self.projects: FlatRepository[Project] = FlatRepository(
            settings.projects_path,
            Project,
            fold_threshold=fold,
            default_sort="createdAt",
        )
        self.courses = CompositeRepository(
            settings.courses_path,
            lesson_order=LESSON_ORDERS[settings.courses.lesson_order],
            description_file=settings.courses.description_file,
            fold_threshold=fold,
        )

    @property
    def root(self) -> Path:
        return self._settings.content_root

    @property
    def settings(self) -> ContentSettings:
        return self._settings

    @property
    def backup_dir(self) -> Path:
        return self.root / ".contentctl" / "backups"

    def ensure_directories(self) -> list[Path]:
        """Create every configured content directory; return those created."""
        created: list[Path] = []
        for path in (self.articles.root, self.courses.root, self.projects.root):
            if not path.is_dir():
                path.mkdir(parents=True, exist_ok=True)
                logger.debug("Created %s", path)
                created.append(path)
        return created
