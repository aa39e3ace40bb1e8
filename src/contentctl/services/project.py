"""ProjectService: portfolio projects stored one per markdown file."""

from __future__ import annotations

import logging
from typing import Any

from contentctl.domain.project import Project
from contentctl.errors import ContentError, DuplicateSlug
from contentctl.infrastructure.repositories.flat import FlatRepository
from contentctl.infrastructure.repositories.query import RecordQuery
from contentctl.infrastructure.templates import render_body
from contentctl.services.base import ContentService, build_record, from_error
from contentctl.services.result import ServiceResult
from contentctl.services.telemetry import traced

logger = logging.getLogger(__name__)


class ProjectService(ContentService[Project]):
    """Create, query, update, and delete projects."""

    record_type = Project

    @property
    def repository(self) -> FlatRepository[Project]:
        return self._store.projects

    @traced
    def list_projects(self, query: RecordQuery | None = None) -> ServiceResult:
        query = query or RecordQuery()
        return self._page_result("list_projects", self.repository.find_all(query), query)

    @traced
    def get_project(self, slug: str) -> ServiceResult:
        return self._get("get_project", slug)

    @traced
    def create_project(self, data: dict[str, Any]) -> ServiceResult:
        """Create a project. An empty body is filled from the ``project`` template."""
        op = "create_project"
        try:
            project = build_record(Project, data)
            if not project.slug:
                project.generate_slug()
            if not project.author and self.settings.content.default_author:
                project.author = self.settings.content.default_author
            if self.repository.exists(project.slug):
                raise DuplicateSlug(self.kind, project.slug)
            if not project.content:
                project.content = render_body(
                    "project",
                    content_root=self._store.root,
                    title=project.title,
                    description=project.description,
                    stack=project.stack,
                    github=project.github,
                )
            self.repository.save(project)
        except ContentError as exc:
            return from_error(op, exc)
        logger.info("Created project %s", project.slug)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "slug": project.slug,
                "id": project.id,
                "title": project.title,
                "status": project.status,
                "path": str(self.repository.root / (project.file_name or "")),
            },
        )

    @traced
    def update_project(self, slug: str, changes: dict[str, Any]) -> ServiceResult:
        op = "update_project"
        try:
            saved = self._update(op, self._require(slug), changes)
        except ContentError as exc:
            return from_error(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "slug": saved.slug,
                "id": saved.id,
                "title": saved.title,
                "status": saved.status,
                "fields_changed": sorted(changes),
            },
        )

    @traced
    def delete_project(self, slug: str) -> ServiceResult:
        return self._delete("delete_project", slug)

    @traced
    def search(self, text: str, query: RecordQuery | None = None) -> ServiceResult:
        """Search title, description, stack, and category."""
        return self._search("search", text, query)
