"""BaseService: foundation for all contentctl services.

Every service receives a :class:`ContentStore` at construction time. The
store hands out one repository per content kind, all rooted in the same
content directory. Services translate the typed exceptions raised below
them into ``ServiceResult`` errors; nothing escapes as an exception.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Generic

from pydantic import ValidationError

from contentctl.domain.lifecycle import RECORD_TRANSITIONS, is_valid_transition
from contentctl.errors import ContentError, DuplicateSlug, NotFound, ValidationFailure
from contentctl.infrastructure.repositories.query import Page, R, RecordQuery
from contentctl.services.markdown import render_markdown
from contentctl.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from contentctl.config.settings import ContentSettings
    from contentctl.infrastructure.repositories.base import Repository
    from contentctl.infrastructure.store import ContentStore

logger = logging.getLogger(__name__)

# Keys callers may not set directly; the repository owns them.
PROTECTED_KEYS = frozenset({"id", "fileName", "file_name", "contentHtml", "content_html"})


# ---------------------------------------------------------------------------
# Result helpers
# ---------------------------------------------------------------------------


def failure(op: str, code: str, message: str, **detail: Any) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=detail),
    )


def from_error(op: str, exc: ContentError) -> ServiceResult:
    """Map a typed content exception onto an error result."""
    detail: dict[str, Any] = {}
    if isinstance(exc, ValidationFailure):
        detail["errors"] = exc.errors
    elif isinstance(exc, NotFound | DuplicateSlug):
        detail["kind"] = exc.kind
        detail["key"] = exc.key
    logger.debug("%s failed: %s", op, exc)
    return failure(op, exc.code, str(exc), **detail)


# ---------------------------------------------------------------------------
# Record construction
# ---------------------------------------------------------------------------


def build_record(record_type: type[R], data: dict[str, Any]) -> R:
    """Strictly validate *data* into a record.

    Raises:
        ValidationFailure: With one message per pydantic error.
    """
    payload = {k: v for k, v in data.items() if k not in PROTECTED_KEYS}
    try:
        return record_type.model_validate(payload)
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}"
            for err in exc.errors()
        ]
        raise ValidationFailure(errors) from exc


def normalize_changes(record_type: type[R], changes: dict[str, Any]) -> dict[str, Any]:
    """Rewrite snake_case keys in *changes* to their on-disk aliases."""
    fields = record_type.model_fields
    normalized: dict[str, Any] = {}
    for key, value in changes.items():
        if key in PROTECTED_KEYS:
            continue
        info = fields.get(key)
        normalized[(info.alias or key) if info else key] = value
    return normalized


def merge_changes(record: R, changes: dict[str, Any]) -> R:
    """Return a new record with *changes* applied over *record*.

    The result keeps the original's file identity.

    Raises:
        ValidationFailure: If a changed value has the wrong type.
    """
    record_type = type(record)
    data = record.model_dump(by_alias=True, exclude={"id", "file_name"})
    data.update(normalize_changes(record_type, changes))
    merged = build_record(record_type, data)
    merged.id = record.id
    merged.file_name = record.file_name
    return merged


# ---------------------------------------------------------------------------
# Services
# ---------------------------------------------------------------------------


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class ArticleService(ContentService[Article]):
            def create_article(self, data: dict[str, Any]) -> ServiceResult:
                ...
                self.repository.save(article)
    """

    def __init__(self, store: ContentStore) -> None:
        self._store = store

    @property
    def settings(self) -> ContentSettings:
        return self._store.settings


class ContentService(BaseService, ABC, Generic[R]):
    """Shared plumbing for a service over a single repository."""

    record_type: type[R]
    transitions: dict[str, list[str]] = RECORD_TRANSITIONS

    @property
    @abstractmethod
    def repository(self) -> Repository[R]:
        """The repository holding this service's records."""

    @property
    def kind(self) -> str:
        return self.record_type.KIND

    # --- Lookups ---

    def _require(self, slug: str) -> R:
        record = self.repository.find_by_slug(slug)
        if record is None:
            raise NotFound(self.kind, slug)
        return record

    def _render(self, record: R) -> R:
        record.content_html = render_markdown(record.content)
        return record

    # --- Shared operations ---

    def _page_result(self, op: str, page: Page[R], query: RecordQuery | None = None) -> ServiceResult:
        items = [record.to_json() for record in page.items]
        data: dict[str, Any] = {
            "kind": self.kind,
            "items": items,
            "count": len(items),
            "total": page.total,
            "has_more": page.has_more,
        }
        if query is not None and query.to_dict():
            data["filters"] = query.to_dict()
        return ServiceResult(ok=True, op=op, data=data)

    def _search(self, op: str, text: str, query: RecordQuery | None) -> ServiceResult:
        if not text.strip():
            return failure(op, "EMPTY_QUERY", "Search query cannot be empty")
        page = self.repository.search(text.strip(), query)
        result = self._page_result(op, page, query)
        return result.model_copy(update={"data": {**result.data, "query": text.strip()}})

    def _get(self, op: str, slug: str) -> ServiceResult:
        try:
            record = self._require(slug)
        except NotFound as exc:
            return from_error(op, exc)
        return ServiceResult(ok=True, op=op, data=self._render(record).to_json())

    def _delete(self, op: str, slug: str) -> ServiceResult:
        try:
            record = self._require(slug)
            if record.id is None or not self.repository.delete(record.id):
                raise NotFound(self.kind, slug)
        except ContentError as exc:
            return from_error(op, exc)
        logger.info("Deleted %s %s", self.kind, slug)
        return ServiceResult(ok=True, op=op, data={"slug": slug, "id": record.id})

    def _update(self, op: str, record: R, changes: dict[str, Any]) -> R:
        """Merge *changes* into *record* and save it.

        Raises:
            ValidationFailure, DuplicateSlug, IOFailure: From the merge or save.
        """
        updated = merge_changes(record, changes)
        if not updated.slug:
            updated.generate_slug()
        if updated.slug != record.slug and self.repository.exists(updated.slug):
            raise DuplicateSlug(self.kind, updated.slug)
        self.prepare(updated, changes)
        return self.repository.save(updated)

    def prepare(self, record: R, changes: dict[str, Any]) -> None:
        """Recompute derived fields before an update is saved."""

    def _transition(self, op: str, slug: str, action: str) -> ServiceResult:
        """Apply a lifecycle method (``publish``, ``archive``, ...) and save.

        Moves outside the normal flow succeed with a warning.
        """
        try:
            record = self._require(slug)
            previous = record.status
            getattr(record, action)()
            self.repository.save(record)
        except ContentError as exc:
            return from_error(op, exc)

        warnings: list[str] = []
        if previous != record.status and not is_valid_transition(
            previous, record.status, self.transitions
        ):
            warnings.append(f"Unusual status transition: {previous} -> {record.status}")
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "slug": record.slug,
                "id": record.id,
                "title": record.title,
                "status": record.status,
                "previous_status": previous,
            },
            warnings=warnings,
        )
