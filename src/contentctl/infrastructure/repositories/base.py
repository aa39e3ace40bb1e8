"""Shared read-side behaviour for repositories of one record kind."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Generic

from contentctl.infrastructure.repositories.query import Page, R, RecordQuery, run_query

logger = logging.getLogger(__name__)


class Repository(ABC, Generic[R]):
    """Query surface common to flat and composite storage.

    Subclasses supply :meth:`iter_records`; every listing, lookup, and
    search is answered from it. Lookups go through the decoded ``slug``
    field, never through a file or directory name.
    """

    kind: str = ""
    default_sort: str = "createdAt"
    _slug_index: dict[str, str]

    @abstractmethod
    def iter_records(self) -> Iterator[R]:
        """Yield every readable record. Unreadable entries are skipped."""

    @abstractmethod
    def load(self, record_id: str) -> R | None:
        """Load the record stored under *record_id* (file stem or directory), or None."""

    @abstractmethod
    def save(self, record: R) -> R:
        """Validate and persist *record*, returning it with its id set."""

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """Remove the stored record *record_id*; False if there was none."""

    def find_all(self, query: RecordQuery | None = None) -> Page[R]:
        return run_query(self.iter_records(), query or RecordQuery(), default_sort=self.default_sort)

    def _remember(self, record: R) -> None:
        if record.slug and record.id:
            self._slug_index[record.slug] = record.id

    def find_by_slug(self, slug: str) -> R | None:
        """Return the record whose decoded slug is *slug*, or None.

        The slug index is only a hint: the record it points at is loaded
        and its decoded slug re-checked. On a miss or a stale entry every
        record is scanned, which also refreshes the index.
        """
        record_id = self._slug_index.get(slug)
        if record_id is not None:
            record = self.load(record_id)
            if record is not None and record.slug == slug:
                return record
            self._slug_index.pop(slug, None)
        for record in self.iter_records():
            if record.slug == slug:
                return record
        return None

    def exists(self, slug: str) -> bool:
        return self.find_by_slug(slug) is not None

    def search(self, text: str, query: RecordQuery | None = None) -> Page[R]:
        """Case-insensitive free-text search, combined with any *query* filters."""
        base = query or RecordQuery()
        combined = RecordQuery(
            status=base.status,
            featured=base.featured,
            category=base.category,
            tag=base.tag,
            author=base.author,
            search=text,
            limit=base.limit,
            offset=base.offset,
            sort_by=base.sort_by,
            sort_order=base.sort_order,
        )
        return self.find_all(combined)
