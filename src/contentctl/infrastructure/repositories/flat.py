"""Flat storage: one markdown file per record.

The file name is chosen once, from the title, when the record is first
saved. Afterwards the record is found through its decoded slug and
rewritten in place under the same file name.

Decoded records are cached per file and invalidated by the file's
``(mtime_ns, size)`` signature, so repeated queries only re-decode files
that changed on disk. The repository's own writes drop the entry outright,
since a same-size rewrite can keep the signature on coarse-mtime
filesystems. Every decoded record also refreshes the
repository's slug index, so a slug lookup normally loads a single file.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Iterator
from pathlib import Path

from contentctl.domain.frontmatter import FOLD_THRESHOLD, decode, encode
from contentctl.domain.ids import generate_file_name
from contentctl.errors import (
    ConcurrentModification,
    DuplicateSlug,
    IOFailure,
    NotFound,
    ValidationFailure,
)
from contentctl.infrastructure.filesystem import (
    MARKDOWN_SUFFIX,
    atomic_write,
    compare_and_swap,
    find_markdown_files,
    fingerprint,
    read_text,
    resolve_child,
    write_content_file,
)
from contentctl.infrastructure.repositories.base import Repository
from contentctl.infrastructure.repositories.query import R

logger = logging.getLogger(__name__)

_Signature = tuple[int, int]

# Optimistic retries for compare-and-swap updates.
MAX_SWAP_ATTEMPTS = 3


class FlatRepository(Repository[R]):
    """Repository over ``root/<file-name-from-title>.md`` files."""

    def __init__(
        self,
        root: Path,
        record_type: type[R],
        *,
        fold_threshold: int = FOLD_THRESHOLD,
        default_sort: str = "createdAt",
    ) -> None:
        self.root = root
        self.record_type = record_type
        self.kind = record_type.KIND
        self.default_sort = default_sort
        self.fold_threshold = fold_threshold
        self._cache: dict[Path, tuple[_Signature, R]] = {}
        self._slug_index = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _parse(self, path: Path, text: str) -> R:
        metadata, body = decode(text, schema=self.record_type.FIELD_SCHEMA)
        if not metadata:
            logger.debug("No frontmatter in %s; loading body only", path)
        record = self.record_type.from_markdown(metadata, body)
        record.id = path.stem
        record.file_name = path.name
        return record

    def _load(self, path: Path) -> R | None:
        try:
            stat = path.stat()
        except FileNotFoundError:
            self._cache.pop(path, None)
            return None
        signature = (stat.st_mtime_ns, stat.st_size)
        cached = self._cache.get(path)
        if cached is not None and cached[0] == signature:
            self._remember(cached[1])
            return cached[1].model_copy(deep=True)
        try:
            record = self._parse(path, read_text(path))
        except IOFailure:
            logger.warning("Skipping unreadable %s file %s", self.kind, path)
            return None
        self._cache[path] = (signature, record)
        self._remember(record)
        return record.model_copy(deep=True)

    def iter_records(self) -> Iterator[R]:
        for path in find_markdown_files(self.root):
            record = self._load(path)
            if record is not None:
                yield record

    def find_by_file(self, file_name: str) -> R | None:
        """Load the record stored in *file_name*, or None if there is none."""
        return self._load(self.root / file_name)

    def load(self, record_id: str) -> R | None:
        try:
            path = resolve_child(self.root, f"{record_id}{MARKDOWN_SUFFIX}")
        except ValueError:
            return None
        return self._load(path)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _check(self, record: R) -> None:
        result = record.validate_record()
        if not result.valid:
            raise ValidationFailure(result.errors)

    def _path_for(self, record: R) -> Path:
        if record.file_name:
            return resolve_child(self.root, record.file_name)
        file_name = generate_file_name(record.title)
        if file_name == MARKDOWN_SUFFIX:
            file_name = f"{record.slug}{MARKDOWN_SUFFIX}"
        return resolve_child(self.root, file_name)

    def save(self, record: R) -> R:
        """Validate and write *record*, creating its file on first save.

        Raises:
            ValidationFailure: Before any disk write, if the record is invalid.
            DuplicateSlug: On creation, if the slug or target file is taken.
            IOFailure: If the write fails.
        """
        self._check(record)
        creating = record.file_name is None
        path = self._path_for(record)
        if creating and (path.exists() or self.exists(record.slug)):
            raise DuplicateSlug(self.kind, record.slug)

        record.touch()
        write_content_file(
            path,
            record.to_frontmatter(),
            record.content,
            fold_threshold=self.fold_threshold,
        )
        self._cache.pop(path, None)
        record.id = path.stem
        record.file_name = path.name
        self._remember(record)
        logger.debug("Saved %s %s to %s", self.kind, record.slug, path)
        return record

    def modify(self, slug: str, mutate: Callable[[R], object]) -> R:
        """Read-modify-write one record with compare-and-swap.

        The file is re-read and *mutate* re-applied if another writer
        changed it in between, up to :data:`MAX_SWAP_ATTEMPTS` times.

        Raises:
            NotFound: If no record has *slug*.
            ValidationFailure: If the mutated record is invalid.
            ConcurrentModification: If every attempt lost the race.
        """
        for attempt in range(1, MAX_SWAP_ATTEMPTS + 1):
            current = self.find_by_slug(slug)
            if current is None or current.file_name is None:
                raise NotFound(self.kind, slug)
            path = self.root / current.file_name
            text = read_text(path)
            record = self._parse(path, text)
            mutate(record)
            self._check(record)
            record.touch()
            rendered = encode(
                record.content,
                record.to_frontmatter(),
                fold_threshold=self.fold_threshold,
            )
            try:
                compare_and_swap(path, fingerprint(text), rendered)
            except ConcurrentModification:
                logger.debug("Lost update race on %s (attempt %d)", path, attempt)
                continue
            self._cache.pop(path, None)
            return record
        raise ConcurrentModification(slug)

    def delete(self, record_id: str) -> bool:
        """Delete ``<record_id>.md``. Returns False if it did not exist."""
        path = resolve_child(self.root, f"{record_id}{MARKDOWN_SUFFIX}")
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.error("Failed to delete %s: %s", path, exc)
            raise IOFailure("delete", str(path), exc) from exc
        self._cache.pop(path, None)
        return True

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def backup(self, slug: str, destination: Path, *, stamp: str) -> Path:
        """Copy the file holding *slug* into *destination*.

        Raises:
            NotFound: If no record has *slug*.
        """
        record = self.find_by_slug(slug)
        if record is None or record.file_name is None:
            raise NotFound(self.kind, slug)
        source = self.root / record.file_name
        target = destination / f"{record.id}_backup_{stamp}{MARKDOWN_SUFFIX}"
        try:
            destination.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
        except OSError as exc:
            logger.error("Failed to back up %s: %s", source, exc)
            raise IOFailure("back up", str(source), exc) from exc
        return target

    def restore(self, backup_path: Path, record_id: str) -> R | None:
        """Write a backup over ``<record_id>.md`` and return the restored record."""
        path = resolve_child(self.root, f"{record_id}{MARKDOWN_SUFFIX}")
        atomic_write(path, read_text(backup_path))
        self._cache.pop(path, None)
        return self._load(path)
