"""Filesystem operations for content storage.

INVARIANT: Files are truth. The repositories' slug index and decode
cache are hints that are re-checked against the markdown files on every
use, never a second source of records.

Pure parsing/rendering lives in :mod:`contentctl.domain.frontmatter`
(correct dependency direction: infrastructure -> domain). This module
handles actual file I/O, atomic replacement, and file discovery.
"""

from __future__ import annotations

import hashlib
import logging
import os
import tempfile
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from contentctl.domain.frontmatter import FOLD_THRESHOLD, FieldType, decode, encode
from contentctl.errors import ConcurrentModification, IOFailure

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def read_text(path: Path) -> str:
    """Read *path* as UTF-8, wrapping OS errors in :class:`IOFailure`."""
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to read %s: %s", path, exc)
        raise IOFailure("read", str(path), exc) from exc


def read_content_file(
    path: Path,
    *,
    schema: Mapping[str, FieldType] | None = None,
) -> tuple[dict[str, Any], str]:
    """Read a markdown file, returning ``(metadata, body)``."""
    return decode(read_text(path), schema=schema)


def atomic_write(path: Path, text: str) -> None:
    """Replace *path* with *text* so readers never see a partial file.

    Writes to a temporary file in the same directory, then ``os.replace``.
    Creates parent directories if they don't exist.
    """
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as handle:
            tmp_name = handle.name
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        logger.error("Failed to write %s: %s", path, exc)
        raise IOFailure("write", str(path), exc) from exc


def write_content_file(
    path: Path,
    metadata: Mapping[str, Any],
    body: str,
    *,
    fold_threshold: int = FOLD_THRESHOLD,
) -> None:
    """Encode *metadata* + *body* and write them atomically to *path*."""
    atomic_write(path, encode(body, metadata, fold_threshold=fold_threshold))


# ---------------------------------------------------------------------------
# Optimistic concurrency
# ---------------------------------------------------------------------------


def fingerprint(text: str) -> str:
    """Content fingerprint used to detect concurrent modification."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


@contextmanager
def _exclusive(path: Path) -> Iterator[None]:
    """Hold a sibling ``.lock`` file for the duration of the block.

    Raises:
        ConcurrentModification: If another writer holds the lock.
    """
    lock = path.with_name(f".{path.name}.lock")
    try:
        fd = os.open(lock, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
    except FileExistsError as exc:
        raise ConcurrentModification(str(path)) from exc
    except OSError as exc:
        raise IOFailure("lock", str(path), exc) from exc
    try:
        yield
    finally:
        os.close(fd)
        lock.unlink(missing_ok=True)


def compare_and_swap(path: Path, expected: str, text: str) -> None:
    """Replace *path* with *text* only if its fingerprint is still *expected*.

    Raises:
        ConcurrentModification: If the file changed since it was read.
    """
    with _exclusive(path):
        current = fingerprint(read_text(path))
        if current != expected:
            logger.debug("Fingerprint mismatch for %s", path)
            raise ConcurrentModification(str(path))
        atomic_write(path, text)


# ---------------------------------------------------------------------------
# Discovery and path resolution
# ---------------------------------------------------------------------------


def find_markdown_files(directory: Path) -> list[Path]:
    """List ``*.md`` files directly inside *directory*, sorted by name.

    Hidden files (temporary writes, lock files) are skipped. A missing
    directory yields an empty list.
    """
    if not directory.is_dir():
        return []
    return sorted(
        path
        for path in directory.iterdir()
        if path.is_file() and path.suffix == MARKDOWN_SUFFIX and not path.name.startswith(".")
    )


def resolve_child(root: Path, name: str) -> Path:
    """Resolve *name* under *root*, refusing anything that escapes it."""
    result = root / name
    if not result.resolve().is_relative_to(root.resolve()) or result.resolve() == root.resolve():
        msg = f"Path escapes content root: {result}"
        raise ValueError(msg)
    return result
