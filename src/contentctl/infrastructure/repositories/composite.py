"""Composite storage: one directory per course.

Layout::

    <root>/<directory-from-title>/
        course_description.md    (or description.md)
        lesson1.md
        lesson2.md
        ...

Lesson files are discovered by name and ordered by a named key function.
The default, :func:`lexicographic_lesson_order`, compares names as plain
strings, so ``lesson10.md`` sorts before ``lesson2.md``. Opt into
:func:`natural_lesson_order` to compare the lesson numbers instead.

Saves are staged: the whole course directory is written to a hidden
sibling directory first and then swapped in with renames, so a crash
never leaves a mix of old and new files under the course's name.
"""

from __future__ import annotations

import logging
import re
import shutil
import uuid
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

from contentctl.domain.course import Course, Lesson, lesson_file_name
from contentctl.domain.frontmatter import FOLD_THRESHOLD
from contentctl.domain.ids import generate_file_name
from contentctl.errors import DuplicateSlug, IOFailure, NotFound, ValidationFailure
from contentctl.infrastructure.filesystem import (
    read_content_file,
    resolve_child,
    write_content_file,
)
from contentctl.infrastructure.repositories.base import Repository

logger = logging.getLogger(__name__)

LESSON_FILE_RE = re.compile(r"^lesson(\d+)\.md$")
DESCRIPTION_FILE = "course_description.md"
FALLBACK_DESCRIPTION_FILE = "description.md"

LessonOrder = Callable[[str], Any]


# ---------------------------------------------------------------------------
# Lesson ordering
# ---------------------------------------------------------------------------


def lexicographic_lesson_order(file_name: str) -> str:
    """Sort key comparing lesson file names as strings (``lesson10`` < ``lesson2``)."""
    return file_name


def natural_lesson_order(file_name: str) -> tuple[int, str]:
    """Sort key comparing the lesson number numerically (``lesson2`` < ``lesson10``)."""
    match = LESSON_FILE_RE.match(file_name)
    return (int(match.group(1)) if match else 0, file_name)


LESSON_ORDERS: dict[str, LessonOrder] = {
    "lexicographic": lexicographic_lesson_order,
    "natural": natural_lesson_order,
}


def find_lesson_files(
    course_dir: Path,
    order: LessonOrder = lexicographic_lesson_order,
) -> list[Path]:
    """List ``lesson<N>.md`` files in *course_dir*, sorted by *order*."""
    names = [
        entry.name
        for entry in course_dir.iterdir()
        if entry.is_file() and LESSON_FILE_RE.match(entry.name)
    ]
    return [course_dir / name for name in sorted(names, key=order)]


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CompositeRepository(Repository[Course]):
    """Repository over course directories with ordered lesson files."""

    kind = Course.KIND
    default_sort = "createdAt"

    def __init__(
        self,
        root: Path,
        *,
        lesson_order: LessonOrder = lexicographic_lesson_order,
        description_file: str = DESCRIPTION_FILE,
        fold_threshold: int = FOLD_THRESHOLD,
    ) -> None:
        self.root = root
        self.lesson_order = lesson_order
        self.description_file = description_file
        self.fold_threshold = fold_threshold
        self._slug_index = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _description_path(self, course_dir: Path) -> Path | None:
        for name in (self.description_file, FALLBACK_DESCRIPTION_FILE):
            candidate = course_dir / name
            if candidate.is_file():
                return candidate
        return None

    def load_lessons(self, course_dir: Path, course_id: str) -> list[Lesson]:
        lessons: list[Lesson] = []
        for path in find_lesson_files(course_dir, self.lesson_order):
            try:
                metadata, body = read_content_file(path, schema=Lesson.FIELD_SCHEMA)
            except IOFailure:
                logger.warning("Skipping unreadable lesson %s", path)
                continue
            lesson = Lesson.from_markdown(metadata, body)
            lesson.id = path.stem
            lesson.course_id = course_id
            lesson.file_name = path.name
            lessons.append(lesson)
        return lessons

    def find_by_directory(self, name: str) -> Course | None:
        """Load the course stored in directory *name*, or None."""
        try:
            course_dir = resolve_child(self.root, name)
        except ValueError:
            return None
        if not course_dir.is_dir():
            return None
        description = self._description_path(course_dir)
        if description is None:
            return None
        try:
            metadata, body = read_content_file(description, schema=Course.FIELD_SCHEMA)
        except IOFailure:
            logger.warning("Skipping unreadable course %s", course_dir)
            return None
        course = Course.from_markdown(metadata, body)
        course.id = name
        course.file_name = name
        course.lessons = self.load_lessons(course_dir, name)
        self._remember(course)
        return course

    def load(self, record_id: str) -> Course | None:
        return self.find_by_directory(record_id)

    def iter_records(self) -> Iterator[Course]:
        if not self.root.is_dir():
            return
        for entry in sorted(self.root.iterdir()):
            if not entry.is_dir() or entry.name.startswith("."):
                continue
            course = self.find_by_directory(entry.name)
            if course is not None:
                yield course

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _check(self, course: Course) -> None:
        errors = list(course.validate_record().errors)
        seen: set[int] = set()
        for lesson in course.lessons:
            label = f"lesson{lesson.order}"
            errors.extend(f"{label}: {message}" for message in lesson.validate_record().errors)
            if lesson.order in seen:
                errors.append(f"{label}: duplicate lesson number")
            seen.add(lesson.order)
        if errors:
            raise ValidationFailure(errors)

    def _stage(self, course: Course, name: str, staging: Path, existing: Path | None) -> None:
        staging.mkdir(parents=True)
        if existing is not None:
            rewritten = {self.description_file, FALLBACK_DESCRIPTION_FILE}
            for entry in existing.iterdir():
                if entry.name in rewritten or LESSON_FILE_RE.match(entry.name):
                    continue
                if entry.is_dir():
                    shutil.copytree(entry, staging / entry.name)
                else:
                    shutil.copy2(entry, staging / entry.name)

        write_content_file(
            staging / self.description_file,
            course.to_frontmatter(),
            course.content,
            fold_threshold=self.fold_threshold,
        )
        for lesson in course.lessons:
            lesson.assign_order(lesson.order)
            lesson.course_id = name
            write_content_file(
                staging / lesson_file_name(lesson.order),
                lesson.to_frontmatter(),
                lesson.content,
                fold_threshold=self.fold_threshold,
            )

    def save(self, course: Course) -> Course:
        """Validate *course* and its lessons, then write the directory atomically.

        Non-lesson files already in the course directory are carried over;
        lesson files that no longer belong to the course are dropped.

        Raises:
            ValidationFailure: Before any disk write, listing every course
                and lesson violation.
            DuplicateSlug: On creation, if the slug or directory is taken.
            IOFailure: If staging or the swap fails.
        """
        self._check(course)
        creating = course.id is None
        name = course.id or generate_file_name(course.title, suffix="") or course.slug
        target = resolve_child(self.root, name)
        if creating and (target.exists() or self.exists(course.slug)):
            raise DuplicateSlug(self.kind, course.slug)

        course.touch()

        token = uuid.uuid4().hex[:8]
        staging = self.root / f".{name}.staging-{token}"
        retired = self.root / f".{name}.old-{token}"
        existing = target if target.is_dir() else None
        try:
            self._stage(course, name, staging, existing)
            if existing is not None:
                existing.rename(retired)
            try:
                staging.rename(target)
            except OSError:
                if existing is not None:
                    retired.rename(target)
                raise
        except OSError as exc:
            shutil.rmtree(staging, ignore_errors=True)
            logger.error("Failed to save course %s: %s", target, exc)
            raise IOFailure("save", str(target), exc) from exc
        except IOFailure:
            shutil.rmtree(staging, ignore_errors=True)
            raise
        shutil.rmtree(retired, ignore_errors=True)
        course.id = name
        course.file_name = name
        self._remember(course)
        logger.debug("Saved course %s to %s", course.slug, target)
        return course

    def delete(self, course_id: str) -> bool:
        """Remove the course directory recursively. False if it did not exist."""
        target = resolve_child(self.root, course_id)
        if not target.is_dir():
            return False
        try:
            shutil.rmtree(target)
        except OSError as exc:
            logger.error("Failed to delete %s: %s", target, exc)
            raise IOFailure("delete", str(target), exc) from exc
        return True

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    def backup(self, course_id: str, destination: Path, *, stamp: str) -> Path:
        """Copy the course directory into *destination*.

        Raises:
            NotFound: If *course_id* is not a course directory.
        """
        if self.find_by_directory(course_id) is None:
            raise NotFound(self.kind, course_id)
        source = self.root / course_id
        target = destination / f"{course_id}_backup_{stamp}"
        try:
            destination.mkdir(parents=True, exist_ok=True)
            shutil.copytree(source, target)
        except OSError as exc:
            logger.error("Failed to back up %s: %s", source, exc)
            raise IOFailure("back up", str(source), exc) from exc
        return target

    def restore(self, backup_path: Path, course_id: str) -> Course | None:
        """Replace the course directory with a backup copy."""
        target = resolve_child(self.root, course_id)
        token = uuid.uuid4().hex[:8]
        staging = self.root / f".{course_id}.staging-{token}"
        retired = self.root / f".{course_id}.old-{token}"
        try:
            shutil.copytree(backup_path, staging)
            if target.exists():
                target.rename(retired)
            staging.rename(target)
        except OSError as exc:
            shutil.rmtree(staging, ignore_errors=True)
            logger.error("Failed to restore %s: %s", target, exc)
            raise IOFailure("restore", str(target), exc) from exc
        shutil.rmtree(retired, ignore_errors=True)
        return self.find_by_directory(course_id)
