"""CourseService: courses and their ordered lessons.

A course is addressed by slug for reads and lifecycle changes, and by
its directory name (``course_id``) for structural edits, mirroring how
the composite repository stores it. Every structural edit rewrites the
whole course directory through the repository's staged save.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from contentctl.domain.course import LEVELS, Course, Lesson
from contentctl.errors import ContentError, DuplicateSlug, NotFound
from contentctl.infrastructure.filesystem import atomic_write
from contentctl.infrastructure.repositories.composite import CompositeRepository
from contentctl.infrastructure.repositories.query import RecordQuery
from contentctl.infrastructure.templates import render_body, render_export
from contentctl.services._helpers import count_by, now_compact
from contentctl.services.base import (
    ContentService,
    build_record,
    failure,
    from_error,
    merge_changes,
)
from contentctl.services.markdown import render_markdown
from contentctl.services.result import ServiceResult
from contentctl.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "markdown")

# Lesson bookkeeping managed by the course, never by callers.
_LESSON_OWNED = frozenset({"order", "lesson", "courseId", "course_id"})


def _build_lesson(data: dict[str, Any]) -> Lesson:
    lesson = build_record(Lesson, data)
    if not lesson.slug:
        lesson.generate_slug()
    return lesson


def _build_lessons(items: list[dict[str, Any]]) -> list[Lesson]:
    """Build lessons in their given ``order`` (list position breaks ties)."""
    lessons = [_build_lesson(item) for item in items]
    return sorted(lessons, key=lambda lesson: lesson.order)


class CourseService(ContentService[Course]):
    """Handles courses stored as one directory per course."""

    record_type = Course

    @property
    def repository(self) -> CompositeRepository:
        return self._store.courses

    def _require_directory(self, course_id: str) -> Course:
        course = self.repository.find_by_directory(course_id)
        if course is None:
            raise NotFound(self.kind, course_id)
        return course

    def _render(self, record: Course) -> Course:
        record.content_html = render_markdown(record.content)
        for lesson in record.lessons:
            lesson.content_html = render_markdown(lesson.content)
        return record

    def _summary(self, op: str, course: Course, **extra: Any) -> ServiceResult:
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "id": course.id,
                "slug": course.slug,
                "title": course.title,
                "status": course.status,
                "lessons": len(course.lessons),
                "path": str(self.repository.root / (course.id or "")),
                **extra,
            },
        )

    def _save_new(self, op: str, course: Course) -> ServiceResult:
        try:
            if not course.slug:
                course.generate_slug()
            if not course.author and self.settings.content.default_author:
                course.author = self.settings.content.default_author
            if self.repository.exists(course.slug):
                raise DuplicateSlug(self.kind, course.slug)
            course.reorder_lessons()
            self.repository.save(course)
        except ContentError as exc:
            return from_error(op, exc)
        except ValueError as exc:
            return failure(op, "VALIDATION_FAILED", str(exc))
        logger.info("Created course %s with %d lessons", course.slug, len(course.lessons))
        return self._summary(op, course)

    # ------------------------------------------------------------------
    # Courses
    # ------------------------------------------------------------------

    @traced
    def list_courses(self, query: RecordQuery | None = None) -> ServiceResult:
        query = query or RecordQuery()
        with trace_span("scan") as span:
            page = self.repository.find_all(query)
            if span:
                span.annotate("total", page.total)
        return self._page_result("list_courses", page, query)

    @traced
    def get_course(self, slug: str) -> ServiceResult:
        """Fetch one course with description and lessons rendered to HTML."""
        return self._get("get_course", slug)

    @traced
    def create_course(self, data: dict[str, Any]) -> ServiceResult:
        """Create a course; ``data["lessons"]`` holds the lesson payloads."""
        op = "create_course"
        payload = dict(data)
        lesson_items = payload.pop("lessons", None) or []
        try:
            course = build_record(Course, payload)
            course.lessons = _build_lessons(lesson_items)
        except ContentError as exc:
            return from_error(op, exc)
        return self._save_new(op, course)

    @traced
    def update_course(self, course_id: str, changes: dict[str, Any]) -> ServiceResult:
        """Apply *changes* to the course's own fields. Lessons are left as is."""
        op = "update_course"
        fields = {k: v for k, v in changes.items() if k != "lessons"}
        try:
            course = self._require_directory(course_id)
            saved = self._update(op, course, fields)
        except ContentError as exc:
            return from_error(op, exc)
        except ValueError as exc:
            return failure(op, "VALIDATION_FAILED", str(exc))
        return self._summary(op, saved, fields_changed=sorted(fields))

    @traced
    def delete_course(self, course_id: str) -> ServiceResult:
        """Remove a course directory and every lesson in it."""
        op = "delete_course"
        try:
            if not self.repository.delete(course_id):
                raise NotFound(self.kind, course_id)
        except ContentError as exc:
            return from_error(op, exc)
        except ValueError as exc:
            return failure(op, "VALIDATION_FAILED", str(exc))
        logger.info("Deleted course %s", course_id)
        return ServiceResult(ok=True, op=op, data={"id": course_id})

    # ------------------------------------------------------------------
    # Lessons
    # ------------------------------------------------------------------

    @traced
    def add_lesson(self, course_id: str, data: dict[str, Any]) -> ServiceResult:
        """Append a lesson to the end of a course.

        An empty body is filled from the ``lesson`` template.
        """
        op = "add_lesson"
        try:
            course = self._require_directory(course_id)
            lesson = _build_lesson({k: v for k, v in data.items() if k not in _LESSON_OWNED})
            course.add_lesson(lesson)
            if not lesson.content:
                lesson.content = render_body(
                    "lesson",
                    content_root=self._store.root,
                    order=lesson.order,
                    title=lesson.title,
                    objectives=lesson.objectives,
                    duration=lesson.duration,
                    difficulty=lesson.difficulty,
                )
            self.repository.save(course)
        except ContentError as exc:
            return from_error(op, exc)
        return self._summary(op, course, lesson_id=lesson.id, lesson_title=lesson.title)

    @traced
    def update_lesson(
        self,
        course_id: str,
        lesson_id: str,
        changes: dict[str, Any],
    ) -> ServiceResult:
        """Apply *changes* to one lesson, found by id (``lesson3``) or slug."""
        op = "update_lesson"
        try:
            course = self._require_directory(course_id)
            lesson = course.get_lesson(lesson_id)
            if lesson is None:
                raise NotFound(Lesson.KIND, lesson_id)
            updated = merge_changes(
                lesson, {k: v for k, v in changes.items() if k not in _LESSON_OWNED}
            )
            updated.course_id = course.id
            updated.touch()
            course.lessons = [updated if item is lesson else item for item in course.lessons]
            self.repository.save(course)
        except ContentError as exc:
            return from_error(op, exc)
        return self._summary(
            op, course, lesson_id=updated.id, fields_changed=sorted(changes)
        )

    @traced
    def delete_lesson(self, course_id: str, lesson_id: str) -> ServiceResult:
        """Remove a lesson; the remaining lessons are renumbered ``1..n``."""
        op = "delete_lesson"
        try:
            course = self._require_directory(course_id)
            lesson = course.get_lesson(lesson_id)
            if lesson is None or lesson.id is None:
                raise NotFound(Lesson.KIND, lesson_id)
            course.remove_lesson(lesson.id)
            self.repository.save(course)
        except ContentError as exc:
            return from_error(op, exc)
        return self._summary(op, course, lesson_id=lesson_id)

    # ------------------------------------------------------------------
    # Lifecycle and search
    # ------------------------------------------------------------------

    @traced
    def publish(self, slug: str) -> ServiceResult:
        return self._transition("publish", slug, "publish")

    @traced
    def unpublish(self, slug: str) -> ServiceResult:
        return self._transition("unpublish", slug, "unpublish")

    @traced
    def archive(self, slug: str) -> ServiceResult:
        return self._transition("archive", slug, "archive")

    @traced
    def search(self, text: str, query: RecordQuery | None = None) -> ServiceResult:
        """Search course title, description, tag, and every lesson's title and body."""
        return self._search("search", text, query)

    @traced
    def stats(self) -> ServiceResult:
        courses = list(self.repository.iter_records())
        lesson_total = sum(len(c.lessons) for c in courses)
        data = {
            "totalCourses": len(courses),
            "publishedCourses": sum(1 for c in courses if c.status == "published"),
            "draftCourses": sum(1 for c in courses if c.status == "draft"),
            "archivedCourses": sum(1 for c in courses if c.status == "archived"),
            "featuredCourses": sum(1 for c in courses if c.featured),
            "totalLessons": lesson_total,
            "averageLessons": round(lesson_total / len(courses), 1) if courses else 0,
            "coursesByLevel": {
                level.lower(): sum(1 for c in courses if c.level == level) for level in LEVELS
            },
            "coursesByTag": count_by(c.tag for c in courses),
        }
        return ServiceResult(ok=True, op="stats", data=data)

    # ------------------------------------------------------------------
    # Templates and export
    # ------------------------------------------------------------------

    @traced
    def scaffold(
        self,
        course_data: dict[str, Any],
        lessons_data: list[dict[str, Any]],
    ) -> ServiceResult:
        """Create a course, filling empty bodies from the course and lesson templates."""
        op = "scaffold_course"
        root = self._store.root
        try:
            course = build_record(Course, {k: v for k, v in course_data.items() if k != "lessons"})
            for position, item in enumerate(lessons_data, start=1):
                lesson = _build_lesson({**item, "order": position})
                if not lesson.content:
                    lesson.content = render_body(
                        "lesson",
                        content_root=root,
                        order=position,
                        title=lesson.title,
                        objectives=lesson.objectives,
                        duration=lesson.duration,
                        difficulty=lesson.difficulty,
                    )
                course.lessons.append(lesson)
        except ContentError as exc:
            return from_error(op, exc)
        if not course.content:
            course.content = render_body(
                "course",
                content_root=root,
                title=course.title,
                description=course.description,
                lesson_count=len(course.lessons),
            )
        return self._save_new(op, course)

    @traced
    def export(self, course_id: str, fmt: str = "json", output: Path | None = None) -> ServiceResult:
        """Render a course as ``json`` or a single ``markdown`` document."""
        op = "export_course"
        if fmt not in EXPORT_FORMATS:
            return failure(
                op,
                "UNSUPPORTED_FORMAT",
                f"Unsupported export format {fmt!r}. Allowed: {list(EXPORT_FORMATS)}",
            )
        try:
            course = self._require_directory(course_id)
            if fmt == "json":
                document = json.dumps(course.to_json(), indent=2)
            else:
                document = render_export(
                    "course.md",
                    content_root=self._store.root,
                    course=course.to_json(include_stats=False),
                )
            if output is not None:
                atomic_write(output, document)
        except ContentError as exc:
            return from_error(op, exc)

        data: dict[str, Any] = {"id": course_id, "format": fmt, "document": document}
        if output is not None:
            data["output_file"] = str(output)
        return ServiceResult(ok=True, op=op, data=data)

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    @traced
    def backup(self, course_id: str) -> ServiceResult:
        """Copy a course directory into the content root's backup directory."""
        op = "backup_course"
        try:
            path = self.repository.backup(
                course_id, self._store.backup_dir / "courses", stamp=now_compact()
            )
        except ContentError as exc:
            return from_error(op, exc)
        return ServiceResult(ok=True, op=op, data={"id": course_id, "backup_file": str(path)})

    @traced
    def restore(self, backup_path: Path, course_id: str) -> ServiceResult:
        op = "restore_course"
        try:
            course = self.repository.restore(backup_path, course_id)
        except ContentError as exc:
            return from_error(op, exc)
        except ValueError as exc:
            return failure(op, "VALIDATION_FAILED", str(exc))
        if course is None:
            return failure(op, "NOT_FOUND", f"Restored directory is not a course: {course_id}")
        return self._summary(op, course, restored_from=str(backup_path))
