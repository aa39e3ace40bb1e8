"""Command group: courses and lessons.

Reads and lifecycle commands take the course slug. Structural edits
(lessons, update, delete, export, backup) take the course directory name.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from contentctl.commands._base import ContentGroup
from contentctl.commands._options import (
    build_query,
    load_json_object,
    parse_assignments,
    query_options,
    read_body,
)
from contentctl.domain.course import DIFFICULTIES, LEVELS
from contentctl.services.course import EXPORT_FORMATS, CourseService

if TYPE_CHECKING:
    from contentctl.commands._context import AppContext

_COURSE_EXAMPLES = """\
  contentctl course create "Python Basics" --level Beginner --lesson Setup --lesson Variables
  contentctl course create "Rust" --from-file rust-course.json
  contentctl course add-lesson "Python Basics" "Control Flow" --duration "45 minutes"
  contentctl course list --status published
  contentctl course publish python-basics"""


@click.group(cls=ContentGroup, examples=_COURSE_EXAMPLES)
@click.pass_obj
def course(app: AppContext) -> None:
    """Manage courses stored as one directory of lessons each."""


@course.command(
    examples="""\
  contentctl course create "Python Basics" --lesson Setup --lesson Variables
  contentctl course create "Advanced Rust" --level Advanced --tag Rust
  contentctl course create "Go" --from-file go-course.json"""
)
@click.argument("title", required=False)
@click.option("--description", default="", help="Short course description.")
@click.option("--level", type=click.Choice(LEVELS), default="Beginner", help="Course level.")
@click.option("--tag", default="Programming", help="Course tag.")
@click.option("--duration", default="2-3 hours", help="Expected duration, e.g. '4-6 hours'.")
@click.option("--author", default="", help="Author name (defaults to [content] default_author).")
@click.option(
    "--lesson",
    "lessons",
    multiple=True,
    help="Lesson title (repeatable); bodies come from the lesson template.",
)
@click.option(
    "--from-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON object with course fields and a 'lessons' list.",
)
@click.pass_obj
def create(
    app: AppContext,
    title: str | None,
    description: str,
    level: str,
    tag: str,
    duration: str,
    author: str,
    lessons: tuple[str, ...],
    from_file: Path | None,
) -> None:
    """Create a course with its lessons."""
    svc = CourseService(app.store)
    if from_file is not None:
        data = load_json_object(from_file)
        if title:
            data["title"] = title
        app.emit(svc.create_course(data))
        return
    if not title:
        raise click.UsageError("TITLE is required unless --from-file is given.")
    course_data: dict[str, Any] = {
        "title": title,
        "description": description,
        "level": level,
        "tag": tag,
        "duration": duration,
        "author": author,
    }
    app.emit(svc.scaffold(course_data, [{"title": name} for name in lessons]))


@course.command(examples="""\
  contentctl course get python-basics
  contentctl -v course get python-basics""")
@click.argument("slug")
@click.pass_obj
def get(app: AppContext, slug: str) -> None:
    """Show one course and its lessons."""
    app.emit(CourseService(app.store).get_course(slug))


@course.command(
    name="list",
    examples="""\
  contentctl course list
  contentctl course list --status published --sort-by title --sort-order asc""",
)
@query_options
@click.pass_obj
def list_cmd(app: AppContext, **options: Any) -> None:
    """List courses."""
    app.emit(CourseService(app.store).list_courses(build_query(**options)))


@course.command(examples="  contentctl course search closures")
@click.argument("text")
@query_options
@click.pass_obj
def search(app: AppContext, text: str, **options: Any) -> None:
    """Search course fields and every lesson's title and body."""
    app.emit(CourseService(app.store).search(text, build_query(**options)))


@course.command(examples="""\
  contentctl course update "Python Basics" --set level=Intermediate
  contentctl course update "Python Basics" --set featured=true""")
@click.argument("course_id")
@click.option("--set", "assignments", multiple=True, help="Field change as key=value.")
@click.pass_obj
def update(app: AppContext, course_id: str, assignments: tuple[str, ...]) -> None:
    """Change the course's own fields. Lessons are edited separately."""
    changes = parse_assignments(assignments)
    if not changes:
        raise click.UsageError("Nothing to update: pass --set.")
    app.emit(CourseService(app.store).update_course(course_id, changes))


@course.command(examples='  contentctl course delete "Python Basics"')
@click.argument("course_id")
@click.confirmation_option(prompt="Delete this course and all its lessons?")
@click.pass_obj
def delete(app: AppContext, course_id: str) -> None:
    """Delete a course directory."""
    app.emit(CourseService(app.store).delete_course(course_id))


@course.command(
    name="add-lesson",
    examples="""\
  contentctl course add-lesson "Python Basics" "Functions"
  contentctl course add-lesson "Python Basics" "Testing" --body-file testing.md --objective "Write a test"
""",
)
@click.argument("course_id")
@click.argument("title")
@click.option("--duration", default="30 minutes", help="Lesson duration.")
@click.option("--difficulty", type=click.Choice(DIFFICULTIES), default="beginner")
@click.option("--objective", "objectives", multiple=True, help="Learning objective (repeatable).")
@click.option(
    "--body-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Lesson body. Without it the body comes from the lesson template.",
)
@click.pass_obj
def add_lesson(
    app: AppContext,
    course_id: str,
    title: str,
    duration: str,
    difficulty: str,
    objectives: tuple[str, ...],
    body_file: Path | None,
) -> None:
    """Append a lesson to a course."""
    data: dict[str, Any] = {
        "title": title,
        "duration": duration,
        "difficulty": difficulty,
        "objectives": list(objectives),
        "content": read_body(body_file),
    }
    app.emit(CourseService(app.store).add_lesson(course_id, data))


@course.command(
    name="update-lesson",
    examples='  contentctl course update-lesson "Python Basics" lesson2 --set title=Variables',
)
@click.argument("course_id")
@click.argument("lesson_id")
@click.option("--set", "assignments", multiple=True, help="Field change as key=value.")
@click.option(
    "--body-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Replace the lesson body with this file's content.",
)
@click.pass_obj
def update_lesson(
    app: AppContext,
    course_id: str,
    lesson_id: str,
    assignments: tuple[str, ...],
    body_file: Path | None,
) -> None:
    """Change fields on one lesson (by id such as lesson2, or by slug)."""
    changes = parse_assignments(assignments)
    if body_file is not None:
        changes["content"] = read_body(body_file)
    if not changes:
        raise click.UsageError("Nothing to update: pass --set or --body-file.")
    app.emit(CourseService(app.store).update_lesson(course_id, lesson_id, changes))


@course.command(
    name="delete-lesson",
    examples='  contentctl course delete-lesson "Python Basics" lesson3',
)
@click.argument("course_id")
@click.argument("lesson_id")
@click.pass_obj
def delete_lesson(app: AppContext, course_id: str, lesson_id: str) -> None:
    """Remove a lesson and renumber the rest."""
    app.emit(CourseService(app.store).delete_lesson(course_id, lesson_id))


@course.command(examples="  contentctl course publish python-basics")
@click.argument("slug")
@click.pass_obj
def publish(app: AppContext, slug: str) -> None:
    """Publish a course."""
    app.emit(CourseService(app.store).publish(slug))


@course.command(examples="  contentctl course unpublish python-basics")
@click.argument("slug")
@click.pass_obj
def unpublish(app: AppContext, slug: str) -> None:
    """Return a course to draft."""
    app.emit(CourseService(app.store).unpublish(slug))


@course.command(examples="  contentctl course archive python-basics")
@click.argument("slug")
@click.pass_obj
def archive(app: AppContext, slug: str) -> None:
    """Archive a course."""
    app.emit(CourseService(app.store).archive(slug))


@course.command(examples="  contentctl --json course stats")
@click.pass_obj
def stats(app: AppContext) -> None:
    """Course and lesson totals."""
    app.emit(CourseService(app.store).stats())


@course.command(examples="""\
  contentctl course export "Python Basics"
  contentctl course export "Python Basics" --format markdown --output python-basics.md""")
@click.argument("course_id")
@click.option("--format", "fmt", type=click.Choice(EXPORT_FORMATS), default="json")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write to this file instead of stdout.",
)
@click.pass_obj
def export(app: AppContext, course_id: str, fmt: str, output: Path | None) -> None:
    """Export a course as JSON or one markdown document."""
    app.emit(CourseService(app.store).export(course_id, fmt, output))


@course.command(examples='  contentctl course backup "Python Basics"')
@click.argument("course_id")
@click.pass_obj
def backup(app: AppContext, course_id: str) -> None:
    """Copy a course directory to .contentctl/backups/courses."""
    app.emit(CourseService(app.store).backup(course_id))


@course.command(
    examples=(
        "  contentctl course restore "
        '".contentctl/backups/courses/Python Basics_backup_20260101T120000" "Python Basics"'
    )
)
@click.argument(
    "backup_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
)
@click.argument("course_id")
@click.pass_obj
def restore(app: AppContext, backup_dir: Path, course_id: str) -> None:
    """Replace a course directory with a backup copy."""
    app.emit(CourseService(app.store).restore(backup_dir, course_id))
