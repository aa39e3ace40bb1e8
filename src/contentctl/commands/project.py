"""Command group: portfolio projects."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from contentctl.commands._base import ContentGroup
from contentctl.commands._options import build_query, parse_assignments, query_options, read_body
from contentctl.services.project import ProjectService

if TYPE_CHECKING:
    from contentctl.commands._context import AppContext

_PROJECT_EXAMPLES = """\
  contentctl project create "Weather Dashboard" --stack React --stack D3
  contentctl project list --tag React
  contentctl project update weather-dashboard --set demo=https://example.com"""


@click.group(cls=ContentGroup, examples=_PROJECT_EXAMPLES)
@click.pass_obj
def project(app: AppContext) -> None:
    """Manage portfolio projects."""


@project.command(examples="""\
  contentctl project create "Weather Dashboard" --stack React --stack D3
  contentctl project create "CLI Toolkit" --github https://github.com/me/toolkit --body-file README.md""")
@click.argument("title")
@click.option("--description", default="", help="Short description.")
@click.option("--stack", multiple=True, help="Technology used (repeatable).")
@click.option("--github", default="", help="Repository URL.")
@click.option("--demo", default="", help="Live demo URL.")
@click.option("--category", default="", help="Category.")
@click.option(
    "--difficulty",
    type=click.Choice(["Beginner", "Intermediate", "Advanced"]),
    default="Intermediate",
)
@click.option(
    "--body-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Markdown body.",
)
@click.pass_obj
def create(
    app: AppContext,
    title: str,
    description: str,
    stack: tuple[str, ...],
    github: str,
    demo: str,
    category: str,
    difficulty: str,
    body_file: Path | None,
) -> None:
    """Create a project."""
    data: dict[str, Any] = {
        "title": title,
        "description": description,
        "stack": list(stack),
        "github": github,
        "demo": demo,
        "category": category,
        "difficulty": difficulty,
        "content": read_body(body_file),
    }
    app.emit(ProjectService(app.store).create_project(data))


@project.command(examples="  contentctl project get weather-dashboard")
@click.argument("slug")
@click.pass_obj
def get(app: AppContext, slug: str) -> None:
    """Show one project."""
    app.emit(ProjectService(app.store).get_project(slug))


@project.command(name="list", examples="  contentctl project list --featured --limit 6")
@query_options
@click.pass_obj
def list_cmd(app: AppContext, **options: Any) -> None:
    """List projects."""
    app.emit(ProjectService(app.store).list_projects(build_query(**options)))


@project.command(examples="  contentctl project search dashboard")
@click.argument("text")
@query_options
@click.pass_obj
def search(app: AppContext, text: str, **options: Any) -> None:
    """Search project fields and stack entries."""
    app.emit(ProjectService(app.store).search(text, build_query(**options)))


@project.command(examples="  contentctl project update weather-dashboard --set featured=true")
@click.argument("slug")
@click.option("--set", "assignments", multiple=True, help="Field change as key=value.")
@click.pass_obj
def update(app: AppContext, slug: str, assignments: tuple[str, ...]) -> None:
    """Change fields on a project."""
    changes = parse_assignments(assignments)
    if not changes:
        raise click.UsageError("Nothing to update: pass --set.")
    app.emit(ProjectService(app.store).update_project(slug, changes))


@project.command(examples="  contentctl project delete weather-dashboard")
@click.argument("slug")
@click.confirmation_option(prompt="Delete this project?")
@click.pass_obj
def delete(app: AppContext, slug: str) -> None:
    """Delete a project's file."""
    app.emit(ProjectService(app.store).delete_project(slug))
