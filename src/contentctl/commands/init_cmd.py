"""Command: content root initialization (named init_cmd to avoid shadowing builtins)."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from contentctl.commands._base import ContentCommand
from contentctl.infrastructure.repositories import LESSON_ORDERS

if TYPE_CHECKING:
    from contentctl.commands._context import AppContext

_INIT_EXAMPLES = """\
  contentctl init
  contentctl init ./site-content --author "Ada Lovelace"
  contentctl init . --lesson-order natural"""


@click.command("init", cls=ContentCommand, examples=_INIT_EXAMPLES)
@click.argument("path", required=False, default=".")
@click.option("--author", default="", help="Default author for new records.")
@click.option(
    "--lesson-order",
    type=click.Choice(sorted(LESSON_ORDERS)),
    default=None,
    help="How lesson files are ordered within a course.",
)
@click.pass_obj
def init_cmd(app: AppContext, path: str, author: str, lesson_order: str | None) -> None:
    """Create the content directories and a contentctl.toml."""
    from contentctl.services.init import InitService

    app.emit(
        InitService.init_root(
            Path(path).resolve(),
            default_author=author,
            lesson_order=lesson_order,
        )
    )
