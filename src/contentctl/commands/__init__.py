"""Subcommand modules for contentctl.

Provides register_commands() which uses deferred imports to keep
``contentctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the record groups and standalone commands on the root CLI group."""
    # --- Groups ---
    from contentctl.commands.article import article
    from contentctl.commands.course import course
    from contentctl.commands.project import project

    cli.add_command(article)
    cli.add_command(course)
    cli.add_command(project)

    # --- Standalone commands ---
    from contentctl.commands.init_cmd import init_cmd

    cli.add_command(init_cmd)
