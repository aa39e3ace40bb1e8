"""Root CLI group: global output flags, config discovery, and command registration."""

from __future__ import annotations

from pathlib import Path

import click

from contentctl import __version__
from contentctl.commands import register_commands
from contentctl.commands._context import AppContext
from contentctl.config.settings import ContentSettings


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="contentctl")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print only slugs, documents, or OK/ERROR.")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging and timing telemetry.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option("-c", "--config", "config_path", default=None, help="Use this contentctl.toml.")
@click.option(
    "-r",
    "--root",
    "content_root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Content root (default: the directory holding contentctl.toml, else cwd).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
    content_root: Path | None,
) -> None:
    """contentctl: manage a markdown content store of articles, courses, and projects."""
    settings = ContentSettings.from_cli(
        config_path=config_path,
        content_root=content_root.resolve() if content_root else None,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
