"""AppContext: the object every command receives through ``@click.pass_obj``.

It holds the resolved settings, opens the content store on demand and
turns a ServiceResult into output plus an exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from contentctl.config.logging import configure_logging
from contentctl.output.formatters import OutputSettings, format_result
from contentctl.services.telemetry import enable_telemetry

if TYPE_CHECKING:
    from contentctl.config.settings import ContentSettings
    from contentctl.infrastructure.store import ContentStore
    from contentctl.services.result import ServiceResult


class AppContext:
    """Per-invocation state shared by the root group and its subcommands."""

    def __init__(self, settings: ContentSettings) -> None:
        self.settings = settings
        self._store: ContentStore | None = None

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)
        if settings.verbose:
            enable_telemetry()

    @property
    def store(self) -> ContentStore:
        # Opened lazily: --help, --version and --examples never touch the root.
        if self._store is None:
            from contentctl.infrastructure.store import ContentStore

            self._store = ContentStore(self.settings)
        return self._store

    def emit(self, result: ServiceResult) -> None:
        """Print *result* and exit 1 if it failed.

        Successful output goes to stdout. Errors, and the warnings of a
        successful non-JSON result, go to stderr so piped output stays clean.
        """
        output_settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=output_settings)
        if not result.ok:
            click.echo(output, err=True)
            raise SystemExit(1)

        click.echo(output)
        if not output_settings.json_output:
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)
