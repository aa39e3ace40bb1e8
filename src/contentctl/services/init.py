"""InitService: lay out a new content root.

Creates the configured content directories and, unless one exists, a
sparse ``contentctl.toml`` holding only the values given explicitly.
"""

from __future__ import annotations

import logging
from pathlib import Path

from contentctl.config.discovery import CONFIG_FILENAME
from contentctl.config.models import ContentConfig, CoursesConfig
from contentctl.errors import IOFailure
from contentctl.infrastructure.filesystem import atomic_write
from contentctl.services.result import ServiceError, ServiceResult
from contentctl.services.telemetry import traced

logger = logging.getLogger(__name__)


def render_config(*, default_author: str = "", lesson_order: str | None = None) -> str:
    """Render a sparse ``contentctl.toml``: defaults are commented out."""
    content = ContentConfig()
    lines = [
        "# contentctl configuration. Every value shown commented out is the default.",
        "",
        "[content]",
        f'# articles_dir = "{content.articles_dir}"',
        f'# courses_dir = "{content.courses_dir}"',
        f'# projects_dir = "{content.projects_dir}"',
    ]
    if default_author:
        escaped = default_author.replace("\\", "\\\\").replace('"', '\\"')
        lines.append(f'default_author = "{escaped}"')
    lines += ["", "[courses]"]
    if lesson_order is not None:
        lines.append(f'lesson_order = "{lesson_order}"')
    else:
        lines.append(f'# lesson_order = "{CoursesConfig().lesson_order}"')
    return "\n".join(lines) + "\n"


class InitService:
    """Content root initialization. Stateless; no store is needed yet."""

    @staticmethod
    @traced
    def init_root(
        path: Path,
        *,
        default_author: str = "",
        lesson_order: str | None = None,
    ) -> ServiceResult:
        """Create content directories under *path* and a starter config file.

        An existing ``contentctl.toml`` is left untouched.
        """
        op = "init"
        content = ContentConfig()
        created: list[str] = []
        warnings: list[str] = []
        config_file = path / CONFIG_FILENAME
        try:
            for relative in (content.articles_dir, content.courses_dir, content.projects_dir):
                directory = path / relative
                if not directory.is_dir():
                    directory.mkdir(parents=True, exist_ok=True)
                    created.append(str(directory))
            if config_file.exists():
                warnings.append(f"{CONFIG_FILENAME} already exists; left unchanged")
            else:
                atomic_write(
                    config_file,
                    render_config(default_author=default_author, lesson_order=lesson_order),
                )
        except OSError as exc:
            logger.error("Failed to initialize %s: %s", path, exc)
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code="IO_ERROR", message=f"Failed to initialize {path}: {exc}"),
            )
        except IOFailure as exc:
            return ServiceResult(
                ok=False,
                op=op,
                error=ServiceError(code=exc.code, message=str(exc)),
            )

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "content_root": str(path),
                "config_file": str(config_file),
                "directories_created": created,
            },
            warnings=warnings,
        )
