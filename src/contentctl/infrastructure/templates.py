"""Shared Jinja2 template loading with per-root override support."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import (
    BaseLoader,
    ChoiceLoader,
    Environment,
    FileSystemLoader,
    PackageLoader,
    select_autoescape,
)

OVERRIDE_DIR = Path(".contentctl") / "templates"


def build_template_environment(group: str, *, content_root: Path | None = None) -> Environment:
    """Build a Jinja2 environment with user overrides before packaged defaults.

    User overrides are loaded from ``.contentctl/templates/`` inside the
    content root. Both a namespaced directory (for example
    ``.contentctl/templates/content/``) and the shared root are searched.
    HTML templates are autoescaped.
    """
    loaders: list[BaseLoader] = []
    if content_root is not None:
        template_root = content_root / OVERRIDE_DIR
        loaders.append(FileSystemLoader([str(template_root / group), str(template_root)]))

    loaders.append(PackageLoader("contentctl", f"templates/{group}"))
    return Environment(
        loader=ChoiceLoader(loaders),
        autoescape=select_autoescape(enabled_extensions=("html", "html.j2")),
        keep_trailing_newline=True,
    )


def render_body(kind: str, *, content_root: Path | None = None, **context: Any) -> str:
    """Render the starter body for a record of *kind* (``<kind>.md.j2``)."""
    env = build_template_environment("content", content_root=content_root)
    return env.get_template(f"{kind}.md.j2").render(**context)


def render_export(name: str, *, content_root: Path | None = None, **context: Any) -> str:
    """Render an export document from ``templates/export/<name>.j2``."""
    env = build_template_environment("export", content_root=content_root)
    return env.get_template(f"{name}.j2").render(**context)
