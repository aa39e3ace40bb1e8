"""Shared Click options and argument parsing for the record command groups."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any, TypeVar

import click

from contentctl.infrastructure.repositories.query import RecordQuery

F = TypeVar("F", bound=Callable[..., Any])


def query_options(func: F) -> F:
    """Attach the listing filters, sort, and pagination options."""
    options = [
        click.option("--status", default=None, help="Filter by status."),
        click.option(
            "--featured/--not-featured",
            default=None,
            help="Filter by the featured flag.",
        ),
        click.option("--category", default=None, help="Filter by category."),
        click.option("--tag", default=None, help="Filter by tag (or stack entry)."),
        click.option("--author", default=None, help="Filter by author."),
        click.option("--limit", type=click.IntRange(min=0), default=None, help="Max results."),
        click.option("--offset", type=click.IntRange(min=0), default=0, help="Skip results."),
        click.option("--sort-by", default=None, help="JSON field to sort by."),
        click.option(
            "--sort-order",
            type=click.Choice(["asc", "desc"]),
            default="desc",
            help="Sort direction.",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_query(**options: Any) -> RecordQuery:
    """Turn the values collected by :func:`query_options` into a RecordQuery."""
    return RecordQuery(
        status=options.get("status"),
        featured=options.get("featured"),
        category=options.get("category"),
        tag=options.get("tag"),
        author=options.get("author"),
        limit=options.get("limit"),
        offset=options.get("offset") or 0,
        sort_by=options.get("sort_by"),
        sort_order=options.get("sort_order") or "desc",
    )


def parse_assignments(pairs: tuple[str, ...]) -> dict[str, Any]:
    """Parse repeated ``--set key=value`` options.

    Values that parse as JSON (numbers, booleans, lists) keep that type;
    anything else stays a string.
    """
    changes: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key.strip():
            msg = f"Expected key=value, got {pair!r}"
            raise click.BadParameter(msg, param_hint="--set")
        try:
            value: Any = json.loads(raw)
        except json.JSONDecodeError:
            value = raw
        changes[key.strip()] = value
    return changes


def read_body(path: Path | None) -> str:
    """Read a body file given on the command line; empty when absent."""
    if path is None:
        return ""
    return path.read_text(encoding="utf-8")


def load_json_object(path: Path) -> dict[str, Any]:
    """Load a JSON object from *path* or fail with a usage error."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON in {path}: {exc}"
        raise click.BadParameter(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path} must contain a JSON object"
        raise click.BadParameter(msg)
    return data
