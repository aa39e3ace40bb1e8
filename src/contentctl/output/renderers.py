"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO). The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from contentctl.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from contentctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: slugs for lists, else the op."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    items = result.data.get("items")
    if items and isinstance(items, list):
        keys = (_extract_key(item) for item in items)
        return "\n".join(key for key in keys if key)

    if "document" in result.data and "output_file" not in result.data:
        return str(result.data["document"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _extract_key(item: Any) -> str:
    if isinstance(item, dict):
        for key in ("slug", "name", "id"):
            val = item.get(key)
            if val:
                return str(val)
    return ""


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="content.ok")
    op = Text(f"  {result.op}", style="content.op")
    console.print(Text.assemble(label, op))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="content.key")
    if isinstance(value, (dict, list)):
        v = Text(json.dumps(value, separators=(",", ":")))
    elif key in ("slug", "id") or key.endswith("_id"):
        v = Text(str(value), style="content.slug")
    elif key in ("path", "backup_file", "output_file", "restored_from"):
        v = Text(str(value), style="content.path")
    elif key == "title":
        v = Text(str(value), style="content.title")
    elif key in ("status", "previous_status"):
        v = Text(str(value), style=style_for_status(str(value)))
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including the telemetry span tree (verbose only)."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    prefix = " " * indent
    duration = span_data.get("duration_ms", 0.0)
    style = "bold red" if duration > 1000 else "yellow" if duration > 100 else "dim"
    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {span_data.get('name', '?')}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)
    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# Extra list columns per record kind: (header, JSON key).
_KIND_COLUMNS: dict[str, list[tuple[str, str]]] = {
    "article": [("Category", "category"), ("Views", "views"), ("Published", "publishedAt")],
    "course": [("Level", "level"), ("Tag", "tag"), ("Lessons", "lessons")],
    "project": [("Stack", "stack"), ("Category", "category")],
}


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, list):
        if value and isinstance(value[0], dict):
            return str(len(value))
        return ", ".join(str(v) for v in value)
    return str(value)


def _item_table(
    items: list[dict[str, Any]],
    *,
    kind: str | None = None,
    score_key: str | None = None,
    verbose: bool = False,
) -> Table:
    """Build a Rich Table for a list of record projections."""
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Slug", style="content.slug", no_wrap=True)
    table.add_column("Title", style="content.title")
    table.add_column("Status")
    columns = _KIND_COLUMNS.get(kind or "", [])
    for header, _key in columns:
        table.add_column(header)
    if score_key:
        table.add_column("Score", style="content.score", justify="right")
    if verbose:
        table.add_column("Updated", style="dim")

    for item in items:
        status = str(item.get("status", ""))
        row: list[str | Text] = [
            str(item.get("slug", "")),
            str(item.get("title", "")),
            Text(status, style=style_for_status(status)),
        ]
        row.extend(_cell(item.get(key)) for _header, key in columns)
        if score_key:
            row.append(str(item.get(score_key, "")))
        if verbose:
            row.append(str(item.get("updatedAt", "")))
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="content.error")
    console.print(Text.assemble(label, Text(f"  {result.op}", style="content.op")))
    console.print(Text(f"  {msg}"))

    if err and err.detail:
        for message in err.detail.get("errors", []):
            console.print(Text(f"    - {message}"))
        if verbose:
            console.print(Text("  detail:", style="dim"))
            for k, v in err.detail.items():
                console.print(f"    {k}: {v}")


# ── Mutation renderers ────────────────────────────────────────────────

_MUTATION_KEYS = (
    "id",
    "slug",
    "title",
    "status",
    "previous_status",
    "lessons",
    "lesson_id",
    "lesson_title",
    "views",
    "likes",
    "path",
    "backup_file",
    "restored_from",
    "fields_changed",
)


def _render_mutation(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render create/update/delete/lifecycle/backup results."""
    _status_line(console, result)
    for key in _MUTATION_KEYS:
        if key in result.data:
            _field(console, key, result.data[key])
    if verbose:
        _render_meta(console, result)


def _render_bulk(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "status", result.data.get("status", ""))
    _field(console, "updated", result.data.get("updated", 0))
    for entry in result.data.get("results", []):
        if not entry.get("success"):
            console.print(f"  [content.error]failed[/content.error] {entry['slug']}: {entry['error']}")
    if verbose:
        _render_meta(console, result)


# ── Query renderers ───────────────────────────────────────────────────


def _render_single_item(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a get result as a panel of metadata followed by the body."""
    d = result.data
    lines: list[str] = []
    for key in (
        "slug",
        "status",
        "author",
        "category",
        "level",
        "tag",
        "duration",
        "publishedAt",
        "readTime",
        "views",
        "likes",
        "github",
        "demo",
        "createdAt",
        "updatedAt",
    ):
        val = d.get(key)
        if val not in (None, ""):
            lines.append(f"{key}: {val}")
    for key in ("tags", "stack"):
        if d.get(key):
            lines.append(f"{key}: {', '.join(d[key])}")

    lessons = d.get("lessons")
    if isinstance(lessons, list) and lessons:
        lines.append("lessons:")
        for lesson in lessons:
            lines.append(f"  {lesson.get('id', '?')}  {lesson.get('title', '')}")

    content = "\n".join(lines)
    summary = d.get("excerpt") or d.get("description") or ""
    if summary:
        content += f"\n\n{summary}"
    if verbose and d.get("content"):
        content += f"\n\n{str(d['content']).strip()}"

    status = str(d.get("status", ""))
    console.print(
        Panel(
            content,
            title=str(d.get("title", "Untitled")),
            border_style=style_for_status(status) or "dim",
            expand=False,
        )
    )


def _render_item_table(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render list, search, and discovery results as a table."""
    items = result.data.get("items", [])
    score_key = "score" if items and "score" in items[0] else None
    console.print(
        _item_table(items, kind=result.data.get("kind"), score_key=score_key, verbose=verbose)
    )
    total = result.data.get("total", len(items))
    footer = f"\n{len(items)} of {total} items"
    if result.data.get("has_more"):
        footer += " (more available)"
    console.print(footer)


def _render_related(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    console.print(_item_table(items, kind="article", score_key="score", verbose=verbose))
    console.print(f"\n{len(items)} related to {result.data.get('slug', '?')}")


_COUNT_HEADERS = {"categories": "Category", "tags": "Tag", "authors": "Author"}


def _render_counts(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render categories/tags/authors as a name/count table."""
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column(_COUNT_HEADERS.get(result.op, "Name"))
    table.add_column("Count", justify="right")
    for entry in result.data.get("items", []):
        table.add_row(str(entry.get("name", "")), str(entry.get("count", 0)))
    console.print(table)


def _render_stats(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render scalar totals as fields and breakdown dicts as small tables."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, dict):
            if not value:
                continue
            table = Table(title=key, show_header=False, pad_edge=False, expand=False)
            table.add_column("name")
            table.add_column("count", justify="right")
            for name, count in value.items():
                table.add_row(str(name), str(count))
            console.print(table)
        elif isinstance(value, list):
            if value:
                console.print(Text(f"  {key}:", style="content.key"))
                for entry in value:
                    console.print(f"    {entry.get('slug', '')}  {entry.get('title', '')}")
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


def _render_export(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Print the exported document, or where it was written."""
    d = result.data
    if "output_file" in d:
        _status_line(console, result)
        _field(console, "format", d.get("format", ""))
        _field(console, "output_file", d["output_file"])
        return
    console.print(Text(str(d.get("document", ""))), soft_wrap=True)


def _render_init(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    d = result.data
    _field(console, "content_root", d.get("content_root", ""))
    if d.get("config_file"):
        _field(console, "config_file", d["config_file"])
    created = d.get("directories_created", [])
    _field(console, "directories_created", len(created))
    if verbose:
        for path in created:
            console.print(f"    {path}")


# ── Generic fallback ──────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    # Mutations
    "create_article": _render_mutation,
    "update_article": _render_mutation,
    "delete_article": _render_mutation,
    "scaffold_article": _render_mutation,
    "import_article": _render_mutation,
    "backup_article": _render_mutation,
    "restore_article": _render_mutation,
    "create_course": _render_mutation,
    "update_course": _render_mutation,
    "delete_course": _render_mutation,
    "scaffold_course": _render_mutation,
    "add_lesson": _render_mutation,
    "update_lesson": _render_mutation,
    "delete_lesson": _render_mutation,
    "backup_course": _render_mutation,
    "restore_course": _render_mutation,
    "create_project": _render_mutation,
    "update_project": _render_mutation,
    "delete_project": _render_mutation,
    "publish": _render_mutation,
    "unpublish": _render_mutation,
    "archive": _render_mutation,
    "increment_views": _render_mutation,
    "increment_likes": _render_mutation,
    "bulk_update_status": _render_bulk,
    # Queries
    "get_article": _render_single_item,
    "get_course": _render_single_item,
    "get_project": _render_single_item,
    "list_articles": _render_item_table,
    "list_courses": _render_item_table,
    "list_projects": _render_item_table,
    "search": _render_item_table,
    "featured": _render_item_table,
    "recent": _render_item_table,
    "popular": _render_item_table,
    "related": _render_related,
    # Aggregates
    "categories": _render_counts,
    "tags": _render_counts,
    "authors": _render_counts,
    "stats": _render_stats,
    "analytics": _render_stats,
    # Export / init
    "export_article": _render_export,
    "export_course": _render_export,
    "init": _render_init,
}
