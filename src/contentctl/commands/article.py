"""Command group: blog articles."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from contentctl.commands._base import ContentGroup
from contentctl.commands._options import build_query, parse_assignments, query_options, read_body
from contentctl.domain.article import CATEGORIES
from contentctl.services.article import EXPORT_FORMATS, IMPORT_FORMATS, TIMEFRAMES, ArticleService

if TYPE_CHECKING:
    from contentctl.commands._context import AppContext

_ARTICLE_EXAMPLES = """\
  contentctl article create "Getting Started with Rust" --author "Ada" --email ada@example.com
  contentctl article list --status published --limit 10
  contentctl article search react --category "Web Development"
  contentctl article publish getting-started-with-rust
  contentctl --json article stats"""


@click.group(cls=ContentGroup, examples=_ARTICLE_EXAMPLES)
@click.pass_obj
def article(app: AppContext) -> None:
    """Create, query, and publish blog articles."""


@article.command(
    examples="""\
  contentctl article create "Getting Started with Rust" --author Ada --email ada@example.com
  contentctl article create "Async Python" --body-file draft.md --tag python --tag async
  contentctl article create "Release Notes" --category News --featured"""
)
@click.argument("title")
@click.option("--author", default="", help="Author name (defaults to [content] default_author).")
@click.option("--email", "author_email", default="", help="Author email.")
@click.option("--category", type=click.Choice(CATEGORIES), default=None, help="Category.")
@click.option("--tag", "tags", multiple=True, help="Tag (repeatable).")
@click.option("--excerpt", default="", help="Summary; derived from the body when omitted.")
@click.option("--slug", default="", help="Explicit slug; derived from the title when omitted.")
@click.option(
    "--body-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Markdown body. Without it the body comes from the article template.",
)
@click.option("--featured", is_flag=True, help="Mark as featured.")
@click.pass_obj
def create(
    app: AppContext,
    title: str,
    author: str,
    author_email: str,
    category: str | None,
    tags: tuple[str, ...],
    excerpt: str,
    slug: str,
    body_file: Path | None,
    featured: bool,
) -> None:
    """Create a draft article."""
    data: dict[str, Any] = {
        "title": title,
        "author": author,
        "authorEmail": author_email,
        "tags": [t.strip().lower() for t in tags if t.strip()],
        "excerpt": excerpt,
        "slug": slug,
        "featured": featured,
        "content": read_body(body_file),
    }
    if category is not None:
        data["category"] = category
    svc = ArticleService(app.store)
    app.emit(svc.create_article(data) if data["content"] else svc.scaffold(data))


@article.command(examples="""\
  contentctl article get getting-started-with-rust
  contentctl -v article get getting-started-with-rust""")
@click.argument("slug")
@click.pass_obj
def get(app: AppContext, slug: str) -> None:
    """Show one article. Use -v to include the body."""
    app.emit(ArticleService(app.store).get_article(slug))


@article.command(
    name="list",
    examples="""\
  contentctl article list
  contentctl article list --status published --featured
  contentctl article list --tag python --sort-by views --limit 5
  contentctl article list --limit 10 --offset 10""",
)
@query_options
@click.pass_obj
def list_cmd(app: AppContext, **options: Any) -> None:
    """List articles, newest publication first."""
    app.emit(ArticleService(app.store).list_articles(build_query(**options)))


@article.command(examples="""\
  contentctl article search react
  contentctl article search "type hints" --status published --limit 5""")
@click.argument("text")
@query_options
@click.pass_obj
def search(app: AppContext, text: str, **options: Any) -> None:
    """Case-insensitive search over title, excerpt, body, author, category, and tags."""
    app.emit(ArticleService(app.store).search(text, build_query(**options)))


@article.command(examples="""\
  contentctl article update my-post --set title="A Better Title"
  contentctl article update my-post --body-file revised.md
  contentctl article update my-post --set 'tags=["python","cli"]'""")
@click.argument("slug")
@click.option("--set", "assignments", multiple=True, help="Field change as key=value.")
@click.option(
    "--body-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Replace the body with this file's content.",
)
@click.pass_obj
def update(
    app: AppContext,
    slug: str,
    assignments: tuple[str, ...],
    body_file: Path | None,
) -> None:
    """Change fields on an article."""
    changes = parse_assignments(assignments)
    if body_file is not None:
        changes["content"] = read_body(body_file)
    if not changes:
        raise click.UsageError("Nothing to update: pass --set or --body-file.")
    app.emit(ArticleService(app.store).update_article(slug, changes))


@article.command(examples="  contentctl article publish my-post")
@click.argument("slug")
@click.pass_obj
def publish(app: AppContext, slug: str) -> None:
    """Publish an article and stamp its publication time."""
    app.emit(ArticleService(app.store).publish(slug))


@article.command(examples="  contentctl article unpublish my-post")
@click.argument("slug")
@click.pass_obj
def unpublish(app: AppContext, slug: str) -> None:
    """Return an article to draft."""
    app.emit(ArticleService(app.store).unpublish(slug))


@article.command(examples="  contentctl article archive my-post")
@click.argument("slug")
@click.pass_obj
def archive(app: AppContext, slug: str) -> None:
    """Archive an article."""
    app.emit(ArticleService(app.store).archive(slug))


@article.command(
    name="bulk-status",
    examples="  contentctl article bulk-status archived old-post older-post",
)
@click.argument("status", type=click.Choice(["draft", "published", "archived", "scheduled"]))
@click.argument("slugs", nargs=-1, required=True)
@click.pass_obj
def bulk_status(app: AppContext, status: str, slugs: tuple[str, ...]) -> None:
    """Set the status of several articles at once."""
    app.emit(ArticleService(app.store).bulk_update_status(list(slugs), status))


@article.command(examples="  contentctl article delete my-post")
@click.argument("slug")
@click.confirmation_option(prompt="Delete this article?")
@click.pass_obj
def delete(app: AppContext, slug: str) -> None:
    """Delete an article's file."""
    app.emit(ArticleService(app.store).delete_article(slug))


@article.command(examples="  contentctl article view my-post")
@click.argument("slug")
@click.pass_obj
def view(app: AppContext, slug: str) -> None:
    """Record one view of an article."""
    app.emit(ArticleService(app.store).increment_views(slug))


@article.command(examples="  contentctl article like my-post")
@click.argument("slug")
@click.pass_obj
def like(app: AppContext, slug: str) -> None:
    """Record one like of an article."""
    app.emit(ArticleService(app.store).increment_likes(slug))


@article.command(examples="""\
  contentctl article related my-post
  contentctl article related my-post --limit 3""")
@click.argument("slug")
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Max results.")
@click.pass_obj
def related(app: AppContext, slug: str, limit: int | None) -> None:
    """Published articles sharing a category, tags, or author."""
    app.emit(ArticleService(app.store).related(slug, limit))


@article.command(examples="""\
  contentctl article top featured
  contentctl article top popular --limit 3""")
@click.argument("which", type=click.Choice(["featured", "recent", "popular"]))
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Max results.")
@click.pass_obj
def top(app: AppContext, which: str, limit: int | None) -> None:
    """Featured, most recent, or most viewed published articles."""
    svc = ArticleService(app.store)
    if which == "featured":
        app.emit(svc.featured(limit or 5))
    elif which == "recent":
        app.emit(svc.recent(limit or 10))
    else:
        app.emit(svc.popular(limit or 10))


@article.command(examples="""\
  contentctl article stats
  contentctl article stats --by tags""")
@click.option(
    "--by",
    type=click.Choice(["categories", "tags", "authors"]),
    default=None,
    help="Show counts per category, tag, or author instead of totals.",
)
@click.pass_obj
def stats(app: AppContext, by: str | None) -> None:
    """Article totals and breakdowns."""
    svc = ArticleService(app.store)
    if by == "categories":
        app.emit(svc.categories())
    elif by == "tags":
        app.emit(svc.tags())
    elif by == "authors":
        app.emit(svc.authors())
    else:
        app.emit(svc.stats())


@article.command(examples="  contentctl article analytics --timeframe 7d")
@click.option("--timeframe", type=click.Choice(list(TIMEFRAMES)), default="30d")
@click.pass_obj
def analytics(app: AppContext, timeframe: str) -> None:
    """Engagement summary for published articles."""
    app.emit(ArticleService(app.store).analytics(timeframe))


@article.command(examples="""\
  contentctl article export my-post
  contentctl article export my-post --format html --output my-post.html""")
@click.argument("slug")
@click.option("--format", "fmt", type=click.Choice(EXPORT_FORMATS), default="json")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write to this file instead of stdout.",
)
@click.pass_obj
def export(app: AppContext, slug: str, fmt: str, output: Path | None) -> None:
    """Export an article as JSON, markdown, or standalone HTML."""
    app.emit(ArticleService(app.store).export(slug, fmt, output))


@article.command(name="import", examples="""\
  contentctl article import post.json
  contentctl article import post.md --format markdown""")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--format", "fmt", type=click.Choice(IMPORT_FORMATS), default="json")
@click.pass_obj
def import_cmd(app: AppContext, source: Path, fmt: str) -> None:
    """Create an article from a JSON or frontmatter file."""
    app.emit(ArticleService(app.store).import_article(source.read_text(encoding="utf-8"), fmt))


@article.command(examples="  contentctl article backup my-post")
@click.argument("slug")
@click.pass_obj
def backup(app: AppContext, slug: str) -> None:
    """Copy an article's file to .contentctl/backups/articles."""
    app.emit(ArticleService(app.store).backup(slug))


@article.command(
    examples=(
        "  contentctl article restore "
        '".contentctl/backups/articles/My Post_backup_20260101T120000.md" "My Post"'
    )
)
@click.argument("backup_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("record_id")
@click.pass_obj
def restore(app: AppContext, backup_file: Path, record_id: str) -> None:
    """Overwrite <RECORD_ID>.md with a backup copy."""
    app.emit(ArticleService(app.store).restore(backup_file, record_id))
