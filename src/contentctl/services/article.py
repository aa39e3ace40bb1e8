"""ArticleService: blog post authoring, lifecycle, discovery, and analytics.

Reads go straight to the flat repository; every write validates before
touching disk. Counter increments use the repository's compare-and-swap
``modify`` so concurrent viewers never lose an update.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from contentctl.domain.article import Article
from contentctl.domain.frontmatter import decode, encode
from contentctl.domain.lifecycle import ARTICLE_TRANSITIONS, ArticleStatus
from contentctl.domain.records import parse_timestamp, utc_now_iso
from contentctl.errors import ContentError, DuplicateSlug, NotFound, ValidationFailure
from contentctl.infrastructure.filesystem import atomic_write
from contentctl.infrastructure.repositories.flat import FlatRepository
from contentctl.infrastructure.repositories.query import RecordQuery, sort_records
from contentctl.infrastructure.templates import render_body, render_export
from contentctl.services._helpers import count_by, now_compact, ranked_counts
from contentctl.services.base import ContentService, build_record, failure, from_error
from contentctl.services.markdown import render_markdown
from contentctl.services.result import ServiceResult
from contentctl.services.telemetry import trace_span, traced

logger = logging.getLogger(__name__)

EXPORT_FORMATS = ("json", "markdown", "html")
IMPORT_FORMATS = ("json", "markdown")

TIMEFRAMES: dict[str, timedelta] = {
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
    "90d": timedelta(days=90),
    "1y": timedelta(days=365),
}

# Related-article scoring weights.
SAME_CATEGORY_SCORE = 10
SHARED_TAG_SCORE = 5
SAME_AUTHOR_SCORE = 2


def related_score(article: Article, candidate: Article) -> int:
    """Similarity of *candidate* to *article*: category, shared tags, author."""
    score = 0
    if candidate.category == article.category:
        score += SAME_CATEGORY_SCORE
    score += SHARED_TAG_SCORE * sum(1 for tag in candidate.tags if tag in article.tags)
    if candidate.author == article.author:
        score += SAME_AUTHOR_SCORE
    return score


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class ArticleService(ContentService[Article]):
    """Handles blog posts stored one per markdown file."""

    record_type = Article
    transitions = ARTICLE_TRANSITIONS

    @property
    def repository(self) -> FlatRepository[Article]:
        return self._store.articles

    # ------------------------------------------------------------------
    # Derived fields
    # ------------------------------------------------------------------

    def _derive(self, article: Article) -> Article:
        """Fill slug, excerpt, read time, and configured defaults."""
        cfg = self.settings.articles
        if not article.slug:
            article.generate_slug()
        if not article.excerpt:
            article.generate_excerpt(cfg.excerpt_length)
        article.read_time = article.calculate_read_time(cfg.words_per_minute)
        if not article.author and self.settings.content.default_author:
            article.author = self.settings.content.default_author
        if not article.featured_image and cfg.default_featured_image:
            article.featured_image = cfg.default_featured_image
        return article

    def prepare(self, record: Article, changes: dict[str, Any]) -> None:
        if "content" in changes:
            if "excerpt" not in changes:
                record.excerpt = ""
                record.generate_excerpt(self.settings.articles.excerpt_length)
            record.read_time = record.calculate_read_time(self.settings.articles.words_per_minute)

    def _create(self, op: str, data: dict[str, Any]) -> ServiceResult:
        try:
            article = self._derive(build_record(Article, data))
            if self.repository.exists(article.slug):
                raise DuplicateSlug(self.kind, article.slug)
            self.repository.save(article)
        except ContentError as exc:
            return from_error(op, exc)
        logger.info("Created article %s", article.slug)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "slug": article.slug,
                "id": article.id,
                "title": article.title,
                "status": article.status,
                "path": str(self.repository.root / (article.file_name or "")),
            },
        )

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    @traced
    def list_articles(self, query: RecordQuery | None = None) -> ServiceResult:
        """List articles, newest publication first unless *query* says otherwise."""
        query = query or RecordQuery()
        with trace_span("scan") as span:
            page = self.repository.find_all(query)
            if span:
                span.annotate("total", page.total)
        return self._page_result("list_articles", page, query)

    @traced
    def get_article(self, slug: str) -> ServiceResult:
        """Fetch one article with its body rendered to HTML."""
        return self._get("get_article", slug)

    @traced
    def create_article(self, data: dict[str, Any]) -> ServiceResult:
        """Create an article from camelCase or snake_case *data*.

        Slug, excerpt and read time are derived when absent. The article is
        validated and refused if its slug is already taken.
        """
        return self._create("create_article", data)

    @traced
    def update_article(self, slug: str, changes: dict[str, Any]) -> ServiceResult:
        """Apply *changes* to an article.

        Changing ``content`` regenerates the excerpt (unless one is given)
        and recomputes the read time.
        """
        op = "update_article"
        try:
            article = self._require(slug)
            saved = self._update(op, article, changes)
        except ContentError as exc:
            return from_error(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "slug": saved.slug,
                "id": saved.id,
                "title": saved.title,
                "status": saved.status,
                "fields_changed": sorted(changes),
            },
        )

    @traced
    def delete_article(self, slug: str) -> ServiceResult:
        return self._delete("delete_article", slug)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @traced
    def publish(self, slug: str) -> ServiceResult:
        return self._transition("publish", slug, "publish")

    @traced
    def unpublish(self, slug: str) -> ServiceResult:
        return self._transition("unpublish", slug, "unpublish")

    @traced
    def archive(self, slug: str) -> ServiceResult:
        return self._transition("archive", slug, "archive")

    @traced
    def bulk_update_status(self, slugs: list[str], status: str) -> ServiceResult:
        """Set *status* on every article in *slugs*.

        Per-article failures are reported in ``results`` and as warnings;
        they do not fail the whole batch.
        """
        op = "bulk_update_status"
        if status not in Article.STATUSES:
            return failure(
                op,
                "INVALID_TRANSITION",
                f"Unknown status {status!r}. Allowed: {list(Article.STATUSES)}",
            )

        results: list[dict[str, Any]] = []
        warnings: list[str] = []
        for slug in slugs:
            try:
                article = self._require(slug)
                article.status = status
                if status == ArticleStatus.PUBLISHED and not article.published_at:
                    article.published_at = utc_now_iso()
                self.repository.save(article)
            except ContentError as exc:
                results.append({"slug": slug, "success": False, "error": str(exc)})
                warnings.append(f"{slug}: {exc}")
                continue
            results.append({"slug": slug, "success": True, "status": status})

        updated = sum(1 for r in results if r["success"])
        return ServiceResult(
            ok=True,
            op=op,
            data={"status": status, "updated": updated, "results": results},
            warnings=warnings,
        )

    # ------------------------------------------------------------------
    # Engagement counters
    # ------------------------------------------------------------------

    def _bump(self, op: str, slug: str, counter: str) -> ServiceResult:
        try:
            if counter == "views":
                article = self.repository.modify(slug, Article.increment_views)
            else:
                article = self.repository.modify(slug, Article.increment_likes)
        except ContentError as exc:
            return from_error(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={"slug": slug, counter: getattr(article, counter)},
        )

    @traced
    def increment_views(self, slug: str) -> ServiceResult:
        return self._bump("increment_views", slug, "views")

    @traced
    def increment_likes(self, slug: str) -> ServiceResult:
        return self._bump("increment_likes", slug, "likes")

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def _published(self) -> list[Article]:
        return self.repository.find_all(RecordQuery(status=ArticleStatus.PUBLISHED)).items

    @traced
    def related(self, slug: str, limit: int | None = None) -> ServiceResult:
        """Published articles most similar to *slug*, best match first."""
        op = "related"
        limit = limit if limit is not None else self.settings.articles.related_limit
        try:
            article = self._require(slug)
        except NotFound as exc:
            return from_error(op, exc)

        scored = [
            (related_score(article, candidate), candidate)
            for candidate in self._published()
            if candidate.id != article.id
        ]
        scored = [pair for pair in scored if pair[0] > 0]
        scored.sort(key=lambda pair: pair[0], reverse=True)
        items = [{**c.to_json(), "score": score} for score, c in scored[:limit]]
        return ServiceResult(
            ok=True,
            op=op,
            data={"slug": slug, "items": items, "count": len(items)},
        )

    def _top(self, op: str, limit: int, **query: Any) -> ServiceResult:
        page = self.repository.find_all(
            RecordQuery(status=ArticleStatus.PUBLISHED, limit=limit, sort_order="desc", **query)
        )
        for article in page.items:
            self._render(article)
        return self._page_result(op, page)

    @traced
    def featured(self, limit: int = 5) -> ServiceResult:
        return self._top("featured", limit, featured=True, sort_by="publishedAt")

    @traced
    def recent(self, limit: int = 10) -> ServiceResult:
        return self._top("recent", limit, sort_by="publishedAt")

    @traced
    def popular(self, limit: int = 10) -> ServiceResult:
        return self._top("popular", limit, sort_by="views")

    @traced
    def search(self, text: str, query: RecordQuery | None = None) -> ServiceResult:
        """Case-insensitive search over title, excerpt, body, author, category, and tags."""
        return self._search("search", text, query)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    @traced
    def stats(self) -> ServiceResult:
        """Totals, breakdowns by category and author, top tags, and recent posts."""
        articles = list(self.repository.iter_records())
        total = len(articles)
        published = [a for a in articles if a.status == ArticleStatus.PUBLISHED]
        tags = ranked_counts((tag for a in articles for tag in a.tags), limit=10)
        recent = sort_records(published, "publishedAt")[:5]
        data = {
            "totalPosts": total,
            "publishedPosts": len(published),
            "draftPosts": sum(1 for a in articles if a.status == ArticleStatus.DRAFT),
            "archivedPosts": sum(1 for a in articles if a.status == ArticleStatus.ARCHIVED),
            "scheduledPosts": sum(1 for a in articles if a.status == ArticleStatus.SCHEDULED),
            "featuredPosts": sum(1 for a in articles if a.featured),
            "totalViews": sum(a.views for a in articles),
            "totalLikes": sum(a.likes for a in articles),
            "averageReadTime": (
                _round_half_up(sum(a.read_time for a in articles) / total) if total else 0
            ),
            "postsByCategory": count_by(a.category for a in articles),
            "postsByAuthor": count_by(a.author for a in articles),
            "popularTags": {entry["name"]: entry["count"] for entry in tags},
            "recentPosts": [
                {"id": a.id, "title": a.title, "slug": a.slug, "publishedAt": a.published_at}
                for a in recent
            ],
        }
        return ServiceResult(ok=True, op="stats", data=data)

    def _ranked(self, op: str, values: list[str]) -> ServiceResult:
        items = ranked_counts(values)
        return ServiceResult(ok=True, op=op, data={"items": items, "count": len(items)})

    @traced
    def categories(self) -> ServiceResult:
        return self._ranked("categories", [a.category for a in self.repository.iter_records()])

    @traced
    def tags(self) -> ServiceResult:
        return self._ranked(
            "tags", [tag for a in self.repository.iter_records() for tag in a.tags]
        )

    @traced
    def authors(self) -> ServiceResult:
        return self._ranked("authors", [a.author for a in self.repository.iter_records()])

    @traced
    def analytics(self, timeframe: str = "30d") -> ServiceResult:
        """Engagement summary for published articles.

        ``recentPosts`` counts articles published within *timeframe*
        (``7d``, ``30d``, ``90d`` or ``1y``).
        """
        op = "analytics"
        window = TIMEFRAMES.get(timeframe)
        if window is None:
            return failure(
                op,
                "VALIDATION_FAILED",
                f"Unknown timeframe {timeframe!r}. Allowed: {list(TIMEFRAMES)}",
            )
        cutoff = datetime.now(UTC) - window
        articles = self._published()
        total = len(articles)
        views = sum(a.views for a in articles)
        likes = sum(a.likes for a in articles)
        recent = []
        for article in articles:
            when = parse_timestamp(article.published_at)
            if when is not None and when >= cutoff:
                recent.append(article)
        top = sorted(articles, key=lambda a: a.views, reverse=True)[:5]
        all_articles = list(self.repository.iter_records())
        data = {
            "timeframe": timeframe,
            "totalPosts": total,
            "recentPosts": len(recent),
            "totalViews": views,
            "totalLikes": likes,
            "averageViews": _round_half_up(views / total) if total else 0,
            "averageLikes": _round_half_up(likes / total) if total else 0,
            "topPosts": [
                {"title": a.title, "slug": a.slug, "views": a.views, "likes": a.likes} for a in top
            ],
            "categoryDistribution": count_by(a.category for a in all_articles),
            "tagDistribution": {
                entry["name"]: entry["count"]
                for entry in ranked_counts((t for a in all_articles for t in a.tags), limit=10)
            },
        }
        return ServiceResult(ok=True, op=op, data=data)

    # ------------------------------------------------------------------
    # Templates, export, import
    # ------------------------------------------------------------------

    @traced
    def scaffold(self, data: dict[str, Any]) -> ServiceResult:
        """Create an article whose body comes from the ``article`` template
        when *data* carries no content."""
        op = "scaffold_article"
        try:
            article = build_record(Article, data)
        except ValidationFailure as exc:
            return from_error(op, exc)
        if not article.content:
            article.content = render_body(
                "article",
                content_root=self._store.root,
                title=article.title,
                excerpt=article.excerpt,
                tags=article.tags,
            )
        return self._create(op, article.model_dump(by_alias=True))

    @traced
    def export(self, slug: str, fmt: str = "json", output: Path | None = None) -> ServiceResult:
        """Render an article as ``json``, ``markdown`` or ``html``.

        With *output*, the document is also written to that file.
        """
        op = "export_article"
        if fmt not in EXPORT_FORMATS:
            return failure(
                op,
                "UNSUPPORTED_FORMAT",
                f"Unsupported export format {fmt!r}. Allowed: {list(EXPORT_FORMATS)}",
            )
        try:
            article = self._require(slug)
            if fmt == "json":
                document = json.dumps(article.to_json(), indent=2)
            elif fmt == "markdown":
                document = encode(
                    article.content,
                    article.to_frontmatter(),
                    fold_threshold=self.settings.codec.fold_threshold,
                )
            else:
                published = parse_timestamp(article.published_at)
                document = render_export(
                    "article.html",
                    content_root=self._store.root,
                    article=article.to_json(include_stats=False),
                    published=published.date().isoformat() if published else "",
                    body_html=render_markdown(article.content),
                )
            if output is not None:
                atomic_write(output, document)
        except ContentError as exc:
            return from_error(op, exc)

        data: dict[str, Any] = {"slug": slug, "format": fmt, "document": document}
        if output is not None:
            data["output_file"] = str(output)
        return ServiceResult(ok=True, op=op, data=data)

    @traced
    def import_article(self, text: str, fmt: str = "json") -> ServiceResult:
        """Create an article from a JSON object or a frontmatter document."""
        op = "import_article"
        if fmt not in IMPORT_FORMATS:
            return failure(
                op,
                "UNSUPPORTED_FORMAT",
                f"Unsupported import format {fmt!r}. Allowed: {list(IMPORT_FORMATS)}",
            )
        if fmt == "json":
            try:
                data = json.loads(text)
            except json.JSONDecodeError as exc:
                return failure(op, "VALIDATION_FAILED", f"Invalid JSON: {exc}")
            if not isinstance(data, dict):
                return failure(op, "VALIDATION_FAILED", "Imported JSON must be an object")
        else:
            metadata, body = decode(text, schema=Article.FIELD_SCHEMA)
            data = {**metadata, "content": body}
        return self._create(op, data)

    # ------------------------------------------------------------------
    # Backup
    # ------------------------------------------------------------------

    @traced
    def backup(self, slug: str) -> ServiceResult:
        """Copy an article's file into the content root's backup directory."""
        op = "backup_article"
        try:
            path = self.repository.backup(
                slug, self._store.backup_dir / "articles", stamp=now_compact()
            )
        except ContentError as exc:
            return from_error(op, exc)
        return ServiceResult(ok=True, op=op, data={"slug": slug, "backup_file": str(path)})

    @traced
    def restore(self, backup_path: Path, record_id: str) -> ServiceResult:
        """Overwrite ``<record_id>.md`` with a backup copy."""
        op = "restore_article"
        try:
            article = self.repository.restore(backup_path, record_id)
        except ContentError as exc:
            return from_error(op, exc)
        except ValueError as exc:
            return failure(op, "VALIDATION_FAILED", str(exc))
        if article is None:
            return failure(op, "NOT_FOUND", f"Restored file is not readable: {record_id}")
        return ServiceResult(
            ok=True,
            op=op,
            data={"slug": article.slug, "id": article.id, "restored_from": str(backup_path)},
        )
