"""Tests for operation-specific Rich renderers."""

from contentctl.output.renderers import render_quiet, render_result
from contentctl.services.result import ServiceError, ServiceResult

# ── Helpers ───────────────────────────────────────────────────────────


def _ok(op: str, **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str, code: str, message: str, **detail: object) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=message, detail=dict(detail)),
    )


def _article(slug: str, **fields: object) -> dict[str, object]:
    return {"slug": slug, "title": slug.replace("-", " ").title(), "status": "draft", **fields}


# ── Errors ────────────────────────────────────────────────────────────


class TestErrorRenderer:
    def test_basic_error(self) -> None:
        output = render_result(_err("get_article", "NOT_FOUND", "No article found with slug: x"))
        assert output.startswith("ERROR")
        assert "get_article" in output
        assert "No article found with slug: x" in output

    def test_lists_validation_errors(self) -> None:
        result = _err(
            "create_article",
            "VALIDATION_FAILED",
            "author is required; excerpt is required",
            errors=["author is required", "excerpt is required"],
        )
        output = render_result(result)
        assert "    - author is required" in output
        assert "    - excerpt is required" in output
        assert "detail" not in output

    def test_verbose_shows_detail(self) -> None:
        output = render_result(_err("get_article", "NOT_FOUND", "x", kind="article"), verbose=True)
        assert "detail" in output
        assert "kind: article" in output

    def test_no_error_object(self) -> None:
        assert "Unknown error" in render_result(ServiceResult(ok=False, op="test"))


# ── Mutations ─────────────────────────────────────────────────────────


class TestMutationRenderer:
    def test_create(self) -> None:
        output = render_result(
            _ok("create_article", slug="hello-world", title="Hello World", path="/x/Hello World.md")
        )
        assert "OK" in output
        assert "slug: hello-world" in output
        assert "path: /x/Hello World.md" in output

    def test_transition_shows_previous_status(self) -> None:
        output = render_result(
            _ok("publish", slug="x", status="published", previous_status="draft")
        )
        assert "status: published" in output
        assert "previous_status: draft" in output

    def test_fields_changed_as_json(self) -> None:
        output = render_result(_ok("update_article", slug="x", fields_changed=["content", "tags"]))
        assert 'fields_changed: ["content","tags"]' in output

    def test_verbose_renders_telemetry(self) -> None:
        result = ServiceResult(
            ok=True,
            op="create_article",
            data={"slug": "x"},
            meta={
                "telemetry": {
                    "name": "ArticleService.create_article",
                    "duration_ms": 12.5,
                    "children": [
                        {"name": "scan", "duration_ms": 2.0, "annotations": {"total": 4}}
                    ],
                }
            },
        )
        output = render_result(result, verbose=True)
        assert "ArticleService.create_article" in output
        assert "scan  (total=4)" in output
        assert "telemetry" not in render_result(result)

    def test_bulk_lists_failures(self) -> None:
        output = render_result(
            _ok(
                "bulk_update_status",
                status="published",
                updated=1,
                results=[
                    {"slug": "a", "success": True},
                    {"slug": "b", "success": False, "error": "No article found with slug: b"},
                ],
            )
        )
        assert "updated: 1" in output
        assert "failed b: No article found with slug: b" in output


# ── Queries ───────────────────────────────────────────────────────────


class TestQueryRenderers:
    def test_list_table(self) -> None:
        output = render_result(
            _ok(
                "list_articles",
                kind="article",
                items=[_article("first-post", category="DevOps", views=3)],
                total=4,
                count=1,
                has_more=True,
            )
        )
        assert "Slug" in output
        assert "Category" in output
        assert "first-post" in output
        assert "DevOps" in output
        assert "1 of 4 items (more available)" in output

    def test_course_table_counts_lessons(self) -> None:
        course = {"slug": "py", "title": "Py", "status": "published", "level": "Beginner",
                  "tag": "Python", "lessons": [{"id": "lesson1"}, {"id": "lesson2"}]}
        output = render_result(_ok("list_courses", kind="course", items=[course], total=1))
        assert "Lessons" in output
        assert "Beginner" in output
        assert "│ 2" in output or " 2 " in output

    def test_search_with_scores(self) -> None:
        output = render_result(_ok("related", slug="base", items=[_article("near", score=17)]))
        assert "Score" in output
        assert "17" in output
        assert "1 related to base" in output

    def test_single_item_panel(self) -> None:
        output = render_result(
            _ok(
                "get_course",
                slug="python-basics",
                title="Python Basics",
                status="draft",
                level="Beginner",
                description="A gentle introduction.",
                lessons=[{"id": "lesson1", "title": "Setup"}],
                content="Full body",
            )
        )
        assert "Python Basics" in output
        assert "level: Beginner" in output
        assert "lesson1  Setup" in output
        assert "A gentle introduction." in output
        assert "Full body" not in output

    def test_single_item_verbose_body(self) -> None:
        output = render_result(_ok("get_article", slug="x", title="X", content="Full body"), verbose=True)
        assert "Full body" in output

    def test_counts_table(self) -> None:
        output = render_result(_ok("tags", items=[{"name": "python", "count": 3}], count=1))
        assert "Tag" in output
        assert "python" in output

    def test_stats(self) -> None:
        output = render_result(
            _ok(
                "stats",
                totalPosts=3,
                postsByCategory={"DevOps": 2},
                popularTags={},
                recentPosts=[{"slug": "first-post", "title": "First"}],
            )
        )
        assert "totalPosts: 3" in output
        assert "postsByCategory" in output
        assert "popularTags" not in output
        assert "first-post  First" in output


# ── Export / init / generic ───────────────────────────────────────────


class TestOtherRenderers:
    def test_export_prints_document(self) -> None:
        output = render_result(_ok("export_article", format="markdown", document="---\nslug: 'x'\n---"))
        assert output == "---\nslug: 'x'\n---"

    def test_export_to_file(self) -> None:
        output = render_result(
            _ok("export_course", format="json", document="{}", output_file="/tmp/c.json")
        )
        assert "output_file: /tmp/c.json" in output
        assert "{}" not in output

    def test_init(self) -> None:
        output = render_result(
            _ok("init", content_root="/site", config_file="/site/contentctl.toml",
                directories_created=["/site/content/blog"])
        )
        assert "content_root: /site" in output
        assert "directories_created: 1" in output

    def test_generic_fallback(self) -> None:
        output = render_result(_ok("something_new", answer=42))
        assert "something_new" in output
        assert "answer: 42" in output


class TestQuietRenderer:
    def test_list_prints_slugs(self) -> None:
        result = _ok("list_articles", items=[_article("a"), _article("b")])
        assert render_quiet(result) == "a\nb"

    def test_counts_print_names(self) -> None:
        assert render_quiet(_ok("tags", items=[{"name": "python", "count": 1}])) == "python"

    def test_document_printed(self) -> None:
        assert render_quiet(_ok("export_article", document="<html/>")) == "<html/>"

    def test_mutation(self) -> None:
        assert render_quiet(_ok("create_article", slug="x")) == "OK: create_article"

    def test_error(self) -> None:
        assert render_quiet(_err("get_article", "NOT_FOUND", "missing")) == "ERROR: get_article: missing"
