"""Tests for the article command group."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from contentctl.cli import cli
from tests.conftest import BODY

TITLE = "Getting Started with Python"
SLUG = "getting-started-with-python"


def _body_file(root: Path) -> Path:
    path = root / "body.md"
    path.write_text(BODY, encoding="utf-8")
    return path


def _create(cli_runner: CliRunner, root: Path, title: str = TITLE, *extra: str) -> dict:
    result = cli_runner.invoke(
        cli,
        [
            "--json",
            "article",
            "create",
            title,
            "--author",
            "Ada Lovelace",
            "--email",
            "ada@example.com",
            "--category",
            "Programming",
            "--tag",
            "Python",
            "--body-file",
            str(_body_file(root)),
            *extra,
        ],
    )
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)["data"]


@pytest.mark.usefixtures("_isolated_root")
class TestArticleCreateCommand:
    def test_create_json(self, cli_runner: CliRunner, content_root: Path) -> None:
        data = _create(cli_runner, content_root)
        assert data["slug"] == SLUG
        assert data["status"] == "draft"
        assert (content_root / "content" / "blog" / f"{TITLE}.md").is_file()

    def test_create_rich_output(self, cli_runner: CliRunner, content_root: Path) -> None:
        result = cli_runner.invoke(
            cli,
            [
                "article",
                "create",
                TITLE,
                "--author",
                "Ada Lovelace",
                "--email",
                "ada@example.com",
                "--body-file",
                str(_body_file(content_root)),
            ],
        )
        assert result.exit_code == 0
        assert "OK" in result.stdout
        assert "create_article" in result.stdout

    def test_create_quiet(self, cli_runner: CliRunner, content_root: Path) -> None:
        result = cli_runner.invoke(
            cli,
            [
                "-q",
                "article",
                "create",
                TITLE,
                "--author",
                "Ada Lovelace",
                "--email",
                "ada@example.com",
                "--body-file",
                str(_body_file(content_root)),
            ],
        )
        assert result.exit_code == 0
        assert result.stdout.strip() == "OK: create_article"

    def test_tags_are_lowercased(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        result = cli_runner.invoke(cli, ["--json", "article", "get", SLUG])
        assert json.loads(result.stdout)["data"]["tags"] == ["python"]

    def test_create_without_body_uses_template(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(
            cli,
            [
                "--json",
                "article",
                "create",
                "Templated Post",
                "--author",
                "Ada Lovelace",
                "--email",
                "ada@example.com",
            ],
        )
        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload["op"] == "scaffold_article"

        got = cli_runner.invoke(cli, ["--json", "article", "get", "templated-post"])
        assert "# Templated Post" in json.loads(got.stdout)["data"]["content"]

    def test_invalid_article_fails_on_stderr(self, cli_runner: CliRunner, content_root: Path) -> None:
        result = cli_runner.invoke(
            cli,
            ["--json", "article", "create", "No Author", "--body-file", str(_body_file(content_root))],
        )
        assert result.exit_code == 1
        assert result.stdout == ""
        payload = json.loads(result.stderr)
        assert payload["ok"] is False
        assert payload["error"]["code"] == "VALIDATION_FAILED"

    def test_duplicate_slug(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        result = cli_runner.invoke(
            cli,
            [
                "--json",
                "article",
                "create",
                "Another Title",
                "--slug",
                SLUG,
                "--author",
                "Ada Lovelace",
                "--email",
                "ada@example.com",
                "--body-file",
                str(_body_file(content_root)),
            ],
        )
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "DUPLICATE_SLUG"

    def test_unknown_category_rejected_by_click(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["article", "create", "X", "--category", "Gardening"])
        assert result.exit_code == 2


@pytest.mark.usefixtures("_isolated_root")
class TestArticleReadCommands:
    def test_get(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        result = cli_runner.invoke(cli, ["--json", "article", "get", SLUG])
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["title"] == TITLE
        assert "<p>" in data["contentHtml"]

    def test_get_missing(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["article", "get", "nope"])
        assert result.exit_code == 1
        assert "No article found with slug: nope" in result.stderr

    def test_list_and_filters(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        _create(cli_runner, content_root, "Second Post")
        cli_runner.invoke(cli, ["article", "publish", "second-post"])

        result = cli_runner.invoke(cli, ["--json", "article", "list"])
        assert json.loads(result.stdout)["data"]["total"] == 2

        result = cli_runner.invoke(cli, ["--json", "article", "list", "--status", "published"])
        items = json.loads(result.stdout)["data"]["items"]
        assert [item["slug"] for item in items] == ["second-post"]

    def test_list_pagination(self, cli_runner: CliRunner, content_root: Path) -> None:
        for title in ("First Post", "Second Post", "Third Post"):
            _create(cli_runner, content_root, title)
        result = cli_runner.invoke(cli, ["--json", "article", "list", "--limit", "2"])
        data = json.loads(result.stdout)["data"]
        assert data["count"] == 2
        assert data["has_more"] is True

    def test_list_quiet_prints_slugs(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        result = cli_runner.invoke(cli, ["-q", "article", "list"])
        assert result.stdout.strip() == SLUG

    def test_search(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        result = cli_runner.invoke(cli, ["--json", "article", "search", "PACKAGED"])
        data = json.loads(result.stdout)["data"]
        assert data["total"] == 1
        assert data["query"] == "PACKAGED"

    def test_search_blank(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "article", "search", "  "])
        assert result.exit_code == 1
        assert json.loads(result.stderr)["error"]["code"] == "EMPTY_QUERY"


@pytest.mark.usefixtures("_isolated_root")
class TestArticleUpdateCommands:
    def test_update_set(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        result = cli_runner.invoke(
            cli, ["--json", "article", "update", SLUG, "--set", "featured=true"]
        )
        assert result.exit_code == 0, result.output
        got = cli_runner.invoke(cli, ["--json", "article", "get", SLUG])
        assert json.loads(got.stdout)["data"]["featured"] is True

    def test_update_nothing(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        result = cli_runner.invoke(cli, ["article", "update", SLUG])
        assert result.exit_code == 2
        assert "Nothing to update" in result.output

    def test_update_bad_assignment(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        result = cli_runner.invoke(cli, ["article", "update", SLUG, "--set", "featured"])
        assert result.exit_code == 2
        assert "Expected key=value" in result.output

    def test_publish_unpublish_archive(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        for command, status in (
            ("publish", "published"),
            ("unpublish", "draft"),
            ("archive", "archived"),
        ):
            result = cli_runner.invoke(cli, ["--json", "article", command, SLUG])
            assert result.exit_code == 0, result.output
            assert json.loads(result.stdout)["data"]["status"] == status

    def test_bulk_status_warns_on_stderr(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        result = cli_runner.invoke(cli, ["article", "bulk-status", "published", SLUG, "missing"])
        assert result.exit_code == 0
        assert "WARNING: missing: No article found with slug: missing" in result.stderr

    def test_delete_requires_confirmation(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        aborted = cli_runner.invoke(cli, ["article", "delete", SLUG], input="n\n")
        assert aborted.exit_code == 1
        assert (content_root / "content" / "blog" / f"{TITLE}.md").exists()

        result = cli_runner.invoke(cli, ["--json", "article", "delete", SLUG, "--yes"])
        assert result.exit_code == 0
        assert not (content_root / "content" / "blog" / f"{TITLE}.md").exists()

    def test_view_and_like(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        cli_runner.invoke(cli, ["article", "view", SLUG])
        result = cli_runner.invoke(cli, ["--json", "article", "view", SLUG])
        assert json.loads(result.stdout)["data"]["views"] == 2
        result = cli_runner.invoke(cli, ["--json", "article", "like", SLUG])
        assert json.loads(result.stdout)["data"]["likes"] == 1


@pytest.mark.usefixtures("_isolated_root")
class TestArticleReportCommands:
    def test_top_recent(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        cli_runner.invoke(cli, ["article", "publish", SLUG])
        result = cli_runner.invoke(cli, ["--json", "article", "top", "recent"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["count"] == 1

    def test_related(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        _create(cli_runner, content_root, "Python Packaging")
        for slug in (SLUG, "python-packaging"):
            cli_runner.invoke(cli, ["article", "publish", slug])
        result = cli_runner.invoke(cli, ["--json", "article", "related", SLUG])
        assert result.exit_code == 0
        items = json.loads(result.stdout)["data"]["items"]
        assert [item["slug"] for item in items] == ["python-packaging"]

    def test_stats(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        result = cli_runner.invoke(cli, ["--json", "article", "stats"])
        data = json.loads(result.stdout)["data"]
        assert data["totalPosts"] == 1
        assert data["draftPosts"] == 1

    def test_stats_by_tags(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        result = cli_runner.invoke(cli, ["--json", "article", "stats", "--by", "tags"])
        items = json.loads(result.stdout)["data"]["items"]
        assert items[0]["name"] == "python"

    def test_analytics(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["--json", "article", "analytics", "--timeframe", "7d"])
        assert result.exit_code == 0
        assert json.loads(result.stdout)["ok"] is True


@pytest.mark.usefixtures("_isolated_root")
class TestArticleTransferCommands:
    def test_export_markdown_quiet_prints_document(
        self, cli_runner: CliRunner, content_root: Path
    ) -> None:
        _create(cli_runner, content_root)
        result = cli_runner.invoke(cli, ["-q", "article", "export", SLUG, "--format", "markdown"])
        assert result.exit_code == 0
        assert result.stdout.startswith("---")
        assert "title: Getting Started with Python" in result.stdout

    def test_export_to_file(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        out = content_root / "export.json"
        result = cli_runner.invoke(cli, ["article", "export", SLUG, "--output", str(out)])
        assert result.exit_code == 0
        assert json.loads(out.read_text(encoding="utf-8"))["slug"] == SLUG

    def test_import_json(self, cli_runner: CliRunner, content_root: Path) -> None:
        source = content_root / "import.json"
        source.write_text(
            json.dumps(
                {
                    "title": "Imported Post",
                    "author": "Grace Hopper",
                    "authorEmail": "grace@example.com",
                    "content": BODY,
                }
            ),
            encoding="utf-8",
        )
        result = cli_runner.invoke(cli, ["--json", "article", "import", str(source)])
        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["data"]["slug"] == "imported-post"

    def test_backup_and_restore(self, cli_runner: CliRunner, content_root: Path) -> None:
        _create(cli_runner, content_root)
        result = cli_runner.invoke(cli, ["--json", "article", "backup", SLUG])
        assert result.exit_code == 0
        backup_file = Path(json.loads(result.stdout)["data"]["backup_file"])
        assert backup_file.is_file()

        cli_runner.invoke(cli, ["article", "update", SLUG, "--set", "featured=true"])
        result = cli_runner.invoke(
            cli, ["--json", "article", "restore", str(backup_file), TITLE]
        )
        assert result.exit_code == 0, result.output
        got = cli_runner.invoke(cli, ["--json", "article", "get", SLUG])
        assert json.loads(got.stdout)["data"]["featured"] is False
