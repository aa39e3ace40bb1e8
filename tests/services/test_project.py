"""Tests for ProjectService."""

from __future__ import annotations

import pytest

from contentctl.infrastructure.repositories.query import RecordQuery
from contentctl.infrastructure.store import ContentStore
from contentctl.services.project import ProjectService


@pytest.fixture
def svc(store: ContentStore) -> ProjectService:
    return ProjectService(store)


def _project(title: str = "Weather Dashboard", **overrides: object) -> dict[str, object]:
    data: dict[str, object] = {
        "title": title,
        "description": "Live weather for any city.",
        "stack": ["React", "TypeScript"],
        "github": "https://github.com/example/weather",
        "category": "Web",
    }
    data.update(overrides)
    return data


class TestCreate:
    def test_create_fills_body_from_template(self, svc: ProjectService, store: ContentStore) -> None:
        result = svc.create_project(_project())
        assert result.ok, result.error
        assert result.data["slug"] == "weather-dashboard"
        project = store.projects.find_by_slug("weather-dashboard")
        assert project.content.startswith("# Weather Dashboard\n\nLive weather for any city.")
        assert "- React\n- TypeScript" in project.content
        assert "git clone https://github.com/example/weather" in project.content

    def test_keeps_given_body(self, svc: ProjectService, store: ContentStore) -> None:
        svc.create_project(_project(content="Hand written."))
        assert store.projects.find_by_slug("weather-dashboard").content == "Hand written."

    def test_stack_required(self, svc: ProjectService) -> None:
        result = svc.create_project(_project(stack=[]))
        assert "stack is required" in result.error.detail["errors"]

    def test_duplicate(self, svc: ProjectService) -> None:
        svc.create_project(_project())
        assert svc.create_project(_project()).error.code == "DUPLICATE_SLUG"


class TestQueries:
    def test_list_filters_by_stack(self, svc: ProjectService) -> None:
        svc.create_project(_project())
        svc.create_project(_project("CLI Toolkit", stack=["Python"], category="Tools"))
        page = svc.list_projects(RecordQuery(tag="Python")).data
        assert [p["slug"] for p in page["items"]] == ["cli-toolkit"]
        assert svc.list_projects().data["total"] == 2

    def test_search_stack(self, svc: ProjectService) -> None:
        svc.create_project(_project())
        assert svc.search("typescript").data["total"] == 1

    def test_get(self, svc: ProjectService) -> None:
        svc.create_project(_project())
        data = svc.get_project("weather-dashboard").data
        assert data["stack"] == ["React", "TypeScript"]
        assert data["contentHtml"].startswith("<h1>Weather Dashboard</h1>")
        assert svc.get_project("ghost").error.code == "NOT_FOUND"


class TestUpdateDelete:
    def test_update(self, svc: ProjectService, store: ContentStore) -> None:
        svc.create_project(_project())
        result = svc.update_project("weather-dashboard", {"demo": "https://weather.example.com"})
        assert result.ok
        assert store.projects.find_by_slug("weather-dashboard").demo == "https://weather.example.com"

    def test_update_invalid(self, svc: ProjectService) -> None:
        svc.create_project(_project())
        result = svc.update_project("weather-dashboard", {"stack": ["  "]})
        assert "stack entries must not be blank" in result.error.detail["errors"]

    def test_delete(self, svc: ProjectService) -> None:
        svc.create_project(_project())
        assert svc.delete_project("weather-dashboard").ok
        assert svc.delete_project("weather-dashboard").error.code == "NOT_FOUND"
