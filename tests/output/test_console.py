"""Tests for Rich Console factory and theme."""

from io import StringIO

from contentctl.output.console import (
    CONTENT_THEME,
    create_console,
    get_output,
    style_for_status,
)


class TestCreateConsole:
    def test_returns_console_with_stringio(self) -> None:
        assert isinstance(create_console().file, StringIO)

    def test_no_color_disables_ansi(self) -> None:
        console = create_console(no_color=True)
        console.print("[content.error]broken[/content.error]")
        output = get_output(console)
        assert "\x1b" not in output
        assert "broken" in output

    def test_width(self) -> None:
        assert create_console().width == 120
        assert create_console(width=80).width == 80


class TestStatusStyles:
    def test_known_statuses(self) -> None:
        for status in ("draft", "published", "scheduled", "archived"):
            assert style_for_status(status) == f"content.status.{status}"
            assert f"content.status.{status}" in CONTENT_THEME.styles

    def test_unknown_status(self) -> None:
        assert style_for_status("deleted") == ""
