"""Tests for slug and file-name derivation."""

import pytest

from contentctl.domain.ids import generate_file_name, generate_slug, is_valid_slug


class TestGenerateSlug:
    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Hello World", "hello-world"),
            ("Intro to Go: Part 1!", "intro-to-go-part-1"),
            ("  --Hello   World--  ", "hello-world"),
            ("C++ & Rust", "c-rust"),
            ("already-a-slug", "already-a-slug"),
            ("Ünïcödé Title", "ncd-title"),
            ("!!!", ""),
        ],
    )
    def test_examples(self, title: str, expected: str) -> None:
        assert generate_slug(title) == expected

    @pytest.mark.parametrize(
        "title",
        ["Hello World", "  A -- B  ", "React & TypeScript: 2024 Edition", "---", "Tabs\tand\nlines"],
    )
    def test_idempotent(self, title: str) -> None:
        once = generate_slug(title)
        assert generate_slug(once) == once

    def test_output_is_valid_slug(self) -> None:
        assert is_valid_slug(generate_slug("Any Title At All 42"))


class TestGenerateFileName:
    def test_keeps_case_and_spaces(self) -> None:
        assert generate_file_name("My Post: Part 2!") == "My Post Part 2.md"

    def test_collapses_whitespace(self) -> None:
        assert generate_file_name("  A \t  B  ") == "A B.md"

    def test_directory_names_have_no_suffix(self) -> None:
        assert generate_file_name("Python Basics", suffix="") == "Python Basics"


class TestIsValidSlug:
    def test_valid(self) -> None:
        assert is_valid_slug("hello-world-2")

    def test_invalid(self) -> None:
        assert not is_valid_slug("Hello World")
        assert not is_valid_slug("")
