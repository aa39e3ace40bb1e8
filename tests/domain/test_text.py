"""Tests for excerpt, word count, and read-time derivations."""

from contentctl.domain.text import make_excerpt, plain_text, read_time, word_count


class TestReadTime:
    def test_rounds_up(self) -> None:
        assert read_time("word " * 201) == 2

    def test_exact_minute(self) -> None:
        assert read_time("word " * 200) == 1

    def test_empty(self) -> None:
        assert read_time("") == 0

    def test_custom_speed(self) -> None:
        assert read_time("word " * 100, words_per_minute=50) == 2


class TestExcerpt:
    def test_strips_markdown(self) -> None:
        text = "## Title\n**bold** and *italic* with `code` and [a link](https://x.io) <b>tag</b>"
        assert plain_text(text) == "Title\nbold and italic with code and a link tag"

    def test_short_text_unchanged(self) -> None:
        assert make_excerpt("Short body.") == "Short body."

    def test_truncates_with_ellipsis(self) -> None:
        excerpt = make_excerpt("a" * 200, max_length=150)
        assert excerpt == "a" * 150 + "..."

    def test_word_count(self) -> None:
        assert word_count("  one two\nthree  ") == 3
        assert word_count("") == 0
