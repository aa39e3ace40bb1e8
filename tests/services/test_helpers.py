"""Tests for shared service helpers."""

from __future__ import annotations

import re

from contentctl.services._helpers import count_by, now_compact, now_iso, ranked_counts


class TestRankedCounts:
    def test_descending_with_first_seen_ties(self) -> None:
        assert ranked_counts(["rust", "go", "go", "zig", "rust", "c"]) == [
            {"name": "rust", "count": 2},
            {"name": "go", "count": 2},
            {"name": "zig", "count": 1},
            {"name": "c", "count": 1},
        ]

    def test_limit_and_blank_values(self) -> None:
        assert ranked_counts(["a", "", "b", "a"], limit=1) == [{"name": "a", "count": 2}]


class TestCountBy:
    def test_first_seen_order(self) -> None:
        assert count_by(["b", "a", "b", ""]) == {"b": 2, "a": 1}


class TestTimestamps:
    def test_compact(self) -> None:
        assert re.fullmatch(r"\d{8}T\d{6}", now_compact())

    def test_iso_has_offset(self) -> None:
        assert now_iso().endswith("+00:00")
