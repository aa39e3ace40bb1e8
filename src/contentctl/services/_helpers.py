"""Shared service-layer helper functions."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any


def now_iso() -> str:
    """Current UTC time as standard ISO 8601."""
    return datetime.now(UTC).isoformat()


def now_compact() -> str:
    """Current UTC time as compact ISO (YYYYMMDDTHHmmss, for backup filenames)."""
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%S")


def ranked_counts(values: Iterable[str], *, limit: int | None = None) -> list[dict[str, Any]]:
    """Count *values* and return ``[{"name", "count"}]`` by descending count.

    Ties keep first-seen order.

    Examples:
        >>> ranked_counts(["go", "rust", "go"])
        [{'name': 'go', 'count': 2}, {'name': 'rust', 'count': 1}]
    """
    counts = Counter(v for v in values if v)
    return [{"name": name, "count": count} for name, count in counts.most_common(limit)]


def count_by(values: Iterable[str]) -> dict[str, int]:
    """Occurrences of each non-empty value, in first-seen order."""
    counts: dict[str, int] = {}
    for value in values:
        if value:
            counts[value] = counts.get(value, 0) + 1
    return counts
