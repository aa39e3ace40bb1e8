"""Query primitives shared by the flat and composite repositories.

Every query is answered by decoding the records, then filtering, sorting
and slicing them in memory. The helpers here operate on the records'
camelCase JSON projection so the same query means the same thing for
every kind.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, Literal, TypeVar

from contentctl.domain.records import Record, parse_timestamp

R = TypeVar("R", bound=Record)

SortOrder = Literal["asc", "desc"]

# Sort keys compared as timestamps; missing or malformed values sort as epoch.
DATE_FIELDS = frozenset({"publishedAt", "createdAt", "updatedAt"})


@dataclass(frozen=True)
class RecordQuery:
    """Filter, sort, and pagination options for a repository listing.

    ``None`` means "no constraint". ``sort_by`` defaults to the
    repository's kind-specific date field.
    """

    status: str | None = None
    featured: bool | None = None
    category: str | None = None
    tag: str | None = None
    author: str | None = None
    search: str | None = None
    limit: int | None = None
    offset: int = 0
    sort_by: str | None = None
    sort_order: SortOrder = "desc"

    def to_dict(self) -> dict[str, Any]:
        """Return only the options that are set, for result payloads."""
        data: dict[str, Any] = {}
        for name in ("status", "featured", "category", "tag", "author", "search"):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        return data


@dataclass(frozen=True)
class Page(Generic[R]):
    """One slice of a filtered, sorted listing."""

    items: list[R] = field(default_factory=list)
    total: int = 0
    has_more: bool = False


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


def _has_tag(data: dict[str, Any], tag: str) -> bool:
    tags = data.get("tags")
    if isinstance(tags, list) and tag in tags:
        return True
    stack = data.get("stack")
    if isinstance(stack, list) and tag in stack:
        return True
    return data.get("tag") == tag


def matches_filters(record: Record, query: RecordQuery) -> bool:
    """True if *record* satisfies every filter set on *query*.

    Filters are a conjunction. ``tag`` matches membership in ``tags`` or
    ``stack``, or equality with a single ``tag`` field.
    """
    data = record.to_json(include_stats=False)
    if query.status is not None and data.get("status") != query.status:
        return False
    if query.featured is not None and bool(data.get("featured")) != query.featured:
        return False
    if query.category is not None and data.get("category") != query.category:
        return False
    if query.author is not None and data.get("author") != query.author:
        return False
    return query.tag is None or _has_tag(data, query.tag)


def matches_search(record: Record, term: str, fields: Iterable[str] | None = None) -> bool:
    """Case-insensitive substring match of *term* across text fields.

    List-valued fields match when any item contains the term. An empty
    term matches everything.
    """
    needle = term.lower()
    if not needle:
        return True
    if fields is None:
        values = list(record.search_values())
    else:
        data = record.to_json(include_stats=False)
        values = [data.get(key) for key in fields]
    for value in values:
        if isinstance(value, list):
            if any(needle in str(item).lower() for item in value):
                return True
        elif isinstance(value, str) and needle in value.lower():
            return True
    return False


# ---------------------------------------------------------------------------
# Sorting and pagination
# ---------------------------------------------------------------------------


def _sort_key(value: Any, *, is_date: bool) -> tuple[int, float, str]:
    if is_date:
        parsed = parse_timestamp(value if isinstance(value, str) else None)
        return (1, parsed.timestamp() if parsed else 0.0, "")
    if value is None or value == "":
        return (0, 0.0, "")
    if isinstance(value, (bool, int, float)):
        return (1, float(value), "")
    return (1, 0.0, str(value).lower())


def sort_records(records: Sequence[R], sort_by: str, sort_order: SortOrder = "desc") -> list[R]:
    """Sort *records* by the JSON key *sort_by*.

    Date keys compare as timestamps, with a missing or unparsable value
    treated as the epoch, so those records land last under a descending
    sort. The sort is stable and never raises on mixed value types.
    """
    is_date = sort_by in DATE_FIELDS
    keyed = [
        (_sort_key(record.to_json(include_stats=False).get(sort_by), is_date=is_date), record)
        for record in records
    ]
    keyed.sort(key=lambda pair: pair[0], reverse=sort_order == "desc")
    return [record for _, record in keyed]


def paginate(records: Sequence[R], *, offset: int = 0, limit: int | None = None) -> Page[R]:
    """Slice *records*; ``has_more`` is set only when a limit cuts the list short."""
    total = len(records)
    end = total if limit is None else offset + limit
    return Page(
        items=list(records[offset:end]),
        total=total,
        has_more=limit is not None and total > offset + limit,
    )


def run_query(
    records: Iterable[R],
    query: RecordQuery,
    *,
    default_sort: str,
) -> Page[R]:
    """Filter, search, sort, and paginate *records* according to *query*."""
    selected = [r for r in records if matches_filters(r, query)]
    if query.search:
        selected = [r for r in selected if matches_search(r, query.search)]
    ordered = sort_records(selected, query.sort_by or default_sort, query.sort_order)
    return paginate(ordered, offset=query.offset, limit=query.limit)
