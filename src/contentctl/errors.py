"""Typed exceptions raised by the domain and infrastructure layers.

Services catch these and translate them into ``ServiceResult`` errors;
nothing above the service layer should need to import this module.
"""

from __future__ import annotations


class ContentError(Exception):
    """Base class for every content store failure."""

    code = "CONTENT_ERROR"


class NotFound(ContentError):
    code = "NOT_FOUND"

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"No {kind} found with slug: {key}")


class DuplicateSlug(ContentError):
    code = "DUPLICATE_SLUG"

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"A {kind} with slug {key!r} already exists")


class ValidationFailure(ContentError):
    """A record failed its rule table; ``errors`` holds every message."""

    code = "VALIDATION_FAILED"

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class ConcurrentModification(ContentError):
    """A file changed between read and write."""

    code = "CONFLICT"

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"File changed while it was being updated: {path}")


class IOFailure(ContentError):
    """Wraps an ``OSError`` from the storage layer."""

    code = "IO_ERROR"

    def __init__(self, action: str, path: str, cause: OSError) -> None:
        self.action = action
        self.path = path
        super().__init__(f"Failed to {action} {path}: {cause}")
