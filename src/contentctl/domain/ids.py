"""Slug and file-name derivation.

Two identities coexist for a stored record:

- Slug: URL-safe identifier stored in the ``slug`` frontmatter key. This is
  the only identity used for lookups.
- File name: chosen once at creation time from the record *title*. It is
  never used to answer "which record is this".

INVARIANT: ``generate_slug(generate_slug(t)) == generate_slug(t)``.
"""

from __future__ import annotations

import re

SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")

_SLUG_STRIP = re.compile(r"[^a-z0-9\s-]")
_FILENAME_STRIP = re.compile(r"[^a-zA-Z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def generate_slug(title: str) -> str:
    """Derive a URL-safe slug from *title*.

    Lowercases, drops everything outside ``[a-z0-9\\s-]``, turns whitespace
    runs into a single hyphen, collapses repeated hyphens, and trims
    hyphens from both ends.

    Examples:
        >>> generate_slug("Intro to Go: Part 1!")
        'intro-to-go-part-1'
        >>> generate_slug("  --Hello   World--  ")
        'hello-world'
    """
    text = _SLUG_STRIP.sub("", title.lower())
    text = _WHITESPACE.sub("-", text)
    text = _HYPHENS.sub("-", text)
    return text.strip("-")


def generate_file_name(title: str, suffix: str = ".md") -> str:
    """Derive an on-disk file (or directory) name from *title*.

    Keeps letters, digits, spaces, and hyphens; normalises whitespace runs
    to one space. Case is preserved, so ``"My Post"`` becomes
    ``"My Post.md"``.
    """
    safe = _FILENAME_STRIP.sub("", title)
    safe = _WHITESPACE.sub(" ", safe).strip()
    return f"{safe}{suffix}"


def is_valid_slug(slug: str) -> bool:
    """Check whether *slug* is already in canonical slug form."""
    return SLUG_PATTERN.match(slug) is not None
