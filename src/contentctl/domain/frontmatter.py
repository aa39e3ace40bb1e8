"""Frontmatter codec: line-oriented metadata block above a free-form body.

The on-disk shape is::

    ---
    key: value
    quoted: "literal"
    tags:
      - item1
      - item2
    summary: >-
      folded multi-line
      content continues
    ---
    <body text>

``decode`` is a single forward pass over the metadata lines with three
mutually exclusive modes (normal, array, multiline). It never raises:
input without the two delimiter lines comes back as ``({}, text)``.

``encode`` is the inverse for every value shape ``decode`` produces.
Known lossy cases of the round trip:

- the body is returned stripped of surrounding whitespace;
- folded lines lose their own leading/trailing whitespace;
- list items are written bare (only blank items are quoted), so an item
  wrapped in quotes loses them;
- an empty metadata map renders as ``---\\n---`` which does not decode
  as frontmatter.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

Value = str | bool | int | float | list[Any]

# Declared per-key types accepted by ``decode(schema=...)``.
FieldType = type

DELIMITER = "---"
FOLD_THRESHOLD = 50

_FRONTMATTER_RE = re.compile(r"\A---\n(.*?)\n---\n(.*)\Z", re.DOTALL)
_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_HEX_RE = re.compile(r"^0[xX][0-9a-fA-F]+$")


# ---------------------------------------------------------------------------
# Scalar classification
# ---------------------------------------------------------------------------


def parse_number(value: str) -> int | float | None:
    """Return *value* as a number if it parses fully as one, else None.

    Integral literals become ``int``; decimals and exponents become
    ``float``. Hex literals (``0x1F``) are accepted. Words such as
    ``NaN`` or ``Infinity`` are not numbers here.
    """
    if not value:
        return None
    if _HEX_RE.match(value):
        return int(value, 16)
    if _INTEGER_RE.match(value):
        return int(value)
    if _DECIMAL_RE.match(value):
        return float(value)
    return None


def _is_quoted(value: str) -> bool:
    return len(value) >= 1 and value[0] in "\"'" and value.endswith(value[0])


def _parse_array_literal(value: str) -> list[Any] | str:
    """Parse ``[...]`` as a strict JSON array, falling back to the raw string."""
    try:
        parsed = json.loads(value)
    except ValueError:
        return value
    if not isinstance(parsed, list):
        return value
    return parsed


def _coerce(key: str, value: Any, declared: FieldType) -> Any:
    """Coerce an inferred value to its declared type where that is lossless."""
    if isinstance(value, declared) and not (declared is int and isinstance(value, bool)):
        if declared is list:
            return [str(item) if not isinstance(item, str) else item for item in value]
        return value

    coerced: Any = None
    if declared is str:
        if isinstance(value, bool):
            coerced = "true" if value else "false"
        elif isinstance(value, (int, float)):
            coerced = str(value)
    elif declared is bool:
        if isinstance(value, str) and value in ("true", "false"):
            coerced = value == "true"
    elif declared is int:
        if isinstance(value, float) and value.is_integer():
            coerced = int(value)
        elif isinstance(value, str):
            number = parse_number(value.strip())
            if isinstance(number, int):
                coerced = number
    elif declared is float:
        if isinstance(value, int) and not isinstance(value, bool):
            coerced = float(value)
        elif isinstance(value, str):
            number = parse_number(value.strip())
            if number is not None:
                coerced = float(number)
    elif declared is list:
        if isinstance(value, str) and value:
            coerced = [value]
        elif isinstance(value, (bool, int, float)):
            coerced = [str(value).lower() if isinstance(value, bool) else str(value)]

    if coerced is None:
        logger.debug("Cannot coerce %r to %s for key %r", value, declared.__name__, key)
        return value
    return coerced


# ---------------------------------------------------------------------------
# Decoder
# ---------------------------------------------------------------------------


class _BlockParser:
    """Single forward pass over the metadata lines."""

    def __init__(self, schema: Mapping[str, FieldType] | None) -> None:
        self.schema = schema or {}
        self.data: dict[str, Value] = {}
        self.current_key: str | None = None
        self.array: list[Any] | None = None
        self.multiline: str | None = None

    def feed(self, line: str) -> None:
        if self.array is not None:
            stripped = line.strip()
            if stripped == "-" or stripped.startswith("- "):
                item = stripped[1:].strip()
                if len(item) >= 2 and _is_quoted(item):
                    item = item[1:-1]
                self.array.append(item)
                return
            self._close_array()

        if self.multiline is not None:
            if line.strip() == "" or line.startswith("  "):
                piece = line.strip()
                self.multiline = f"{self.multiline}\n{piece}" if self.multiline else piece
                return
            self._close_multiline()

        self._normal(line)

    def finish(self) -> dict[str, Value]:
        if self.array is not None:
            self._close_array()
        if self.multiline is not None:
            self._close_multiline()
        return self.data

    def _normal(self, line: str) -> None:
        if line.strip().startswith("- "):
            return
        colon = line.find(":")
        if colon <= 0:
            return

        key = line[:colon].strip()
        value = line[colon + 1 :].strip()
        self.current_key = key
        declared = self.schema.get(key)

        if value == "":
            self.array = []
            return
        if _is_quoted(value):
            self._assign(key, value[1:-1])
            return
        if value.startswith(">-"):
            self.multiline = value[2:].strip()
            return
        if declared is str:
            self._assign(key, value)
            return
        if value in ("true", "false"):
            self._assign(key, value == "true")
            return
        number = parse_number(value)
        if number is not None:
            self._assign(key, number)
            return
        if value.startswith("[") and value.endswith("]"):
            self._assign(key, _parse_array_literal(value))
            return
        self._assign(key, value)

    def _assign(self, key: str, value: Any) -> None:
        declared = self.schema.get(key)
        if declared is not None:
            value = _coerce(key, value, declared)
        self.data[key] = value

    def _close_array(self) -> None:
        if self.current_key is not None and self.array is not None:
            self._assign(self.current_key, self.array)
        self.array = None

    def _close_multiline(self) -> None:
        if self.current_key is not None and self.multiline is not None:
            self._assign(self.current_key, self.multiline)
        self.multiline = None


def decode(
    text: str,
    *,
    schema: Mapping[str, FieldType] | None = None,
) -> tuple[dict[str, Value], str]:
    """Split *text* into ``(metadata, body)``.

    Args:
        text: Raw file content. ``\\r\\n`` line endings are normalised.
        schema: Optional declared type per key. Declared keys are coerced
            to that type instead of relying on inference alone, so a
            numeric-looking title stays a string.

    Returns:
        Ordered metadata dict and the stripped body. If the delimiter
        pattern is absent, returns ``({}, text)`` with *text* unchanged.
    """
    normalized = text.replace("\r\n", "\n")
    match = _FRONTMATTER_RE.match(normalized)
    if match is None:
        if normalized.startswith(DELIMITER):
            logger.debug("Frontmatter delimiters incomplete; treating content as body")
        return {}, text

    parser = _BlockParser(schema)
    for line in match.group(1).split("\n"):
        parser.feed(line)
    return parser.finish(), match.group(2).strip()


# ---------------------------------------------------------------------------
# Encoder
# ---------------------------------------------------------------------------


def _render_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    return f"'{value}'"


def encode(
    body: str,
    metadata: Mapping[str, Any],
    *,
    fold_threshold: int = FOLD_THRESHOLD,
) -> str:
    """Render *metadata* and *body* into frontmatter text.

    Keys are emitted in insertion order. ``None`` values are skipped.
    Strings longer than *fold_threshold* or containing a newline are
    written as ``>-`` folded blocks.

    Raises:
        TypeError: If a value is not a string, bool, number, or list.
    """
    lines = [DELIMITER]
    for key, value in metadata.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            lines.append(f"{key}:")
            lines.extend(f"  - {_render_item(item)}" for item in value)
        elif isinstance(value, str) and ("\n" in value or len(value) > fold_threshold):
            lines.append(f"{key}: >-")
            lines.extend(f"  {part}" for part in value.split("\n"))
        elif isinstance(value, (str, bool, int, float)):
            lines.append(f"{key}: {_render_scalar(value)}")
        else:
            msg = f"Unsupported frontmatter value for {key!r}: {type(value).__name__}"
            raise TypeError(msg)
    lines.append(DELIMITER)
    return "\n".join(lines) + "\n\n" + body


def _render_item(item: Any) -> str:
    if isinstance(item, bool):
        return "true" if item else "false"
    text = str(item)
    if text.strip() == "":
        return f'"{text}"'
    return text
