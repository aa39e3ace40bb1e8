"""Minimal markdown-to-HTML rendering for record bodies.

This is a line-oriented substitution pass, not a CommonMark renderer:
headings, bold, italic, fenced and inline code, links, and paragraph
breaks. Output is meant for previews and exports.
"""

from __future__ import annotations

import html
import re

_FENCE = re.compile(r"```[^\n]*\n(.*?)```", re.DOTALL)
_HEADING = re.compile(r"^(#{1,6}) (.*)$", re.MULTILINE)
_BOLD = re.compile(r"\*\*(.+?)\*\*")
_ITALIC = re.compile(r"\*(.+?)\*")
_INLINE_CODE = re.compile(r"`([^`]+)`")
_LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_BLOCK_TAG = re.compile(r"^<(h[1-6]|pre)>")


def _heading(match: re.Match[str]) -> str:
    level = len(match.group(1))
    return f"<h{level}>{match.group(2).strip()}</h{level}>"


def _inline(text: str) -> str:
    text = _INLINE_CODE.sub(lambda m: f"<code>{html.escape(m.group(1))}</code>", text)
    text = _BOLD.sub(r"<strong>\1</strong>", text)
    text = _ITALIC.sub(r"<em>\1</em>", text)
    return _LINK.sub(r'<a href="\2" target="_blank" rel="noopener noreferrer">\1</a>', text)


def render_markdown(text: str) -> str:
    """Render *text* to an HTML fragment. Empty input renders as ``""``."""
    if not text.strip():
        return ""

    # Fenced blocks are swapped out first so their contents stay literal.
    blocks: list[str] = []

    def _stash(match: re.Match[str]) -> str:
        blocks.append(f"<pre><code>{html.escape(match.group(1).rstrip())}</code></pre>")
        return f"\n\n\x00{len(blocks) - 1}\x00\n\n"

    source = _FENCE.sub(_stash, text.replace("\r\n", "\n"))
    source = _HEADING.sub(lambda m: f"\n\n{_heading(m)}\n\n", source)

    parts: list[str] = []
    for chunk in re.split(r"\n{2,}", source):
        chunk = chunk.strip()
        if not chunk:
            continue
        if chunk.startswith("\x00") and chunk.endswith("\x00"):
            parts.append(blocks[int(chunk.strip("\x00"))])
        elif _BLOCK_TAG.match(chunk):
            parts.append(_inline(chunk))
        else:
            parts.append(f"<p>{_inline(chunk).replace(chr(10), '<br>')}</p>")
    return "\n".join(parts)
