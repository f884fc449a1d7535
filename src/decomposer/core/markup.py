"""JIRA wiki-markup helpers.

- :func:`normalize_text` prepares a raw field value for the parser
  (``\\n``-only line endings, HTML entities decoded).
- :func:`strip_markup` turns an inline fragment such as a task title into
  plain text.
"""

from __future__ import annotations

import html
import re

_INLINE_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\[([^|\]]+)\|[^\]]+\]"), r"\1"),  # [text|url] -> text
    (re.compile(r"\{\{([^}]+)\}\}"), r"\1"),  # {{monospace}}
    (re.compile(r"\*([^*]+)\*"), r"\1"),  # *bold*
    (re.compile(r"(?<!\w)_([^_]+)_(?!\w)"), r"\1"),  # _italic_
    (re.compile(r"(?<!\w)-([^-\s][^-]*)-(?!\w)"), r"\1"),  # -strikethrough-
    (re.compile(r"\{color(?::[^}]*)?\}"), ""),
)
_WHITESPACE = re.compile(r"\s+")


def normalize_text(raw: str | None) -> str:
    """Return ``raw`` with ``\\r\\n``/``\\r`` turned into ``\\n`` and entities unescaped."""
    if not raw:
        return ""
    text = raw.replace("\r\n", "\n").replace("\r", "\n")
    return html.unescape(text)


def strip_markup(fragment: str) -> str:
    """Remove inline JIRA formatting from a single-line fragment.

    Stray emphasis markers left at either end (``Sidebar*``) are dropped as
    well, and runs of whitespace collapse to one space.

    >>> strip_markup("*Sidebar* for {{xhh}}  [docs|https://example.com]*")
    'Sidebar for xhh docs'
    """
    text = fragment
    for pattern, replacement in _INLINE_RULES:
        text = pattern.sub(replacement, text)
    text = text.strip().strip("*").strip()
    return _WHITESPACE.sub(" ", text)


__all__ = ["normalize_text", "strip_markup"]
