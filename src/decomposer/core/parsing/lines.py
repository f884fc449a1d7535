"""Line classifier for decomposition documents.

Every line of a decomposition is one of:

TASK
    A task declaration: optional ``h<N>.`` heading prefix and/or ``*``
    emphasis marker, a size token, an optional ``[repository]`` tag, then the
    title, optionally closed by ``*``::

        h3. M+S [xhh] Sidebar redesign
        *S+ [backend] New endpoint*
        XL [db] Migrate vacancies

HEADING
    ``h<N>. text`` where ``text`` does not start with a size token.

TEXT
    Anything else.

The size token has to be followed by whitespace, ``[``, ``*`` or the end of
the line, so words such as ``Summary`` or ``List`` never read as sizes.
Tokens that start like a size but continue with an unknown combination
(``M+XXL``) still make a task line; the token extractor turns them into the
``"?"`` estimate.

The title must start with a word character (or an opening bracket or quote),
so a bold size letter used in prose such as ``*S*: small`` stays text.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

from decomposer.core.markup import strip_markup

_HEADING_LINE = re.compile(r"^\s*h(?P<level>[1-6])\.\s*(?P<text>.*?)\s*$")

_TASK_LINE = re.compile(
    r"""
    ^\s*
    (?:h(?P<level>[1-6])\.\s*)?          # heading prefix
    (?P<emphasis>\*)?\s*                 # emphasis marker
    (?P<token>(?i:XS|XL|S|M|L)(?:\+[A-Za-z]*)?)
    (?=[\s\[*]|$)
    \s*
    (?:\[(?P<repository>[^\]|]*)\])?     # first bracketed group, links excluded
    (?P<title>.*?)
    \s*$
    """,
    re.VERBOSE,
)

#: A title has to start like a word; "*S*: note" is bold prose, not a task.
_TITLE_START = re.compile(r"[\w(\"'«“]")


class LineKind(Enum):
    TASK = "task"
    HEADING = "heading"
    TEXT = "text"


@dataclass(frozen=True, slots=True)
class ClassifiedLine:
    """A source line plus what the classifier recognised in it.

    ``level`` is the heading level for headings and heading-prefixed tasks,
    ``None`` otherwise. ``token``, ``repository`` and ``title`` are only set
    for task lines.
    """

    kind: LineKind
    raw: str
    level: int | None = None
    token: str | None = None
    repository: str | None = None
    title: str | None = None

    @property
    def is_task(self) -> bool:
        return self.kind is LineKind.TASK

    @property
    def is_heading(self) -> bool:
        return self.kind is LineKind.HEADING


def _match_task(line: str) -> ClassifiedLine | None:
    match = _TASK_LINE.match(line)
    if match is None:
        return None
    title = strip_markup(match.group("title"))
    if not title or _TITLE_START.match(title) is None:
        return None
    level = match.group("level")
    repository = match.group("repository")
    return ClassifiedLine(
        kind=LineKind.TASK,
        raw=line,
        level=int(level) if level else None,
        token=match.group("token"),
        repository=repository.strip().lower() or None if repository else None,
        title=title,
    )


def classify_line(line: str) -> ClassifiedLine:
    """Classify a single line; never raises."""
    task = _match_task(line)
    if task is not None:
        return task
    heading = _HEADING_LINE.match(line)
    if heading is not None:
        return ClassifiedLine(kind=LineKind.HEADING, raw=line, level=int(heading.group("level")))
    return ClassifiedLine(kind=LineKind.TEXT, raw=line)


def classify_lines(lines: Iterable[str]) -> Iterator[ClassifiedLine]:
    """Lazily classify ``lines`` in order."""
    return (classify_line(line) for line in lines)


__all__ = ["ClassifiedLine", "LineKind", "classify_line", "classify_lines"]
