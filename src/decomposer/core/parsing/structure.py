"""Structural parser: classified lines -> ordered :class:`Block` sequence.

The scan is a single left fold over the classified lines. All parser state
lives in an immutable :class:`ScanState` value that each step returns anew;
blocks are emitted as soon as they are complete.

Scoping rules
-------------
- A task opened by ``h<N>.`` runs until the next task line or the next
  heading of level ``<= N``. Deeper headings belong to the task body.
- A task opened without a heading prefix (``*S [x] Title*`` or a bare
  ``S [x] Title``) is unbounded: the next task line or *any* heading closes
  it; prose never does.
- The line that closes a task is not part of it; it is processed again with
  no task open.
- Prose outside tasks accumulates into text blocks; whitespace-only runs are
  dropped. A text block that ends at a task line loses its trailing blank
  lines, the final one is kept as written.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from dataclasses import dataclass, replace
from typing import Final

from decomposer.core.contracts.block import Block, TaskInfo
from decomposer.core.mapping import SPMapping
from decomposer.core.parsing.lines import ClassifiedLine, LineKind, classify_line
from decomposer.core.parsing.tokens import build_task_info
from decomposer.core.settings import get_logger

logger = get_logger(__name__)

#: Scope of a task opened without a heading prefix (heading levels are 1-6).
UNBOUNDED: Final = 7


@dataclass(frozen=True, slots=True)
class OpenTask:
    """A task whose body is still being collected."""

    info: TaskInfo
    level: int
    title_index: int

    def closes_on(self, line: ClassifiedLine) -> bool:
        if line.kind is LineKind.TASK:
            return True
        return line.kind is LineKind.HEADING and line.level is not None and line.level <= self.level


@dataclass(frozen=True, slots=True)
class ScanState:
    """Fold accumulator.

    ``text_start`` is the index of the first pending prose line, ``task`` the
    open task, ``context_level`` the scope of the most recently closed task
    (cleared by a heading that outranks it).
    """

    text_start: int | None = None
    task: OpenTask | None = None
    context_level: int | None = None


def _join(lines: Sequence[str], start: int, end: int) -> str:
    return "\n".join(lines[start:end])


def _task_body(lines: Sequence[str], task: OpenTask, end: int) -> str:
    body = list(lines[task.title_index + 1 : end])
    while body and not body[0].strip():
        body.pop(0)
    return "\n".join(body).rstrip()


def _flush_text(
    state: ScanState, lines: Sequence[str], end: int, *, trim_end: bool = False
) -> tuple[Block, ...]:
    if state.text_start is None:
        return ()
    content = _join(lines, state.text_start, end)
    if trim_end:
        content = content.rstrip()
    if not content.strip():
        return ()
    return (Block.of_text(content),)


def _close_task(task: OpenTask, lines: Sequence[str], end: int) -> Block:
    return Block.of_task(_task_body(lines, task, end), task.info)


def step(
    state: ScanState,
    index: int,
    line: ClassifiedLine,
    lines: Sequence[str],
    mapping: SPMapping,
) -> tuple[ScanState, tuple[Block, ...]]:
    """Advance the fold by one line; return the new state and any finished blocks."""
    emitted: tuple[Block, ...] = ()

    if state.task is not None:
        if not state.task.closes_on(line):
            return state, ()
        emitted = (_close_task(state.task, lines, index),)
        state = ScanState(context_level=state.task.level)

    if line.kind is LineKind.TASK:
        emitted += _flush_text(state, lines, index, trim_end=True)
        info = build_task_info(
            line.title or "",
            line.token,
            mapping,
            repository=line.repository,
        )
        task = OpenTask(info=info, level=line.level or UNBOUNDED, title_index=index)
        return ScanState(task=task, context_level=state.context_level), emitted

    if (
        line.kind is LineKind.HEADING
        and state.context_level is not None
        and line.level is not None
        and line.level <= state.context_level
    ):
        state = replace(state, context_level=None)

    if state.text_start is None:
        state = replace(state, text_start=index)
    return state, emitted


def finish(state: ScanState, lines: Sequence[str]) -> tuple[Block, ...]:
    """Emit whatever is still open at end of input."""
    end = len(lines)
    if state.task is not None:
        return (_close_task(state.task, lines, end),)
    return _flush_text(state, lines, end)


def iter_blocks(text: str, mapping: SPMapping | None = None) -> Iterator[Block]:
    """Yield blocks of ``text`` in document order."""
    mapping = mapping or SPMapping.default()
    lines = text.split("\n")
    state = ScanState()
    for index, raw in enumerate(lines):
        state, emitted = step(state, index, classify_line(raw), lines, mapping)
        yield from emitted
    yield from finish(state, lines)


def parse_blocks(text: str, mapping: SPMapping | None = None) -> tuple[Block, ...]:
    """Split a normalised decomposition into an immutable block sequence.

    Parameters
    ----------
    text:
        Decomposition text with ``\\n`` line endings and decoded entities
        (see :func:`decomposer.core.markup.normalize_text`).
    mapping:
        Size -> story point mapping used to fill ``estimation_sp``/``risk_sp``.
        Defaults to :meth:`SPMapping.default`.

    Returns
    -------
    tuple[Block, ...]
        Blocks in document order. Blank input yields an empty tuple; input
        without task lines yields one text block equal to the input.
    """
    if not text.strip():
        return ()
    blocks = tuple(iter_blocks(text, mapping))
    logger.debug(
        "parse_blocks: %d blocks (%d tasks) from %d lines",
        len(blocks),
        sum(1 for b in blocks if b.is_task),
        text.count("\n") + 1,
    )
    return blocks


__all__ = ["OpenTask", "ScanState", "UNBOUNDED", "finish", "iter_blocks", "parse_blocks", "step"]
