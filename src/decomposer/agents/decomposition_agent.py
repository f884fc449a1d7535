"""LLM-backed decomposition producer.

The regex parser in :mod:`decomposer.core.parsing` is the reference producer
of :class:`~decomposer.core.contracts.block.Block` sequences. This module
offers a second producer that asks a model to segment the document instead.
Both produce the same contract, so the aggregator does not care which one
ran.

The model is asked for JSON only:

.. code-block:: json

    {
      "blocks": [
        {"type": "text", "content": "h3. Auth"},
        {
          "type": "task",
          "content": "body lines under the task",
          "taskInfo": {"title": "Sidebar", "repository": "xhh",
                       "estimation": "S", "risk": "XS"}
        }
      ]
    }

The payload is validated with pydantic before anything else touches it and
story points are always re-resolved from the caller's mapping, so a model
that invents SP values cannot skew the totals.

Usage
-----
.. code-block:: python

    from decomposer.agents.decomposition_agent import parse_decomposition
    from decomposer.llm.client import LLMClient

    blocks = parse_decomposition(text, llm=LLMClient.from_env())

If the model call fails for any reason, :func:`parse_decomposition` logs a
warning and returns the regex parser's output.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, Final

from pydantic import TypeAdapter, ValidationError

from decomposer.core.contracts.block import Block
from decomposer.core.mapping import SPMapping, refresh_story_points
from decomposer.core.parsing import parse_blocks
from decomposer.core.result import Result, err, ok
from decomposer.core.settings import get_logger
from decomposer.llm.client import LLMClient

logger = get_logger(__name__)

#: Logical model alias for segmentation calls.
_PARSER_MODEL_ALIAS: Final = "parser"

_BLOCKS_ADAPTER: Final = TypeAdapter(list[Block])


def _build_llm_messages(text: str) -> list[dict[str, str]]:
    """Build the JSON-only segmentation prompt for ``text``."""
    system_msg = {
        "role": "system",
        "content": (
            "You are a careful parser of JIRA task decompositions written in "
            "JIRA wiki markup. Split the document into an ordered list of text "
            "and task blocks and return ONLY JSON. Do not invent tasks, do not "
            "rewrite text, do not write explanations."
        ),
    }
    user_msg = {
        "role": "user",
        "content": (
            "A task line starts with a T-shirt size (XS, S, M, L, XL), optionally "
            "followed by '+' and a risk size, then an optional [repository] tag "
            "and the task title. The line may be prefixed by a heading marker "
            "such as 'h4.' or wrapped in '*' emphasis.\n"
            "Everything under a task up to the next task or an equal-or-higher "
            "heading belongs to that task's content.\n\n"
            "Document:\n\n"
            f"{text}\n\n"
            "Return ONLY JSON with this exact shape:\n\n"
            "{\n"
            '  "blocks": [\n'
            '    {"type": "text", "content": "..."},\n'
            "    {\n"
            '      "type": "task",\n'
            '      "content": "...",\n'
            '      "taskInfo": {\n'
            '        "title": "...",\n'
            '        "repository": "xhh",\n'
            '        "estimation": "M",\n'
            '        "risk": "XS"\n'
            "      }\n"
            "    }\n"
            "  ]\n"
            "}\n\n"
            "Rules:\n"
            "- Preserve document order; copy text verbatim.\n"
            "- `repository` and `risk` may be null.\n"
            "- Use \"?\" as `estimation` when a size token is present but unreadable.\n"
            "- Do not include any keys other than those shown."
        ),
    }
    return [system_msg, user_msg]


def _parse_llm_blocks(raw: str) -> Result[list[Block], str]:
    """Decode and validate the model payload.

    A ``{"blocks": [...]}`` object is expected; a bare list is accepted too.
    """
    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        return err(f"Decomposition agent could not parse LLM JSON: {exc}")

    if isinstance(payload, Mapping) and "blocks" in payload:
        payload = payload["blocks"]
    if not isinstance(payload, list):
        return err("Decomposition agent expected a list of blocks in the JSON output.")

    try:
        blocks = _BLOCKS_ADAPTER.validate_python(payload)
    except ValidationError as exc:
        return err(f"Decomposition agent produced invalid blocks: {exc.error_count()} error(s)")

    return ok(blocks)


class DecompositionAgent:
    """Produce blocks for a decomposition document with an LLM.

    Parameters
    ----------
    llm:
        Client used for the segmentation call. Tests pass a fake object
        exposing a compatible ``generate`` method.
    model_alias:
        Registry alias passed to :meth:`LLMClient.generate`.
    """

    def __init__(self, llm: LLMClient, model_alias: str = _PARSER_MODEL_ALIAS) -> None:
        self._llm = llm
        self._model_alias = model_alias

    def run(self, text: str, mapping: SPMapping | None = None) -> Result[tuple[Block, ...], str]:
        """Segment ``text`` and return validated blocks with SPs from ``mapping``."""
        mapping = mapping or SPMapping.default()
        if not text.strip():
            return ok(())

        try:
            raw = self._llm.generate(_build_llm_messages(text), model=self._model_alias)
        except Exception as exc:
            return err(f"Decomposition agent LLM error: {exc}")

        parsed = _parse_llm_blocks(raw)
        if parsed.is_err():
            return err(parsed.unwrap_err())

        blocks = refresh_story_points(parsed.unwrap(), mapping)
        logger.debug("Decomposition agent produced %d block(s)", len(blocks))
        return ok(blocks)


def parse_decomposition(
    text: str,
    mapping: SPMapping | None = None,
    *,
    llm: LLMClient | None = None,
) -> tuple[Block, ...]:
    """Parse ``text`` with the LLM when ``llm`` is given, else with the regex parser.

    The LLM path never raises: on any failure it logs a warning and returns
    the regex parser's blocks instead.
    """
    if llm is None:
        return parse_blocks(text, mapping)

    result = DecompositionAgent(llm).run(text, mapping)
    if result.is_ok():
        return result.unwrap()

    logger.warning("%s; falling back to the regex parser", result.unwrap_err())
    return parse_blocks(text, mapping)


__all__ = ["DecompositionAgent", "parse_decomposition"]
