"""
Estimator agent: ask a model for a T-shirt size per task.

The proposals are attached to each task as ``estimation_by_llm`` (wire name
``estimationByLLM``). Human estimates are never overwritten; the aggregator
only uses a proposal for tasks that carry no human size, and reports the
full model aggregate separately under ``Estimation.llm``.

Tasks are addressed by their position among task blocks (0-based), which
keeps the prompt short and the reply unambiguous.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any, Final

from pydantic import TypeAdapter, ValidationError

from decomposer.core.contracts.block import Block, LLMEstimation
from decomposer.core.result import Result, err, ok
from decomposer.core.settings import get_logger
from decomposer.llm.client import LLMClient

logger = get_logger(__name__)

_ESTIMATOR_MODEL_ALIAS: Final = "estimator"

#: Body excerpt length included per task in the prompt.
_CONTENT_PREVIEW_CHARS: Final = 400


class _Proposal(LLMEstimation):
    index: int


_PROPOSAL_ADAPTER: Final = TypeAdapter(_Proposal)


def _build_estimator_messages(tasks: Sequence[Block]) -> list[Mapping[str, str]]:
    lines: list[str] = []
    for index, block in enumerate(tasks):
        info = block.task_info
        if info is None:
            continue
        repo = f" [{info.repository}]" if info.repository else ""
        body = block.content.strip()[:_CONTENT_PREVIEW_CHARS]
        lines.append(f"[{index}]{repo} {info.title}" + (f"\n    {body}" if body else ""))

    system_content = """You are a senior engineer estimating development tasks.

For every task, propose a T-shirt size for the base effort and, if the task
carries notable uncertainty, a risk size on top of it.

Sizes: XS, S, M, L, XL.

Output format (VERY IMPORTANT):
Return only a single JSON object with this structure:

{
  "estimates": [
    {"index": 0, "estimation": "M", "risk": "XS", "reasoning": "One sentence."}
  ]
}

Rules:
- One entry per task index you were given.
- "risk" may be null.
- Do not wrap the JSON in backticks or Markdown.
"""

    user_content = "Tasks:\n\n" + "\n".join(lines)

    return [
        {"role": "system", "content": system_content},
        {"role": "user", "content": user_content},
    ]


def _parse_estimates_json(raw: str) -> Result[dict[int, LLMEstimation], str]:
    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        return err(f"Estimator agent could not parse LLM JSON: {exc}")

    if not isinstance(payload, Mapping):
        return err("Estimator agent expected JSON object as root.")

    estimates = payload.get("estimates", [])
    if not isinstance(estimates, list):
        return err("Estimator agent expected 'estimates' to be a list in the JSON output.")

    by_index: dict[int, LLMEstimation] = {}
    for position, entry in enumerate(estimates):
        try:
            proposal = _PROPOSAL_ADAPTER.validate_python(entry)
        except ValidationError as exc:
            logger.warning(
                "Skipping estimate #%d: %d validation error(s)", position, exc.error_count()
            )
            continue
        if proposal.estimation is None:
            continue
        by_index[proposal.index] = LLMEstimation(
            estimation=proposal.estimation,
            risk=proposal.risk,
            reasoning=proposal.reasoning,
        )

    if not by_index:
        return err("Estimator agent produced no usable estimates.")

    return ok(by_index)


class EstimatorAgent:
    """Attach model-proposed sizes to the task blocks of a decomposition."""

    def __init__(self, llm: LLMClient, model_alias: str = _ESTIMATOR_MODEL_ALIAS) -> None:
        self._llm = llm
        self._model_alias = model_alias

    def run(self, blocks: Sequence[Block]) -> Result[tuple[Block, ...], str]:
        """Return ``blocks`` with ``estimation_by_llm`` filled where the model answered.

        On failure the blocks are left untouched and an ``Err`` is returned.
        """
        tasks = [b for b in blocks if b.is_task]
        if not tasks:
            return ok(tuple(blocks))

        try:
            raw = self._llm.generate(
                _build_estimator_messages(tasks),
                model=self._model_alias,
            )
        except Exception as exc:
            return err(f"Estimator agent LLM error: {exc}")

        parsed = _parse_estimates_json(raw)
        if parsed.is_err():
            return err(parsed.unwrap_err())
        by_index = parsed.unwrap()

        out: list[Block] = []
        task_index = 0
        for block in blocks:
            if block.is_task and block.task_info is not None:
                proposal = by_index.get(task_index)
                task_index += 1
                if proposal is not None:
                    info = block.task_info.model_copy(update={"estimation_by_llm": proposal})
                    block = block.model_copy(update={"task_info": info})
            out.append(block)

        logger.debug("Estimator agent sized %d of %d task(s)", len(by_index), len(tasks))
        return ok(tuple(out))


__all__ = ["EstimatorAgent"]
