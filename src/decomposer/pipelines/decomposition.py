"""
Decomposition pipeline: from raw JIRA description text to totals and a schedule.

Flow
----
1. **Normalise** the raw text (line endings, HTML entities).
2. **Parse** it into blocks, with the regex parser (``provider="regexp"``)
   or the LLM producer (``provider="llm"``, regex fallback on failure).
3. **Propose sizes** (optional): the estimator agent attaches
   ``estimationByLLM`` to every task it can size.
4. **Aggregate** the blocks into an :class:`Estimation`.
5. **Schedule**: extra risk buffer, working days and delivery date.

Every stage is a plain function of its inputs. The only optional side effect
is the LLM traffic in stages 2 and 3, and a failed call there degrades to the
deterministic result instead of aborting the run.
"""

from __future__ import annotations

from datetime import date
from typing import Literal, TypedDict

from decomposer.agents.decomposition_agent import parse_decomposition
from decomposer.agents.estimator_agent import EstimatorAgent
from decomposer.core.contracts.block import Block
from decomposer.core.contracts.estimation import Estimation, Schedule
from decomposer.core.estimation import build_schedule, calculate_estimation
from decomposer.core.mapping import SPMapping
from decomposer.core.markup import normalize_text
from decomposer.core.repositories import count_by_category
from decomposer.core.settings import get_logger
from decomposer.llm.client import LLMClient

logger = get_logger(__name__)

Provider = Literal["regexp", "llm"]


class PipelineResult(TypedDict):
    """Everything a consumer needs to render one decomposition.

    Keys
    ----
    blocks:
        Ordered blocks as produced by the selected parser.
    estimation:
        Aggregated story points, formulas and task counters.
    schedule:
        Extra risk buffer, total, working days and delivery date.
    mapping:
        The SP scale used for the run.
    categories:
        Task count per repository category.
    """

    blocks: tuple[Block, ...]
    estimation: Estimation
    schedule: Schedule
    mapping: SPMapping
    categories: dict[str, int]


def run_pipeline(
    text: str,
    *,
    provider: Provider = "regexp",
    mapping: SPMapping | None = None,
    llm: LLMClient | None = None,
    llm_estimates: bool = False,
    additional_risk_percent: float = 20,
    parallelization: float = 1.0,
    today: date | None = None,
) -> PipelineResult:
    """Run parse → (estimate) → aggregate → schedule over ``text``.

    Parameters
    ----------
    text:
        Raw decomposition text, possibly with CRLF endings or HTML entities.
    provider:
        ``"regexp"`` for the deterministic parser, ``"llm"`` for the
        model-backed producer.
    mapping:
        SP scale; the default scale when omitted.
    llm:
        Client for the LLM stages. Built from the environment when an LLM
        stage is requested and none is given.
    llm_estimates:
        Ask the estimator agent for a size per task.
    additional_risk_percent, parallelization, today:
        Schedule inputs, see :func:`decomposer.core.estimation.build_schedule`.
    """
    mapping = mapping or SPMapping.default()
    normalized = normalize_text(text)

    if (provider == "llm" or llm_estimates) and llm is None:
        llm = LLMClient.from_env(default_model_alias="parser")

    blocks = parse_decomposition(normalized, mapping, llm=llm if provider == "llm" else None)
    logger.info("Parsed %d block(s) with the %s provider", len(blocks), provider)

    if llm_estimates and llm is not None:
        proposed = EstimatorAgent(llm).run(blocks)
        if proposed.is_ok():
            blocks = proposed.unwrap()
        else:
            logger.warning("%s; continuing without model estimates", proposed.unwrap_err())

    estimation = calculate_estimation(blocks, mapping)
    schedule = build_schedule(
        estimation,
        additional_risk_percent=additional_risk_percent,
        parallelization=parallelization,
        today=today,
    )

    return {
        "blocks": blocks,
        "estimation": estimation,
        "schedule": schedule,
        "mapping": mapping,
        "categories": count_by_category(blocks),
    }


__all__ = ["PipelineResult", "Provider", "run_pipeline"]
