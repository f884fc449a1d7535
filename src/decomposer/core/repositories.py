"""Repository tag -> team category lookup.

Task lines carry a repository tag (``M [xhh] Sidebar``). Consumers group or
colour tasks by the area that owns the repository. The table is a plain
value so callers can pass their own; :data:`DEFAULT_CATEGORIES` mirrors the
tags used by the product teams today.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Mapping
from typing import Final

from decomposer.core.contracts.block import Block

DEFAULT_CATEGORIES: Final[Mapping[str, frozenset[str]]] = {
    "Frontend": frozenset({"frontend", "xhh", "docs", "magritte", "bloko", "front-packages"}),
    "Configs": frozenset({"configs", "deploy", "deploy-dev-secure"}),
    "DB": frozenset({"db", "dbscripts"}),
    "Backend": frozenset(
        {
            "backend",
            "hh.ru",
            "hhru",
            "xmlback",
            "billing",
            "billing-price",
            "mm",
            "monetization-manager",
            "vacancy-creation",
            "vc",
        }
    ),
}


def categorize_repository(
    repository: str | None,
    categories: Mapping[str, Iterable[str]] = DEFAULT_CATEGORIES,
) -> str | None:
    """Return the category owning ``repository`` or ``None`` when unknown."""
    if not repository:
        return None
    tag = repository.lower()
    for category, repos in categories.items():
        if tag in repos:
            return category
    return None


def count_by_category(
    blocks: Iterable[Block],
    categories: Mapping[str, Iterable[str]] = DEFAULT_CATEGORIES,
    *,
    uncategorized: str = "Other",
) -> dict[str, int]:
    """Count task blocks per category (tasks without a known tag go to ``uncategorized``)."""
    counts: Counter[str] = Counter()
    for block in blocks:
        if block.task_info is None:
            continue
        category = categorize_repository(block.task_info.repository, categories)
        counts[category or uncategorized] += 1
    return dict(counts)


__all__ = ["DEFAULT_CATEGORIES", "categorize_repository", "count_by_category"]
