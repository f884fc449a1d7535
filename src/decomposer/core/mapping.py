"""T-shirt size -> story point mapping.

The mapping is an explicit value passed to the token extractor and the
aggregator; nothing in the parsing code reads it from global state. Operators
redefine the scale by editing a JSON file such as::

    {"XS": 0.5, "S": 1, "M": 2, "L": 3, "XL": 5}

A partial mapping is accepted: sizes without an entry resolve to ``None``
and contribute nothing to totals.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Annotated, Final

from pydantic import BeforeValidator, NonNegativeFloat, TypeAdapter, ValidationError

from decomposer.core.contracts.block import Block, TShirt
from decomposer.core.errors import MappingConfigError
from decomposer.core.settings import get_logger

logger = get_logger(__name__)

#: Fallback used only when no configuration file is supplied.
DEFAULT_SP_MAPPING: Final[Mapping[str, float]] = MappingProxyType(
    {"XS": 0.5, "S": 1, "M": 2, "L": 3, "XL": 5}
)

_SizeKey = Annotated[
    TShirt,
    BeforeValidator(lambda v: v.strip().upper() if isinstance(v, str) else v),
]
_MAPPING_ADAPTER: Final = TypeAdapter(dict[_SizeKey, NonNegativeFloat])


@dataclass(frozen=True, slots=True)
class SPMapping:
    """Immutable lookup from T-shirt size to story points."""

    points: Mapping[str, float] = field(default_factory=lambda: DEFAULT_SP_MAPPING)

    def __post_init__(self) -> None:
        object.__setattr__(self, "points", MappingProxyType(dict(self.points)))

    @classmethod
    def default(cls) -> SPMapping:
        return cls(DEFAULT_SP_MAPPING)

    @classmethod
    def from_dict(cls, data: object) -> SPMapping:
        """Validate a raw mapping (e.g. decoded JSON).

        Raises
        ------
        MappingConfigError
            If a key is not a T-shirt size or a value is not a non-negative number.
        """
        try:
            parsed = _MAPPING_ADAPTER.validate_python(data)
        except ValidationError as exc:
            raise MappingConfigError(f"Invalid story point mapping: {exc}") from exc
        return cls(parsed)

    @classmethod
    def from_file(cls, path: str | Path) -> SPMapping:
        p = Path(path)
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise MappingConfigError(f"Mapping file {p} is not valid JSON: {exc}") from exc
        return cls.from_dict(data)

    def resolve(self, size: str | None) -> float | None:
        """Return the story points for ``size``, or ``None`` if unmapped."""
        if size is None:
            return None
        return self.points.get(size.upper())

    def as_dict(self) -> dict[str, float]:
        return dict(self.points)


def load_mapping(path: str | Path | None = None) -> SPMapping:
    """Load the mapping from ``path``, falling back to the default scale.

    A missing file is not an error; a present but malformed one is.
    """
    if path is None:
        return SPMapping.default()
    p = Path(path)
    if not p.exists():
        logger.info("No estimation mapping at %s; using default %s", p, dict(DEFAULT_SP_MAPPING))
        return SPMapping.default()
    mapping = SPMapping.from_file(p)
    logger.debug("Loaded estimation mapping from %s: %s", p, mapping.as_dict())
    return mapping


def refresh_story_points(blocks: Iterable[Block], mapping: SPMapping) -> tuple[Block, ...]:
    """Recompute ``estimation_sp``/``risk_sp`` on every task from ``mapping``.

    Used whenever blocks come from a producer that may have filled SP values
    from a different scale (or not at all).
    """
    out: list[Block] = []
    for block in blocks:
        info = block.task_info
        if info is None:
            out.append(block)
            continue
        estimation_sp = mapping.resolve(info.estimation) if info.has_human_estimate else None
        refreshed = info.model_copy(
            update={"estimation_sp": estimation_sp, "risk_sp": mapping.resolve(info.risk)}
        )
        out.append(block.model_copy(update={"task_info": refreshed}))
    return tuple(out)


__all__ = ["DEFAULT_SP_MAPPING", "SPMapping", "load_mapping", "refresh_story_points"]
