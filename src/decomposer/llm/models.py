# -----------------------------------------------------------------------------
# A tiny, in-process model registry used by the LLM client.
#
# The registry maps logical aliases ("parser", "estimator", ...) to concrete
# provider model IDs plus default sampling parameters, so agents never
# hard-code provider names. Two provider families are supported:
#   - "openai":    OpenAI-compatible Chat Completions
#   - "anthropic": Anthropic Messages API
# -----------------------------------------------------------------------------
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ModelConfig:
    """Configuration for a single LLM model.

    Parameters
    ----------
    name:
        Provider-specific model identifier, e.g. ``"gpt-4o-mini"``.
    provider:
        ``"openai"`` or ``"anthropic"``; drives authentication and endpoint
        selection inside the client.
    base_url:
        Base URL for the API endpoint. Callers may override it through the
        provider's ``*_BASE_URL`` environment variable.
    max_tokens:
        Soft default for the maximum number of tokens to generate.
    temperature:
        Default sampling temperature. Parsing work wants low values.
    """

    name: str
    provider: str = "openai"
    base_url: str = "https://api.openai.com/v1"
    max_tokens: int = 4096
    temperature: float = 0.2


MODEL_REGISTRY: dict[str, ModelConfig] = {
    "fast": ModelConfig(
        name="gpt-4o-mini",
        provider="openai",
        max_tokens=2048,
        temperature=0.2,
    ),
    "balanced": ModelConfig(
        name="gpt-4o",
        provider="openai",
        max_tokens=4096,
        temperature=0.2,
    ),
    # Parser: block segmentation, strict JSON output.
    "parser": ModelConfig(
        name="gpt-4o",
        provider="openai",
        max_tokens=8192,
        temperature=0.0,
    ),
    # Estimator: proposes a T-shirt size per task with a short reasoning.
    "estimator": ModelConfig(
        name="claude-3-5-sonnet-latest",
        provider="anthropic",
        base_url="https://api.anthropic.com/v1",
        max_tokens=4096,
        temperature=0.2,
    ),
}

DEFAULT_ALIAS: str = "balanced"


def get_model(alias_or_name: str) -> ModelConfig:
    """Return a :class:`ModelConfig` for the given alias or model name.

    Unknown names are treated as concrete OpenAI-compatible model IDs.
    """
    if alias_or_name in MODEL_REGISTRY:
        return MODEL_REGISTRY[alias_or_name]
    return ModelConfig(name=alias_or_name)


def all_models() -> Mapping[str, ModelConfig]:
    """Return a shallow copy of the registry."""
    return dict(MODEL_REGISTRY)


__all__ = ["ModelConfig", "MODEL_REGISTRY", "DEFAULT_ALIAS", "get_model", "all_models"]
