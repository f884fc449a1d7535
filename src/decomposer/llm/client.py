# -----------------------------------------------------------------------------
# A small, synchronous LLM client:
#   - reads provider API keys / base URLs from environment variables
#   - resolves logical aliases through the model registry
#   - exposes a single `generate()` method returning the completion text
#
# HTTP goes through `urllib.request`; unit tests patch `_post()` so no network
# calls are made.
#
# Provider support
# ----------------
# 1. OpenAI-compatible Chat Completions (provider="openai"):
#    POST {base}/chat/completions
# 2. Anthropic Messages (provider="anthropic"):
#    POST {base}/messages, system prompt passed separately from the turns.
# -----------------------------------------------------------------------------
from __future__ import annotations

import json
import os
import urllib.error
import urllib.request
from collections.abc import Mapping, MutableMapping, Sequence
from dataclasses import dataclass
from typing import Any

from decomposer.core.settings import get_logger

from .models import DEFAULT_ALIAS, ModelConfig, get_model

logger = get_logger(__name__)

ANTHROPIC_VERSION = "2023-06-01"


@dataclass(slots=True)
class LLMClient:
    """Multi-provider LLM client with a simple `generate()` API.

    Parameters
    ----------
    api_key:
        Default OpenAI key. :meth:`from_env` fills it from ``OPENAI_API_KEY``
        (or the legacy ``OPENAI_TOKEN``).
    base_url:
        Default base URL for OpenAI-compatible endpoints.
    default_model_alias:
        Alias looked up in the registry when callers pass no ``model``.
    timeout_seconds:
        Network timeout for each HTTP request.
    """

    api_key: str
    base_url: str
    default_model_alias: str = DEFAULT_ALIAS
    timeout_seconds: float = 60.0

    @classmethod
    def from_env(cls, default_model_alias: str = DEFAULT_ALIAS) -> LLMClient:
        """Construct a client from environment variables.

        Read variables: ``OPENAI_API_KEY`` / ``OPENAI_TOKEN``,
        ``OPENAI_BASE_URL``; ``ANTHROPIC_API_KEY`` and ``ANTHROPIC_BASE_URL``
        are looked up lazily when an Anthropic model is used.
        """
        api_key = os.getenv("OPENAI_API_KEY") or os.getenv("OPENAI_TOKEN", "")
        base_url = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
        return cls(
            api_key=api_key,
            base_url=base_url,
            default_model_alias=default_model_alias,
        )

    def generate(
        self,
        messages: Sequence[Mapping[str, str]],
        *,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> str:
        """Generate a single text completion from chat-style ``messages``.

        Raises
        ------
        RuntimeError
            If a key is missing, the HTTP call fails, or the payload has no text.
        """
        config: ModelConfig = get_model(model or self.default_model_alias)
        effective_temperature = float(
            temperature if temperature is not None else config.temperature
        )
        effective_max_tokens = int(max_tokens if max_tokens is not None else config.max_tokens)

        provider = config.provider.lower().strip()
        logger.debug("LLM call: provider=%s model=%s", provider, config.name)

        if provider == "anthropic":
            response = self._generate_anthropic(
                config=config,
                messages=messages,
                temperature=effective_temperature,
                max_tokens=effective_max_tokens,
            )
            return self._extract_content_anthropic(response)

        response = self._generate_openai_compatible(
            config=config,
            messages=messages,
            temperature=effective_temperature,
            max_tokens=effective_max_tokens,
        )
        return self._extract_content_openai(response)

    def _generate_openai_compatible(
        self,
        *,
        config: ModelConfig,
        messages: Sequence[Mapping[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> dict[str, Any]:
        api_key = os.getenv("OPENAI_API_KEY") or self.api_key
        if not api_key:
            raise RuntimeError(
                "Missing API key for provider 'openai'. "
                "Expected environment variable 'OPENAI_API_KEY' to be set."
            )

        base_url = (os.getenv("OPENAI_BASE_URL") or self.base_url or config.base_url).rstrip("/")
        payload: MutableMapping[str, Any] = {
            "model": config.name,
            "messages": [{"role": m["role"], "content": m["content"]} for m in messages],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        return self._post(url=base_url + "/chat/completions", headers=headers, payload=payload)

    def _generate_anthropic(
        self,
        *,
        config: ModelConfig,
        messages: Sequence[Mapping[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> dict[str, Any]:
        api_key = os.getenv("ANTHROPIC_API_KEY", "")
        if not api_key:
            raise RuntimeError("Missing ANTHROPIC_API_KEY; cannot call Anthropic models.")

        base_url = (os.getenv("ANTHROPIC_BASE_URL") or config.base_url).rstrip("/")
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        turns = [
            {"role": m["role"], "content": m["content"]} for m in messages if m["role"] != "system"
        ]
        payload: MutableMapping[str, Any] = {
            "model": config.name,
            "messages": turns,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if system:
            payload["system"] = system
        headers = {
            "Content-Type": "application/json",
            "x-api-key": api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }
        return self._post(url=base_url + "/messages", headers=headers, payload=payload)

    def _post(
        self,
        *,
        url: str,
        headers: Mapping[str, str],
        payload: Mapping[str, Any],
    ) -> dict[str, Any]:
        """POST ``payload`` as JSON and decode the JSON response.

        This is the seam tests patch to avoid real network I/O.
        """
        body = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(url=url, data=body, headers=dict(headers), method="POST")

        try:
            with urllib.request.urlopen(request, timeout=self.timeout_seconds) as resp:
                raw = resp.read()
        except urllib.error.HTTPError as exc:
            detail = exc.read().decode("utf-8", errors="ignore")
            raise RuntimeError(f"LLM HTTP error {exc.code}: {exc.reason}; body={detail!r}") from exc
        except urllib.error.URLError as exc:
            raise RuntimeError(f"LLM network error: {exc}") from exc

        try:
            decoded: dict[str, Any] = json.loads(raw.decode("utf-8"))
        except json.JSONDecodeError as exc:
            raise RuntimeError("Failed to decode LLM response as JSON") from exc

        return decoded

    @staticmethod
    def _extract_content_openai(response: Mapping[str, Any]) -> str:
        """Extract ``choices[0].message.content`` from a Chat Completions payload."""
        choices = response.get("choices")
        if not isinstance(choices, list) or not choices:
            raise RuntimeError("LLM response has no choices; cannot extract content.")

        message = choices[0].get("message")
        if not isinstance(message, Mapping):
            raise RuntimeError("LLM response choice[0].message is missing or invalid.")

        content = message.get("content")
        if not isinstance(content, str) or not content:
            raise RuntimeError("LLM response choice[0].message.content is empty.")

        return content

    @staticmethod
    def _extract_content_anthropic(response: Mapping[str, Any]) -> str:
        """Concatenate the ``text`` blocks of an Anthropic Messages response."""
        content = response.get("content")
        if not isinstance(content, list) or not content:
            raise RuntimeError("Anthropic response has no content blocks.")

        texts = [
            part["text"]
            for part in content
            if isinstance(part, Mapping)
            and part.get("type") == "text"
            and isinstance(part.get("text"), str)
        ]
        if not texts:
            raise RuntimeError("Anthropic response contains no text blocks.")

        return "".join(texts)


__all__ = ["LLMClient"]
