"""Pipeline entry points for decomposer.

Currently exposed:

- :func:`run_pipeline`: normalise → parse → (LLM sizes) → aggregate →
  schedule, implemented in ``decomposition.py``.
"""

from __future__ import annotations

from .decomposition import PipelineResult, Provider, run_pipeline

__all__ = ["run_pipeline", "PipelineResult", "Provider"]
