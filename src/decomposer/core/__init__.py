"""Core package initializer for Decomposer.

Sub-packages:
    contracts   pydantic models shared by the parser, agents and aggregator
    parsing     line classifier, estimation tokens, structural parser
    estimation  story-point aggregation and schedule helpers
"""

from __future__ import annotations

__all__ = ["__doc__"]
