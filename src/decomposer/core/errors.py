"""Exception types raised by Decomposer.

Parsing itself never raises on malformed documents; these cover
configuration problems the caller has to fix.
"""

from __future__ import annotations


class DecomposerError(Exception):
    """Base class for all Decomposer errors."""


class MappingConfigError(DecomposerError):
    """The size -> story point mapping file exists but cannot be used."""


__all__ = ["DecomposerError", "MappingConfigError"]
