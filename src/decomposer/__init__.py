"""Decomposer: structural parser and estimator for JIRA decomposition documents.

The package turns a free-form decomposition (JIRA wiki-markup listing the
sub-tasks of a story) into an ordered sequence of text/task blocks and
aggregates their T-shirt sizes into story-point totals and formulas.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.3.0"
