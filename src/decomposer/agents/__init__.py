"""LLM-backed agents for decomposer."""
