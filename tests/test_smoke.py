"""
Smoke tests for package structure and availability.

These tests strictly verify that the package is installed correctly in the
environment and that top-level modules are importable.
"""

from __future__ import annotations

import importlib

from decomposer import __version__


def test_package_importable() -> None:
    """Ensure the top-level package can be imported."""
    mod = importlib.import_module("decomposer")
    assert mod is not None


def test_version_is_set() -> None:
    """Ensure the package exposes a valid version string."""
    assert isinstance(__version__, str)
    assert len(__version__) > 0


def test_cli_module_exposes_app() -> None:
    """
    The presence of 'app' is required for the entry point defined in
    pyproject.toml (`decomposer.cli:app`).
    """
    cli = importlib.import_module("decomposer.cli")
    assert hasattr(cli, "app"), "decomposer.cli must expose an 'app' Typer object."
