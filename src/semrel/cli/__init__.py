"""Command line interface for semrel."""

from __future__ import annotations

from semrel.cli.main import cli

__all__ = ["cli"]
