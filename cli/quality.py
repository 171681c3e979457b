"""
CLI wrappers: Lint and format the project with ruff.

Usage:
    uv run lint              # ruff check
    uv run lint --fix        # extra arguments are passed through
    uv run format            # rewrite files in place
    uv run format-check      # fail if any file would be reformatted
"""

from __future__ import annotations

import sys

from cli._runner import run

# Everything that holds Python sources, including these wrappers
RUFF_TARGETS = ("app", "tests", "scripts", "cli")


def _ruff(*subcommand: str) -> None:
    run([sys.executable, "-m", "ruff", *subcommand, *RUFF_TARGETS, *sys.argv[1:]])


def lint() -> None:
    _ruff("check")


def format_code() -> None:
    _ruff("format")


def format_check() -> None:
    _ruff("format", "--check")
