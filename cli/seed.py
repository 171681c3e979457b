"""CLI wrapper: Insert sample users into the configured database."""

from __future__ import annotations

import sys

from cli._runner import run


def main() -> None:
    run([sys.executable, "-m", "scripts.seed_users", *sys.argv[1:]])
