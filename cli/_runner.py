"""
Shared CLI runner helper.

Every ``[project.scripts]`` entry point delegates to ``run`` so that the
wrapped command's exit code becomes the script's exit code.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence


def run(cmd: Sequence[str]) -> None:
    """
    Run a command and exit with its return code.

    Args:
        cmd: Command and arguments to execute

    Example:
        >>> run([sys.executable, "-m", "pytest", "-q"])
    """
    result = subprocess.run(list(cmd))
    raise SystemExit(result.returncode)
