"""Run external tools (git, cmake) and report how they exited."""

from __future__ import annotations

import shlex
import subprocess
from pathlib import Path
from typing import Callable, Optional, Sequence

from loguru import logger

from .errors import ExternalProcessError

Runner = Callable[..., subprocess.CompletedProcess]

# Shell convention for "command not found".
NOT_FOUND_EXIT_CODE = 127


def format_command(cmd: Sequence[str]) -> str:
    return " ".join(shlex.quote(part) for part in cmd)


def run_process(
    cmd: Sequence[str],
    cwd: Optional[Path] = None,
    capture: bool = False,
) -> subprocess.CompletedProcess:
    """Run ``cmd`` to completion without raising on a non-zero exit.

    With ``capture`` the combined stdout/stderr is collected on the result
    instead of being streamed to the terminal.
    """

    logger.debug("+ {}", format_command(cmd))
    try:
        if capture:
            return subprocess.run(
                list(cmd),
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        return subprocess.run(list(cmd), cwd=cwd)
    except FileNotFoundError as exc:
        logger.debug("Executable not found: {}", exc)
        return subprocess.CompletedProcess(list(cmd), NOT_FOUND_EXIT_CODE, stdout=str(exc))


def run_checked(
    cmd: Sequence[str],
    cwd: Optional[Path] = None,
    capture: bool = False,
    runner: Runner = run_process,
) -> subprocess.CompletedProcess:
    """Run ``cmd`` and raise :class:`ExternalProcessError` if it fails."""

    result = runner(cmd, cwd=cwd, capture=capture)
    if result.returncode != 0:
        raise ExternalProcessError(format_command(cmd), result.returncode)
    return result


__all__ = ["NOT_FOUND_EXIT_CODE", "Runner", "format_command", "run_checked", "run_process"]
