"""Drive CMake to configure, build, and run the generated project."""

from __future__ import annotations

import os
import sysconfig
from pathlib import Path

from loguru import logger

from .compiler import SCRIPT_NAME, script_is_stale, write_script
from .config import ProjectConfig
from .errors import ExternalProcessError
from .process import Runner, format_command, run_checked, run_process
from .scaffold import BUILD_DIR


def exe_name(target: str) -> str:
    suffix = sysconfig.get_config_var("EXE_SUFFIX") or (".exe" if os.name == "nt" else "")
    return f"{target}{suffix}"


def ensure_script(config: ProjectConfig, root: Path = Path(".")) -> bool:
    """Regenerate the build script if it is missing or out of date.

    Returns True when the script was (re)written.
    """

    script = root / SCRIPT_NAME
    if not script.exists():
        logger.warning("{} doesn't exist", SCRIPT_NAME)
    elif script_is_stale(config, script):
        logger.warning("{} out of date. Regenerating.", SCRIPT_NAME)
    else:
        return False
    write_script(config, script)
    return True


def build_project(config: ProjectConfig, root: Path = Path("."), runner: Runner = run_process) -> None:
    """Configure and compile the project with CMake."""

    ensure_script(config, root)
    logger.info("Generating CMake build system")
    run_checked(["cmake", "-B", BUILD_DIR], cwd=root, runner=runner)
    logger.info("Compiling project")
    run_checked(["cmake", "--build", BUILD_DIR], cwd=root, runner=runner)


def executable_path(config: ProjectConfig, root: Path = Path(".")) -> Path:
    return root / BUILD_DIR / exe_name(config.project.name)


def run_project(
    config: ProjectConfig,
    root: Path = Path("."),
    *,
    skip_build: bool = False,
    runner: Runner = run_process,
) -> None:
    """Build (unless ``skip_build``) and execute the project binary."""

    if not skip_build:
        build_project(config, root, runner)

    executable = executable_path(config, root)
    cmd = [str(executable.resolve())]
    result = runner(cmd, cwd=root)
    if result.returncode != 0:
        raise ExternalProcessError(format_command(cmd), result.returncode)


__all__ = ["build_project", "ensure_script", "executable_path", "exe_name", "run_project"]
