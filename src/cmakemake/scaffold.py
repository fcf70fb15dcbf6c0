"""Project scaffolding and housekeeping on the filesystem."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import List

from loguru import logger
from pathspec import PathSpec
from pathspec.patterns import GitWildMatchPattern

from .compiler import SCRIPT_NAME, template_environment
from .config import CONFIG_NAME, new_config, save_config
from .errors import (
    DirectoryCreationError,
    FileCreationError,
    FileOpenOrParseError,
    NotAProjectDirectoryError,
    VersionControlInitError,
)
from .process import Runner, run_process

BUILD_DIR = "build"
GITIGNORE_NAME = ".gitignore"
MAIN_TEMPLATE = "main.cpp.j2"
IGNORE_ENTRIES = ("build/", ".cache/", "compile_commands.json")


def _create_dir(path: Path) -> None:
    try:
        path.mkdir()
    except OSError as exc:
        raise DirectoryCreationError(path, str(exc)) from exc


def _create_file(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise FileCreationError(path, str(exc)) from exc


def new_project(name: str, parent: Path = Path("."), runner: Runner = run_process) -> Path:
    """Create a project folder with a git repo, config, and starter source."""

    config = new_config(name)
    path = parent / name
    _create_dir(path)

    result = runner(["git", "init"], cwd=path, capture=True)
    if result.returncode != 0:
        reason = (result.stdout or "").strip() or f"exit code {result.returncode}"
        raise VersionControlInitError(reason)

    _create_file(path / GITIGNORE_NAME, f"{BUILD_DIR}\n")
    save_config(config, path / CONFIG_NAME)

    _create_dir(path / "src")
    template = template_environment().get_template(MAIN_TEMPLATE)
    _create_file(path / "src" / "main.cpp", template.render(project_name=config.project.name))

    logger.debug("Scaffolded project '{}' at {}", name, path)
    return path


def require_project(root: Path = Path(".")) -> Path:
    config_path = root / CONFIG_NAME
    if not config_path.is_file():
        raise NotAProjectDirectoryError(CONFIG_NAME)
    return config_path


def missing_ignore_entries(existing: str, entries: tuple[str, ...] = IGNORE_ENTRIES) -> List[str]:
    """Return the entries not already covered by the ignore rules in ``existing``."""

    spec = PathSpec.from_lines(GitWildMatchPattern, existing.splitlines())
    missing: List[str] = []
    for entry in entries:
        # a trailing-slash rule only matches paths inside the directory
        probe = f"{entry}probe" if entry.endswith("/") else entry
        if not spec.match_file(probe):
            missing.append(entry)
    return missing


def update_gitignore(root: Path = Path(".")) -> List[str]:
    """Make sure generated build artifacts are ignored by git."""

    require_project(root)
    path = root / GITIGNORE_NAME
    try:
        existing = path.read_text(encoding="utf-8") if path.exists() else ""
    except OSError as exc:
        raise FileOpenOrParseError(path, str(exc)) from exc

    added = missing_ignore_entries(existing)
    if added:
        prefix = "" if not existing or existing.endswith("\n") else "\n"
        _create_file(path, existing + prefix + "\n".join(added) + "\n")
    return added


def clean_project(root: Path = Path("."), remove_script: bool = False) -> List[Path]:
    """Remove build output, and the generated script when ``remove_script`` is set."""

    require_project(root)
    removed: List[Path] = []

    build_dir = root / BUILD_DIR
    try:
        shutil.rmtree(build_dir)
        removed.append(build_dir)
    except OSError as exc:
        logger.warning("failed to remove folder '{}' with error: {}", BUILD_DIR, exc)

    if remove_script:
        script = root / SCRIPT_NAME
        try:
            script.unlink()
            removed.append(script)
        except OSError as exc:
            logger.warning("failed to remove file '{}' with error: {}", SCRIPT_NAME, exc)

    return removed


__all__ = [
    "BUILD_DIR",
    "IGNORE_ENTRIES",
    "clean_project",
    "missing_ignore_entries",
    "new_project",
    "require_project",
    "update_gitignore",
]
