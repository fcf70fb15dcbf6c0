"""Translate declarative file-selection rules into CMake statements."""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Iterable, List

from .config import IncludeGroup, ProjectFiles, SourceGroup, SourceMode, VisibilityMode
from .models import ResolvedFiles

SOURCE_PATTERNS = ("*.c", "*.cpp", "*.h", "*.hpp")
SOURCE_DIR_VARIABLE = "${CMAKE_CURRENT_SOURCE_DIR}"

_GLOB_COMMANDS = {
    SourceMode.GLOB: "GLOB",
    SourceMode.GLOB_RECURSIVE: "GLOB_RECURSE",
}


def source_variable(name: str) -> str:
    """Return the CMake variable that holds a dependency's sources."""

    cleaned = re.sub(r"[^A-Za-z0-9_]", "_", name.strip())
    return f"{cleaned.upper()}_SOURCES"


def join_base(base: str, path: str) -> str:
    """Join ``path`` onto ``base``; ``.`` resolves to the base itself."""

    return PurePosixPath(base, path.strip()).as_posix()


def quote(value: str) -> str:
    return f'"{value}"'


def _paths_for(groups: Iterable[SourceGroup], mode: SourceMode) -> List[str]:
    return [path for group in groups if group.mode is mode for path in group.paths]


def _include_paths_for(groups: Iterable[IncludeGroup], visibility: VisibilityMode) -> List[str]:
    return [path for group in groups if group.visibility is visibility for path in group.paths]


def _absolute(base: str, path: str) -> str:
    return quote(f"{SOURCE_DIR_VARIABLE}/{join_base(base, path)}")


def resolve_sources(files: ProjectFiles, base: str, variable: str) -> List[str]:
    """Return the statements that bind ``variable`` to the selected sources.

    Single files come first, then non-recursive and recursive discovery. The
    first statement binds the variable and later ones append to it, so
    mixing modes never discards an earlier selection.
    """

    statements: List[str] = []

    single = _paths_for(files.source_files, SourceMode.SINGLE_FILE)
    if single:
        listed = " ".join(_absolute(base, path) for path in single)
        statements.append(f"set({variable} {listed})")

    for mode in (SourceMode.GLOB, SourceMode.GLOB_RECURSIVE):
        directories = _paths_for(files.source_files, mode)
        if not directories:
            continue
        patterns = " ".join(
            quote(f"{join_base(base, directory)}/{pattern}")
            for directory in directories
            for pattern in SOURCE_PATTERNS
        )
        command = _GLOB_COMMANDS[mode]
        if not statements:
            statements.append(f"file({command} {variable} {patterns})")
        else:
            partial = f"{variable}_{command}"
            statements.append(f"file({command} {partial} {patterns})")
            statements.append(f"list(APPEND {variable} ${{{partial}}})")

    if statements and files.exclude_files:
        removed = " ".join(_absolute(base, path) for path in files.exclude_files)
        statements.append(f"list(REMOVE_ITEM {variable} {removed})")

    return statements


def resolve_includes(files: ProjectFiles, base: str, target: str, *, interface: bool = False) -> List[str]:
    """Return one ``target_include_directories`` statement per visibility group.

    An interface library can only carry INTERFACE usage requirements, so both
    groups use that keyword when ``interface`` is set.
    """

    statements: List[str] = []
    for visibility in (VisibilityMode.PUBLIC, VisibilityMode.INTERFACE_ONLY):
        directories = _include_paths_for(files.include_dirs, visibility)
        if not directories:
            continue
        keyword = "INTERFACE" if interface or visibility is VisibilityMode.INTERFACE_ONLY else "PUBLIC"
        listed = " ".join(quote(join_base(base, directory)) for directory in directories)
        statements.append(f"target_include_directories({target} {keyword} {listed})")
    return statements


def resolve_files(
    files: ProjectFiles,
    base: str,
    variable: str,
    target: str,
    *,
    executable: bool = False,
) -> ResolvedFiles:
    """Resolve sources and include directories for one target."""

    sources = resolve_sources(files, base, variable)
    interface = not executable and not sources
    return ResolvedFiles(
        variable=variable,
        source_statements=sources,
        include_statements=resolve_includes(files, base, target, interface=interface),
    )


__all__ = [
    "SOURCE_PATTERNS",
    "join_base",
    "quote",
    "resolve_files",
    "resolve_includes",
    "resolve_sources",
    "source_variable",
]
