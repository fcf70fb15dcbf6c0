"""Shared result models for script generation and dependency acquisition."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .config import LocalDependency
from .errors import ProjectError


@dataclass(slots=True)
class ResolvedFiles:
    """CMake statements produced for one file-selection rule."""

    variable: str
    source_statements: List[str] = field(default_factory=list)
    include_statements: List[str] = field(default_factory=list)

    @property
    def has_sources(self) -> bool:
        return bool(self.source_statements)


@dataclass(slots=True)
class ScriptSections:
    """Ordered statement blocks that make up a generated CMakeLists.txt."""

    minimum_version: str
    project_name: str
    flags: List[str] = field(default_factory=list)
    located: List[str] = field(default_factory=list)
    local_blocks: List[List[str]] = field(default_factory=list)
    fetch_blocks: List[List[str]] = field(default_factory=list)
    project_files: List[str] = field(default_factory=list)
    target: List[str] = field(default_factory=list)


@dataclass(slots=True)
class SubmoduleCheckout:
    """Outcome of fetching a git submodule into ``external/``."""

    path: str
    initialized: bool = True
    pinned: Optional[bool] = None


@dataclass(slots=True)
class ReplayFailure:
    entry_name: str
    error: ProjectError


@dataclass(slots=True)
class ReplayResult:
    """Outcome of re-adding cached dependencies."""

    added: List[LocalDependency] = field(default_factory=list)
    failures: List[ReplayFailure] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)


__all__ = [
    "ResolvedFiles",
    "ScriptSections",
    "SubmoduleCheckout",
    "ReplayFailure",
    "ReplayResult",
]
