"""Render dependency declarations into ordered CMake statements."""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from loguru import logger

from .config import (
    Dependencies,
    ExternalBuildScript,
    FetchDependency,
    LocalDependency,
    LocatedDependency,
    ProjectConfig,
)
from .models import ScriptSections
from .resolver import quote, resolve_files, source_variable

PROJECT_TARGET = '"${PROJECT_NAME}"'
PROJECT_SOURCES = "SOURCES"
PROJECT_SOURCE_DIR = "src"


def _link_names(names: Iterable[str], located: Sequence[LocatedDependency]) -> List[str]:
    overrides: Dict[str, str] = {
        dependency.name: dependency.link_name_override
        for dependency in located
        if dependency.link_name_override
    }
    return [overrides.get(name, name) for name in names]


def emit_variables(variables: Iterable[Tuple[str, str]]) -> List[str]:
    return [f"set({name} {value.strip()})" for name, value in variables]


def emit_located(located: Sequence[LocatedDependency]) -> List[str]:
    """One ``find_package`` per located dependency, in declared order."""

    statements: List[str] = []
    for dependency in located:
        suffix = " REQUIRED" if dependency.required else ""
        statements.append(f"find_package({dependency.name}{suffix})")
    return statements


def emit_local(dependency: LocalDependency, located: Sequence[LocatedDependency] = ()) -> List[str]:
    """Render a local dependency: its variables, then its target."""

    statements = emit_variables(dependency.variables)
    kind = dependency.kind

    if isinstance(kind, ExternalBuildScript):
        statements.append(f"add_subdirectory({quote(dependency.path)})")
        return statements

    name = dependency.name
    resolved = resolve_files(kind.files, dependency.path, source_variable(name), name)
    statements.extend(resolved.source_statements)
    if resolved.has_sources:
        statements.append(f"add_library({name} ${{{resolved.variable}}})")
        visibility = "PUBLIC"
    else:
        statements.append(f"add_library({name} INTERFACE)")
        visibility = "INTERFACE"
    statements.extend(resolved.include_statements)

    if kind.link_against:
        libraries = " ".join(_link_names(kind.link_against, located))
        statements.append(f"target_link_libraries({name} {visibility} {libraries})")
    return statements


def emit_fetch(dependency: FetchDependency) -> List[str]:
    statements = emit_variables(dependency.variables)
    statements.append(f"FetchContent_Declare({dependency.name}")
    statements.append(f"\tGIT_REPOSITORY {dependency.repo}")
    revision = dependency.tag or dependency.branch
    if revision:
        statements.append(f"\tGIT_TAG {revision}")
    statements.append("\tGIT_SHALLOW TRUE")
    statements.append("\tGIT_PROGRESS TRUE")
    statements.append(")")
    statements.append(f"FetchContent_MakeAvailable({dependency.name})")
    return statements


def _warn_dangling(dependencies: Dependencies) -> None:
    known = {dependency.name for dependency in dependencies.located}
    known.update(dependency.name for dependency in dependencies.local)
    known.update(dependency.name for dependency in dependencies.fetch_content)
    for name in dependencies.project_dependencies:
        if name not in known:
            logger.warning("Project dependency '{}' does not match any declared dependency", name)


def emit_project(config: ProjectConfig) -> Tuple[List[str], List[str]]:
    """Return the top-level source statements and the executable block."""

    dependencies = config.dependencies
    resolved = resolve_files(
        config.build.files, PROJECT_SOURCE_DIR, PROJECT_SOURCES, PROJECT_TARGET, executable=True
    )

    if resolved.has_sources:
        target = [f"add_executable({PROJECT_TARGET} ${{{PROJECT_SOURCES}}})"]
    else:
        target = [f"add_executable({PROJECT_TARGET})"]
    target.extend(resolved.include_statements)

    # An empty argument list is a CMake error, so the link line is omitted entirely.
    if dependencies.project_dependencies:
        libraries = " ".join(_link_names(dependencies.project_dependencies, dependencies.located))
        target.append(f"target_link_libraries({PROJECT_TARGET} PRIVATE {libraries})")
    return resolved.source_statements, target


def build_sections(config: ProjectConfig) -> ScriptSections:
    """Collect every statement block of the script in emission order."""

    dependencies = config.dependencies
    _warn_dangling(dependencies)

    flags: List[str] = []
    if dependencies.fetch_content:
        flags.append("include(FetchContent)")
    flags.append("set(CMAKE_BUILD_TYPE Debug)")
    flags.append("set(CMAKE_EXPORT_COMPILE_COMMANDS ON)")

    project_files, target = emit_project(config)
    return ScriptSections(
        minimum_version=str(config.build.minimum_tool_version),
        project_name=config.project.name,
        flags=flags,
        located=emit_located(dependencies.located),
        local_blocks=[emit_local(local, dependencies.located) for local in dependencies.local],
        fetch_blocks=[emit_fetch(fetch) for fetch in dependencies.fetch_content],
        project_files=project_files,
        target=target,
    )


__all__ = [
    "PROJECT_SOURCES",
    "PROJECT_TARGET",
    "build_sections",
    "emit_fetch",
    "emit_local",
    "emit_located",
    "emit_project",
    "emit_variables",
]
