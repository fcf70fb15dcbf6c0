"""Fetch external dependencies and register them in the project configuration."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from loguru import logger

from .cache import cache_git_submodule, load_cache
from .config import (
    FetchDependency,
    GitSubmodule,
    LocalDependency,
    LocatedDependency,
    ProjectConfig,
    derive_name,
)
from .errors import DirectoryCreationError, ExternalProcessError, ProjectError, UnrecognizedArgumentError
from .models import ReplayFailure, ReplayResult, SubmoduleCheckout
from .process import Runner, format_command, run_process

EXTERNAL_DIR = "external"


class DependencyPrompter(Protocol):
    """Interactive decisions the workflows need from the user."""

    def describe_local(self, path: str) -> LocalDependency:
        ...

    def confirm_project_dependency(self, name: str) -> bool:
        ...

    def confirm_cache(self, name: str) -> bool:
        ...

    def select_cached(self, names: Sequence[str]) -> List[int]:
        ...


def submodule_path(repo: str) -> str:
    return f"{EXTERNAL_DIR}/{derive_name(repo)}"


def pin_command(tag: Optional[str], branch: Optional[str]) -> Optional[List[str]]:
    """Return the checkout command that pins a fresh submodule, if any."""

    if tag and branch:
        return ["git", "checkout", f"tags/{tag}", "-b", branch]
    if tag:
        return ["git", "checkout", f"tags/{tag}"]
    if branch:
        return ["git", "checkout", "-b", branch]
    return None


def add_submodule(
    repo: str,
    tag: Optional[str] = None,
    branch: Optional[str] = None,
    *,
    root: Path = Path("."),
    runner: Runner = run_process,
) -> SubmoduleCheckout:
    """Add ``repo`` as a submodule under ``external/`` and optionally pin it.

    Only the ``git submodule add`` step is fatal. A failed recursive init or
    checkout is logged and the submodule is left where the add step put it.
    """

    path = submodule_path(repo)
    external = root / EXTERNAL_DIR
    try:
        external.mkdir(exist_ok=True)
    except OSError as exc:
        raise DirectoryCreationError(external, str(exc)) from exc

    add_cmd = ["git", "submodule", "add", repo, path]
    logger.info("Adding submodule {} at {}", repo, path)
    result = runner(add_cmd, cwd=root)
    if result.returncode != 0:
        raise ExternalProcessError(format_command(add_cmd), result.returncode)

    checkout = SubmoduleCheckout(path=path)

    update_cmd = ["git", "submodule", "update", "--init", "--recursive"]
    result = runner(update_cmd, cwd=root)
    if result.returncode != 0:
        checkout.initialized = False
        logger.warning("{}", ExternalProcessError(format_command(update_cmd), result.returncode))

    cmd = pin_command(tag, branch)
    if cmd is not None:
        if tag and branch:
            logger.info("Switching to 'tags/{}' on branch '{}'", tag, branch)
        elif tag:
            logger.info("Switching to 'tags/{}'", tag)
        else:
            logger.info("Switching to branch '{}'", branch)
        # checkout of a tag is noisy, so output is only shown on failure
        result = runner(cmd, cwd=root / path, capture=True)
        checkout.pinned = result.returncode == 0
        if result.returncode != 0:
            if result.stdout:
                logger.debug("{}", result.stdout)
            logger.warning("{}", ExternalProcessError(format_command(cmd), result.returncode))

    return checkout


def _offer_project_dependency(config: ProjectConfig, name: str, prompter: DependencyPrompter) -> None:
    if prompter.confirm_project_dependency(name):
        config.dependencies.project_dependencies.append(name)


def add_located_dependency(
    config: ProjectConfig,
    name: str,
    prompter: DependencyPrompter,
    *,
    required: bool = True,
    link_name_override: Optional[str] = None,
) -> LocatedDependency:
    """Register a ``find_package`` dependency."""

    dependency = LocatedDependency(name=name, required=required, link_name_override=link_name_override)
    config.dependencies.located.append(dependency)
    _offer_project_dependency(config, name, prompter)
    return dependency


def add_local_dependency(config: ProjectConfig, path: str, prompter: DependencyPrompter) -> LocalDependency:
    """Describe the directory at ``path`` and register it as a local dependency."""

    dependency = prompter.describe_local(path)
    config.dependencies.local.append(dependency)
    _offer_project_dependency(config, dependency.name, prompter)
    return dependency


def add_fetch_dependency(
    config: ProjectConfig, dependency: FetchDependency, prompter: DependencyPrompter
) -> FetchDependency:
    config.dependencies.fetch_content.append(dependency)
    _offer_project_dependency(config, dependency.name, prompter)
    return dependency


def add_git_submodule(
    config: ProjectConfig,
    repo: str,
    prompter: DependencyPrompter,
    *,
    tag: Optional[str] = None,
    branch: Optional[str] = None,
    root: Path = Path("."),
    runner: Runner = run_process,
    cache_path: Optional[Path] = None,
) -> LocalDependency:
    """Fetch ``repo`` as a submodule, register it, and offer to cache it."""

    checkout = add_submodule(repo, tag, branch, root=root, runner=runner)
    local_setup = add_local_dependency(config, checkout.path, prompter)

    submodule = GitSubmodule(repo=repo, tag=tag, branch=branch, local_setup=local_setup)
    if prompter.confirm_cache(submodule.display_name):
        cache_git_submodule(submodule, cache_path)
    return local_setup


def add_cached_dependency(
    config: ProjectConfig,
    prompter: DependencyPrompter,
    *,
    root: Path = Path("."),
    runner: Runner = run_process,
    cache_path: Optional[Path] = None,
) -> ReplayResult:
    """Re-add dependencies chosen from the cache.

    Every selected entry is attempted; failures are collected and logged
    once the whole batch has run.
    """

    cache = load_cache(cache_path)
    result = ReplayResult()
    if not cache.git_submodules:
        logger.info("No cached dependencies available.")
        return result

    for index in prompter.select_cached(cache.names()):
        if not 0 <= index < len(cache.git_submodules):
            result.failures.append(ReplayFailure(str(index), UnrecognizedArgumentError(str(index))))
            continue

        entry = cache.git_submodules[index]
        submodule = entry.submodule
        try:
            add_submodule(submodule.repo, submodule.tag, submodule.branch, root=root, runner=runner)
        except ProjectError as exc:
            result.failures.append(ReplayFailure(entry.name, exc))
            continue

        local_setup = submodule.local_setup.model_copy(deep=True)
        config.dependencies.local.append(local_setup)
        _offer_project_dependency(config, local_setup.name, prompter)
        result.added.append(local_setup)

    for failure in result.failures:
        logger.error("Failed to add cached dependency '{}': {}", failure.entry_name, failure.error)
    return result


__all__ = [
    "EXTERNAL_DIR",
    "DependencyPrompter",
    "add_cached_dependency",
    "add_fetch_dependency",
    "add_git_submodule",
    "add_located_dependency",
    "add_local_dependency",
    "add_submodule",
    "derive_name",
    "pin_command",
    "submodule_path",
]
