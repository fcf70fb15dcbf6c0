"""Persistent cache of previously fetched git dependencies."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from .config import GitSubmodule
from .errors import FileCreationError, FileOpenOrParseError

CACHE_ENV_VAR = "CMAKEMAKE_CACHE"
CACHE_FILE_NAME = "cache.yaml"


class CacheEntry(BaseModel):
    name: str
    submodule: GitSubmodule


class DependencyCache(BaseModel):
    git_submodules: List[CacheEntry] = Field(default_factory=list)

    def names(self) -> List[str]:
        return [entry.name for entry in self.git_submodules]


def default_cache_path() -> Path:
    override = os.environ.get(CACHE_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".cmakemake" / CACHE_FILE_NAME


def load_cache(path: Optional[Path] = None) -> DependencyCache:
    """Load the dependency cache; a missing file is an empty cache."""

    path = path or default_cache_path()
    if not path.exists():
        return DependencyCache()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise FileOpenOrParseError(path, str(exc)) from exc
    except yaml.YAMLError as exc:
        raise FileOpenOrParseError(path, f"Failed to parse YAML: {exc}") from exc

    try:
        return DependencyCache.model_validate(data or {})
    except ValidationError as exc:
        raise FileOpenOrParseError(path, f"Invalid dependency cache: {exc}") from exc


def save_cache(cache: DependencyCache, path: Optional[Path] = None) -> None:
    """Persist the cache to disk as YAML."""

    path = path or default_cache_path()
    rendered = yaml.safe_dump(cache.model_dump(mode="json"), sort_keys=False)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(rendered, encoding="utf-8")
    except OSError as exc:
        raise FileCreationError(path, str(exc)) from exc


def cache_git_submodule(submodule: GitSubmodule, path: Optional[Path] = None) -> CacheEntry:
    """Append ``submodule`` to the cache and write it out straight away."""

    cache = load_cache(path)
    entry = CacheEntry(name=submodule.display_name, submodule=submodule)
    cache.git_submodules.append(entry)
    save_cache(cache, path)
    logger.info("Cached dependency '{}'", entry.name)
    return entry


__all__ = [
    "CACHE_ENV_VAR",
    "CacheEntry",
    "DependencyCache",
    "cache_git_submodule",
    "default_cache_path",
    "load_cache",
    "save_cache",
]
