"""Project configuration model and persistence for CMakeMake."""

from __future__ import annotations

import math
import os
import stat
import tempfile
import tomllib
from enum import Enum
from pathlib import Path
from typing import Annotated, List, Literal, Optional, Tuple, Union

import tomli_w
from pydantic import AfterValidator, BaseModel, Field, ValidationError, field_validator

from .errors import (
    FileCreationError,
    FileOpenOrParseError,
    MissingRequiredInputError,
    NotAProjectDirectoryError,
)

CONFIG_NAME = "CMakeMake.toml"
DEFAULT_PROJECT_NAME = "Unnamed Project"
DEFAULT_PROJECT_VERSION = 1.0
DEFAULT_MINIMUM_TOOL_VERSION = 3.15


def _require_finite(value: float) -> float:
    if not math.isfinite(value):
        raise ValueError("must be a finite number")
    # -0.0 equals 0.0 but serializes differently
    return 0.0 if value == 0 else value


# Finite floats are totally ordered and print the same way every time,
# which the staleness hash relies on.
OrderedFloat = Annotated[float, AfterValidator(_require_finite)]


class SourceMode(str, Enum):
    """How a group of source paths is discovered."""

    SINGLE_FILE = "SingleFile"
    GLOB = "Glob"
    GLOB_RECURSIVE = "GlobRecursive"


class VisibilityMode(str, Enum):
    """Visibility of an include directory group."""

    PUBLIC = "Public"
    INTERFACE_ONLY = "InterfaceOnly"


class FilePreset(str, Enum):
    ALL = "All"
    ROOT_ONLY = "RootOnly"
    HEADER_ONLY = "HeaderOnly"


class SourceGroup(BaseModel):
    mode: SourceMode = SourceMode.GLOB_RECURSIVE
    paths: List[str] = Field(default_factory=list)


class IncludeGroup(BaseModel):
    visibility: VisibilityMode = VisibilityMode.PUBLIC
    paths: List[str] = Field(default_factory=list)


def _default_source_files() -> List[SourceGroup]:
    return [SourceGroup(mode=SourceMode.GLOB_RECURSIVE, paths=["."])]


def _default_include_dirs() -> List[IncludeGroup]:
    return [IncludeGroup(visibility=VisibilityMode.PUBLIC, paths=["."])]


class ProjectFiles(BaseModel):
    """Declarative file-selection rule for a project or a source dependency.

    Missing fields fall back to the ``All`` preset so documents written by
    older versions of the tool still load.
    """

    source_files: List[SourceGroup] = Field(default_factory=_default_source_files)
    include_dirs: List[IncludeGroup] = Field(default_factory=_default_include_dirs)
    exclude_files: List[str] = Field(default_factory=list)

    @classmethod
    def all_files(cls) -> "ProjectFiles":
        return cls()

    @classmethod
    def root_only(cls) -> "ProjectFiles":
        return cls(source_files=[SourceGroup(mode=SourceMode.GLOB, paths=["."])])

    @classmethod
    def header_only(cls) -> "ProjectFiles":
        return cls(
            source_files=[],
            include_dirs=[IncludeGroup(visibility=VisibilityMode.INTERFACE_ONLY, paths=["."])],
        )

    @classmethod
    def from_preset(cls, preset: FilePreset) -> "ProjectFiles":
        if preset is FilePreset.ROOT_ONLY:
            return cls.root_only()
        if preset is FilePreset.HEADER_ONLY:
            return cls.header_only()
        return cls.all_files()


class Project(BaseModel):
    name: str = DEFAULT_PROJECT_NAME
    version: OrderedFloat = DEFAULT_PROJECT_VERSION

    @field_validator("name")
    def _name_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Project name cannot be empty")
        return value


class BuildSettings(BaseModel):
    minimum_tool_version: OrderedFloat = DEFAULT_MINIMUM_TOOL_VERSION
    files: ProjectFiles = Field(default_factory=ProjectFiles)


class LocatedDependency(BaseModel):
    """Dependency resolved by CMake's ``find_package``."""

    name: str
    required: bool = True
    link_name_override: Optional[str] = None


class ExternalBuildScript(BaseModel):
    """The dependency ships its own CMakeLists.txt."""

    type: Literal["ExternalBuildScript"] = "ExternalBuildScript"


class SourceBuild(BaseModel):
    """The dependency's sources are discovered and compiled inline."""

    type: Literal["Source"] = "Source"
    files: ProjectFiles = Field(default_factory=ProjectFiles)
    link_against: List[str] = Field(default_factory=list)


LocalKind = Annotated[Union[ExternalBuildScript, SourceBuild], Field(discriminator="type")]


class LocalDependency(BaseModel):
    path: str
    name: str
    kind: LocalKind = Field(default_factory=ExternalBuildScript)
    variables: List[Tuple[str, str]] = Field(default_factory=list)


class FetchDependency(BaseModel):
    """Dependency pulled at configure time through CMake's FetchContent."""

    name: str
    repo: str
    tag: Optional[str] = None
    branch: Optional[str] = None
    variables: List[Tuple[str, str]] = Field(default_factory=list)


class Dependencies(BaseModel):
    located: List[LocatedDependency] = Field(default_factory=list)
    local: List[LocalDependency] = Field(default_factory=list)
    fetch_content: List[FetchDependency] = Field(default_factory=list)
    project_dependencies: List[str] = Field(default_factory=list)


class ProjectConfig(BaseModel):
    """Top-level project document."""

    project: Project = Field(default_factory=Project)
    build: BuildSettings = Field(default_factory=BuildSettings)
    dependencies: Dependencies = Field(default_factory=Dependencies)


def derive_name(repo: str) -> str:
    """Return the repository basename with any extension stripped.

    ``https://github.com/org/Lib.Name.git`` becomes ``Lib``.
    """

    basename = repo.strip().rstrip("/").split("/")[-1]
    name = basename.split(".")[0]
    if not name:
        raise MissingRequiredInputError("repository url")
    return name


class GitSubmodule(BaseModel):
    """A previously fetched git dependency and how it was registered."""

    repo: str
    tag: Optional[str] = None
    branch: Optional[str] = None
    local_setup: LocalDependency

    @property
    def display_name(self) -> str:
        name = derive_name(self.repo)
        if self.tag:
            name = f"{name} - tags/{self.tag}"
        if self.branch:
            name = f"{name} - branch/{self.branch}"
        return name


class ConfigError(FileOpenOrParseError):
    """Raised when a configuration document cannot be parsed or validated."""


def new_config(name: str) -> ProjectConfig:
    """Create the configuration written by ``cmakemake new``."""

    if not name or not name.strip():
        raise MissingRequiredInputError("project name")
    return ProjectConfig(project=Project(name=name))


def parse_config(text: str, source: Path = Path(CONFIG_NAME)) -> ProjectConfig:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(source, f"Failed to parse TOML: {exc}") from exc

    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(source, f"Invalid configuration: {exc}") from exc


def render_config(config: ProjectConfig) -> str:
    # TOML has no null; unset optionals are dropped and restored as defaults on load.
    return tomli_w.dumps(config.model_dump(mode="json", exclude_none=True))


def load_config(path: Path = Path(CONFIG_NAME)) -> ProjectConfig:
    """Load the project configuration from ``path``."""

    if not path.is_file():
        raise NotAProjectDirectoryError(path.name)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(path, str(exc)) from exc
    return parse_config(text, path)


def _file_mode(path: Path) -> int:
    """Permission bits for ``path``: kept if it exists, else what ``open`` would create."""

    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def save_config(config: ProjectConfig, path: Path = Path(CONFIG_NAME)) -> None:
    """Persist configuration to disk, replacing the previous document atomically."""

    rendered = render_config(config)
    temp_path: Optional[Path] = None
    try:
        mode = _file_mode(path)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", delete=False
        ) as handle:
            temp_path = Path(handle.name)
            handle.write(rendered)
        os.chmod(temp_path, mode)
        os.replace(temp_path, path)
    except OSError as exc:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        raise FileCreationError(path, str(exc)) from exc


__all__ = [
    "CONFIG_NAME",
    "BuildSettings",
    "ConfigError",
    "Dependencies",
    "ExternalBuildScript",
    "FetchDependency",
    "FilePreset",
    "GitSubmodule",
    "IncludeGroup",
    "LocalDependency",
    "LocatedDependency",
    "Project",
    "ProjectConfig",
    "ProjectFiles",
    "SourceBuild",
    "SourceGroup",
    "SourceMode",
    "VisibilityMode",
    "derive_name",
    "load_config",
    "new_config",
    "parse_config",
    "render_config",
    "save_config",
]
