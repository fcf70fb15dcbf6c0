"""Error types raised by CMakeMake commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence


class ProjectError(Exception):
    """Base class for every failure surfaced to the user."""


class MissingRequiredInputError(ProjectError):
    def __init__(self, what: str) -> None:
        super().__init__(f"please provide a suitable {what}")
        self.what = what


class UnrecognizedArgumentError(ProjectError):
    def __init__(self, argument: str) -> None:
        super().__init__(f"unknown argument '{argument}'")
        self.argument = argument


class NotAProjectDirectoryError(ProjectError):
    def __init__(self, config_name: str) -> None:
        super().__init__(f"current directory doesn't contain a {config_name}")
        self.config_name = config_name


class DirectoryCreationError(ProjectError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"failed to create folder '{path}' with error: {reason}")
        self.path = path


class VersionControlInitError(ProjectError):
    def __init__(self, reason: str) -> None:
        super().__init__(f"failed to init git repo with error: {reason}")


class FileCreationError(ProjectError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"failed to create file '{path}' with error: {reason}")
        self.path = path


class FileOpenOrParseError(ProjectError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"failed to open file '{path}' with error: {reason}")
        self.path = path


class ExternalProcessError(ProjectError):
    """A child process exited unsuccessfully."""

    def __init__(self, command: Sequence[str] | str, exit_code: Optional[int]) -> None:
        if not isinstance(command, str):
            command = " ".join(command)
        code = f"exit code {exit_code}" if exit_code is not None else "an unknown error code"
        super().__init__(f"process '{command}' exited with {code}")
        self.command = command
        self.exit_code = exit_code


__all__ = [
    "ProjectError",
    "MissingRequiredInputError",
    "UnrecognizedArgumentError",
    "NotAProjectDirectoryError",
    "DirectoryCreationError",
    "VersionControlInitError",
    "FileCreationError",
    "FileOpenOrParseError",
    "ExternalProcessError",
]
