"""Interactive prompts used by the ``add`` command."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.table import Table

from .config import (
    ExternalBuildScript,
    FetchDependency,
    FilePreset,
    LocalDependency,
    ProjectFiles,
    SourceBuild,
)


class DependencyType(str, Enum):
    PRE_CACHED = "Pre-Cached"
    GIT_SUBMODULE = "Git Submodule"
    LOCAL = "Local"
    FIND_PACKAGE = "Find Package"
    FETCH_CONTENT = "Fetch Git (CMake)"


_PRESET_LABELS = {
    FilePreset.ALL: "All (recursive)",
    FilePreset.ROOT_ONLY: "All (root folder only)",
    FilePreset.HEADER_ONLY: "Header only",
}


def parse_variable(line: str) -> Optional[Tuple[str, str]]:
    """Split ``NAME VALUE...`` into a pair, or return None if malformed."""

    parts = line.strip().split(maxsplit=1)
    if len(parts) != 2:
        return None
    return parts[0], parts[1].strip()


def parse_selection(raw: str, count: int) -> Optional[List[int]]:
    """Parse comma separated 1-based numbers into 0-based indices."""

    indices: List[int] = []
    for token in raw.replace(" ", "").split(","):
        if not token:
            continue
        if not token.isdigit() or not 1 <= int(token) <= count:
            return None
        index = int(token) - 1
        if index not in indices:
            indices.append(index)
    return indices


def validate_local_path(root: Path, raw: str) -> Optional[str]:
    """Return an error message when ``raw`` is not a usable dependency folder."""

    candidate = root / raw
    if not candidate.is_dir():
        return f"'{raw}' is not a folder"
    if candidate.resolve() == root.resolve():
        return "cannot add the project folder as its own dependency"
    return None


class ConsolePrompter:
    """Ask the user for dependency details on the terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def _choose(self, title: str, options: Sequence[str]) -> int:
        self.console.print(f"[bold]{title}[/bold]")
        for number, option in enumerate(options, start=1):
            self.console.print(f"  {number}) {option}")
        choices = [str(number) for number in range(1, len(options) + 1)]
        answer = Prompt.ask(" >", choices=choices, console=self.console)
        return int(answer) - 1

    def ask_text(self, label: str, default: Optional[str] = None) -> str:
        while True:
            if default is None:
                value = Prompt.ask(label, console=self.console)
            else:
                value = Prompt.ask(label, default=default, console=self.console)
            if value and value.strip():
                return value.strip()
            self.console.print("[red]A value is required[/red]")

    def ask_optional(self, label: str) -> Optional[str]:
        value = Prompt.ask(f"{label} (optional)", default="", show_default=False, console=self.console)
        return value.strip() or None

    def confirm(self, label: str, default: bool = True) -> bool:
        return Confirm.ask(label, default=default, console=self.console)

    def collect_lines(self, title: str, placeholder: str = "") -> List[str]:
        """Collect entries until an empty line."""

        hint = f" [dim]{placeholder}[/dim]" if placeholder else ""
        self.console.print(f"{title}{hint} [dim](empty line to finish)[/dim]")
        lines: List[str] = []
        while True:
            value = Prompt.ask(" >", default="", show_default=False, console=self.console)
            if not value.strip():
                return lines
            lines.append(value.strip())

    def ask_dependency_type(self) -> DependencyType:
        options = list(DependencyType)
        index = self._choose("Choose the Dependency Type:", [option.value for option in options])
        return options[index]

    def ask_local_path(self, root: Path = Path(".")) -> str:
        while True:
            path = self.ask_text("Path (relative to the project folder)")
            problem = validate_local_path(root, path)
            if problem is None:
                return path
            self.console.print(f"[red]{problem}[/red]")

    def ask_variables(self) -> List[Tuple[str, str]]:
        variables: List[Tuple[str, str]] = []
        self.console.print("Any variables/flags [dim][NAME] [VALUES]... (empty line to finish)[/dim]")
        while True:
            line = Prompt.ask(" >", default="", show_default=False, console=self.console)
            if not line.strip():
                return variables
            parsed = parse_variable(line)
            if parsed is None:
                self.console.print("[red]Expected a name followed by a value[/red]")
                continue
            variables.append(parsed)

    def ask_fetch_dependency(self) -> FetchDependency:
        repo = self.ask_text("Fetch Git Repo")
        name = self.ask_text("Dependency Name")
        return FetchDependency(
            name=name,
            repo=repo,
            tag=self.ask_optional("Git Tag"),
            branch=self.ask_optional("Git Branch"),
            variables=self.ask_variables(),
        )

    def describe_local(self, path: str) -> LocalDependency:
        name = self.ask_text("Dependency Name", default=Path(path).name or None)
        variables = self.ask_variables()

        if Confirm.ask("Dependency uses CMake?", default=True, console=self.console):
            kind = ExternalBuildScript()
        else:
            presets = list(FilePreset)
            index = self._choose("Included files", [_PRESET_LABELS[preset] for preset in presets])
            kind = SourceBuild(
                files=ProjectFiles.from_preset(presets[index]),
                link_against=self.collect_lines("Library dependencies"),
            )

        return LocalDependency(path=path, name=name, kind=kind, variables=variables)

    def confirm_project_dependency(self, name: str) -> bool:
        return Confirm.ask(f"Add '{name}' as project dependency?", default=True, console=self.console)

    def confirm_cache(self, name: str) -> bool:
        return Confirm.ask(f"Save '{name}' to the dependency cache?", default=True, console=self.console)

    def select_cached(self, names: Sequence[str]) -> List[int]:
        table = Table(title="Cached dependencies")
        table.add_column("#", justify="right")
        table.add_column("Dependency")
        for number, name in enumerate(names, start=1):
            table.add_row(str(number), name)
        self.console.print(table)

        while True:
            raw = Prompt.ask("Choose dependencies (comma separated)", default="", show_default=False, console=self.console)
            selection = parse_selection(raw, len(names))
            if selection is not None:
                return selection
            self.console.print(f"[red]Enter numbers between 1 and {len(names)}[/red]")


__all__ = [
    "ConsolePrompter",
    "DependencyType",
    "parse_selection",
    "parse_variable",
    "validate_local_path",
]
