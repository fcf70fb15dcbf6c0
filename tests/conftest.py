from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import pytest

from cmakemake.config import CONFIG_NAME, LocalDependency, ProjectConfig, new_config, save_config


class FakeRunner:
    """Records commands instead of running them.

    ``failures`` maps a command prefix to the exit code it should return.
    """

    def __init__(self, failures: Optional[Dict[Tuple[str, ...], int]] = None) -> None:
        self.failures = failures or {}
        self.calls: List[Tuple[List[str], Optional[Path], bool]] = []

    def __call__(
        self, cmd: Sequence[str], cwd: Optional[Path] = None, capture: bool = False
    ) -> subprocess.CompletedProcess:
        cmd = list(cmd)
        self.calls.append((cmd, cwd, capture))
        code = 0
        for prefix, exit_code in self.failures.items():
            if tuple(cmd[: len(prefix)]) == prefix:
                code = exit_code
        return subprocess.CompletedProcess(cmd, code, stdout="")

    @property
    def commands(self) -> List[List[str]]:
        return [cmd for cmd, _, _ in self.calls]


class ScriptedPrompter:
    """Answers workflow questions from canned values."""

    def __init__(
        self,
        *,
        describe: Optional[Callable[[str], LocalDependency]] = None,
        project_dependency: bool = True,
        cache: bool = False,
        selection: Sequence[int] = (),
    ) -> None:
        self._describe = describe
        self.project_dependency = project_dependency
        self.cache = cache
        self.selection = list(selection)
        self.described: List[str] = []
        self.cache_questions: List[str] = []
        self.selection_offered: List[str] = []

    def describe_local(self, path: str) -> LocalDependency:
        self.described.append(path)
        if self._describe is not None:
            return self._describe(path)
        return LocalDependency(path=path, name=Path(path).name)

    def confirm_project_dependency(self, name: str) -> bool:
        return self.project_dependency

    def confirm_cache(self, name: str) -> bool:
        self.cache_questions.append(name)
        return self.cache

    def select_cached(self, names: Sequence[str]) -> List[int]:
        self.selection_offered = list(names)
        return self.selection


@pytest.fixture()
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture()
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter()


@pytest.fixture()
def demo_config() -> ProjectConfig:
    return new_config("demo")


@pytest.fixture()
def project_dir(tmp_path: Path, demo_config: ProjectConfig) -> Path:
    save_config(demo_config, tmp_path / CONFIG_NAME)
    return tmp_path


@pytest.fixture()
def cache_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "cache" / "cache.yaml"
    monkeypatch.setenv("CMAKEMAKE_CACHE", str(path))
    return path


@pytest.fixture()
def make_runner() -> Callable[..., FakeRunner]:
    return FakeRunner


@pytest.fixture()
def make_prompter() -> Callable[..., ScriptedPrompter]:
    return ScriptedPrompter
