from __future__ import annotations

from pathlib import Path

import pytest
from typer.testing import CliRunner

from cmakemake import cli
from cmakemake.config import CONFIG_NAME, load_config

runner = CliRunner()


@pytest.fixture()
def in_project(project_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(project_dir)
    return project_dir


def test_cmake_writes_script(in_project: Path) -> None:
    result = runner.invoke(cli.app, ["cmake"])

    assert result.exit_code == 0, result.output
    assert 'project("demo")' in (in_project / "CMakeLists.txt").read_text(encoding="utf-8")
    assert "Finished" in result.output


def test_cmake_outside_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(cli.app, ["cmake"])

    assert result.exit_code == 1
    assert "doesn't contain" in result.output
    assert not (tmp_path / "CMakeLists.txt").exists()


def test_unknown_run_option(in_project: Path) -> None:
    result = runner.invoke(cli.app, ["run", "bogus"])

    assert result.exit_code == 1
    assert "unknown argument 'bogus'" in result.output


def test_unknown_clean_option(in_project: Path) -> None:
    result = runner.invoke(cli.app, ["clean", "everything"])

    assert result.exit_code == 1


def test_new_requires_name(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(cli.app, ["new"])

    assert result.exit_code == 1
    assert "project name" in result.output


def test_new_reports_location(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    created = []

    def fake_new_project(name: str) -> Path:
        created.append(name)
        return tmp_path / name

    monkeypatch.setattr(cli, "new_project", fake_new_project)

    result = runner.invoke(cli.app, ["new", "demo"])

    assert result.exit_code == 0, result.output
    assert created == ["demo"]


def test_clean_all(in_project: Path) -> None:
    (in_project / "build").mkdir()
    (in_project / "CMakeLists.txt").write_text("# 0\n", encoding="utf-8")

    result = runner.invoke(cli.app, ["clean", "all"])

    assert result.exit_code == 0, result.output
    assert not (in_project / "build").exists()
    assert not (in_project / "CMakeLists.txt").exists()


def test_ignore(in_project: Path) -> None:
    result = runner.invoke(cli.app, ["ignore"])

    assert result.exit_code == 0, result.output
    assert "compile_commands.json" in (in_project / ".gitignore").read_text(encoding="utf-8")


def test_add_find_package(in_project: Path) -> None:
    answers = "\n".join(["4", "fmt", "y", "", "y"]) + "\n"

    result = runner.invoke(cli.app, ["add"], input=answers)

    assert result.exit_code == 0, result.output
    config = load_config(in_project / CONFIG_NAME)
    assert [dependency.name for dependency in config.dependencies.located] == ["fmt"]
    assert config.dependencies.project_dependencies == ["fmt"]


def test_help_lists_commands() -> None:
    result = runner.invoke(cli.app, ["help"])

    assert result.exit_code == 0
    for command in ("new", "add", "cmake", "build", "run", "clean"):
        assert command in result.output


def test_unknown_command() -> None:
    result = runner.invoke(cli.app, ["frobnicate"])

    assert result.exit_code == 2
