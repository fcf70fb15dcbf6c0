from __future__ import annotations

from pathlib import Path

import pytest

from cmakemake.builder import build_project, ensure_script, executable_path, exe_name, run_project
from cmakemake.compiler import SCRIPT_NAME, compile_script
from cmakemake.config import ProjectConfig
from cmakemake.errors import ExternalProcessError

CONFIGURE = ["cmake", "-B", "build"]
COMPILE = ["cmake", "--build", "build"]


def test_build_regenerates_stale_script(project_dir: Path, runner, demo_config: ProjectConfig) -> None:
    script = project_dir / SCRIPT_NAME
    script.write_text("# 42\n", encoding="utf-8")

    build_project(demo_config, project_dir, runner)

    assert script.read_text(encoding="utf-8") == compile_script(demo_config)
    assert runner.commands == [CONFIGURE, COMPILE]
    assert all(cwd == project_dir for _, cwd, _ in runner.calls)


def test_configure_failure_stops_build(project_dir: Path, make_runner, demo_config: ProjectConfig) -> None:
    runner = make_runner({("cmake", "-B"): 1})

    with pytest.raises(ExternalProcessError) as excinfo:
        build_project(demo_config, project_dir, runner)

    assert excinfo.value.exit_code == 1
    assert runner.commands == [CONFIGURE]


def test_ensure_script_leaves_fresh_script(project_dir: Path, demo_config: ProjectConfig) -> None:
    assert ensure_script(demo_config, project_dir) is True
    assert ensure_script(demo_config, project_dir) is False

    demo_config.project.version = 2.0
    assert ensure_script(demo_config, project_dir) is True


def test_run_skip_build(project_dir: Path, runner, demo_config: ProjectConfig) -> None:
    run_project(demo_config, project_dir, skip_build=True, runner=runner)

    expected = str((project_dir / "build" / exe_name("demo")).resolve())
    assert runner.commands == [[expected]]
    assert not (project_dir / SCRIPT_NAME).exists()


def test_run_builds_first(project_dir: Path, runner, demo_config: ProjectConfig) -> None:
    run_project(demo_config, project_dir, runner=runner)

    assert runner.commands[:2] == [CONFIGURE, COMPILE]
    assert runner.commands[2] == [str(executable_path(demo_config, project_dir).resolve())]


def test_run_reports_program_failure(project_dir: Path, make_runner, demo_config: ProjectConfig) -> None:
    runner = make_runner({(str(executable_path(demo_config, project_dir).resolve()),): 3})

    with pytest.raises(ExternalProcessError) as excinfo:
        run_project(demo_config, project_dir, skip_build=True, runner=runner)

    assert excinfo.value.exit_code == 3
