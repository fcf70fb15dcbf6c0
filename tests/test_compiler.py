from __future__ import annotations

from pathlib import Path

from cmakemake.compiler import (
    SCRIPT_NAME,
    compile_script,
    config_hash,
    is_stale,
    read_first_line,
    script_is_stale,
    write_script,
)
from cmakemake.config import (
    LocalDependency,
    LocatedDependency,
    ProjectConfig,
    new_config,
    parse_config,
)


def _statements(text: str) -> list[str]:
    return [line for line in text.splitlines() if line.strip() and not line.startswith("#")]


def test_new_project_script() -> None:
    config = new_config("demo")

    text = compile_script(config)
    lines = text.splitlines()

    assert lines[0] == f"# {config_hash(config)}"
    assert lines[1] == ""
    statements = _statements(text)
    assert statements[0] == "cmake_minimum_required(VERSION 3.15)"
    assert statements[1] == 'project("demo")'
    assert "set(CMAKE_BUILD_TYPE Debug)" in statements
    assert "set(CMAKE_EXPORT_COMPILE_COMMANDS ON)" in statements
    assert statements[-1] == 'target_include_directories("${PROJECT_NAME}" PUBLIC "src")'
    assert "target_link_libraries" not in text


def test_compile_is_deterministic(demo_config: ProjectConfig) -> None:
    demo_config.dependencies.located = [LocatedDependency(name="fmt")]
    demo_config.dependencies.project_dependencies = ["fmt"]

    assert compile_script(demo_config) == compile_script(demo_config.model_copy(deep=True))


def test_sections_appear_in_order(demo_config: ProjectConfig) -> None:
    demo_config.dependencies.located = [LocatedDependency(name="fmt")]
    demo_config.dependencies.local = [LocalDependency(path="external/glfw", name="glfw")]
    demo_config.dependencies.project_dependencies = ["glfw", "fmt"]

    statements = _statements(compile_script(demo_config))
    order = [
        "find_package(fmt REQUIRED)",
        'add_subdirectory("external/glfw")',
        'add_executable("${PROJECT_NAME}" ${SOURCES})',
        'target_link_libraries("${PROJECT_NAME}" PRIVATE glfw fmt)',
    ]
    positions = [statements.index(statement) for statement in order]
    assert positions == sorted(positions)
    assert statements[-1] == order[-1]


def test_hash_is_order_sensitive(demo_config: ProjectConfig) -> None:
    demo_config.dependencies.located = [LocatedDependency(name="a"), LocatedDependency(name="b")]
    swapped = demo_config.model_copy(deep=True)
    swapped.dependencies.located.reverse()

    assert config_hash(demo_config) != config_hash(swapped)


def test_hash_changes_with_any_field(demo_config: ProjectConfig) -> None:
    baseline = config_hash(demo_config)

    renamed = demo_config.model_copy(deep=True)
    renamed.project.name = "demo2"
    bumped = demo_config.model_copy(deep=True)
    bumped.build.minimum_tool_version = 3.16
    variables = demo_config.model_copy(deep=True)
    variables.dependencies.local = [LocalDependency(path="p", name="n", variables=[("A", "1"), ("B", "2")])]
    reordered = demo_config.model_copy(deep=True)
    reordered.dependencies.local = [LocalDependency(path="p", name="n", variables=[("B", "2"), ("A", "1")])]

    hashes = {baseline, config_hash(renamed), config_hash(bumped), config_hash(variables), config_hash(reordered)}
    assert len(hashes) == 5
    assert config_hash(demo_config.model_copy(deep=True)) == baseline


def test_is_stale(demo_config: ProjectConfig) -> None:
    first_line = compile_script(demo_config).splitlines(keepends=True)[0]

    assert not is_stale(first_line, demo_config)
    assert is_stale(None, demo_config)
    assert is_stale("# 1\n", demo_config)
    assert is_stale(f"# {config_hash(demo_config)} extra\n", demo_config)

    demo_config.dependencies.project_dependencies.append("fmt")
    assert is_stale(first_line, demo_config)


def test_write_script_and_staleness_on_disk(tmp_path: Path, demo_config: ProjectConfig) -> None:
    path = tmp_path / SCRIPT_NAME
    assert script_is_stale(demo_config, path)

    write_script(demo_config, path)

    assert read_first_line(path) == f"# {config_hash(demo_config)}\n"
    assert not script_is_stale(demo_config, path)
    assert script_is_stale(new_config("other"), path)


def test_signed_zero_hashes_like_zero() -> None:
    negative = parse_config('[project]\nname = "demo"\nversion = -0.0\n')
    positive = parse_config('[project]\nname = "demo"\nversion = 0.0\n')

    assert config_hash(negative) == config_hash(positive)
