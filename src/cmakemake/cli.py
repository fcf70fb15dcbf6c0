"""Typer-based CLI for CMakeMake."""

from __future__ import annotations

import time
from pathlib import Path
from typing import NoReturn, Optional

import typer
from loguru import logger
from rich.console import Console

from .acquisition import (
    add_cached_dependency,
    add_fetch_dependency,
    add_git_submodule,
    add_located_dependency,
    add_local_dependency,
)
from .builder import build_project, run_project
from .compiler import SCRIPT_NAME, write_script
from .config import load_config, save_config
from .errors import MissingRequiredInputError, ProjectError, UnrecognizedArgumentError
from .prompts import ConsolePrompter, DependencyType
from .scaffold import clean_project, new_project, update_gitignore

app = typer.Typer(help="A C++ project setup tool.", no_args_is_help=True, add_completion=False)
console = Console()


def _configure_logging(level: str, log_file: Path | None) -> None:
    logger.remove()
    logger.add(
        lambda message: console.print(message, end="", markup=False, highlight=False),
        level=level,
        format="{level}: {message}",
    )
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(log_file, level="DEBUG")


def _fail(exc: ProjectError) -> NoReturn:
    console.print(f"[red]error:[/red] {exc}")
    raise typer.Exit(code=1)


@app.callback()
def main(
    log_level: str = typer.Option("INFO", "--log-level", envvar="CMAKEMAKE_LOG_LEVEL", help="Logging level"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also write a debug log to this file"),
) -> None:
    """A C++ project setup tool."""

    _configure_logging(log_level.upper(), log_file)


@app.command()
def new(name: Optional[str] = typer.Argument(None, help="Name of the project folder")) -> None:
    """Create a new project."""

    try:
        if not name:
            raise MissingRequiredInputError("project name")
        path = new_project(name)
    except ProjectError as exc:
        _fail(exc)

    console.print(f"[green bold]Finished[/green bold] creating project at {path.resolve()}")


@app.command()
def add() -> None:
    """Add a dependency."""

    prompter = ConsolePrompter(console)
    try:
        config = load_config()
        kind = prompter.ask_dependency_type()

        if kind is DependencyType.PRE_CACHED:
            result = add_cached_dependency(config, prompter)
            if result.has_failures and not result.added:
                console.print("[yellow]warning:[/yellow] no cached dependencies were added")
        elif kind is DependencyType.GIT_SUBMODULE:
            repo = prompter.ask_text("Fetch Git Repo")
            tag = prompter.ask_optional("Git Tag")
            branch = prompter.ask_optional("Git Branch")
            add_git_submodule(config, repo, prompter, tag=tag, branch=branch)
        elif kind is DependencyType.LOCAL:
            add_local_dependency(config, prompter.ask_local_path(), prompter)
        elif kind is DependencyType.FIND_PACKAGE:
            name = prompter.ask_text("Dependency Name")
            required = prompter.confirm("Dependency required?", default=True)
            link_name = prompter.ask_optional("Link name override")
            add_located_dependency(config, name, prompter, required=required, link_name_override=link_name)
        else:
            add_fetch_dependency(config, prompter.ask_fetch_dependency(), prompter)

        save_config(config)
    except ProjectError as exc:
        _fail(exc)

    console.print("[green]Successfully[/green] added dependency")


@app.command()
def cmake() -> None:
    """Generate the CMake build script."""

    logger.info("Generating {} from config", SCRIPT_NAME)
    started = time.perf_counter()
    try:
        write_script(load_config())
    except ProjectError as exc:
        _fail(exc)

    elapsed = time.perf_counter() - started
    console.print(f"[green bold]Finished[/green bold] creating {SCRIPT_NAME} in {elapsed:.3f}s")


@app.command()
def build() -> None:
    """Build project code."""

    started = time.perf_counter()
    try:
        build_project(load_config())
    except ProjectError as exc:
        _fail(exc)

    elapsed = time.perf_counter() - started
    console.print(f"[green bold]Finished[/green bold] building project in {elapsed:.3f}s")


@app.command()
def run(option: Optional[str] = typer.Argument(None, metavar="[skip_build]")) -> None:
    """Build and run project code."""

    try:
        if option not in (None, "skip_build"):
            raise UnrecognizedArgumentError(option)
        run_project(load_config(), skip_build=option == "skip_build")
    except ProjectError as exc:
        _fail(exc)

    console.print("\n[green bold]Finished[/green bold] program execution")


@app.command()
def clean(option: Optional[str] = typer.Argument(None, metavar="[all]")) -> None:
    """Remove build files (and optionally the generated CMake files)."""

    try:
        if option not in (None, "all"):
            raise UnrecognizedArgumentError(option)
        logger.info("Cleaning build files")
        clean_project(remove_script=option == "all")
    except ProjectError as exc:
        _fail(exc)

    console.print("[green]Finished[/green] removing build files")


@app.command()
def ignore() -> None:
    """Add generated build artifacts to .gitignore."""

    try:
        added = update_gitignore()
    except ProjectError as exc:
        _fail(exc)

    if added:
        console.print(f"[green]Added[/green] {', '.join(added)} to .gitignore")
    else:
        console.print(".gitignore already up to date")


@app.command("help")
def help_command(ctx: typer.Context) -> None:
    """Output this help message."""

    parent = ctx.parent or ctx
    typer.echo(parent.get_help())


if __name__ == "__main__":
    app()
