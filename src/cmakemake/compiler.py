"""Compile a project configuration into a CMakeLists.txt build script."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader
from loguru import logger

from .config import ProjectConfig
from .emitter import build_sections
from .errors import FileCreationError, FileOpenOrParseError

SCRIPT_NAME = "CMakeLists.txt"
TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
SCRIPT_TEMPLATE = "CMakeLists.txt.j2"


def template_environment() -> Environment:
    loader = FileSystemLoader(str(TEMPLATES_DIR))
    return Environment(
        loader=loader,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def canonical_form(config: ProjectConfig) -> str:
    """Serialize the configuration with stable field and sequence order."""

    return json.dumps(
        config.model_dump(mode="json"),
        ensure_ascii=False,
        separators=(",", ":"),
    )


def config_hash(config: ProjectConfig) -> int:
    """Return a 64-bit content hash of the whole configuration."""

    digest = hashlib.sha256(canonical_form(config).encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")


def hash_line(config: ProjectConfig) -> str:
    return f"# {config_hash(config)}"


def compile_script(config: ProjectConfig) -> str:
    """Render the build script text for ``config``."""

    sections = build_sections(config)
    template = template_environment().get_template(SCRIPT_TEMPLATE)
    return template.render(config_hash=config_hash(config), sections=sections)


def is_stale(first_line: Optional[str], config: ProjectConfig) -> bool:
    """Return True when a script whose first line is ``first_line`` needs regenerating."""

    if first_line is None:
        return True
    return first_line.rstrip("\r\n") != hash_line(config)


def read_first_line(path: Path) -> Optional[str]:
    if not path.is_file():
        return None
    try:
        with path.open(encoding="utf-8") as handle:
            return handle.readline()
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOpenOrParseError(path, str(exc)) from exc


def script_is_stale(config: ProjectConfig, path: Path = Path(SCRIPT_NAME)) -> bool:
    return is_stale(read_first_line(path), config)


def write_script(config: ProjectConfig, path: Path = Path(SCRIPT_NAME)) -> str:
    """Compile ``config`` and write the result to ``path``."""

    text = compile_script(config)
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise FileCreationError(path, str(exc)) from exc
    logger.debug("Wrote {} ({} bytes)", path, len(text))
    return text


__all__ = [
    "SCRIPT_NAME",
    "canonical_form",
    "compile_script",
    "config_hash",
    "is_stale",
    "read_first_line",
    "script_is_stale",
    "template_environment",
    "write_script",
]
