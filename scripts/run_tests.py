"""Run the CMakeMake test suite from a source checkout.

Usage: ``python scripts/run_tests.py [pytest args...]``. The package is
installed in editable mode with its ``test`` extra first if any of the
modules the suite imports cannot be found.
"""

from __future__ import annotations

import importlib.util
import subprocess
import sys
from pathlib import Path
from typing import List, Sequence

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SUITE_MODULES = ("pytest", "typer", "cmakemake")


def missing_modules(names: Sequence[str] = SUITE_MODULES) -> List[str]:
    return [name for name in names if importlib.util.find_spec(name) is None]


def install_editable() -> None:
    command = [sys.executable, "-m", "pip", "install", "--quiet", "--editable", f"{PROJECT_ROOT}[test]"]
    if subprocess.call(command) != 0:
        raise SystemExit("could not install cmakemake with its test extra")


def main(argv: Sequence[str]) -> int:
    missing = missing_modules()
    if missing:
        print(f"missing {', '.join(missing)}; installing cmakemake[test]", file=sys.stderr)
        install_editable()
    return subprocess.call([sys.executable, "-m", "pytest", "-q", *argv], cwd=PROJECT_ROOT)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
