#!/usr/bin/env python3
# Copyright 2026 step21 Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run all CI checks locally: format, lint, tests, a STEP round trip, and build."""

import subprocess
import sys
import time
from pathlib import Path

from yachalk import chalk

# ###############
# Public Interface
# ###############

ROUND_TRIP_DIR = Path("build") / "ci"

STEPS: list[tuple[str, list[str]]] = [
    ("Format check", ["uv", "run", "ruff", "format", "--check", "src/", "tests/", "tools/"]),
    ("Lint", ["uv", "run", "ruff", "check", "src/", "tests/", "tools/"]),
    ("Tests", ["uv", "run", "pytest", "--cov=step21", "--cov-report=term-missing"]),
    (
        "Write cube",
        ["uv", "run", "step21", "write", "tests/fixtures/cube.step", str(ROUND_TRIP_DIR / "cube.step")],
    ),
    (
        "Rewrite cube",
        ["uv", "run", "step21", "write", str(ROUND_TRIP_DIR / "cube.step"), str(ROUND_TRIP_DIR / "cube2.step")],
    ),
    ("Build", ["uv", "build"]),
]


def main() -> int:
    """Run all CI steps and report results."""
    results: list[tuple[str, bool, float]] = []

    for name, cmd in STEPS:
        _banner(name)
        start = time.monotonic()
        proc = subprocess.run(cmd, cwd=_repo_root())
        elapsed = time.monotonic() - start
        results.append((name, proc.returncode == 0, elapsed))

    _banner("Round trip is a fixed point")
    start = time.monotonic()
    results.append(("Round trip is a fixed point", _outputs_match(), time.monotonic() - start))

    sep = "=" * 60
    print(f"\n{chalk.blue(sep)}")
    print(chalk.blue("  Summary"))
    print(chalk.blue(sep))
    all_passed = True
    for name, passed, elapsed in results:
        if passed:
            line = chalk.green(f"  PASS  {name} ({elapsed:.1f}s)")
        else:
            line = chalk.red(f"  FAIL  {name} ({elapsed:.1f}s)")
            all_passed = False
        print(line)

    print()
    return 0 if all_passed else 1


# ################
# Implementation
# ################


def _repo_root() -> Path:
    return Path(__file__).parent.parent


def _banner(name: str) -> None:
    sep = chalk.blue("=" * 60)
    print(f"\n{sep}")
    print(chalk.blue(name))
    print(sep)


def _outputs_match() -> bool:
    """Compare the first and second rewrite of the cube byte for byte."""
    first = _repo_root() / ROUND_TRIP_DIR / "cube.step"
    second = _repo_root() / ROUND_TRIP_DIR / "cube2.step"
    if not first.exists() or not second.exists():
        print(chalk.red("Round-trip outputs are missing"))
        return False
    if first.read_bytes() != second.read_bytes():
        print(chalk.red(f"{first} and {second} differ"))
        return False
    print(f"{first} and {second} are identical")
    return True


if __name__ == "__main__":
    sys.exit(main())
