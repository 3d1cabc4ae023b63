#!/usr/bin/env python3
"""Run the formatters, linters and the test suite in one go.

Order: black, isort, ruff, pylint, pytest. Every step runs even when an
earlier one fails; the exit code is non-zero if any step failed.
"""

from pathlib import Path
import subprocess
import sys

ROOT = Path(__file__).parent
PACKAGES = ["app", "core", "infrastructure", "main.py"]

STEPS: list[tuple[str, list[str]]] = [
    ("black", [sys.executable, "-m", "black", "--check", *PACKAGES, "tests"]),
    ("isort", [sys.executable, "-m", "isort", "--check-only", *PACKAGES, "tests"]),
    ("ruff", [sys.executable, "-m", "ruff", "check", *PACKAGES, "tests"]),
    ("pylint", [sys.executable, "-m", "pylint", *PACKAGES]),
    ("pytest", [sys.executable, "-m", "pytest", "-q"]),
]


def run_step(name: str, cmd: list[str]) -> tuple[bool, str]:
    """Run one tool from the repo root and return (passed, combined output)."""
    print(f"\n{'=' * 60}\n{name}: {' '.join(cmd[1:])}\n{'=' * 60}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, check=False, cwd=ROOT)
    except OSError as ex:
        print(f"FAILED to start: {ex}")
        return False, str(ex)

    output = (result.stdout + result.stderr).strip()
    passed = result.returncode == 0
    print("ok" if passed else f"FAILED (exit {result.returncode})")
    if output:
        print(output)
    return passed, output


def main() -> None:
    results = [(name, run_step(name, cmd)[0]) for name, cmd in STEPS]

    print(f"\n{'=' * 60}\nSummary\n{'=' * 60}")
    for name, passed in results:
        print(f"{name:<8} {'ok' if passed else 'FAILED'}")

    sys.exit(0 if all(passed for _, passed in results) else 1)


if __name__ == "__main__":
    main()
