#!/usr/bin/env python3
"""Run all linters for the webcal-mirror project."""

import os
import subprocess
import sys
from pathlib import Path

TARGETS = "webcal_mirror/ tests/"

CHECKS = [
    (f"ruff check {TARGETS}", "Ruff (code quality)"),
    (f"black --check {TARGETS}", "Black (code formatting)"),
    (f"isort --check {TARGETS}", "isort (import sorting)"),
    ("mypy webcal_mirror/", "mypy (type checking)"),
]


def run_check(cmd: str, description: str) -> bool:
    """Run one linter and report whether it passed."""
    print(f"\n🔍 {description}...")
    result = subprocess.run(cmd, shell=True, capture_output=True, text=True)
    if result.returncode == 0:
        print(f"✅ {description} passed")
        return True

    print(f"❌ {description} failed")
    for label, output in (("STDOUT", result.stdout), ("STDERR", result.stderr)):
        if output:
            print(f"{label}: {output}")
    return False


def main() -> int:
    os.chdir(Path(__file__).parent)
    print("🧹 Running webcal-mirror linters")
    print("=" * 50)

    passed = sum(run_check(cmd, description) for cmd, description in CHECKS)

    print("\n" + "=" * 50)
    if passed == len(CHECKS):
        print(f"🎉 All linters passed! ({passed}/{len(CHECKS)})")
        return 0
    print(f"⚠️  Some linters failed ({passed}/{len(CHECKS)})")
    return 1


if __name__ == "__main__":
    sys.exit(main())
