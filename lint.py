#!/usr/bin/env python3
"""Lint and format script for youtube-subscriptions using Ruff.

This script runs ruff format and ruff check --fix on the codebase.
It provides options for checking specific files or directories.
"""

import argparse
import glob
import os
import subprocess
import sys


def collect_files(paths):
    """Expand directories and glob patterns into a sorted list of Python files."""
    all_paths = []
    for path_pattern in paths:
        if os.path.isdir(path_pattern):
            all_paths.extend(glob.glob(os.path.join(path_pattern, "**", "*.py"), recursive=True))
        elif os.path.isfile(path_pattern) and path_pattern.endswith(".py"):
            all_paths.append(path_pattern)
        else:
            all_paths.extend(glob.glob(path_pattern, recursive=True))
    return sorted({f for f in all_paths if os.path.isfile(f)})


def main():
    """Parse arguments and run the formatter and linter."""
    parser = argparse.ArgumentParser(description="Run Ruff formatter and linter on the codebase")

    parser.add_argument(
        "--paths",
        nargs="+",
        default=["src", "tests", "run_tests.py", "setup.py", "lint.py"],
        help="Paths to format and lint (default: src tests *.py)",
    )
    parser.add_argument(
        "--statistics", action="store_true", help="Show statistics during check phase"
    )

    args = parser.parse_args()

    target_files = collect_files(args.paths)
    if not target_files:
        print("No Python files found to format or lint based on provided paths.")
        return 0

    print("\n--- Running Ruff Formatter ---")
    format_command = ["ruff", "format"] + target_files
    print(f"Running: {' '.join(format_command)}")
    format_result = subprocess.run(format_command, capture_output=True, text=True)

    print(format_result.stdout)
    if format_result.stderr:
        print("Formatter Error Output:", file=sys.stderr)
        print(format_result.stderr, file=sys.stderr)
    if format_result.returncode != 0:
        print("\nFormatter failed.", file=sys.stderr)

    print("\n--- Running Ruff Linter (with fixes) ---")
    check_command = ["ruff", "check", "--fix"] + target_files
    if args.statistics:
        check_command.append("--statistics")

    print(f"Running: {' '.join(check_command)}")
    check_result = subprocess.run(check_command, capture_output=True, text=True)

    print(check_result.stdout)
    if check_result.stderr:
        print("Linter Error Output:", file=sys.stderr)
        print(check_result.stderr, file=sys.stderr)

    if check_result.returncode != 0:
        print("\nRuff check found errors (even after attempting fixes).", file=sys.stderr)
        return 1
    print("\nRuff format and check passed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
