#!/usr/bin/env python3
"""
Script to run black and mypy on the report engine codebase.
"""
import os
import subprocess
import sys

PACKAGES = ["report_engine", "tests"]


def run_black():
    """Run black on the codebase"""
    print("Running black on the report engine codebase...")

    # Get the project root directory
    project_root = os.path.dirname(os.path.abspath(__file__))

    try:
        subprocess.run(
            ["black", "--line-length", "120"] + [f"{project_root}/{package}" for package in PACKAGES],
            check=True,
        )
        print("Black formatting completed successfully!")
        return 0
    except subprocess.CalledProcessError as e:
        print(f"Error running black: {e}")
        return 1


def run_mypy():
    """Run mypy on the codebase"""
    print("Running mypy on the report engine codebase...")

    project_root = os.path.dirname(os.path.abspath(__file__))

    # Gradual adoption mode - less strict
    try:
        subprocess.run(
            ["mypy", "--ignore-missing-imports", "--follow-imports=silent", f"{project_root}/report_engine"],
            check=True,
        )
        print("Mypy type checking completed successfully!")
        return 0
    except subprocess.CalledProcessError as e:
        print(f"Error running mypy: {e}")
        return 1


if __name__ == "__main__":
    black_result = run_black()
    mypy_result = run_mypy()
    sys.exit(black_result or mypy_result)  # Exit with error if either tool failed
