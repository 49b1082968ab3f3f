"""
Test runner script for the report engine test suite.
Runs the test categories and generates coverage reports.
"""

import os
import subprocess
import sys
from pathlib import Path

COMMANDS = {
    "all": ("python -m pytest tests/ -v", "Running all tests"),
    "unit": ("python -m pytest tests/unit/ -v", "Running unit tests"),
    "functional": ("python -m pytest tests/functional/ -v", "Running functional tests"),
    "api": ("python -m pytest tests/functional/test_*_api.py -v", "Running API tests"),
    "compilers": ("python -m pytest tests/unit/ -k 'compiler' -v", "Running report compiler tests"),
    "legacy": ("python -m pytest tests/ -k 'legacy' -v", "Running legacy import tests"),
    "coverage": (
        "python -m pytest tests/ --cov=report_engine --cov-report=html --cov-report=term-missing -v",
        "Running tests with coverage report",
    ),
}


def run_command(command, description):
    """Run a command and handle output"""
    print(f"\n{'='*60}")
    print(f"Running: {description}")
    print(f"Command: {command}")
    print(f"{'='*60}")

    result = subprocess.run(command, shell=True, capture_output=True, text=True)

    if result.stdout:
        print(result.stdout)
    if result.stderr:
        print("STDERR:", result.stderr)

    return result.returncode == 0


def main():
    """Main test runner"""
    # Change to project root directory
    project_root = Path(__file__).parent.parent
    os.chdir(project_root)

    if len(sys.argv) < 2:
        print("Usage: python tests/run_tests.py [command]")
        print("\nAvailable commands:")
        for name, (_, description) in COMMANDS.items():
            print(f"  {name:<12} - {description}")
        sys.exit(1)

    command = sys.argv[1].lower()
    if command not in COMMANDS:
        print(f"Unknown command: {command}")
        sys.exit(1)

    success = run_command(*COMMANDS[command])
    if command == "coverage" and success:
        print("\n📊 Coverage report generated in htmlcov/index.html")

    if success:
        print("\n✅ Tests completed successfully!")
    else:
        print("\n❌ Some tests failed!")
        sys.exit(1)


if __name__ == "__main__":
    main()
