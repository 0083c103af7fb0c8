#!/usr/bin/env python3
"""
Shutdown tracker test runner

Runs the pytest suite, or one layer of it.
"""

import os
import sys
import subprocess
import argparse
from pathlib import Path

LAYERS = ["core", "orchestrators", "adapters", "api", "common"]


def run_command(cmd, description):
    """Run a command and report its outcome"""
    print(f"\n{'='*60}")
    print(f"Running: {description}")
    print(f"Command: {cmd}")
    print(f"{'='*60}")

    result = subprocess.run(cmd, shell=True, capture_output=True, text=True)

    if result.returncode == 0:
        print("OK")
        if result.stdout:
            print(result.stdout)
    else:
        print("FAILED")
        if result.stdout:
            print(result.stdout)
        if result.stderr:
            print(result.stderr)
        return False

    return True


def main():
    parser = argparse.ArgumentParser(description="Run the shutdown tracker tests")
    parser.add_argument(
        "--type",
        choices=["unit", "integration", "all"] + LAYERS,
        default="all",
        help="which tests to run"
    )
    parser.add_argument(
        "--coverage",
        action="store_true",
        help="collect coverage"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="verbose output"
    )

    args = parser.parse_args()

    project_root = Path(__file__).parent
    os.chdir(project_root)

    pytest_opts = []

    if args.verbose:
        pytest_opts.append("-v")

    if args.coverage:
        pytest_opts.extend(["--cov=shutdown_tracker", "--cov-report=html", "--cov-report=term"])

    opts = ' '.join(pytest_opts)
    if args.type == "all":
        success = run_command(f"python -m pytest {opts} tests/", "all tests")
    elif args.type == "unit":
        success = run_command(f"python -m pytest {opts} tests/unit/", "unit tests")
    elif args.type == "integration":
        success = run_command(f"python -m pytest {opts} -m integration tests/", "integration tests")
    else:
        success = run_command(f"python -m pytest {opts} tests/unit/{args.type}/", f"{args.type} tests")

    print(f"\n{'='*60}")
    if success:
        print("All tests passed.")
    else:
        print("Some tests failed.")
        sys.exit(1)
    print(f"{'='*60}")


if __name__ == "__main__":
    main()
