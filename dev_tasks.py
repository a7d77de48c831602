#!/usr/bin/env python3
"""
Development tasks for sqlcamel.

Usage: python dev_tasks.py <command> [database-url]
"""

import os
import shutil
import subprocess
import sys

SOURCES = "sqlcamel tests examples"


def run_command(command, check=True, env=None):
    print(f"Running: {command}")
    result = subprocess.run(command, shell=True, check=check, env=env)
    return result.returncode == 0


def clean():
    print("Cleaning build artifacts...")
    for path in ["build", "dist", ".pytest_cache", ".mypy_cache", "htmlcov"]:
        shutil.rmtree(path, ignore_errors=True)
    for name in os.listdir("."):
        if name.endswith(".egg-info"):
            shutil.rmtree(name, ignore_errors=True)
    for root, dirs, _ in os.walk("."):
        if "__pycache__" in dirs:
            shutil.rmtree(os.path.join(root, "__pycache__"), ignore_errors=True)
    print("Clean completed.")


def format_code():
    print("Formatting code...")
    run_command(f"black {SOURCES}")
    run_command(f"isort {SOURCES}")
    print("Code formatting completed.")


def lint():
    print("Running linting...")
    success = True
    if not run_command("mypy sqlcamel", check=False):
        success = False
    if not run_command(f"flake8 {SOURCES}", check=False):
        success = False
    if not success:
        print("Linting failed.")
        sys.exit(1)
    print("Linting passed.")


def test():
    print("Running tests...")
    run_command("pytest tests/ -v --cov=sqlcamel --cov-report=html --cov-report=term")
    print("Tests completed.")


def test_db():
    """Run the suite against SQLCAMEL_TEST_DATABASE_URL (or the URL given on the command line)."""
    env = dict(os.environ)
    if len(sys.argv) > 2:
        env["SQLCAMEL_TEST_DATABASE_URL"] = sys.argv[2]
    if not env.get("SQLCAMEL_TEST_DATABASE_URL"):
        print("SQLCAMEL_TEST_DATABASE_URL is not set.")
        sys.exit(1)
    run_command("pytest tests/ -v", env=env)


def build():
    print("Building package...")
    clean()
    run_command("python -m build")
    print("Build completed.")


def install_dev():
    print("Installing in development mode...")
    run_command("pip install -e .[dev,test]")
    print("Development installation completed.")


def check_package():
    print("Checking package...")
    run_command("python -m twine check dist/*")
    print("Package check completed.")


def main():
    if len(sys.argv) < 2:
        print("Usage: python dev_tasks.py <command> [database-url]")
        print("Commands: clean, format, lint, test, test-db, build, install-dev, check, all")
        sys.exit(1)
    command = sys.argv[1]
    commands = {
        "clean": clean,
        "format": format_code,
        "lint": lint,
        "test": test,
        "test-db": test_db,
        "build": build,
        "install-dev": install_dev,
        "check": check_package,
        "all": lambda: (format_code(), lint(), test(), build(), check_package()),
    }
    fn = commands.get(command)
    if not fn:
        print(f"Unknown command: {command}")
        sys.exit(1)
    fn()


if __name__ == "__main__":
    main()
