"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path
from textwrap import dedent

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from coursetree.config import Settings  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


def lesson_text(title=None, order=None, minutes=None, body="Some lesson text.", **extra):
    """Build lesson document text with a front-matter block."""
    lines = ["---"]
    if title is not None:
        lines.append(f"title: {title}")
    if order is not None:
        lines.append(f"order: {order}")
    if minutes is not None:
        lines.append(f"estimatedMinutes: {minutes}")
    for key, value in extra.items():
        lines.append(f"{key}: {value}")
    lines.append("---")
    lines.append(body)
    return "\n".join(lines) + "\n"


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def settings():
    """Settings independent of the environment and any .env file."""
    return Settings(_env_file=None)


@pytest.fixture
def write_file():
    """Write a file, creating parent directories."""

    def _write(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dedent(text) if text.startswith("\n") else text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def content_root(tmp_path, write_file):
    """
    A well-formed content tree: one course with two modules of two lessons.

        courses/
          javascript/
            01-basics/   variables.md (1), functions.md (2)
            02-async/    promises.md (1), async-await.md (3)
    """
    root = tmp_path / "courses"
    course = root / "javascript"
    write_file(course / "01-basics" / "variables.md", lesson_text("Variables", 1, 10, "# Variables\n\nlet and const."))
    write_file(course / "01-basics" / "functions.md", lesson_text("Functions", 2, 15, "# Functions\n\nDeclarations."))
    write_file(course / "02-async" / "promises.md", lesson_text("Promises", 1, 20, "# Promises\n\nthen/catch."))
    write_file(course / "02-async" / "async-await.md", lesson_text("Async Await", 3, 25, "# Async Await\n\nSugar."))
    return root
