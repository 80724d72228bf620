"""
Smoke Tests for CLI Commands.

These tests run the CLI in a subprocess against small content trees and
check exit codes and output.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json
import os
import subprocess
import sys
from pathlib import Path

import pytest

from conftest import lesson_text

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


def run_cli_command(*args: str, timeout: int = 60, env: dict[str, str] | None = None) -> tuple[int, str, str]:
    """
    Run a CLI command and return exit code, stdout, stderr.

    Args:
        args: Arguments after 'python -m coursetree'
        timeout: Maximum time to wait
        env: Extra environment variables

    Returns:
        Tuple of (exit_code, stdout, stderr)
    """
    run_env = {**os.environ, "COLUMNS": "200", "NO_COLOR": "1", "PYTHONIOENCODING": "utf-8", **(env or {})}
    run_env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(PROJECT_ROOT), run_env.get("PYTHONPATH")]))

    result = subprocess.run(
        [sys.executable, "-m", "coursetree", *args],
        cwd=PROJECT_ROOT,
        capture_output=True,
        text=True,
        timeout=timeout,
        env=run_env,
    )

    return result.returncode, result.stdout, result.stderr


class TestCLIHelp:
    def test_main_help(self):
        code, stdout, stderr = run_cli_command("--help")

        assert code == 0, f"Help failed: {stderr}"
        assert "validate" in stdout
        assert "build" in stdout

    def test_version(self):
        code, stdout, _ = run_cli_command("--version")

        assert code == 0
        assert stdout.startswith("coursetree ")


class TestCLIValidate:
    def test_valid_content(self, content_root):
        code, stdout, stderr = run_cli_command("validate", str(content_root))

        assert code == 0, f"Validate failed: {stdout}{stderr}"
        assert "All content valid" in stdout

    def test_invalid_content_exits_1(self, content_root, write_file, tmp_path):
        write_file(content_root / "javascript" / "01-basics" / "scope.md", lesson_text("Scope", 2))
        report = tmp_path / "report.json"

        code, stdout, _ = run_cli_command("validate", str(content_root), "--output", str(report))

        assert code == 1
        assert "DuplicateOrder" in stdout
        data = json.loads(report.read_text(encoding="utf-8"))
        assert data["summary"]["status"] == "fail"
        assert data["errors"][0]["kind"] == "DuplicateOrder"
        assert data["errors"][0]["order"] == 2

    def test_missing_directory(self, tmp_path):
        code, _, stderr = run_cli_command("validate", str(tmp_path / "nope"))

        assert code == 1
        assert "not found" in stderr


class TestCLISettingsFromEnvironment:
    @pytest.fixture
    def two_violations(self, content_root, write_file):
        """02-async gains a MissingOrder and a DuplicateOrder."""
        module_dir = content_root / "javascript" / "02-async"
        write_file(module_dir / "x.md", lesson_text("X"))
        write_file(module_dir / "y.md", lesson_text("Y", 3))
        return content_root

    def test_validation_mode_from_env(self, two_violations):
        code, stdout, _ = run_cli_command(
            "validate", str(two_violations), env={"COURSETREE_VALIDATION_MODE": "fail_fast"}
        )

        assert code == 1
        assert "Errors: 1" in stdout
        assert "MissingOrder" in stdout
        assert "DuplicateOrder" not in stdout

    def test_collect_all_flag_overrides_env(self, two_violations):
        code, stdout, _ = run_cli_command(
            "validate",
            str(two_violations),
            "--collect-all",
            env={"COURSETREE_VALIDATION_MODE": "fail_fast"},
        )

        assert code == 1
        assert "Errors: 2" in stdout

    def test_strict_from_env(self, content_root, write_file):
        write_file(
            content_root / "javascript" / "02-async" / "events.md",
            lesson_text("Events", 5, estimatedMinute=10),
        )
        env = {"COURSETREE_STRICT_FRONT_MATTER": "true"}

        code, stdout, _ = run_cli_command("validate", str(content_root), env=env)
        assert code == 1
        assert "UnknownField" in stdout

        code, stdout, _ = run_cli_command("validate", str(content_root), "--no-strict", env=env)
        assert code == 0, stdout

    def test_invalid_log_level_is_a_usage_error(self, content_root):
        code, _, stderr = run_cli_command("--log-level", "foo", "validate", str(content_root))

        assert code == 2
        assert "Traceback" not in stderr

    def test_log_level_is_case_insensitive(self, content_root):
        code, _, stderr = run_cli_command("--log-level", "debug", "validate", str(content_root))

        assert code == 0, stderr
        assert "DEBUG" in stderr


class TestCLIBuild:
    def test_build_to_stdout(self, content_root):
        code, stdout, stderr = run_cli_command("build", str(content_root))

        assert code == 0, f"Build failed: {stderr}"
        data = json.loads(stdout)
        lessons = data["courses"][0]["modules"][0]["lessons"]
        assert lessons[1]["nextLessonRef"]["module"] == "02-async"

    def test_build_to_file(self, content_root, tmp_path):
        output = tmp_path / "out" / "tree.json"
        code, _, stderr = run_cli_command("build", str(content_root), "-o", str(output))

        assert code == 0, f"Build failed: {stderr}"
        assert json.loads(output.read_text(encoding="utf-8"))["courses"][0]["name"] == "javascript"

    def test_build_empty_module_fails(self, content_root):
        (content_root / "javascript" / "03-empty").mkdir()
        code, _, stderr = run_cli_command("build", str(content_root))

        assert code == 1
        assert "EmptyModule" in stderr


class TestCLIShow:
    def test_show_tree(self, content_root):
        code, stdout, stderr = run_cli_command("show", str(content_root))

        assert code == 0, f"Show failed: {stderr}"
        assert "Variables" in stdout
        assert "02-async/promises" in stdout

    def test_show_unknown_course(self, content_root):
        code, _, stderr = run_cli_command("show", str(content_root), "--course", "cobol")

        assert code == 1
        assert "not found" in stderr
