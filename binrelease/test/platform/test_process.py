"""Tests for binrelease.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from binrelease.core.result import Err, Ok
from binrelease.platform.process import ProcessError, run, run_live


class TestProcessError:
    def test_str_short_command(self) -> None:
        error = ProcessError(command=("git", "push"), returncode=1, stdout="", stderr="rejected")
        assert str(error) == "git push failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("gh", "release", "create", "v0.2.2", "--generate-notes"),
            returncode=1,
            stdout="",
            stderr="",
        )
        assert str(error) == "gh release create ... failed (exit 1)"

    def test_detail_prefers_stderr(self) -> None:
        assert ProcessError(("x",), 1, "out", " err \n").detail == "err"
        assert ProcessError(("x",), 1, "out\n", "").detail == "out"
        assert ProcessError(("x",), 3, "", "").detail == "x failed (exit 3)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRun:
    def test_success_returns_stdout(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "print('hello')"], cwd=tmp_path)
        assert isinstance(result, Ok)
        assert result.value.strip() == "hello"

    def test_failure_keeps_exit_code_and_stderr(self, tmp_path: Path) -> None:
        result = run(
            [sys.executable, "-c", "import sys; sys.stderr.write('nope'); sys.exit(2)"],
            cwd=tmp_path,
        )
        assert isinstance(result, Err)
        assert result.error.returncode == 2
        assert result.error.stderr == "nope"

    def test_runs_in_cwd(self, tmp_path: Path) -> None:
        result = run([sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path)
        assert isinstance(result, Ok)
        assert Path(result.value.strip()).resolve() == tmp_path.resolve()

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run(["nonexistent_command_12345"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == -1

    def test_timeout(self, tmp_path: Path) -> None:
        cmd = [sys.executable, "-c", "import time; time.sleep(5)"]
        result = run(cmd, cwd=tmp_path, timeout=0.2)
        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert "timed out" in result.error.stderr


class TestRunLive:
    def test_success(self, tmp_path: Path) -> None:
        assert run_live([sys.executable, "-c", "pass"], cwd=tmp_path) == Ok(None)

    def test_failure(self, tmp_path: Path) -> None:
        result = run_live([sys.executable, "-c", "raise SystemExit(101)"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == 101

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run_live(["nonexistent_command_12345"], cwd=tmp_path)
        assert isinstance(result, Err)
        assert result.error.returncode == -1
