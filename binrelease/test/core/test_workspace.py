"""Tests for binrelease.core.workspace module."""

from __future__ import annotations

from pathlib import Path

import pytest

from binrelease.core.config import ReleaseConfig
from binrelease.core.result import Err, Ok
from binrelease.core.workspace import (
    ROOT_ENV_VAR,
    Workspace,
    detect_workspace,
    find_checkout_upward,
    is_checkout_root,
)


@pytest.fixture
def checkout(tmp_path: Path) -> Path:
    (tmp_path / ".git").mkdir()
    (tmp_path / "src" / "bin").mkdir(parents=True)
    return tmp_path


@pytest.fixture(autouse=True)
def _no_root_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ROOT_ENV_VAR, raising=False)


class TestWorkspace:
    def test_paths(self, checkout: Path) -> None:
        ws = Workspace(root=checkout)
        cfg = ReleaseConfig()
        assert ws.config_path == checkout / "release.toml"
        assert ws.manifest_path(cfg) == checkout / "Cargo.toml"
        assert ws.lockfile_path(cfg) == checkout / "Cargo.lock"
        assert ws.artifacts_dir(cfg) == checkout / "artifacts"
        assert ws.data_dir(cfg) == checkout / "data"
        assert str(ws) == str(checkout)


class TestDetection:
    def test_is_checkout_root(self, checkout: Path) -> None:
        assert is_checkout_root(checkout)
        assert not is_checkout_root(checkout / "src")

    def test_worktree_git_file(self, tmp_path: Path) -> None:
        (tmp_path / ".git").write_text("gitdir: /elsewhere\n", encoding="utf-8")
        assert is_checkout_root(tmp_path)

    def test_find_upward(self, checkout: Path) -> None:
        assert find_checkout_upward(checkout / "src" / "bin") == checkout

    def test_detect_from_subdirectory(self, checkout: Path) -> None:
        result = detect_workspace(start_dir=checkout / "src")
        assert result == Ok(Workspace(root=checkout.resolve()))

    def test_detect_from_env(self, checkout: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ROOT_ENV_VAR, str(checkout))
        result = detect_workspace(start_dir=Path("/"))
        assert result == Ok(Workspace(root=checkout.resolve()))

    def test_invalid_env_is_an_error(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(ROOT_ENV_VAR, str(tmp_path))
        result = detect_workspace()
        assert isinstance(result, Err)
        assert ROOT_ENV_VAR in result.error.message
