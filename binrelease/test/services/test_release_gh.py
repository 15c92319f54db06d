from __future__ import annotations

from pathlib import Path

import pytest

from binrelease.core.result import Err, Ok, Result
from binrelease.platform.process import ProcessError
from binrelease.services.release import gh as gh_mod
from binrelease.services.release.errors import ReleaseError
from binrelease.services.release.gh import GhReleaseClient, MockReleaseClient

REPO = "acme/c67-mcp"


def _err(*, stderr: str, returncode: int = 1) -> Err[ProcessError]:
    return Err(
        ProcessError(
            command=("gh", "release", "view", "v0.2.2"),
            returncode=returncode,
            stdout="",
            stderr=stderr,
        )
    )


def _no_sleep(seconds: float) -> None:
    del seconds


def _install(
    monkeypatch: pytest.MonkeyPatch, responses: list[Result[str, ProcessError]]
) -> list[list[str]]:
    calls: list[list[str]] = []

    def fake_run(cmd: list[str], *, cwd: Path, timeout: float | None = None):
        del cwd
        del timeout
        calls.append(cmd)
        return responses.pop(0)

    monkeypatch.setattr(gh_mod, "run_process", fake_run)
    monkeypatch.setattr(gh_mod, "sleep", _no_sleep)
    return calls


def test_release_exists_true(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _install(monkeypatch, [Ok('{"tagName":"v0.2.2"}')])

    result = GhReleaseClient(root=tmp_path, repo=REPO).release_exists("v0.2.2")

    assert result == Ok(True)
    assert calls == [["gh", "release", "view", "v0.2.2", "--repo", REPO, "--json", "tagName"]]


def test_release_exists_not_found(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _install(monkeypatch, [_err(stderr="release not found")])

    result = GhReleaseClient(root=tmp_path, repo=REPO).release_exists("v0.2.2")

    assert result == Ok(False)
    assert len(calls) == 1


def test_release_exists_retries_transient_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    calls = _install(
        monkeypatch,
        [_err(stderr="HTTP 503 Service Unavailable"), Ok('{"tagName":"v0.2.2"}')],
    )

    result = GhReleaseClient(root=tmp_path, repo=REPO).release_exists("v0.2.2")

    assert result == Ok(True)
    assert len(calls) == 2


def test_release_exists_gives_up_after_retries(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    calls = _install(monkeypatch, [_err(stderr="connection reset by peer") for _ in range(3)])

    result = GhReleaseClient(root=tmp_path, repo=REPO).release_exists("v0.2.2")

    assert isinstance(result, Err)
    assert result.error.kind == "gh_failed"
    assert len(calls) == 3


def test_release_exists_auth_failure_is_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _install(monkeypatch, [_err(stderr="HTTP 401: Bad credentials")])

    result = GhReleaseClient(root=tmp_path, repo=REPO).release_exists("v0.2.2")

    assert isinstance(result, Err)
    assert result.error.hint == "HTTP 401: Bad credentials"


def test_release_exists_missing_repository_is_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _install(monkeypatch, [_err(stderr="HTTP 404: Not Found (repository not found)")])

    result = GhReleaseClient(root=tmp_path, repo=REPO).release_exists("v0.2.2")

    assert isinstance(result, Err)
    assert result.error.kind == "gh_failed"


def test_create_release_command(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _install(monkeypatch, [Ok("https://github.com/acme/c67-mcp/releases/tag/v0.2.2\n")])

    result = GhReleaseClient(root=tmp_path, repo=REPO).create_release(
        tag="v0.2.2", title="Release v0.2.2", target="release/0.2.2"
    )

    assert result == Ok(None)
    assert calls == [
        [
            "gh",
            "release",
            "create",
            "v0.2.2",
            "--repo",
            REPO,
            "--title",
            "Release v0.2.2",
            "--target",
            "release/0.2.2",
            "--generate-notes",
        ]
    ]


def test_create_release_failure_is_not_retried(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    calls = _install(monkeypatch, [_err(stderr="HTTP 502 Bad Gateway")])

    result = GhReleaseClient(root=tmp_path, repo=REPO).create_release(
        tag="v0.2.2", title="Release v0.2.2", target="release/0.2.2"
    )

    assert isinstance(result, Err)
    assert result.error.kind == "gh_failed"
    assert len(calls) == 1


def test_upload_and_download_commands(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    calls = _install(monkeypatch, [Ok(""), Ok("")])
    client = GhReleaseClient(root=tmp_path, repo=REPO)
    archive = tmp_path / "c67-mcp-0.2.2-x86_64-linux.tgz"

    assert client.upload_release_assets(tag="v0.2.2", files=[archive]) == Ok(None)
    assert client.download_run_artifacts(run_id="42", pattern="c67-*", dest=tmp_path / "a") == Ok(
        None
    )

    assert calls[0] == ["gh", "release", "upload", "v0.2.2", "--repo", REPO, str(archive)]
    assert calls[1] == [
        "gh",
        "run",
        "download",
        "42",
        "--repo",
        REPO,
        "--pattern",
        "c67-*",
        "--dir",
        str(tmp_path / "a"),
    ]


def test_ensure_gh_available_missing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gh_mod.shutil, "which", lambda name: None)
    result = gh_mod.ensure_gh_available()
    assert isinstance(result, Err)
    assert result.error.kind == "gh_missing"


class TestMockReleaseClient:
    def test_create_twice_conflicts(self) -> None:
        client = MockReleaseClient()
        assert client.create_release(tag="v1.0.0", title="t", target="b") == Ok(None)
        second = client.create_release(tag="v1.0.0", title="t", target="b")
        assert isinstance(second, Err)

    def test_download_uses_per_artifact_directories(self, tmp_path: Path) -> None:
        client = MockReleaseClient()
        client.run_artifacts = {"a.tgz": b"1", "b.tgz": b"2", "notes.txt": b"3"}

        assert client.download_run_artifacts(run_id="1", pattern="*.tgz", dest=tmp_path) == Ok(
            None
        )

        assert (tmp_path / "a.tgz" / "a.tgz").read_bytes() == b"1"
        assert (tmp_path / "b.tgz" / "b.tgz").read_bytes() == b"2"
        assert not (tmp_path / "notes.txt").exists()

    def test_injected_failure(self) -> None:
        client = MockReleaseClient()
        client.fail["release_exists"] = ReleaseError(kind="gh_failed", message="boom")
        assert isinstance(client.release_exists("v1.0.0"), Err)
