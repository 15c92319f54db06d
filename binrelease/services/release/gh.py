"""GitHub CLI adapter for release and CI-run artifact operations."""

from __future__ import annotations

import shutil
from fnmatch import fnmatch
from pathlib import Path
from time import sleep

from binrelease.core.result import Err, Ok, Result
from binrelease.platform.process import ProcessError
from binrelease.platform.process import run as run_process
from binrelease.services.release.errors import ReleaseError, ReleaseErrorKind
from binrelease.services.release.timeouts import (
    GH_READ_RETRY_ATTEMPTS,
    GH_READ_RETRY_DELAY_SECONDS,
    GH_TIMEOUT_SECONDS,
    GH_TRANSFER_TIMEOUT_SECONDS,
)


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "tls handshake timeout",
        "network is unreachable",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    return any(marker in text for marker in markers)


def _is_not_found(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    return "release not found" in text


def run_gh_read(
    *,
    root: Path,
    cmd: list[str],
    kind: ReleaseErrorKind,
    message: str,
    timeout: float = GH_TIMEOUT_SECONDS,
    retry_attempts: int = GH_READ_RETRY_ATTEMPTS,
) -> Result[str, ProcessError | ReleaseError]:
    """Run a read-only gh command, retrying transient network failures.

    Non-transient failures are returned as the raw ProcessError so callers
    can recognise expected absence (e.g. "release not found").
    """
    attempts = max(1, retry_attempts)
    last: ProcessError | None = None
    for attempt in range(attempts):
        result = run_process(cmd, cwd=root, timeout=timeout)
        if isinstance(result, Ok):
            return result

        last = result.error
        if attempt < attempts - 1 and _is_transient_gh_error(last):
            sleep(GH_READ_RETRY_DELAY_SECONDS * (attempt + 1))
            continue
        if _is_transient_gh_error(last):
            return Err(ReleaseError(kind=kind, message=message, hint=last.detail))
        return Err(last)

    return Err(ReleaseError(kind=kind, message=message, hint=last.detail if last else None))


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


class GhReleaseClient:
    """ReleaseClient backed by `gh`, scoped to one repository.

    Authentication is whatever `gh` picks up from the environment
    (GH_TOKEN / GITHUB_TOKEN in CI).
    """

    def __init__(self, *, root: Path, repo: str) -> None:
        self.root = root
        self.repo = repo

    def release_exists(self, tag: str) -> Result[bool, ReleaseError]:
        result = run_gh_read(
            root=self.root,
            cmd=["gh", "release", "view", tag, "--repo", self.repo, "--json", "tagName"],
            kind="gh_failed",
            message=f"failed to query release {tag}",
        )
        match result:
            case Ok(_):
                return Ok(True)
            case Err(ReleaseError() as e):
                return Err(e)
            case Err(ProcessError() as e) if _is_not_found(e):
                return Ok(False)
            case Err(ProcessError() as e):
                return Err(
                    ReleaseError(
                        kind="gh_failed", message=f"failed to query release {tag}", hint=e.detail
                    )
                )

    def create_release(self, *, tag: str, title: str, target: str) -> Result[None, ReleaseError]:
        cmd = [
            "gh",
            "release",
            "create",
            tag,
            "--repo",
            self.repo,
            "--title",
            title,
            "--target",
            target,
            "--generate-notes",
        ]
        result = run_process(cmd, cwd=self.root, timeout=GH_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="gh_failed",
                    message=f"failed to create release {tag}",
                    hint=result.error.detail,
                )
            )
        return Ok(None)

    def upload_release_assets(self, *, tag: str, files: list[Path]) -> Result[None, ReleaseError]:
        cmd = ["gh", "release", "upload", tag, "--repo", self.repo, *[str(f) for f in files]]
        result = run_process(cmd, cwd=self.root, timeout=GH_TRANSFER_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="artifact_failed",
                    message=f"failed to upload assets to {tag}",
                    hint=result.error.detail,
                )
            )
        return Ok(None)

    def download_run_artifacts(
        self, *, run_id: str, pattern: str, dest: Path
    ) -> Result[None, ReleaseError]:
        cmd = [
            "gh",
            "run",
            "download",
            run_id,
            "--repo",
            self.repo,
            "--pattern",
            pattern,
            "--dir",
            str(dest),
        ]
        result = run_process(cmd, cwd=self.root, timeout=GH_TRANSFER_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="artifact_failed",
                    message=f"failed to download artifacts matching {pattern!r} from run {run_id}",
                    hint=result.error.detail,
                )
            )
        return Ok(None)


class MockReleaseClient:
    """In-memory ReleaseClient for tests.

    `releases` maps tag -> target branch; `assets` maps tag -> uploaded file
    names; `run_artifacts` maps artifact name -> file contents and is
    materialised under `dest/<name>/<name>` on download, the layout
    `gh run download` produces when several artifacts match.
    """

    def __init__(self) -> None:
        self.releases: dict[str, str] = {}
        self.assets: dict[str, list[str]] = {}
        self.run_artifacts: dict[str, bytes] = {}
        self.fail: dict[str, ReleaseError] = {}
        self.calls: list[str] = []

    def release_exists(self, tag: str) -> Result[bool, ReleaseError]:
        self.calls.append(f"release_exists {tag}")
        if "release_exists" in self.fail:
            return Err(self.fail["release_exists"])
        return Ok(tag in self.releases)

    def create_release(self, *, tag: str, title: str, target: str) -> Result[None, ReleaseError]:
        self.calls.append(f"create_release {tag} {title!r} {target}")
        if "create_release" in self.fail:
            return Err(self.fail["create_release"])
        if tag in self.releases:
            return Err(ReleaseError(kind="gh_failed", message=f"a release with tag {tag} exists"))
        self.releases[tag] = target
        self.assets[tag] = []
        return Ok(None)

    def upload_release_assets(self, *, tag: str, files: list[Path]) -> Result[None, ReleaseError]:
        self.calls.append(f"upload_release_assets {tag} {' '.join(f.name for f in files)}")
        if "upload_release_assets" in self.fail:
            return Err(self.fail["upload_release_assets"])
        if tag not in self.releases:
            return Err(ReleaseError(kind="artifact_failed", message=f"release not found: {tag}"))
        self.assets[tag].extend(f.name for f in files)
        return Ok(None)

    def download_run_artifacts(
        self, *, run_id: str, pattern: str, dest: Path
    ) -> Result[None, ReleaseError]:
        self.calls.append(f"download_run_artifacts {run_id} {pattern}")
        if "download_run_artifacts" in self.fail:
            return Err(self.fail["download_run_artifacts"])
        matched = [n for n in sorted(self.run_artifacts) if fnmatch(n, pattern)]
        if not matched:
            return Err(
                ReleaseError(kind="artifact_failed", message=f"no artifact matches {pattern!r}")
            )
        for name in matched:
            (dest / name).mkdir(parents=True, exist_ok=True)
            (dest / name / name).write_bytes(self.run_artifacts[name])
        return Ok(None)
