"""Capability interfaces for the external clients the release steps drive.

Steps depend on these protocols, not on git/gh directly, so the decision
logic can be exercised with in-memory fakes.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from binrelease.core.result import Result
from binrelease.git.repository import GitError
from binrelease.services.release.errors import ReleaseError


class GitClient(Protocol):
    """Implemented by `binrelease.git.Repository`."""

    remote: str

    def latest_tag(self) -> str: ...

    def current_branch(self) -> str | None: ...

    def local_branch_exists(self, branch: str) -> Result[bool, GitError]: ...

    def remote_branch_exists(self, branch: str) -> Result[bool, GitError]: ...

    def has_staged_changes(self, paths: list[str] | None = None) -> Result[bool, GitError]: ...

    def has_upstream(self, branch: str) -> Result[bool, GitError]: ...

    def checkout(self, branch: str) -> Result[None, GitError]: ...

    def create_branch(self, branch: str) -> Result[None, GitError]: ...

    def checkout_tracking(self, branch: str) -> Result[None, GitError]: ...

    def set_upstream(self, branch: str) -> Result[None, GitError]: ...

    def push_upstream(self, branch: str) -> Result[None, GitError]: ...

    def fetch(self, branch: str) -> Result[None, GitError]: ...

    def delete_remote_branch(self, branch: str) -> Result[None, GitError]: ...

    def add(self, paths: list[str]) -> Result[None, GitError]: ...

    def commit(self, message: str, paths: list[str] | None = None) -> Result[None, GitError]: ...

    def push(self, branch: str) -> Result[None, GitError]: ...

    def push_with_lease(self, branch: str) -> Result[None, GitError]: ...

    def merge_squash(self, branch: str) -> Result[None, GitError]: ...


class ReleaseClient(Protocol):
    """Hosting-service operations. Implemented by `GhReleaseClient`."""

    def release_exists(self, tag: str) -> Result[bool, ReleaseError]: ...

    def create_release(
        self, *, tag: str, title: str, target: str
    ) -> Result[None, ReleaseError]: ...

    def upload_release_assets(
        self, *, tag: str, files: list[Path]
    ) -> Result[None, ReleaseError]: ...

    def download_run_artifacts(
        self, *, run_id: str, pattern: str, dest: Path
    ) -> Result[None, ReleaseError]: ...


class RunArtifactStore(Protocol):
    """Artifact storage of the current CI run."""

    def upload(self, path: Path) -> Result[None, ReleaseError]: ...


class LockResolver(Protocol):
    """Dependency resolver that keeps the lockfile consistent with the manifest."""

    def resolve(self, root: Path) -> Result[None, ReleaseError]: ...
