"""In-memory stand-in for Repository.

Models just enough of git for the release steps: local and remote branch
sets, HEAD, a tag list, and a working tree of changed/staged files. Every
call is appended to `calls` so tests can assert on the exact sequence, and
`fail` injects a GitError for a given method name.

Usage:
    git = MockRepository(remote_branches={"main"}, local_branches={"main"})
    git.changed.add("Cargo.toml")
"""

from __future__ import annotations

from dataclasses import dataclass, field

from binrelease.core.result import Err, Ok, Result
from binrelease.git.repository import GitError

__all__ = ["MockCommit", "MockRepository"]


@dataclass(frozen=True, slots=True)
class MockCommit:
    branch: str
    message: str
    files: tuple[str, ...]


def _str_set() -> set[str]:
    return set()


def _matching(files: set[str], paths: list[str] | None) -> set[str]:
    """Members of `files` selected by `paths` (a file or a directory prefix)."""
    if not paths:
        return set(files)
    selected: set[str] = set()
    for path in paths:
        prefix = path.rstrip("/") + "/"
        selected |= {f for f in files if f == path or f.startswith(prefix)}
    return selected


@dataclass
class MockRepository:
    remote: str = "origin"
    head: str | None = "main"
    tags: list[str] = field(default_factory=list)
    local_branches: set[str] = field(default_factory=_str_set)
    remote_branches: set[str] = field(default_factory=_str_set)
    # Branches whose remote-tracking ref has been fetched.
    tracking: set[str] = field(default_factory=_str_set)
    # Local branches with a configured upstream.
    upstreams: set[str] = field(default_factory=_str_set)
    changed: set[str] = field(default_factory=_str_set)
    staged: set[str] = field(default_factory=_str_set)
    commits: list[MockCommit] = field(default_factory=list)
    pushes: list[str] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    fail: dict[str, GitError] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.head is not None:
            self.local_branches.add(self.head)

    def _enter(self, name: str, *args: str) -> GitError | None:
        self.calls.append(" ".join((name, *args)))
        return self.fail.get(name)

    # -- queries -------------------------------------------------------------

    def latest_tag(self) -> str:
        self._enter("latest_tag")
        return self.tags[-1] if self.tags else ""

    def current_branch(self) -> str | None:
        return self.head

    def local_branch_exists(self, branch: str) -> Result[bool, GitError]:
        if e := self._enter("local_branch_exists", branch):
            return Err(e)
        return Ok(branch in self.local_branches)

    def remote_branch_exists(self, branch: str) -> Result[bool, GitError]:
        if e := self._enter("remote_branch_exists", branch):
            return Err(e)
        return Ok(branch in self.remote_branches)

    def has_staged_changes(self, paths: list[str] | None = None) -> Result[bool, GitError]:
        if e := self._enter("has_staged_changes", *(paths or [])):
            return Err(e)
        return Ok(bool(_matching(self.staged, paths)))

    def has_upstream(self, branch: str) -> Result[bool, GitError]:
        if e := self._enter("has_upstream", branch):
            return Err(e)
        return Ok(branch in self.upstreams)

    # -- branch operations ---------------------------------------------------

    def checkout(self, branch: str) -> Result[None, GitError]:
        if e := self._enter("checkout", branch):
            return Err(e)
        if branch not in self.local_branches:
            return Err(GitError("checkout", f"pathspec '{branch}' did not match", 1))
        self.head = branch
        return Ok(None)

    def create_branch(self, branch: str) -> Result[None, GitError]:
        if e := self._enter("create_branch", branch):
            return Err(e)
        if branch in self.local_branches:
            return Err(GitError("checkout -b", f"a branch named '{branch}' already exists", 128))
        self.local_branches.add(branch)
        self.head = branch
        return Ok(None)

    def checkout_tracking(self, branch: str) -> Result[None, GitError]:
        if e := self._enter("checkout_tracking", branch):
            return Err(e)
        if branch not in self.remote_branches:
            return Err(GitError("fetch", f"couldn't find remote ref {branch}", 128))
        if branch in self.local_branches:
            return Err(GitError("checkout --track", f"'{branch}' already exists", 128))
        self.tracking.add(branch)
        self.upstreams.add(branch)
        self.local_branches.add(branch)
        self.head = branch
        return Ok(None)

    def set_upstream(self, branch: str) -> Result[None, GitError]:
        if e := self._enter("set_upstream", branch):
            return Err(e)
        if branch not in self.remote_branches:
            return Err(GitError("fetch", f"couldn't find remote ref {branch}", 128))
        self.tracking.add(branch)
        self.upstreams.add(branch)
        return Ok(None)

    def push_upstream(self, branch: str) -> Result[None, GitError]:
        if e := self._enter("push_upstream", branch):
            return Err(e)
        self.remote_branches.add(branch)
        self.tracking.add(branch)
        self.upstreams.add(branch)
        self.pushes.append(branch)
        return Ok(None)

    def fetch(self, branch: str) -> Result[None, GitError]:
        if e := self._enter("fetch", branch):
            return Err(e)
        if branch not in self.remote_branches:
            return Err(GitError("fetch", f"couldn't find remote ref {branch}", 128))
        self.tracking.add(branch)
        return Ok(None)

    def delete_remote_branch(self, branch: str) -> Result[None, GitError]:
        if e := self._enter("delete_remote_branch", branch):
            return Err(e)
        if branch not in self.remote_branches:
            return Err(GitError("push --delete", f"remote ref does not exist: {branch}", 1))
        self.remote_branches.discard(branch)
        self.tracking.discard(branch)
        return Ok(None)

    # -- commits -------------------------------------------------------------

    def add(self, paths: list[str]) -> Result[None, GitError]:
        if e := self._enter("add", *paths):
            return Err(e)
        matched = _matching(self.changed, paths)
        self.staged |= matched
        self.changed -= matched
        return Ok(None)

    def commit(self, message: str, paths: list[str] | None = None) -> Result[None, GitError]:
        if e := self._enter("commit", message, *(paths or [])):
            return Err(e)
        files = _matching(self.staged, paths)
        if not files:
            return Err(GitError("commit", "nothing to commit, working tree clean", 1))
        self.commits.append(
            MockCommit(branch=self.head or "HEAD", message=message, files=tuple(sorted(files)))
        )
        self.staged -= files
        return Ok(None)

    def push(self, branch: str) -> Result[None, GitError]:
        if e := self._enter("push", branch):
            return Err(e)
        self.remote_branches.add(branch)
        self.pushes.append(branch)
        return Ok(None)

    def push_with_lease(self, branch: str) -> Result[None, GitError]:
        if e := self._enter("push_with_lease", branch):
            return Err(e)
        self.remote_branches.add(branch)
        self.pushes.append(branch)
        return Ok(None)

    def merge_squash(self, branch: str) -> Result[None, GitError]:
        if e := self._enter("merge_squash", branch):
            return Err(e)
        if branch not in self.tracking:
            return Err(
                GitError(
                    "merge --squash", f"{self.remote}/{branch} - not something we can merge", 1
                )
            )
        self.staged.add(f"<squash {branch}>")
        return Ok(None)
