"""Git repository abstraction.

Repository wraps the git CLI for the operations the release steps need.
Queries that distinguish "absent" from "failed" return Result[bool, ...]:
an absent branch is Ok(False), never an error.

Usage:
    repo = Repository(Path("/path/to/checkout"), remote="origin")

    match repo.local_branch_exists("release/0.2.2"):
        case Ok(True):
            repo.checkout("release/0.2.2")
        case Ok(False):
            ...
        case Err(e):
            print(f"git failed: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from binrelease.core.result import Err, Ok, Result
from binrelease.platform.process import ProcessError
from binrelease.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone", "ls-remote"})

__all__ = [
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed (e.g. "push --force-with-lease")
        message: Error message (stderr when available)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Repository:
    """A git checkout plus the name of the remote releases are pushed to.

    Attributes:
        path: Path to the checkout root
        remote: Remote name (usually "origin")
    """

    def __init__(self, path: Path, remote: str = "origin") -> None:
        self.path = path
        self.remote = remote

    # -- queries -------------------------------------------------------------

    def latest_tag(self) -> str:
        """Most recent tag reachable from HEAD, or "" when there is none.

        git exits non-zero when no tag can describe HEAD; on a first
        release that is the expected state, not a failure.
        """
        result = self._run(["describe", "--tags", "--abbrev=0"])
        match result:
            case Ok(stdout):
                return stdout.strip()
            case Err(_):
                return ""

    def current_branch(self) -> str | None:
        """Current branch name; None on detached HEAD or error."""
        result = self._run(["rev-parse", "--abbrev-ref", "HEAD"])
        match result:
            case Ok(stdout):
                branch = stdout.strip()
                return None if branch == "HEAD" else branch
            case Err(_):
                return None

    def local_branch_exists(self, branch: str) -> Result[bool, GitError]:
        result = self._run(["show-ref", "--verify", "--quiet", f"refs/heads/{branch}"])
        match result:
            case Ok(_):
                return Ok(True)
            case Err(e) if e.returncode == 1:
                return Ok(False)
            case Err(e):
                return Err(self._error("show-ref", e))

    def remote_branch_exists(self, branch: str) -> Result[bool, GitError]:
        # --exit-code: 2 means "no matching refs".
        result = self._run(["ls-remote", "--exit-code", "--heads", self.remote, branch])
        match result:
            case Ok(stdout):
                return Ok(bool(stdout.strip()))
            case Err(e) if e.returncode == 2:
                return Ok(False)
            case Err(e):
                return Err(self._error("ls-remote", e))

    def has_staged_changes(self, paths: list[str] | None = None) -> Result[bool, GitError]:
        """True when the index differs from HEAD, limited to `paths` if given."""
        args = ["diff", "--cached", "--quiet"]
        if paths:
            args += ["--", *paths]
        result = self._run(args)
        match result:
            case Ok(_):
                return Ok(False)
            case Err(e) if e.returncode == 1:
                return Ok(True)
            case Err(e):
                return Err(self._error("diff --cached", e))

    def has_upstream(self, branch: str) -> Result[bool, GitError]:
        """True when `branch` has a configured upstream."""
        result = self._run(["config", "--get", f"branch.{branch}.merge"])
        match result:
            case Ok(stdout):
                return Ok(bool(stdout.strip()))
            case Err(e) if e.returncode == 1:
                return Ok(False)
            case Err(e):
                return Err(self._error("config --get", e))

    # -- branch operations ---------------------------------------------------

    def checkout(self, branch: str) -> Result[None, GitError]:
        return self._run_checked(["checkout", branch], label="checkout")

    def create_branch(self, branch: str) -> Result[None, GitError]:
        return self._run_checked(["checkout", "-b", branch], label="checkout -b")

    def checkout_tracking(self, branch: str) -> Result[None, GitError]:
        """Create a local branch tracking `<remote>/<branch>` and check it out.

        CI checkouts are usually single-branch: the remote's fetch refspecs do
        not cover the release branch, and git refuses to track a ref no
        refspec maps to. The branch is added to the refspecs and fetched first.
        """
        fetched = self._fetch_tracked(branch)
        if isinstance(fetched, Err):
            return fetched
        return self._run_checked(
            ["checkout", "-b", branch, "--track", f"{self.remote}/{branch}"],
            label="checkout --track",
        )

    def set_upstream(self, branch: str) -> Result[None, GitError]:
        """Make an existing local branch track `<remote>/<branch>`."""
        fetched = self._fetch_tracked(branch)
        if isinstance(fetched, Err):
            return fetched
        return self._run_checked(
            ["branch", f"--set-upstream-to={self.remote}/{branch}", branch],
            label="branch --set-upstream-to",
        )

    def push_upstream(self, branch: str) -> Result[None, GitError]:
        return self._run_checked(["push", "-u", self.remote, branch], label="push -u")

    def fetch(self, branch: str) -> Result[None, GitError]:
        return self._run_checked(
            ["fetch", self.remote, f"+refs/heads/{branch}:refs/remotes/{self.remote}/{branch}"],
            label="fetch",
        )

    def delete_remote_branch(self, branch: str) -> Result[None, GitError]:
        return self._run_checked(["push", self.remote, "--delete", branch], label="push --delete")

    # -- commits -------------------------------------------------------------

    def add(self, paths: list[str]) -> Result[None, GitError]:
        return self._run_checked(["add", "--", *paths], label="add")

    def commit(self, message: str, paths: list[str] | None = None) -> Result[None, GitError]:
        """Commit the index, or only `paths` when given.

        With paths, anything else already staged stays staged and out of
        the commit.
        """
        args = ["commit", "-m", message]
        if paths:
            args += ["--", *paths]
        return self._run_checked(args, label="commit")

    def push(self, branch: str) -> Result[None, GitError]:
        return self._run_checked(["push", self.remote, branch], label="push")

    def push_with_lease(self, branch: str) -> Result[None, GitError]:
        """Force-push, refusing to overwrite remote commits this branch never had.

        --force-with-lease alone only compares against the remote-tracking
        ref, which any fetch moves. --force-if-includes also requires that
        ref's tip to appear in the local branch's reflog.
        """
        return self._run_checked(
            ["push", "--force-with-lease", "--force-if-includes", self.remote, branch],
            label="push --force-with-lease",
        )

    def merge_squash(self, branch: str) -> Result[None, GitError]:
        """Squash the remote-tracking `<remote>/<branch>` into the index."""
        return self._run_checked(
            ["merge", "--squash", f"{self.remote}/{branch}"], label="merge --squash"
        )

    # -- internals -----------------------------------------------------------

    def _fetch_tracked(self, branch: str) -> Result[None, GitError]:
        refspec = f"+refs/heads/{branch}:refs/remotes/{self.remote}/{branch}"
        configured = self._run(["config", "--get-all", f"remote.{self.remote}.fetch"])
        match configured:
            case Ok(stdout):
                refspecs = stdout.split()
            case Err(e) if e.returncode == 1:
                refspecs = []
            case Err(e):
                return Err(self._error("config --get-all", e))

        wildcard = f"+refs/heads/*:refs/remotes/{self.remote}/*"
        if refspec not in refspecs and wildcard not in refspecs:
            added = self._run_checked(
                ["remote", "set-branches", "--add", self.remote, branch],
                label="remote set-branches",
            )
            if isinstance(added, Err):
                return added
        return self.fetch(branch)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        )
        return run_process(["git", "-C", str(self.path), *args], cwd=self.path, timeout=timeout)

    def _run_checked(self, args: list[str], *, label: str) -> Result[None, GitError]:
        result = self._run(args)
        if isinstance(result, Err):
            return Err(self._error(label, result.error))
        return Ok(None)

    @staticmethod
    def _error(label: str, e: ProcessError) -> GitError:
        return GitError(
            command=label,
            message=e.stderr.strip() or e.stdout.strip() or f"git {label} failed",
            returncode=e.returncode,
        )
