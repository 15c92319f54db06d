from __future__ import annotations

from binrelease.core.result import Err, Ok
from binrelease.git.mock import MockRepository
from binrelease.git.repository import GitError
from binrelease.output.console import MockConsole
from binrelease.services.release.merge import merge_release_branch

BRANCH = "release/0.2.2"


def _repo() -> MockRepository:
    return MockRepository(
        head=BRANCH, local_branches={"main", BRANCH}, remote_branches={"main", BRANCH}
    )


def test_squash_merges_and_deletes_branch() -> None:
    git = _repo()

    result = merge_release_branch(
        git=git, version="0.2.2", branch=BRANCH, trunk="main", console=MockConsole()
    )

    assert result == Ok(None)
    assert git.head == "main"
    assert git.calls == [
        "checkout main",
        f"fetch {BRANCH}",
        f"merge_squash {BRANCH}",
        "commit Release 0.2.2",
        "push main",
        f"delete_remote_branch {BRANCH}",
    ]
    assert git.commits[-1].branch == "main"
    assert git.commits[-1].message == "Release 0.2.2"
    assert BRANCH not in git.remote_branches


def test_rerun_after_completion_fails() -> None:
    git = _repo()
    merge_release_branch(
        git=git, version="0.2.2", branch=BRANCH, trunk="main", console=MockConsole()
    )

    again = merge_release_branch(
        git=git, version="0.2.2", branch=BRANCH, trunk="main", console=MockConsole()
    )

    assert isinstance(again, Err)
    assert again.error.kind == "git_failed"


def test_stops_at_first_failure() -> None:
    git = _repo()
    git.fail["push"] = GitError("push", "protected branch", 1)

    result = merge_release_branch(
        git=git, version="0.2.2", branch=BRANCH, trunk="main", console=MockConsole()
    )

    assert isinstance(result, Err)
    assert result.error.hint == "protected branch"
    assert BRANCH in git.remote_branches
    assert not any(c.startswith("delete_remote_branch") for c in git.calls)


def test_dry_run_only_echoes() -> None:
    git = _repo()
    console = MockConsole()

    result = merge_release_branch(
        git=git, version="0.2.2", branch=BRANCH, trunk="main", console=console, dry_run=True
    )

    assert result == Ok(None)
    assert git.calls == []
    assert console.find(f"git merge --squash origin/{BRANCH}")
