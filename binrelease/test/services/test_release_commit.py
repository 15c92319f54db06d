from __future__ import annotations

from binrelease.core.result import Err, Ok
from binrelease.git.mock import MockRepository
from binrelease.git.repository import GitError
from binrelease.output.console import MockConsole
from binrelease.services.release.commit import publish_commit

BRANCH = "release/0.2.2"


def _repo(fail: dict[str, GitError] | None = None) -> MockRepository:
    return MockRepository(head=BRANCH, remote_branches={"main", BRANCH}, fail=fail or {})


def test_changed_files_are_committed_and_pushed() -> None:
    git = _repo()
    git.changed |= {"Cargo.toml", "Cargo.lock"}

    result = publish_commit(
        git=git, files=["Cargo.toml", "Cargo.lock"], message="Bump version", console=MockConsole()
    )

    assert result == Ok("committed")
    assert len(git.commits) == 1
    assert git.commits[0].branch == BRANCH
    assert git.commits[0].files == ("Cargo.lock", "Cargo.toml")
    assert git.pushes == [BRANCH]
    assert f"push_with_lease {BRANCH}" in git.calls


def test_directory_paths_stage_their_contents() -> None:
    git = _repo()
    git.changed |= {"data/aarch64-darwin.json", "README.md"}

    result = publish_commit(git=git, files=["data"], message="Update data", console=MockConsole())

    assert result == Ok("committed")
    assert git.commits[0].files == ("data/aarch64-darwin.json",)
    assert git.changed == {"README.md"}


def test_unrelated_staged_file_stays_out_of_the_commit() -> None:
    git = _repo()
    git.staged.add("secret.txt")
    git.changed.add("Cargo.toml")

    result = publish_commit(git=git, files=["Cargo.toml"], message="Bump", console=MockConsole())

    assert result == Ok("committed")
    assert git.commits[0].files == ("Cargo.toml",)
    assert git.staged == {"secret.txt"}


def test_only_unrelated_staged_file_is_noop() -> None:
    git = _repo()
    git.staged.add("secret.txt")

    result = publish_commit(git=git, files=["Cargo.toml"], message="Bump", console=MockConsole())

    assert result == Ok("noop")
    assert git.commits == []
    assert git.pushes == []


def test_nothing_staged_is_noop() -> None:
    git = _repo()
    console = MockConsole()

    result = publish_commit(git=git, files=["Cargo.toml"], message="Bump", console=console)

    assert result == Ok("noop")
    assert git.commits == []
    assert git.pushes == []
    assert console.find("nothing to commit")


def test_second_run_is_noop() -> None:
    git = _repo()
    git.changed.add("Cargo.toml")
    assert publish_commit(git=git, files=["Cargo.toml"], message="m", console=MockConsole()) == Ok(
        "committed"
    )
    assert publish_commit(git=git, files=["Cargo.toml"], message="m", console=MockConsole()) == Ok(
        "noop"
    )
    assert len(git.commits) == 1


def test_empty_file_list_is_rejected() -> None:
    result = publish_commit(git=_repo(), files=[], message="m", console=MockConsole())
    assert isinstance(result, Err)
    assert result.error.kind == "git_failed"


def test_detached_head_is_rejected() -> None:
    git = MockRepository(head=None)
    result = publish_commit(git=git, files=["Cargo.toml"], message="m", console=MockConsole())
    assert isinstance(result, Err)
    assert "detached" in result.error.message
    assert git.calls == []


def test_rejected_push_is_reported() -> None:
    git = _repo(fail={"push_with_lease": GitError("push", "stale info", 1)})
    git.changed.add("Cargo.toml")

    result = publish_commit(git=git, files=["Cargo.toml"], message="m", console=MockConsole())

    assert isinstance(result, Err)
    assert result.error.kind == "git_failed"
    assert result.error.hint == "stale info"


def test_dry_run_does_not_touch_git() -> None:
    git = _repo()
    git.changed.add("Cargo.toml")
    console = MockConsole()

    result = publish_commit(
        git=git, files=["Cargo.toml"], message="Bump", console=console, dry_run=True
    )

    assert result == Ok("committed")
    assert git.calls == []
    assert console.find(f"git push --force-with-lease --force-if-includes origin {BRANCH}")
