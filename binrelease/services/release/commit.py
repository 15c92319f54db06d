from __future__ import annotations

from binrelease.core.result import Err, Ok, Result
from binrelease.output.console import ConsoleProtocol, Style
from binrelease.services.release.errors import ReleaseError, git_failed
from binrelease.services.release.model import CommitOutcome
from binrelease.services.release.ports import GitClient


def publish_commit(
    *,
    git: GitClient,
    files: list[str],
    message: str,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[CommitOutcome, ReleaseError]:
    """Stage `files`, then commit and push them if that changed anything.

    Only `files` are committed; anything else already staged is left alone.
    Nothing staged among them is a normal outcome ("noop"): a re-run after
    the commit already landed must not fail. The push is a lease-checked
    force-push so a stale checkout cannot overwrite newer remote history.
    """
    if not files:
        return Err(ReleaseError(kind="git_failed", message="no files to commit"))

    branch = git.current_branch()
    if branch is None:
        return Err(
            ReleaseError(
                kind="git_failed",
                message="cannot commit on a detached HEAD",
                hint="check out the release branch first",
            )
        )

    commit_echo = f"git commit -m {message!r} -- {' '.join(files)}"
    push_echo = f"git push --force-with-lease --force-if-includes {git.remote} {branch}"

    console.print(f"git add -- {' '.join(files)}", Style.DIM)
    if dry_run:
        console.print(commit_echo, Style.DIM)
        console.print(push_echo, Style.DIM)
        return Ok("committed")

    added = git.add(files)
    if isinstance(added, Err):
        return Err(git_failed(added.error))

    staged = git.has_staged_changes(files)
    if isinstance(staged, Err):
        return Err(git_failed(staged.error))
    if not staged.value:
        console.print("nothing to commit", Style.DIM)
        return Ok("noop")

    console.print(commit_echo, Style.DIM)
    committed = git.commit(message, files)
    if isinstance(committed, Err):
        return Err(git_failed(committed.error))

    console.print(push_echo, Style.DIM)
    pushed = git.push_with_lease(branch)
    if isinstance(pushed, Err):
        return Err(git_failed(pushed.error))

    return Ok("committed")
