from __future__ import annotations

from binrelease.core.result import Err, Ok, Result
from binrelease.output.console import ConsoleProtocol, Style
from binrelease.services.release.errors import ReleaseError, git_failed
from binrelease.services.release.ports import GitClient


def merge_release_branch(
    *,
    git: GitClient,
    version: str,
    branch: str,
    trunk: str,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[None, ReleaseError]:
    """Squash-merge `branch` into `trunk`, push trunk, delete the remote branch.

    Terminal step, not idempotent: once the remote branch is gone a re-run
    fails at the fetch.
    """
    remote = git.remote
    steps = [
        (f"git checkout {trunk}", lambda: git.checkout(trunk)),
        (f"git fetch {remote} {branch}", lambda: git.fetch(branch)),
        (f"git merge --squash {remote}/{branch}", lambda: git.merge_squash(branch)),
        (f"git commit -m 'Release {version}'", lambda: git.commit(f"Release {version}")),
        (f"git push {remote} {trunk}", lambda: git.push(trunk)),
        (f"git push {remote} --delete {branch}", lambda: git.delete_remote_branch(branch)),
    ]
    for echo, action in steps:
        console.print(echo, Style.DIM)
        if dry_run:
            continue
        done = action()
        if isinstance(done, Err):
            return Err(git_failed(done.error))
    return Ok(None)
