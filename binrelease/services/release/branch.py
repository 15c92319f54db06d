from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

from binrelease.core.result import Err, Ok, Result
from binrelease.git.repository import GitError
from binrelease.output.console import ConsoleProtocol, Style
from binrelease.services.release.errors import ReleaseError, git_failed
from binrelease.services.release.model import BranchResult, BranchState
from binrelease.services.release.ports import GitClient
from binrelease.services.release.semver import InvalidVersion, parse_version

_Step: TypeAlias = tuple[str, Callable[[], Result[None, GitError]]]


def release_branch_name(version: str, *, prefix: str = "release/") -> str:
    return f"{prefix}{version}"


def _branch_state(git: GitClient, branch: str) -> Result[BranchState, ReleaseError]:
    local = git.local_branch_exists(branch)
    if isinstance(local, Err):
        return Err(git_failed(local.error))
    if local.value:
        return Ok("local")

    remote = git.remote_branch_exists(branch)
    if isinstance(remote, Err):
        return Err(git_failed(remote.error))
    return Ok("remote" if remote.value else "absent")


def _local_steps(git: GitClient, branch: str) -> Result[list[_Step], ReleaseError]:
    """Check out an existing local branch and make sure it tracks the remote.

    A previous run may have created the branch and died before `push -u`.
    """
    steps: list[_Step] = [(f"git checkout {branch}", lambda: git.checkout(branch))]
    upstream = git.has_upstream(branch)
    if isinstance(upstream, Err):
        return Err(git_failed(upstream.error))
    if upstream.value:
        return Ok(steps)

    remote = git.remote_branch_exists(branch)
    if isinstance(remote, Err):
        return Err(git_failed(remote.error))
    if remote.value:
        steps.append(
            (
                f"git branch --set-upstream-to={git.remote}/{branch} {branch}",
                lambda: git.set_upstream(branch),
            )
        )
    else:
        steps.append((f"git push -u {git.remote} {branch}", lambda: git.push_upstream(branch)))
    return Ok(steps)


def ensure_release_branch(
    *,
    git: GitClient,
    version: str,
    console: ConsoleProtocol,
    prefix: str = "release/",
    dry_run: bool = False,
) -> Result[BranchResult, ReleaseError]:
    """Leave the checkout on `release/<version>`, whatever state it starts in.

    - exists locally: check it out, then push it or set its upstream if it
      does not track the remote yet
    - exists only on the remote: create a local branch tracking it
    - exists nowhere: create it and push it with upstream tracking

    Re-running after any of these converges on the same end state.
    """
    try:
        parse_version(version)
    except InvalidVersion as e:
        return Err(ReleaseError(kind="invalid_version", message=str(e)))

    branch = release_branch_name(version, prefix=prefix)
    state = _branch_state(git, branch)
    if isinstance(state, Err):
        return state

    steps: list[_Step]
    match state.value:
        case "local":
            local = _local_steps(git, branch)
            if isinstance(local, Err):
                return local
            steps = local.value
        case "remote":
            steps = [
                (
                    f"git checkout -b {branch} --track {git.remote}/{branch}",
                    lambda: git.checkout_tracking(branch),
                )
            ]
        case "absent":
            steps = [
                (f"git checkout -b {branch}", lambda: git.create_branch(branch)),
                (f"git push -u {git.remote} {branch}", lambda: git.push_upstream(branch)),
            ]

    console.print(f"release branch {branch}: {state.value}", Style.DIM)
    for echo, action in steps:
        console.print(echo, Style.DIM)
        if dry_run:
            continue
        done = action()
        if isinstance(done, Err):
            return Err(git_failed(done.error))

    if not dry_run:
        head = git.current_branch()
        if head != branch:
            return Err(
                ReleaseError(
                    kind="git_failed",
                    message=f"expected HEAD on {branch}, found {head or 'detached HEAD'}",
                )
            )

    return Ok(BranchResult(branch=branch, found=state.value, version=version))
