from __future__ import annotations

from typing import NoReturn, TypeVar

import typer

from binrelease.core.errors import ErrorCode
from binrelease.core.result import Err, Result
from binrelease.output.console import ConsoleProtocol
from binrelease.services.release.errors import ReleaseError

T = TypeVar("T")


def release_error_code(kind: str) -> ErrorCode:
    if kind in {"gh_missing", "ci_env_missing"}:
        return ErrorCode.ENV_ERROR
    if kind in {"lock_failed"}:
        return ErrorCode.BUILD_ERROR
    if kind in {"git_failed", "gh_failed", "artifact_failed", "release_exists"}:
        return ErrorCode.NETWORK_ERROR
    if kind in {"hash_missing", "catalog_failed", "manifest_invalid"}:
        return ErrorCode.IO_ERROR
    return ErrorCode.USER_ERROR


def exit_release(error: ReleaseError, *, console: ConsoleProtocol) -> NoReturn:
    console.error(error.message)
    if error.hint:
        typer.echo(f"hint: {error.hint}", err=True)
    raise typer.Exit(code=int(release_error_code(error.kind)))


def unwrap_or_exit(result: Result[T, ReleaseError], *, console: ConsoleProtocol) -> T:
    if isinstance(result, Err):
        exit_release(result.error, console=console)
    return result.value


def require_repository(repository: str | None, *, console: ConsoleProtocol) -> str:
    if not repository:
        exit_release(
            ReleaseError(
                kind="ci_env_missing",
                message="GITHUB_REPOSITORY is not set",
                hint="export GITHUB_REPOSITORY=<owner>/<name>",
            ),
            console=console,
        )
    return repository
