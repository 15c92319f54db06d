from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from binrelease.git.repository import GitError

ReleaseErrorKind = Literal[
    "invalid_version",
    "ci_env_missing",
    "git_failed",
    "gh_missing",
    "gh_failed",
    "release_exists",
    "manifest_invalid",
    "lock_failed",
    "hash_missing",
    "catalog_failed",
    "artifact_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    kind: ReleaseErrorKind
    message: str
    hint: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


def git_failed(e: GitError) -> ReleaseError:
    return ReleaseError(kind="git_failed", message=f"git {e.command} failed", hint=e.message)
