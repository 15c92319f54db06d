"""Repository checkout detection and paths.

Release steps operate on the checkout of the project being released. It is
identified by a `.git` entry (directory, or file for worktrees/submodules).

Detection order:
1. BINRELEASE_ROOT environment variable (if set it must be valid)
2. Search upward from the start directory (or cwd)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .config import ReleaseConfig
from .result import Err, Ok, Result

__all__ = [
    "Workspace",
    "WorkspaceError",
    "detect_workspace",
    "find_checkout_upward",
    "is_checkout_root",
]

ROOT_ENV_VAR = "BINRELEASE_ROOT"


@dataclass(frozen=True)
class WorkspaceError:
    """Error when the checkout root cannot be detected."""

    message: str
    searched_from: Path | None = None


@dataclass(frozen=True, slots=True)
class Workspace:
    """A checkout of the project being released.

    Paths derived from release.toml are resolved relative to `root`.
    """

    root: Path

    @property
    def config_path(self) -> Path:
        return self.root / "release.toml"

    def manifest_path(self, config: ReleaseConfig) -> Path:
        return self.root / config.project.manifest

    def lockfile_path(self, config: ReleaseConfig) -> Path:
        return self.root / config.project.lockfile

    def artifacts_dir(self, config: ReleaseConfig) -> Path:
        return self.root / config.artifacts.root

    def data_dir(self, config: ReleaseConfig) -> Path:
        """Descriptor records always live under the checkout root."""
        return self.root / config.artifacts.data_dir

    def __str__(self) -> str:
        return str(self.root)


def is_checkout_root(path: Path) -> bool:
    return (path / ".git").exists()


def find_checkout_upward(start: Path) -> Path | None:
    for parent in (start, *start.parents):
        if is_checkout_root(parent):
            return parent
    return None


def detect_workspace(
    *,
    start_dir: Path | None = None,
    env_var: str = ROOT_ENV_VAR,
) -> Result[Workspace, WorkspaceError]:
    env_value = os.environ.get(env_var)
    if env_value:
        env_path = Path(env_value).expanduser().resolve()
        if env_path.is_dir() and is_checkout_root(env_path):
            return Ok(Workspace(root=env_path))
        return Err(
            WorkspaceError(
                message=f"${env_var} is set to '{env_value}' but it is not a git checkout",
                searched_from=env_path if env_path.is_dir() else None,
            )
        )

    search_start = (start_dir or Path.cwd()).resolve()
    found = find_checkout_upward(search_start)
    if found is None:
        return Err(
            WorkspaceError(
                message="Could not find a git checkout (.git not found)",
                searched_from=search_start,
            )
        )
    return Ok(Workspace(root=found))
