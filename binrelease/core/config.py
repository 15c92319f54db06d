"""Typed loading of the optional `release.toml`.

Every field has a default, so a repository without `release.toml` gets the
conventions of a Cargo project published from GitHub Actions:

    [project]
    name = "c67-mcp"            # defaults to package.name in the manifest
    manifest = "Cargo.toml"
    lockfile = "Cargo.lock"
    lock_command = ["cargo", "update", "--workspace"]

    [git]
    remote = "origin"
    trunk = "main"
    branch_prefix = "release/"

    [artifacts]
    root = "artifacts"
    archive_ext = ".tgz"
    hash_suffix = "-nix.sha256"
    data_dir = "data"
    platforms = ["aarch64-darwin", "aarch64-linux", "x86_64-linux"]
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_str_list, get_table

__all__ = [
    "ArtifactsConfig",
    "CiEnvironment",
    "ConfigError",
    "GitConfig",
    "ProjectConfig",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
]

DEFAULT_LOCK_COMMAND: tuple[str, ...] = ("cargo", "update", "--workspace")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when release.toml cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class ProjectConfig:
    name: str | None = None
    manifest: str = "Cargo.toml"
    lockfile: str = "Cargo.lock"
    lock_command: tuple[str, ...] = DEFAULT_LOCK_COMMAND


@dataclass(frozen=True, slots=True)
class GitConfig:
    remote: str = "origin"
    trunk: str = "main"
    branch_prefix: str = "release/"

    def release_branch(self, version: str) -> str:
        return f"{self.branch_prefix}{version}"


@dataclass(frozen=True, slots=True)
class ArtifactsConfig:
    root: str = "artifacts"
    archive_ext: str = ".tgz"
    hash_suffix: str = "-nix.sha256"
    data_dir: str = "data"
    # Empty means "whatever the build matrix produced".
    platforms: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Main configuration container."""

    project: ProjectConfig = field(default_factory=ProjectConfig)
    git: GitConfig = field(default_factory=GitConfig)
    artifacts: ArtifactsConfig = field(default_factory=ArtifactsConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Create ReleaseConfig from a mapping (parsed TOML).

        Raises:
            ValueError: a list-valued key holds something other than strings.
        """
        project: StrDict = get_table(data, "project") or {}
        git: StrDict = get_table(data, "git") or {}
        artifacts: StrDict = get_table(data, "artifacts") or {}

        lock_command: tuple[str, ...] = DEFAULT_LOCK_COMMAND
        if "lock_command" in project:
            cmd = get_str_list(project, "lock_command")
            if not cmd:
                raise ValueError("project.lock_command must be a non-empty list of strings")
            lock_command = tuple(cmd)

        platforms: tuple[str, ...] = ()
        if "platforms" in artifacts:
            items = get_str_list(artifacts, "platforms")
            if items is None:
                raise ValueError("artifacts.platforms must be a list of strings")
            platforms = tuple(items)

        defaults = ArtifactsConfig()
        return cls(
            project=ProjectConfig(
                name=get_str(project, "name"),
                manifest=get_str(project, "manifest") or "Cargo.toml",
                lockfile=get_str(project, "lockfile") or "Cargo.lock",
                lock_command=lock_command,
            ),
            git=GitConfig(
                remote=get_str(git, "remote") or "origin",
                trunk=get_str(git, "trunk") or "main",
                branch_prefix=get_str(git, "branch_prefix") or "release/",
            ),
            artifacts=ArtifactsConfig(
                root=get_str(artifacts, "root") or defaults.root,
                archive_ext=get_str(artifacts, "archive_ext") or defaults.archive_ext,
                hash_suffix=get_str(artifacts, "hash_suffix") or defaults.hash_suffix,
                data_dir=get_str(artifacts, "data_dir") or defaults.data_dir,
                platforms=platforms,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load and parse release.toml.

    Args:
        path: Path to release.toml

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(ReleaseConfig.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Like load_config, but a missing file yields the defaults.

    A present but broken file is still an error: silently falling back would
    publish with the wrong branch or artifact naming.
    """
    if not path.exists():
        return Ok(ReleaseConfig())
    return load_config(path)


@dataclass(frozen=True, slots=True)
class CiEnvironment:
    """CI variables the release steps read.

    Attributes:
        repository: "owner/name" of the hosting repository (GITHUB_REPOSITORY)
        run_id: Current workflow run (GITHUB_RUN_ID)
        in_actions: True when running inside GitHub Actions
        runtime_token: Token for the run artifact service
        results_url: Base URL of the run artifact service
    """

    repository: str | None = None
    run_id: str | None = None
    in_actions: bool = False
    runtime_token: str | None = None
    results_url: str | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> CiEnvironment:
        source = os.environ if env is None else env

        def _get(key: str) -> str | None:
            value = source.get(key, "").strip()
            return value or None

        return cls(
            repository=_get("GITHUB_REPOSITORY"),
            run_id=_get("GITHUB_RUN_ID"),
            in_actions=source.get("GITHUB_ACTIONS", "").lower() == "true",
            runtime_token=_get("ACTIONS_RUNTIME_TOKEN"),
            results_url=_get("ACTIONS_RESULTS_URL"),
        )
