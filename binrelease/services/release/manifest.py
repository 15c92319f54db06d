"""Version manifest updates (Cargo.toml + Cargo.lock).

The manifest is the single source of truth for the version being released.
It is edited with tomlkit so comments, ordering and formatting of every
other field survive the round-trip.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from pathlib import Path

import tomlkit
from tomlkit.exceptions import TOMLKitError
from tomlkit.toml_document import TOMLDocument

from binrelease.core.result import Err, Ok, Result
from binrelease.output.console import ConsoleProtocol, Style
from binrelease.platform.process import run_live
from binrelease.services.release.errors import ReleaseError
from binrelease.services.release.ports import LockResolver
from binrelease.services.release.semver import InvalidVersion, parse_version


def _load(path: Path) -> Result[TOMLDocument, ReleaseError]:
    try:
        return Ok(tomlkit.parse(path.read_text(encoding="utf-8")))
    except FileNotFoundError:
        return Err(ReleaseError(kind="manifest_invalid", message=f"manifest not found: {path}"))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ReleaseError(kind="manifest_invalid", message=f"cannot read {path}: {e}"))
    except TOMLKitError as e:
        return Err(ReleaseError(kind="manifest_invalid", message=f"invalid TOML in {path}: {e}"))


def _package_table(
    doc: TOMLDocument, path: Path
) -> Result[MutableMapping[str, object], ReleaseError]:
    package = doc.get("package")
    if not isinstance(package, MutableMapping):
        return Err(ReleaseError(kind="manifest_invalid", message=f"{path} has no [package] table"))
    return Ok(package)


def _package_str(path: Path, key: str) -> Result[str, ReleaseError]:
    doc = _load(path)
    if isinstance(doc, Err):
        return doc
    package = _package_table(doc.value, path)
    if isinstance(package, Err):
        return package

    value = package.value.get(key)
    if not isinstance(value, str) or not value.strip():
        return Err(
            ReleaseError(
                kind="manifest_invalid",
                message=f"{path} has no string package.{key}",
                hint="workspace-inherited values are not supported" if value is not None else None,
            )
        )
    return Ok(str(value).strip())


def read_manifest_version(path: Path) -> Result[str, ReleaseError]:
    return _package_str(path, "version")


def read_package_name(path: Path) -> Result[str, ReleaseError]:
    return _package_str(path, "name")


def set_manifest_version(path: Path, version: str) -> Result[bool, ReleaseError]:
    """Rewrite package.version in place. Returns False if it already matched."""
    try:
        parse_version(version)
    except InvalidVersion as e:
        return Err(ReleaseError(kind="invalid_version", message=str(e)))

    doc = _load(path)
    if isinstance(doc, Err):
        return doc
    package = _package_table(doc.value, path)
    if isinstance(package, Err):
        return package

    current = package.value.get("version")
    if not isinstance(current, str):
        return Err(
            ReleaseError(
                kind="manifest_invalid",
                message=f"{path}: package.version is not a plain string",
                hint="workspace-inherited versions are not supported",
            )
        )
    if str(current) == version:
        return Ok(False)

    package.value["version"] = version
    try:
        path.write_text(tomlkit.dumps(doc.value), encoding="utf-8")
    except OSError as e:
        return Err(ReleaseError(kind="manifest_invalid", message=f"cannot write {path}: {e}"))
    return Ok(True)


class CommandLockResolver:
    """Runs the configured resolver command (default `cargo update --workspace`)."""

    def __init__(self, command: tuple[str, ...]) -> None:
        self.command = command

    def resolve(self, root: Path) -> Result[None, ReleaseError]:
        result = run_live(list(self.command), cwd=root)
        if isinstance(result, Err):
            e = result.error
            return Err(
                ReleaseError(
                    kind="lock_failed",
                    message=f"{' '.join(self.command)} failed (exit {e.returncode})",
                    hint=e.stderr.strip() or "the manifest no longer resolves; fix it and re-run",
                )
            )
        return Ok(None)


def update_manifest(
    *,
    root: Path,
    manifest: str,
    lockfile: str,
    version: str,
    resolver: LockResolver,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[list[str], ReleaseError]:
    """Set the manifest version and re-resolve so the lockfile follows.

    Returns the paths (relative to `root`) that must be committed. The
    resolver runs even when the version was already set, so a re-run after
    an interrupted resolve still repairs the lockfile.
    """
    manifest_path = root / manifest
    console.print(f"set package.version = {version} in {manifest}", Style.DIM)
    if dry_run:
        current = read_manifest_version(manifest_path)
        if isinstance(current, Err):
            return current
    else:
        changed = set_manifest_version(manifest_path, version)
        if isinstance(changed, Err):
            return changed
        if not changed.value:
            console.print(f"{manifest} already at {version}", Style.DIM)

    console.print("resolve dependencies (lockfile)", Style.DIM)
    if not dry_run:
        resolved = resolver.resolve(root)
        if isinstance(resolved, Err):
            return resolved

    files = [manifest]
    if dry_run or (root / lockfile).is_file():
        files.append(lockfile)
    return Ok(files)
