"""Composite release steps.

`prepare` runs before the build matrix, `finalize` after it. They are
sequences of the individual steps with nothing carried between them except
the version string; every step re-reads the state it needs.
"""

from __future__ import annotations

from pathlib import Path

from binrelease.core.config import CiEnvironment, ReleaseConfig
from binrelease.core.result import Err, Ok, Result
from binrelease.output.console import ConsoleProtocol
from binrelease.services.release.artifacts import upload_to_release
from binrelease.services.release.branch import ensure_release_branch
from binrelease.services.release.catalog import catalog_platform_artifacts
from binrelease.services.release.commit import publish_commit
from binrelease.services.release.errors import ReleaseError
from binrelease.services.release.manifest import (
    read_manifest_version,
    read_package_name,
    update_manifest,
)
from binrelease.services.release.merge import merge_release_branch
from binrelease.services.release.model import CatalogResult, ReleaseTarget
from binrelease.services.release.ports import GitClient, LockResolver, ReleaseClient
from binrelease.services.release.publish import publish_release
from binrelease.services.release.semver import InvalidVersion, calculate_semver, parse_version
from binrelease.services.release.tags import read_latest_version


def next_version(*, git: GitClient, manifest_path: Path) -> Result[str, ReleaseError]:
    current = read_manifest_version(manifest_path)
    if isinstance(current, Err):
        return current

    latest = read_latest_version(git)
    try:
        version = calculate_semver(latest, current.value)
        parse_version(version)
    except InvalidVersion as e:
        return Err(
            ReleaseError(
                kind="invalid_version",
                message=str(e),
                hint=f"latest tag: {latest or '(none)'}, manifest: {current.value}",
            )
        )
    return Ok(version)


def resolve_project_name(
    *, config: ReleaseConfig, manifest_path: Path
) -> Result[str, ReleaseError]:
    if config.project.name:
        return Ok(config.project.name)
    return read_package_name(manifest_path)


def prepare_release(
    *,
    root: Path,
    config: ReleaseConfig,
    git: GitClient,
    resolver: LockResolver,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[str, ReleaseError]:
    """Tag -> version -> release branch -> manifest -> commit. Returns the version."""
    console.group("Compute version")
    version = next_version(git=git, manifest_path=root / config.project.manifest)
    console.endgroup()
    if isinstance(version, Err):
        return version
    console.info(f"releasing {version.value}")

    console.group("Release branch")
    branch = ensure_release_branch(
        git=git,
        version=version.value,
        prefix=config.git.branch_prefix,
        console=console,
        dry_run=dry_run,
    )
    console.endgroup()
    if isinstance(branch, Err):
        return branch

    console.group("Update manifest")
    files = update_manifest(
        root=root,
        manifest=config.project.manifest,
        lockfile=config.project.lockfile,
        version=version.value,
        resolver=resolver,
        console=console,
        dry_run=dry_run,
    )
    console.endgroup()
    if isinstance(files, Err):
        return files

    console.group("Commit manifest")
    committed = publish_commit(
        git=git,
        files=files.value,
        message=f"Bump version to {version.value}",
        console=console,
        dry_run=dry_run,
    )
    console.endgroup()
    if isinstance(committed, Err):
        return committed

    return Ok(version.value)


def finalize_release(
    *,
    root: Path,
    config: ReleaseConfig,
    env: CiEnvironment,
    git: GitClient,
    client: ReleaseClient,
    version: str,
    artifacts_root: Path,
    console: ConsoleProtocol,
    prune: bool = False,
    dry_run: bool = False,
) -> Result[CatalogResult, ReleaseError]:
    """Catalog -> commit data -> create release -> upload archives -> merge."""
    try:
        parse_version(version)
    except InvalidVersion as e:
        return Err(ReleaseError(kind="invalid_version", message=str(e)))

    name = resolve_project_name(config=config, manifest_path=root / config.project.manifest)
    if isinstance(name, Err):
        return name

    console.group("Release branch")
    branch = ensure_release_branch(
        git=git,
        version=version,
        prefix=config.git.branch_prefix,
        console=console,
        dry_run=dry_run,
    )
    console.endgroup()
    if isinstance(branch, Err):
        return branch

    console.group("Catalog artifacts")
    catalog = catalog_platform_artifacts(
        version=version,
        artifacts_root=artifacts_root,
        data_dir=root / config.artifacts.data_dir,
        project_name=name.value,
        repo=env.repository,
        console=console,
        archive_ext=config.artifacts.archive_ext,
        hash_suffix=config.artifacts.hash_suffix,
        expected_platforms=config.artifacts.platforms,
        prune=prune,
        dry_run=dry_run,
    )
    console.endgroup()
    if isinstance(catalog, Err):
        return catalog

    console.group("Commit install data")
    committed = publish_commit(
        git=git,
        files=[config.artifacts.data_dir],
        message=f"Update install data for {version}",
        console=console,
        dry_run=dry_run,
    )
    console.endgroup()
    if isinstance(committed, Err):
        return committed

    target = ReleaseTarget(version=version, branch=branch.value.branch)
    console.group("Publish release")
    published = publish_release(client=client, target=target, console=console, dry_run=dry_run)
    if isinstance(published, Ok):
        published = upload_to_release(
            client=client,
            version=version,
            files=catalog.value.archives,
            console=console,
            dry_run=dry_run,
        )
    console.endgroup()
    if isinstance(published, Err):
        return published

    console.group("Merge release branch")
    merged = merge_release_branch(
        git=git,
        version=version,
        branch=target.branch,
        trunk=config.git.trunk,
        console=console,
        dry_run=dry_run,
    )
    console.endgroup()
    if isinstance(merged, Err):
        return merged

    return Ok(catalog.value)
