"""Per-platform install metadata from build artifacts.

The build matrix produces, per target:

    <project>-<version>-<platform>.tgz
    <project>-<version>-<platform>-nix.sha256

Artifact downloads put each job's files in its own subdirectory, so the
artifacts root is searched recursively. For every archive one descriptor
record `data/<platform>.json` is written:

    {"url": "https://github.com/<repo>/releases/download/v<version>/<archive>",
     "hash": "<contents of the hash file>"}
"""

from __future__ import annotations

import json
from pathlib import Path

from binrelease.core.result import Err, Ok, Result
from binrelease.output.console import ConsoleProtocol, Style
from binrelease.services.release.errors import ReleaseError
from binrelease.services.release.model import (
    CatalogEntry,
    CatalogResult,
    PlatformArtifactDescriptor,
)

DOWNLOAD_URL_BASE = "https://github.com"


def download_url(*, repo: str, version: str, filename: str) -> str:
    return f"{DOWNLOAD_URL_BASE}/{repo}/releases/download/v{version}/{filename}"


def find_archives(artifacts_root: Path, archive_ext: str) -> list[Path]:
    return sorted(p for p in artifacts_root.rglob(f"*{archive_ext}") if p.is_file())


def platform_key_for(
    filename: str, *, project_name: str, version: str, archive_ext: str
) -> str | None:
    """`c67-mcp-0.2.2-aarch64-darwin.tgz` -> `aarch64-darwin`; None if it does not match."""
    prefix = f"{project_name}-{version}-"
    if not filename.startswith(prefix) or not filename.endswith(archive_ext):
        return None
    key = filename[len(prefix) : len(filename) - len(archive_ext)]
    return key or None


def hash_file_for(archive: Path, *, archive_ext: str, hash_suffix: str) -> Path:
    stem = archive.name[: len(archive.name) - len(archive_ext)]
    return archive.with_name(f"{stem}{hash_suffix}")


def _read_hash(path: Path) -> Result[str, ReleaseError]:
    try:
        content = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return Err(
            ReleaseError(
                kind="hash_missing",
                message=f"hash file missing: {path}",
                hint="every archive must ship with its hash file",
            )
        )
    except (OSError, UnicodeDecodeError) as e:
        return Err(ReleaseError(kind="hash_missing", message=f"cannot read {path}: {e}"))

    if not content:
        return Err(ReleaseError(kind="hash_missing", message=f"hash file is empty: {path}"))
    return Ok(content)


def write_descriptor(data_dir: Path, descriptor: PlatformArtifactDescriptor) -> Path:
    data_dir.mkdir(parents=True, exist_ok=True)
    path = data_dir / f"{descriptor.platform_key}.json"
    path.write_text(json.dumps(descriptor.to_record(), separators=(",", ":")), encoding="utf-8")
    return path


def collect_descriptors(
    *,
    version: str,
    artifacts_root: Path,
    project_name: str,
    repo: str,
    archive_ext: str = ".tgz",
    hash_suffix: str = "-nix.sha256",
) -> Result[list[tuple[PlatformArtifactDescriptor, Path]], ReleaseError]:
    """Build descriptors for every archive without touching `data/`."""
    if not artifacts_root.is_dir():
        return Err(
            ReleaseError(
                kind="catalog_failed",
                message=f"artifacts directory not found: {artifacts_root}",
            )
        )

    found: dict[str, tuple[PlatformArtifactDescriptor, Path]] = {}
    for archive in find_archives(artifacts_root, archive_ext):
        key = platform_key_for(
            archive.name, project_name=project_name, version=version, archive_ext=archive_ext
        )
        if key is None:
            return Err(
                ReleaseError(
                    kind="catalog_failed",
                    message=f"unexpected archive name: {archive.name}",
                    hint=f"expected {project_name}-{version}-<platform>{archive_ext}",
                )
            )

        hash_path = hash_file_for(archive, archive_ext=archive_ext, hash_suffix=hash_suffix)
        digest = _read_hash(hash_path)
        if isinstance(digest, Err):
            return digest

        descriptor = PlatformArtifactDescriptor(
            platform_key=key,
            download_url=download_url(repo=repo, version=version, filename=archive.name),
            content_hash=digest.value,
        )

        previous = found.get(key)
        if previous is not None:
            if previous[0].content_hash != descriptor.content_hash:
                return Err(
                    ReleaseError(
                        kind="catalog_failed",
                        message=f"conflicting archives for {key}",
                        hint=f"{previous[1]} vs {archive}",
                    )
                )
            continue
        found[key] = (descriptor, archive)

    return Ok([found[k] for k in sorted(found)])


def catalog_platform_artifacts(
    *,
    version: str,
    artifacts_root: Path,
    data_dir: Path,
    project_name: str,
    repo: str | None,
    console: ConsoleProtocol,
    archive_ext: str = ".tgz",
    hash_suffix: str = "-nix.sha256",
    expected_platforms: tuple[str, ...] = (),
    prune: bool = False,
    dry_run: bool = False,
) -> Result[CatalogResult, ReleaseError]:
    """Regenerate `data/<platform>.json` from the archives under `artifacts_root`.

    Nothing is written unless every archive has a readable hash file and,
    when `expected_platforms` is given, every expected platform was built.
    Records for platforms not built this time are deleted with `prune`,
    otherwise reported. `dry_run` validates everything but writes nothing.
    """
    if not repo:
        return Err(
            ReleaseError(
                kind="ci_env_missing",
                message="GITHUB_REPOSITORY is not set",
                hint="download URLs need the owner/name of the hosting repository",
            )
        )

    collected = collect_descriptors(
        version=version,
        artifacts_root=artifacts_root,
        project_name=project_name,
        repo=repo,
        archive_ext=archive_ext,
        hash_suffix=hash_suffix,
    )
    if isinstance(collected, Err):
        return collected

    built = {d.platform_key for d, _ in collected.value}
    missing = [p for p in expected_platforms if p not in built]
    if missing:
        return Err(
            ReleaseError(
                kind="catalog_failed",
                message=f"missing archives for: {', '.join(missing)}",
                hint=f"searched {artifacts_root}",
            )
        )
    if not collected.value:
        return Err(
            ReleaseError(
                kind="catalog_failed",
                message=f"no *{archive_ext} archives under {artifacts_root}",
            )
        )

    entries: list[CatalogEntry] = []
    for descriptor, archive in collected.value:
        record = data_dir / f"{descriptor.platform_key}.json"
        if not dry_run:
            try:
                record = write_descriptor(data_dir, descriptor)
            except OSError as e:
                return Err(
                    ReleaseError(kind="catalog_failed", message=f"cannot write record: {e}")
                )
        console.print(f"{descriptor.platform_key}: {archive.name}", Style.DIM)
        entries.append(CatalogEntry(descriptor=descriptor, archive=archive, record_path=record))

    stale = sorted(p for p in data_dir.glob("*.json") if p.stem not in built)
    for path in stale:
        if prune:
            console.print(f"remove stale {path.name}", Style.DIM)
            if not dry_run:
                path.unlink()
        else:
            console.warning(f"stale descriptor not built this release: {path.name}")

    return Ok(CatalogResult(entries=tuple(entries), stale=tuple(stale), pruned=prune))
