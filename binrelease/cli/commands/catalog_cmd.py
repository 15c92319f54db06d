from __future__ import annotations

from pathlib import Path

import typer

from binrelease.cli.commands._helpers import unwrap_or_exit
from binrelease.cli.context import build_context
from binrelease.services.release.catalog import catalog_platform_artifacts
from binrelease.services.release.flow import resolve_project_name


def catalog(
    version: str = typer.Option(..., "--version", help="Released version"),
    artifacts: Path | None = typer.Option(
        None, "--artifacts", help="Artifacts root (default from release.toml)"
    ),
    prune: bool = typer.Option(False, "--prune", help="Delete descriptors of platforms not built"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Validate without writing"),
) -> None:
    """Write data/<platform>.json descriptors for the built archives."""
    ctx = build_context()
    cfg = ctx.config
    name = unwrap_or_exit(
        resolve_project_name(config=cfg, manifest_path=ctx.workspace.manifest_path(cfg)),
        console=ctx.console,
    )
    result = unwrap_or_exit(
        catalog_platform_artifacts(
            version=version,
            artifacts_root=artifacts if artifacts is not None else ctx.workspace.artifacts_dir(cfg),
            data_dir=ctx.workspace.data_dir(cfg),
            project_name=name,
            repo=ctx.env.repository,
            console=ctx.console,
            archive_ext=cfg.artifacts.archive_ext,
            hash_suffix=cfg.artifacts.hash_suffix,
            expected_platforms=cfg.artifacts.platforms,
            prune=prune,
            dry_run=dry_run,
        ),
        console=ctx.console,
    )
    for entry in result.entries:
        ctx.console.success(f"{entry.descriptor.platform_key} -> {entry.record_path.name}")
