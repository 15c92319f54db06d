from __future__ import annotations

from pathlib import Path

import typer

from binrelease.cli.commands._helpers import require_repository, unwrap_or_exit
from binrelease.cli.context import build_context
from binrelease.services.release.flow import finalize_release, prepare_release
from binrelease.services.release.gh import GhReleaseClient, ensure_gh_available
from binrelease.services.release.manifest import CommandLockResolver


def prepare(
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands only"),
) -> None:
    """Compute the version, set up the release branch and commit the manifest.

    Prints the version on stdout for the following CI jobs.
    """
    ctx = build_context()
    version = unwrap_or_exit(
        prepare_release(
            root=ctx.workspace.root,
            config=ctx.config,
            git=ctx.git,
            resolver=CommandLockResolver(ctx.config.project.lock_command),
            console=ctx.console,
            dry_run=dry_run,
        ),
        console=ctx.console,
    )
    typer.echo(version)


def finalize(
    version: str = typer.Option(..., "--version", help="Version being released"),
    artifacts: Path | None = typer.Option(None, "--artifacts", help="Artifacts root"),
    prune: bool = typer.Option(False, "--prune", help="Delete descriptors of platforms not built"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands only"),
) -> None:
    """Catalog artifacts, publish the release and merge the release branch."""
    ctx = build_context()
    unwrap_or_exit(ensure_gh_available(), console=ctx.console)
    repo = require_repository(ctx.env.repository, console=ctx.console)
    result = unwrap_or_exit(
        finalize_release(
            root=ctx.workspace.root,
            config=ctx.config,
            env=ctx.env,
            git=ctx.git,
            client=GhReleaseClient(root=ctx.workspace.root, repo=repo),
            version=version,
            artifacts_root=(
                artifacts if artifacts is not None else ctx.workspace.artifacts_dir(ctx.config)
            ),
            console=ctx.console,
            prune=prune,
            dry_run=dry_run,
        ),
        console=ctx.console,
    )
    ctx.console.success(f"released v{version} ({len(result.entries)} platform(s))")
