from __future__ import annotations

import typer

from binrelease.cli.commands._helpers import unwrap_or_exit
from binrelease.cli.context import build_context
from binrelease.services.release.branch import release_branch_name
from binrelease.services.release.merge import merge_release_branch


def merge(
    version: str = typer.Option(..., "--version", help="Released version"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands only"),
) -> None:
    """Squash-merge release/<version> into trunk and delete the remote branch."""
    ctx = build_context()
    branch = release_branch_name(version, prefix=ctx.config.git.branch_prefix)
    unwrap_or_exit(
        merge_release_branch(
            git=ctx.git,
            version=version,
            branch=branch,
            trunk=ctx.config.git.trunk,
            console=ctx.console,
            dry_run=dry_run,
        ),
        console=ctx.console,
    )
    ctx.console.success(f"{branch} merged into {ctx.config.git.trunk}")
