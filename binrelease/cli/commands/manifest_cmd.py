from __future__ import annotations

import typer

from binrelease.cli.commands._helpers import unwrap_or_exit
from binrelease.cli.context import build_context
from binrelease.services.release.manifest import CommandLockResolver, update_manifest

manifest_app = typer.Typer(add_completion=False, no_args_is_help=True)


@manifest_app.command("set")
def set_cmd(
    version: str = typer.Option(..., "--version", help="Version to write"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions only"),
) -> None:
    """Write the version into the manifest and refresh the lockfile (no commit)."""
    ctx = build_context()
    files = unwrap_or_exit(
        update_manifest(
            root=ctx.workspace.root,
            manifest=ctx.config.project.manifest,
            lockfile=ctx.config.project.lockfile,
            version=version,
            resolver=CommandLockResolver(ctx.config.project.lock_command),
            console=ctx.console,
            dry_run=dry_run,
        ),
        console=ctx.console,
    )
    for f in files:
        typer.echo(f)
