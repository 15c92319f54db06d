from __future__ import annotations

import typer

from binrelease.cli.commands._helpers import unwrap_or_exit
from binrelease.cli.context import build_context
from binrelease.services.release.flow import next_version
from binrelease.services.release.manifest import read_manifest_version

version_app = typer.Typer(add_completion=False, no_args_is_help=True)


@version_app.command("next")
def next_cmd() -> None:
    """Print the version the next release will use."""
    ctx = build_context()
    version = unwrap_or_exit(
        next_version(git=ctx.git, manifest_path=ctx.workspace.manifest_path(ctx.config)),
        console=ctx.console,
    )
    typer.echo(version)


@version_app.command("current")
def current_cmd() -> None:
    """Print the version recorded in the manifest."""
    ctx = build_context()
    version = unwrap_or_exit(
        read_manifest_version(ctx.workspace.manifest_path(ctx.config)), console=ctx.console
    )
    typer.echo(version)
