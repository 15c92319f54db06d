from __future__ import annotations

import typer

from binrelease.cli.commands._helpers import unwrap_or_exit
from binrelease.cli.context import build_context
from binrelease.services.release.branch import ensure_release_branch

branch_app = typer.Typer(add_completion=False, no_args_is_help=True)


@branch_app.command("ensure")
def ensure_cmd(
    version: str = typer.Option(..., "--version", help="Version being released"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands only"),
) -> None:
    """Check out release/<version>, creating or adopting it as needed."""
    ctx = build_context()
    result = unwrap_or_exit(
        ensure_release_branch(
            git=ctx.git,
            version=version,
            prefix=ctx.config.git.branch_prefix,
            console=ctx.console,
            dry_run=dry_run,
        ),
        console=ctx.console,
    )
    ctx.console.success(f"on {result.branch} (was {result.found})")
    typer.echo(result.version)
