from __future__ import annotations

import typer

from binrelease.cli.commands._helpers import unwrap_or_exit
from binrelease.cli.context import build_context
from binrelease.services.release.commit import publish_commit


def commit(
    files: list[str] = typer.Argument(..., help="Files to stage"),
    message: str = typer.Option(..., "--message", "-m", help="Commit message"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands only"),
) -> None:
    """Commit and push the given files; a no-op when nothing changed."""
    ctx = build_context()
    outcome = unwrap_or_exit(
        publish_commit(
            git=ctx.git, files=files, message=message, console=ctx.console, dry_run=dry_run
        ),
        console=ctx.console,
    )
    if outcome == "noop":
        ctx.console.info("nothing changed, no commit")
    else:
        ctx.console.success("committed and pushed")
