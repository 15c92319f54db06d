from __future__ import annotations

import typer

from binrelease.cli.commands._helpers import require_repository, unwrap_or_exit
from binrelease.cli.context import build_context
from binrelease.services.release.branch import release_branch_name
from binrelease.services.release.gh import GhReleaseClient, ensure_gh_available
from binrelease.services.release.model import ReleaseTarget
from binrelease.services.release.publish import publish_release

release_app = typer.Typer(add_completion=False, no_args_is_help=True)


@release_app.command("create")
def create_cmd(
    version: str = typer.Option(..., "--version", help="Version to publish"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands only"),
) -> None:
    """Create release v<version> targeted at the release branch."""
    ctx = build_context()
    unwrap_or_exit(ensure_gh_available(), console=ctx.console)
    repo = require_repository(ctx.env.repository, console=ctx.console)

    target = ReleaseTarget(
        version=version,
        branch=release_branch_name(version, prefix=ctx.config.git.branch_prefix),
    )
    unwrap_or_exit(
        publish_release(
            client=GhReleaseClient(root=ctx.workspace.root, repo=repo),
            target=target,
            console=ctx.console,
            dry_run=dry_run,
        ),
        console=ctx.console,
    )
    ctx.console.success(f"release {target.tag}")
