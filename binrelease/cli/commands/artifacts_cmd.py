from __future__ import annotations

from pathlib import Path

import typer

from binrelease.cli.commands._helpers import require_repository, unwrap_or_exit
from binrelease.cli.context import build_context
from binrelease.platform.http import RealHttpClient
from binrelease.services.release.artifacts import (
    ActionsArtifactStore,
    download_from_run,
    upload_to_release,
    upload_to_run,
)
from binrelease.services.release.gh import GhReleaseClient, ensure_gh_available

artifacts_app = typer.Typer(add_completion=False, no_args_is_help=True)


@artifacts_app.command("upload-release")
def upload_release_cmd(
    files: list[Path] = typer.Argument(..., help="Files to attach"),
    version: str = typer.Option(..., "--version", help="Release version"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands only"),
) -> None:
    """Attach files to release v<version>."""
    ctx = build_context()
    unwrap_or_exit(ensure_gh_available(), console=ctx.console)
    repo = require_repository(ctx.env.repository, console=ctx.console)
    unwrap_or_exit(
        upload_to_release(
            client=GhReleaseClient(root=ctx.workspace.root, repo=repo),
            version=version,
            files=files,
            console=ctx.console,
            dry_run=dry_run,
        ),
        console=ctx.console,
    )
    ctx.console.success(f"uploaded {len(files)} file(s) to v{version}")


@artifacts_app.command("upload-run")
def upload_run_cmd(
    files: list[Path] = typer.Argument(..., help="Files to store as run artifacts"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print actions only"),
) -> None:
    """Store files as artifacts of the current workflow run (one per file)."""
    ctx = build_context()
    store = unwrap_or_exit(
        ActionsArtifactStore.from_env(http=RealHttpClient(), env=ctx.env), console=ctx.console
    )
    unwrap_or_exit(
        upload_to_run(store=store, files=files, console=ctx.console, dry_run=dry_run),
        console=ctx.console,
    )
    ctx.console.success(f"uploaded {len(files)} run artifact(s)")


@artifacts_app.command("download")
def download_cmd(
    pattern: str = typer.Option(..., "--pattern", help="Artifact name glob"),
    run_id: str | None = typer.Option(None, "--run-id", help="Run id (default: GITHUB_RUN_ID)"),
    dest: Path | None = typer.Option(None, "--dir", help="Destination (default: artifacts root)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print commands only"),
) -> None:
    """Download run artifacts matching a pattern."""
    ctx = build_context()
    unwrap_or_exit(ensure_gh_available(), console=ctx.console)
    repo = require_repository(ctx.env.repository, console=ctx.console)
    target = dest if dest is not None else ctx.workspace.artifacts_dir(ctx.config)
    unwrap_or_exit(
        download_from_run(
            client=GhReleaseClient(root=ctx.workspace.root, repo=repo),
            run_id=run_id or ctx.env.run_id,
            pattern=pattern,
            dest=target,
            console=ctx.console,
            dry_run=dry_run,
        ),
        console=ctx.console,
    )
    ctx.console.success(str(target))
