from __future__ import annotations

import os
from pathlib import Path

import typer

from binrelease import __version__
from binrelease.cli.commands.artifacts_cmd import artifacts_app
from binrelease.cli.commands.branch_cmd import branch_app
from binrelease.cli.commands.catalog_cmd import catalog
from binrelease.cli.commands.commit_cmd import commit
from binrelease.cli.commands.manifest_cmd import manifest_app
from binrelease.cli.commands.merge_cmd import merge
from binrelease.cli.commands.pipeline_cmd import finalize, prepare
from binrelease.cli.commands.release_cmd import release_app
from binrelease.cli.commands.version_cmd import version_app
from binrelease.core.errors import ErrorCode
from binrelease.core.workspace import ROOT_ENV_VAR, is_checkout_root


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    invoke_without_command=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(commit)
app.command()(catalog)
app.command()(merge)
app.command()(prepare)
app.command()(finalize)

# Sub-apps
app.add_typer(version_app, name="version")
app.add_typer(branch_app, name="branch")
app.add_typer(manifest_app, name="manifest")
app.add_typer(release_app, name="release")
app.add_typer(artifacts_app, name="artifacts")


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    show_version: bool = typer.Option(False, "--version", help="Show version and exit."),
    root: Path | None = typer.Option(
        None,
        "--root",
        help="Checkout root (overrides auto detection)",
    ),
) -> None:
    if show_version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if root is not None:
        try:
            resolved = root.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --root: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))

        if not resolved.is_dir() or not is_checkout_root(resolved):
            typer.echo(f"error: --root '{resolved}' is not a git checkout", err=True)
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

        os.environ[ROOT_ENV_VAR] = str(resolved)


def main() -> None:
    app()
