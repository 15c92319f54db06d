from __future__ import annotations

from dataclasses import dataclass

import typer

from binrelease.core.config import CiEnvironment, ReleaseConfig, load_config_or_default
from binrelease.core.errors import ErrorCode
from binrelease.core.result import Err
from binrelease.core.workspace import Workspace, detect_workspace
from binrelease.git.repository import Repository
from binrelease.output.console import ConsoleProtocol, RichConsole
from binrelease.services.release.ports import GitClient


@dataclass(frozen=True, slots=True)
class CLIContext:
    workspace: Workspace
    config: ReleaseConfig
    env: CiEnvironment
    git: GitClient
    console: ConsoleProtocol


def build_context() -> CLIContext:
    workspace_result = detect_workspace()
    if isinstance(workspace_result, Err):
        typer.echo(f"error: {workspace_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
    workspace = workspace_result.value

    config_result = load_config_or_default(workspace.config_path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    config = config_result.value

    env = CiEnvironment.from_env()
    return CLIContext(
        workspace=workspace,
        config=config,
        env=env,
        git=Repository(workspace.root, remote=config.git.remote),
        console=RichConsole(github_actions=env.in_actions),
    )
