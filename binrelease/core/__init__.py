"""Core domain types and logic."""

from .config import CiEnvironment, ConfigError, ReleaseConfig, load_config, load_config_or_default
from .errors import ErrorCode
from .result import Err, Ok, Result
from .workspace import Workspace, WorkspaceError, detect_workspace

__all__ = [
    # config
    "CiEnvironment",
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    "load_config_or_default",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
    # workspace
    "Workspace",
    "WorkspaceError",
    "detect_workspace",
]
