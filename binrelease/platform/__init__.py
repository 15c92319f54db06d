"""Process and HTTP boundary layer."""

from .process import (
    ProcessError,
    run,
    run_live,
)

__all__ = [
    "ProcessError",
    "run",
    "run_live",
]
