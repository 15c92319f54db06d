"""Git operations module.

Usage:
    from binrelease.git import Repository

    repo = Repository(Path("/path/to/checkout"))
    print(repo.latest_tag() or "no tags yet")
"""

from binrelease.git.mock import MockRepository
from binrelease.git.repository import (
    GitError,
    Repository,
)

__all__ = [
    "GitError",
    "MockRepository",
    "Repository",
]
