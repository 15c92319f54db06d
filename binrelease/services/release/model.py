from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

BranchState = Literal["local", "remote", "absent"]
CommitOutcome = Literal["committed", "noop"]


@dataclass(frozen=True, slots=True)
class PlatformArtifactDescriptor:
    """Install metadata for one build target."""

    platform_key: str
    download_url: str
    content_hash: str

    def to_record(self) -> dict[str, str]:
        return {"url": self.download_url, "hash": self.content_hash}


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    descriptor: PlatformArtifactDescriptor
    archive: Path
    record_path: Path


@dataclass(frozen=True, slots=True)
class CatalogResult:
    entries: tuple[CatalogEntry, ...]
    # data/*.json left over from platforms not built this cycle
    stale: tuple[Path, ...]
    pruned: bool

    @property
    def record_paths(self) -> list[Path]:
        return [e.record_path for e in self.entries]

    @property
    def archives(self) -> list[Path]:
        return [e.archive for e in self.entries]


@dataclass(frozen=True, slots=True)
class BranchResult:
    branch: str
    # How the branch was found before reconciling.
    found: BranchState
    version: str


@dataclass(frozen=True, slots=True)
class ReleaseTarget:
    version: str
    branch: str

    @property
    def tag(self) -> str:
        return f"v{self.version}"

    @property
    def title(self) -> str:
        return f"Release v{self.version}"
