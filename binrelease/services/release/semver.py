from __future__ import annotations

from dataclasses import dataclass


class InvalidVersion(ValueError):
    """A version string that is not three dot-separated non-negative integers."""


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def to_tag(self) -> str:
        return f"v{self}"

    def bump_patch(self) -> SemVer:
        return SemVer(self.major, self.minor, self.patch + 1)


def parse_version(text: str) -> SemVer:
    """Parse "major.minor.patch".

    Raises:
        InvalidVersion: not exactly three components, or a component is not
            a non-negative integer.
    """
    parts = text.strip().split(".")
    if len(parts) != 3:
        raise InvalidVersion(f"expected major.minor.patch, got {text!r}")
    if not all(p.isascii() and p.isdigit() for p in parts):
        raise InvalidVersion(f"non-integer version component in {text!r}")
    return SemVer(int(parts[0]), int(parts[1]), int(parts[2]))


def calculate_semver(latest_tag_version: str, current_version: str) -> str:
    """Decide the version to release.

    - no previous tag: release the manifest version as-is
    - major or minor differ: the manifest was bumped by hand, respect it
    - identical: the manifest was not bumped since the last release,
      release the next patch
    - same major/minor, different patch: the manifest is already ahead

    Raises:
        InvalidVersion: either input is malformed.
    """
    if not latest_tag_version:
        return current_version

    latest = parse_version(latest_tag_version)
    current = parse_version(current_version)

    if (latest.major, latest.minor) != (current.major, current.minor):
        return current_version

    if latest_tag_version == current_version:
        return str(current.bump_patch())

    return current_version
