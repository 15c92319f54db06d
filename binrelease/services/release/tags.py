from __future__ import annotations

from binrelease.services.release.ports import GitClient


def strip_tag_prefix(tag: str) -> str:
    tag = tag.strip()
    if tag.startswith("v"):
        return tag[1:].strip()
    return tag


def read_latest_version(git: GitClient) -> str:
    """Version of the most recent reachable release tag, "" if none exists."""
    return strip_tag_prefix(git.latest_tag())
