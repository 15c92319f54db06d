from __future__ import annotations

from binrelease.core.result import Err, Ok, Result
from binrelease.output.console import ConsoleProtocol, Style
from binrelease.services.release.errors import ReleaseError
from binrelease.services.release.model import ReleaseTarget
from binrelease.services.release.ports import ReleaseClient


def publish_release(
    *,
    client: ReleaseClient,
    target: ReleaseTarget,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[None, ReleaseError]:
    """Create release `v<version>` on the release branch.

    The tag is the lock for a version: if it already exists another run got
    there first (or this step already ran), and we stop with a conflict
    instead of relying on the create call to fail.
    """
    exists = client.release_exists(target.tag)
    if isinstance(exists, Err):
        return exists
    if exists.value:
        return Err(
            ReleaseError(
                kind="release_exists",
                message=f"release {target.tag} already exists",
                hint="another run published this version; bump the manifest or delete the release",
            )
        )

    console.print(
        f"gh release create {target.tag} --title {target.title!r} --target {target.branch}",
        Style.DIM,
    )
    if dry_run:
        return Ok(None)
    return client.create_release(tag=target.tag, title=target.title, target=target.branch)
