"""Artifact transport: release assets and CI-run artifact storage.

Uploads to the current workflow run go through the GitHub Actions artifact
service (the backend of actions/upload-artifact v4). Each file becomes its
own artifact named after the file, so a later job can fetch a subset with
`gh run download --pattern`. Downloads use `gh run download`, which puts
every artifact in its own subdirectory when several match.

Every batch is all-or-nothing: the first failure aborts the remaining files.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import tempfile
from dataclasses import dataclass
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

from binrelease.core.config import CiEnvironment
from binrelease.core.result import Err, Ok, Result
from binrelease.core.structured import as_str_dict, get_str
from binrelease.output.console import ConsoleProtocol, Style
from binrelease.platform.http import HttpClient
from binrelease.services.release.errors import ReleaseError
from binrelease.services.release.ports import ReleaseClient, RunArtifactStore

_SERVICE = "twirp/github.actions.results.api.v1.ArtifactService"
_INVALID_NAME_CHARS = frozenset('"\\/:<>|*?\r\n')


@dataclass(frozen=True, slots=True)
class RunBackendIds:
    run_id: str
    job_id: str


def backend_ids_from_token(token: str) -> Result[RunBackendIds, ReleaseError]:
    """Extract run/job backend ids from the `scp` claim of the runtime token."""
    parts = token.split(".")
    if len(parts) != 3:
        return Err(ReleaseError(kind="ci_env_missing", message="malformed ACTIONS_RUNTIME_TOKEN"))

    payload = parts[1] + "=" * (-len(parts[1]) % 4)
    try:
        claims_obj: object = json.loads(base64.urlsafe_b64decode(payload).decode("utf-8"))
    except (binascii.Error, ValueError) as e:
        return Err(
            ReleaseError(
                kind="ci_env_missing", message=f"cannot decode ACTIONS_RUNTIME_TOKEN: {e}"
            )
        )

    claims = as_str_dict(claims_obj)
    scp = get_str(claims, "scp") if claims is not None else None
    for scope in (scp or "").split():
        fields = scope.split(":")
        if len(fields) == 3 and fields[0] == "Actions.Results":
            return Ok(RunBackendIds(run_id=fields[1], job_id=fields[2]))

    return Err(
        ReleaseError(
            kind="ci_env_missing",
            message="ACTIONS_RUNTIME_TOKEN has no Actions.Results scope",
        )
    )


def _sha256_file(path: Path) -> str:
    h = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def _zip_single(src: Path, dest: Path) -> None:
    with ZipFile(dest, "w", compression=ZIP_DEFLATED, strict_timestamps=False) as zf:
        zf.write(src, arcname=src.name)


class ActionsArtifactStore:
    """RunArtifactStore for the GitHub Actions run this process executes in."""

    def __init__(self, *, http: HttpClient, results_url: str, token: str) -> None:
        self.http = http
        self.results_url = results_url.rstrip("/")
        self.token = token

    @classmethod
    def from_env(
        cls, *, http: HttpClient, env: CiEnvironment
    ) -> Result[ActionsArtifactStore, ReleaseError]:
        if not env.runtime_token or not env.results_url:
            return Err(
                ReleaseError(
                    kind="ci_env_missing",
                    message="ACTIONS_RUNTIME_TOKEN / ACTIONS_RESULTS_URL are not set",
                    hint="run artifact upload only works inside a GitHub Actions job",
                )
            )
        return Ok(cls(http=http, results_url=env.results_url, token=env.runtime_token))

    def _call(
        self, method: str, payload: dict[str, object]
    ) -> Result[dict[str, object], ReleaseError]:
        result = self.http.post_json(
            f"{self.results_url}/{_SERVICE}/{method}",
            payload,
            headers={"Authorization": f"Bearer {self.token}"},
        )
        if isinstance(result, Err):
            return Err(
                ReleaseError(
                    kind="artifact_failed",
                    message=f"artifact service {method} failed",
                    hint=str(result.error),
                )
            )
        if result.value.get("ok") is not True:
            return Err(
                ReleaseError(kind="artifact_failed", message=f"artifact service {method} refused")
            )
        return Ok(result.value)

    def upload(self, path: Path) -> Result[None, ReleaseError]:
        name = path.name
        if any(c in _INVALID_NAME_CHARS for c in name):
            return Err(
                ReleaseError(kind="artifact_failed", message=f"invalid artifact name: {name}")
            )
        if not path.is_file():
            return Err(ReleaseError(kind="artifact_failed", message=f"file not found: {path}"))

        ids = backend_ids_from_token(self.token)
        if isinstance(ids, Err):
            return ids
        scope: dict[str, object] = {
            "workflow_run_backend_id": ids.value.run_id,
            "workflow_job_run_backend_id": ids.value.job_id,
        }

        created = self._call("CreateArtifact", {**scope, "name": name, "version": 4})
        if isinstance(created, Err):
            return created
        upload_url = get_str(created.value, "signed_upload_url")
        if upload_url is None:
            return Err(
                ReleaseError(
                    kind="artifact_failed", message="CreateArtifact returned no upload URL"
                )
            )

        with tempfile.TemporaryDirectory(prefix="binrelease-") as tmp:
            archive = Path(tmp) / f"{name}.zip"
            try:
                _zip_single(path, archive)
            except OSError as e:
                return Err(ReleaseError(kind="artifact_failed", message=f"cannot zip {path}: {e}"))
            size = archive.stat().st_size
            digest = _sha256_file(archive)

            put = self.http.put_file(upload_url, archive, headers={"x-ms-blob-type": "BlockBlob"})
            if isinstance(put, Err):
                return Err(
                    ReleaseError(
                        kind="artifact_failed",
                        message=f"blob upload failed for {name}",
                        hint=str(put.error),
                    )
                )

        finalized = self._call(
            "FinalizeArtifact",
            {**scope, "name": name, "size": str(size), "hash": f"sha256:{digest}"},
        )
        if isinstance(finalized, Err):
            return finalized
        return Ok(None)


def _missing_files(files: list[Path]) -> Result[None, ReleaseError]:
    missing = [str(f) for f in files if not f.is_file()]
    if missing:
        return Err(
            ReleaseError(kind="artifact_failed", message=f"files not found: {', '.join(missing)}")
        )
    return Ok(None)


def upload_to_release(
    *,
    client: ReleaseClient,
    version: str,
    files: list[Path],
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[None, ReleaseError]:
    """Attach `files` to the existing release `v<version>`."""
    checked = _missing_files(files)
    if isinstance(checked, Err):
        return checked

    tag = f"v{version}"
    console.print(f"gh release upload {tag} {' '.join(f.name for f in files)}", Style.DIM)
    if dry_run:
        return Ok(None)
    return client.upload_release_assets(tag=tag, files=files)


def upload_to_run(
    *,
    store: RunArtifactStore,
    files: list[Path],
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[None, ReleaseError]:
    checked = _missing_files(files)
    if isinstance(checked, Err):
        return checked

    for path in files:
        console.print(f"upload run artifact {path.name}", Style.DIM)
        if dry_run:
            continue
        uploaded = store.upload(path)
        if isinstance(uploaded, Err):
            return uploaded
    return Ok(None)


def download_from_run(
    *,
    client: ReleaseClient,
    run_id: str | None,
    pattern: str,
    dest: Path,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[None, ReleaseError]:
    if not run_id:
        return Err(
            ReleaseError(
                kind="ci_env_missing",
                message="no run id (pass --run-id or set GITHUB_RUN_ID)",
            )
        )

    console.print(f"gh run download {run_id} --pattern {pattern} --dir {dest}", Style.DIM)
    if dry_run:
        return Ok(None)
    dest.mkdir(parents=True, exist_ok=True)
    return client.download_run_artifacts(run_id=run_id, pattern=pattern, dest=dest)
