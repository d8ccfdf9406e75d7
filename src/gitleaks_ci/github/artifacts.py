"""Upload workflow artifacts through the Actions results service.

This follows the v4 artifact protocol used by ``actions/upload-artifact``:

1. ``CreateArtifact`` returns a signed blob URL,
2. the zipped files are PUT to that URL,
3. ``FinalizeArtifact`` records the size and digest.

The runner provides ``ACTIONS_RUNTIME_TOKEN`` (a JWT whose ``scp`` claim
carries the run and job backend ids) and ``ACTIONS_RESULTS_URL``.
"""

from __future__ import annotations

import base64
import hashlib
import io
import json
import logging
import zipfile
from pathlib import Path
from typing import Any

import httpx

from gitleaks_ci.errors import ArtifactUploadError

logger = logging.getLogger(__name__)

ARTIFACT_SERVICE = "twirp/github.actions.results.api.v1.ArtifactService"
ARTIFACT_VERSION = 4


def backend_ids_from_token(token: str) -> tuple[str, str]:
    """Extract (workflow_run_backend_id, workflow_job_run_backend_id) from the runtime token.

    Raises:
        ArtifactUploadError: If the token is malformed or lacks the results scope.
    """
    try:
        payload_segment = token.split(".")[1]
        padded = payload_segment + "=" * (-len(payload_segment) % 4)
        claims = json.loads(base64.urlsafe_b64decode(padded))
    except (IndexError, ValueError) as e:
        raise ArtifactUploadError(f"Invalid ACTIONS_RUNTIME_TOKEN: {e}") from e

    for scope in str(claims.get("scp", "")).split(" "):
        parts = scope.split(":")
        if len(parts) == 3 and parts[0] == "Actions.Results":
            return parts[1], parts[2]

    raise ArtifactUploadError("ACTIONS_RUNTIME_TOKEN has no Actions.Results scope")


def zip_files(files: list[Path], root_directory: Path) -> bytes:
    """Zip ``files`` with names relative to ``root_directory``."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for file in files:
            path = file if file.is_absolute() else root_directory / file
            archive.write(path, arcname=path.relative_to(root_directory).as_posix())
    return buffer.getvalue()


class ArtifactClient:
    """Client for the Actions artifact (results) service."""

    def __init__(
        self,
        runtime_token: str | None,
        results_url: str | None,
        client: httpx.Client | None = None,
        timeout: float = 60.0,
    ) -> None:
        self.runtime_token = runtime_token
        self.results_url = results_url.rstrip("/") if results_url else None
        self._client = client or httpx.Client(timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def _rpc(self, method: str, body: dict[str, Any]) -> dict[str, Any]:
        response = self._client.post(
            f"{self.results_url}/{ARTIFACT_SERVICE}/{method}",
            json=body,
            headers={"Authorization": f"Bearer {self.runtime_token}"},
        )
        if response.status_code >= 400:
            raise ArtifactUploadError(
                f"{method} failed with HTTP {response.status_code}: {response.text}"
            )
        data = response.json()
        if not data.get("ok"):
            raise ArtifactUploadError(f"{method} was rejected by the artifact service")
        return data

    def upload_artifact(self, name: str, files: list[Path], root_directory: Path) -> str:
        """Upload ``files`` as a single zipped artifact.

        Args:
            name: Artifact name shown on the workflow run.
            files: Files to include.
            root_directory: Directory the archive paths are relative to.

        Returns:
            The artifact id assigned by the service.

        Raises:
            ArtifactUploadError: If the runtime is not configured or any step fails.
        """
        if not self.runtime_token or not self.results_url:
            raise ArtifactUploadError(
                "ACTIONS_RUNTIME_TOKEN and ACTIONS_RESULTS_URL are required to upload artifacts"
            )

        run_id, job_id = backend_ids_from_token(self.runtime_token)
        ids = {"workflow_run_backend_id": run_id, "workflow_job_run_backend_id": job_id}

        created = self._rpc("CreateArtifact", {**ids, "name": name, "version": ARTIFACT_VERSION})
        upload_url = created.get("signed_upload_url")
        if not upload_url:
            raise ArtifactUploadError("CreateArtifact did not return an upload URL")

        content = zip_files(files, root_directory)
        try:
            response = self._client.put(
                upload_url,
                content=content,
                headers={"x-ms-blob-type": "BlockBlob", "Content-Type": "application/zip"},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise ArtifactUploadError(f"Artifact blob upload failed: {e}") from e

        finalized = self._rpc(
            "FinalizeArtifact",
            {
                **ids,
                "name": name,
                "size": str(len(content)),
                "hash": f"sha256:{hashlib.sha256(content).hexdigest()}",
            },
        )
        artifact_id = str(finalized.get("artifact_id", ""))
        logger.info("Uploaded artifact %s (id %s, %d bytes)", name, artifact_id, len(content))
        return artifact_id
