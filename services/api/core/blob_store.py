# services/api/core/blob_store.py
from __future__ import annotations

import logging
import re
from datetime import timedelta
from pathlib import Path
from typing import Optional, Protocol

from google.cloud import storage

from adapters.firestore import service_account_credentials

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/devstorage.read_write"]

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".mp4", ".mov"}
ALLOWED_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "video/mp4",
    "video/quicktime",
}


def sanitize_filename(filename: str) -> str:
    """Replace anything outside [A-Za-z0-9._-] so keys can't traverse paths."""
    return re.sub(r"[^a-zA-Z0-9._-]", "_", filename or "")


def file_extension(filename: str) -> str:
    name = filename or ""
    dot = name.rfind(".")
    return name[dot:].lower() if dot != -1 else ""


def validate_file_type(filename: str, content_type: str) -> None:
    """
    Raises ValueError when the extension or the MIME type is not allowed.
    Both must pass.
    """
    if file_extension(filename) not in ALLOWED_EXTENSIONS or content_type not in ALLOWED_MIME_TYPES:
        raise ValueError("File type not allowed")


class BlobStore(Protocol):
    """Object storage for uploaded media. Keys are '/'-separated paths like 'album/img-123.jpg'."""

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        ...

    def delete(self, key: str) -> None:
        ...

    def exists(self, key: str) -> bool:
        ...

    def signed_url(self, key: str, expires_in: int = 900) -> str:
        ...


class GcsBlobStore:
    """
    Google Cloud Storage bucket.
    Reads are served through V4 signed URLs so the bucket can stay private.
    """

    def __init__(
        self,
        bucket_name: str,
        google_sa_json: Optional[str] = None,
        project_id: Optional[str] = None,
        client: Optional[storage.Client] = None,
    ) -> None:
        if not bucket_name:
            raise ValueError("GCS_BUCKET_NAME is required for the gcs blob backend")

        if client is None:
            creds = service_account_credentials(google_sa_json or "", SCOPES)
            project = project_id or (creds.project_id if creds else None)
            client = storage.Client(project=project, credentials=creds)

        self.client = client
        self.bucket = client.bucket(bucket_name)
        logger.info(f"GCS blob store ready (bucket={bucket_name})")

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        blob = self.bucket.blob(key)
        blob.upload_from_string(data, content_type=content_type)
        logger.info("Uploaded blob %s (%d bytes)", key, len(data))
        return key

    def delete(self, key: str) -> None:
        self.bucket.blob(key).delete()
        logger.info("Deleted blob %s", key)

    def exists(self, key: str) -> bool:
        return self.bucket.blob(key).exists()

    def signed_url(self, key: str, expires_in: int = 900) -> str:
        return self.bucket.blob(key).generate_signed_url(
            version="v4",
            expiration=timedelta(seconds=expires_in),
            method="GET",
        )


class LocalBlobStore:
    """
    Filesystem-backed blob store for local development and tests.
    URLs are built from a public base URL; nothing is actually signed.
    """

    def __init__(self, root_dir: str = "data/uploads", public_base_url: str = "/uploads") -> None:
        self.root = Path(root_dir).resolve()
        self.root.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url.rstrip("/")

    def _path(self, key: str) -> Path:
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise ValueError(f"Blob key escapes storage root: {key}")
        return path

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        path = self._path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return key

    def delete(self, key: str) -> None:
        path = self._path(key)
        if not path.exists():
            raise FileNotFoundError(key)
        path.unlink()

    def exists(self, key: str) -> bool:
        return self._path(key).exists()

    def signed_url(self, key: str, expires_in: int = 900) -> str:
        return f"{self.public_base_url}/{key}"
