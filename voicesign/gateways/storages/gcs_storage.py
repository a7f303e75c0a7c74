from typing import Any
from urllib.parse import unquote, urlparse

from google.cloud import storage  # type: ignore[import-untyped]
from google.cloud.exceptions import GoogleCloudError, NotFound

from voicesign.gateways.exceptions import StorageError

GCS_HOST = "storage.googleapis.com"


class GCSStorage:
    """Google Cloud Storage implementation."""

    client: Any
    bucket: Any

    def __init__(self, bucket_name: str, project_id: str | None = None) -> None:
        self.client = storage.Client(project=project_id)
        self.bucket = self.client.bucket(bucket_name)
        self.bucket_name = bucket_name

    def _key(self, path: str) -> str:
        return self.key_from_url(path) or path

    def upload(
        self,
        data: bytes,
        path: str,
        content_type: str | None = None,
    ) -> str:
        """Upload a file to GCS."""
        blob = self.bucket.blob(path)
        try:
            blob.upload_from_string(data, content_type=content_type)
        except GoogleCloudError as e:
            raise StorageError(f"Failed to upload {path}: {e}") from e
        return f"gs://{self.bucket_name}/{path}"

    def download(self, url_or_key: str) -> bytes:
        """Download an object from GCS."""
        key = self._key(url_or_key)
        blob = self.bucket.blob(key)
        try:
            return blob.download_as_bytes()
        except NotFound as e:
            raise StorageError(f"Object not found: {key}") from e
        except GoogleCloudError as e:
            raise StorageError(f"Failed to download {key}: {e}") from e

    def delete(self, path: str) -> None:
        """Delete a file."""
        blob = self.bucket.blob(self._key(path))
        try:
            blob.delete()
        except NotFound:
            pass

    def get_url(self, path: str, expires_in: int = 3600) -> str:
        """Get a V4 signed URL."""
        blob = self.bucket.blob(self._key(path))
        url = blob.generate_signed_url(
            version="v4",
            expiration=expires_in,
            method="GET",
        )
        return url

    def key_from_url(self, url: str) -> str | None:
        """Extract the object key from a gs://, path-style or virtual-hosted URL.

        Returns None for references to other buckets or hosts.
        """
        prefix = f"gs://{self.bucket_name}/"
        if url.startswith(prefix):
            return url[len(prefix) :]
        if not url.startswith(("http://", "https://")):
            return None

        parsed = urlparse(url)
        path = unquote(parsed.path.lstrip("/"))
        if parsed.hostname == f"{self.bucket_name}.{GCS_HOST}":
            return path or None
        if parsed.hostname == GCS_HOST:
            bucket, _, key = path.partition("/")
            if bucket == self.bucket_name and key:
                return key
        return None
