"""Object storage Protocol."""

from typing import Protocol


class StorageProtocol(Protocol):
    """Protocol for object storage of recordings and extracted audio."""

    def upload(
        self,
        data: bytes,
        path: str,
        content_type: str | None = None,
    ) -> str:
        """Upload a file.

        Args:
            data: File contents
            path: Destination key, e.g. "voice-audio/42.wav"
            content_type: MIME type

        Returns:
            Reference (URL or path) of the stored object
        """
        ...

    def download(self, url_or_key: str) -> bytes:
        """Download a stored object by reference or key."""
        ...

    def get_url(self, path: str, expires_in: int = 3600) -> str:
        """Get a time-limited retrieval URL for a stored object."""
        ...

    def key_from_url(self, url: str) -> str | None:
        """Extract the storage key from a reference, or None if foreign."""
        ...

    def delete(self, path: str) -> None:
        """Delete a stored object. Missing objects are ignored."""
        ...


class MediaFetcherProtocol(Protocol):
    """Protocol for fetching bytes from a URL or local path."""

    def fetch(self, url: str) -> bytes:
        """Fetch the object at url."""
        ...
