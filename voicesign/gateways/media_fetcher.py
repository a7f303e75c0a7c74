"""Fetch recordings by URL."""

import logging
from pathlib import Path

import httpx

from voicesign.gateways.exceptions import StorageError

logger = logging.getLogger(__name__)


class HttpMediaFetcher:
    """MediaFetcherProtocol implementation.

    Downloads http(s) URLs (e.g. presigned storage URLs) with httpx and
    reads anything else as a local file path.
    """

    def __init__(
        self, timeout: float = 60.0, transport: httpx.BaseTransport | None = None
    ) -> None:
        self.timeout = timeout
        self.transport = transport

    def fetch(self, url: str) -> bytes:
        if not url.startswith(("http://", "https://")):
            try:
                return Path(url).read_bytes()
            except OSError as e:
                raise StorageError(f"Failed to read {url}: {e}") from e

        try:
            with httpx.Client(
                timeout=self.timeout, follow_redirects=True, transport=self.transport
            ) as client:
                response = client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StorageError(
                f"Failed to fetch media: {e.response.status_code} "
                f"{e.response.reason_phrase}"
            ) from e
        except httpx.HTTPError as e:
            raise StorageError(f"Failed to fetch media: {e}") from e

        logger.info(f"Fetched {len(response.content)} bytes from storage URL")
        return response.content
