from pathlib import Path

from voicesign.gateways.exceptions import StorageError


class LocalStorage:
    """Local filesystem implementation (for development)."""

    def __init__(self, base_path: str = "/tmp") -> None:
        self.base_path = Path(base_path).resolve()
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _file_path(self, path: str) -> Path:
        return Path(path) if Path(path).is_absolute() else self.base_path / path

    def upload(
        self,
        data: bytes,
        path: str,
        content_type: str | None = None,
    ) -> str:
        """Save a file under base_path."""
        file_path = self.base_path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, "wb") as f:
            f.write(data)

        return str(file_path)

    def download(self, url_or_key: str) -> bytes:
        """Read a stored file."""
        file_path = self._file_path(url_or_key)
        try:
            with open(file_path, "rb") as f:
                return f.read()
        except OSError as e:
            raise StorageError(f"Failed to read {file_path}: {e}") from e

    def delete(self, path: str) -> None:
        """Delete a file."""
        file_path = self._file_path(path)
        if file_path.exists():
            file_path.unlink()

    def get_url(self, path: str, expires_in: int = 3600) -> str:
        """Return the local path."""
        return str(self._file_path(path))

    def key_from_url(self, url: str) -> str | None:
        """Get the key relative to base_path, or None if outside it."""
        file_path = Path(url)
        if not file_path.is_absolute():
            return url
        try:
            return file_path.resolve().relative_to(self.base_path).as_posix()
        except ValueError:
            return None
