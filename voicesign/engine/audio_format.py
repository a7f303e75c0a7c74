"""Audio container detection and size formatting."""

WAV = "audio/wav"
WEBM = "audio/webm"
MPEG = "audio/mpeg"
OGG = "audio/ogg"
OCTET_STREAM = "application/octet-stream"

_EBML_MAGIC = b"\x1a\x45\xdf\xa3"

# Extensions for recordings accepted on upload
_EXTENSIONS = {
    "video/webm": "webm",
    "video/mp4": "mp4",
    "audio/webm": "webm",
    "audio/mp3": "mp3",
    "audio/mpeg": "mp3",
    "audio/wav": "wav",
    "audio/ogg": "ogg",
}


def detect_audio_content_type(data: bytes) -> str:
    """Guess the content type of an audio buffer from its magic bytes.

    Args:
        data: Leading bytes of the buffer (at least 12 for WAV)

    Returns:
        MIME type, ``application/octet-stream`` if nothing matches
    """
    if len(data) >= 12 and data[0:4] == b"RIFF" and data[8:12] == b"WAVE":
        return WAV
    if data[0:4] == _EBML_MAGIC:
        return WEBM
    if data[0:3] == b"ID3":
        return MPEG
    if len(data) >= 2 and data[0] == 0xFF and (data[1] & 0xE0) == 0xE0:
        return MPEG
    if data[0:4] == b"OggS":
        return OGG
    return OCTET_STREAM


def extension_for_content_type(content_type: str | None) -> str:
    """Map a recording MIME type to a file extension, ``bin`` if unknown."""
    if not content_type:
        return "bin"
    base = content_type.split(";", 1)[0].strip().lower()
    return _EXTENSIONS.get(base, "bin")


def format_bytes(size: int, decimals: int = 2) -> str:
    """Format a byte count for logs, e.g. ``1.5 KB``."""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB", "TB"]
    index = 0
    value = float(size)
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{round(value, decimals):g} {units[index]}"


def leading_bytes_hex(data: bytes, count: int = 16) -> str:
    """Hex dump of the first bytes, for diagnosing unrecognized formats."""
    return data[:count].hex(" ")
