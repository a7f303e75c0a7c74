"""Decoding of audio submitted inline as base64 or a data URI."""

import base64
import binascii
import re

_DATA_URI = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[\w=.+-]+)*;base64,", re.I)


def split_data_uri(value: str) -> tuple[str | None, str]:
    """Split ``data:audio/webm;base64,AAAA`` into its MIME type and payload."""
    value = value.strip()
    match = _DATA_URI.match(value)
    if match is None:
        return None, value
    return match.group("mime"), value[match.end() :]


def decode_audio_data(value: str) -> bytes:
    """Decode base64 audio, with or without a data URI prefix.

    Raises:
        ValueError: If the payload is not valid base64
    """
    _mime, payload = split_data_uri(value)
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 audio data: {e}") from e
