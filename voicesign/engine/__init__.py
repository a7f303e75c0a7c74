"""Audio processing engine."""

from voicesign.engine.audio_converter import (
    AudioConverter,
    TranscodeResult,
    convert_to_wav,
    transcode_to_wav,
)
from voicesign.engine.audio_format import (
    detect_audio_content_type,
    extension_for_content_type,
    format_bytes,
)
from voicesign.engine.exceptions import (
    AudioConversionError,
    EngineError,
    NoAudioStreamError,
)

__all__ = [
    "AudioConversionError",
    "AudioConverter",
    "EngineError",
    "NoAudioStreamError",
    "TranscodeResult",
    "convert_to_wav",
    "detect_audio_content_type",
    "extension_for_content_type",
    "format_bytes",
    "transcode_to_wav",
]
