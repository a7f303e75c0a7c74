"""Engine exceptions."""


class EngineError(Exception):
    """Base exception for engine."""

    pass


class AudioConversionError(EngineError):
    """Failed to convert audio format."""

    pass


class NoAudioStreamError(AudioConversionError):
    """Input container has no audio stream."""

    pass
