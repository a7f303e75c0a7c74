"""Speech-to-text Protocol."""

from typing import Protocol


class TranscriberProtocol(Protocol):
    """Protocol for speech-to-text."""

    def transcribe(self, audio_bytes: bytes) -> str:
        """Transcribe audio.

        Args:
            audio_bytes: Audio in any container PyAV can decode

        Returns:
            Transcribed text
        """
        ...
