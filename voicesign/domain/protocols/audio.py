"""Audio conversion Protocol."""

from typing import Protocol


class AudioConverterProtocol(Protocol):
    """Protocol for converting audio to mono 16 kHz PCM WAV."""

    def convert_to_wav(self, audio_data: bytes) -> bytes:
        """Convert any decodable container to WAV.

        Args:
            audio_data: Source bytes (video or audio container)

        Returns:
            WAV bytes
        """
        ...
