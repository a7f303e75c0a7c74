import logging
import tempfile
from typing import TYPE_CHECKING

from voicesign.engine import AudioConversionError, convert_to_wav
from voicesign.gateways.exceptions import TranscriptionError

if TYPE_CHECKING:
    from faster_whisper import WhisperModel

logger = logging.getLogger(__name__)


class WhisperTranscriber:
    """TranscriberProtocol implementation using faster-whisper."""

    def __init__(self, model: "WhisperModel", language: str = "en"):
        self.model = model
        self.language = language

    def transcribe(self, audio_bytes: bytes) -> str:
        """Transcribe audio bytes.

        Args:
            audio_bytes: Audio in any container PyAV can decode

        Returns:
            Transcribed text

        Raises:
            TranscriptionError: If the audio cannot be decoded or transcribed
        """
        logger.info(f"Transcribing audio: {len(audio_bytes)} bytes")

        try:
            wav = convert_to_wav(audio_bytes)
        except AudioConversionError as e:
            raise TranscriptionError(f"Could not decode audio for transcription: {e}") from e

        # faster-whisper needs a file path
        with tempfile.NamedTemporaryFile(suffix=".wav", delete=True) as f:
            f.write(wav)
            f.flush()

            try:
                segments, _info = self.model.transcribe(  # type: ignore[reportUnknownMemberType]
                    f.name,
                    language=self.language,
                )
                text = "".join(segment.text for segment in segments).strip()
            except RuntimeError as e:
                raise TranscriptionError(f"Transcription failed: {e}") from e

        logger.info(f"Transcription complete: {len(text)} characters")
        return text
