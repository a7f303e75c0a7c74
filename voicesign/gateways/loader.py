"""Process-wide gateway instances.

Clients are created once per process (API server or worker) from the
settings singletons and shared by every request or job.
"""

import logging

from voicesign.domain.protocols import (
    SpeakerRecognitionClientProtocol,
    StorageProtocol,
    TranscriberProtocol,
)
from voicesign.gateways.media_fetcher import HttpMediaFetcher
from voicesign.gateways.settings import speaker_settings, storage_settings, whisper_settings
from voicesign.gateways.speaker_recognition import create_speaker_recognition_client
from voicesign.gateways.storages import create_storage

logger = logging.getLogger(__name__)

# Singleton instances
_speaker_client: SpeakerRecognitionClientProtocol | None = None
_storage: StorageProtocol | None = None
_transcriber: TranscriberProtocol | None = None


def get_speaker_client() -> SpeakerRecognitionClientProtocol:
    """Get the speaker recognition client, creating it on first use."""
    global _speaker_client
    if _speaker_client is None:
        _speaker_client = create_speaker_recognition_client(speaker_settings)
    return _speaker_client


def get_storage() -> StorageProtocol:
    """Get the configured object storage, creating it on first use."""
    global _storage
    if _storage is None:
        _storage = create_storage(storage_settings)
    return _storage


def get_media_fetcher() -> HttpMediaFetcher:
    return HttpMediaFetcher(timeout=storage_settings.download_timeout)


def get_transcriber() -> TranscriberProtocol:
    """Get the Whisper transcriber, loading the model on first use."""
    global _transcriber
    if _transcriber is None:
        from voicesign.gateways.transcription import WhisperTranscriber, get_whisper_model

        _transcriber = WhisperTranscriber(
            get_whisper_model(), language=whisper_settings.language
        )
    return _transcriber
