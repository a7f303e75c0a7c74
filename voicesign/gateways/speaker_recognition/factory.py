"""Speaker recognition client selection."""

import logging

from voicesign.domain.protocols.speaker_recognition import SpeakerRecognitionClientProtocol
from voicesign.gateways.settings import SpeakerRecognitionSettings

from .http_client import HttpSpeakerRecognitionClient
from .mock_client import MockSpeakerRecognitionClient

logger = logging.getLogger(__name__)


def create_speaker_recognition_client(
    settings: SpeakerRecognitionSettings,
) -> SpeakerRecognitionClientProtocol:
    """Create the client once, based on whether credentials are configured."""
    if settings.use_mock:
        logger.warning(
            "No speaker recognition subscription key configured, using mock client"
        )
        return MockSpeakerRecognitionClient(settings)
    logger.info(f"Using speaker recognition service at {settings.base_url}")
    return HttpSpeakerRecognitionClient(settings)
