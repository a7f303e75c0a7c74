"""Speaker recognition clients."""

from .factory import create_speaker_recognition_client
from .http_client import HttpSpeakerRecognitionClient
from .mock_client import MockSpeakerRecognitionClient

__all__ = [
    "HttpSpeakerRecognitionClient",
    "MockSpeakerRecognitionClient",
    "create_speaker_recognition_client",
]
