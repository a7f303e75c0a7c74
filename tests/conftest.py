"""Shared pytest fixtures."""

import io
import wave
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import numpy as np
import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from voicesign.app.dependencies import (
    get_db,
    get_job_queue,
    get_media_fetcher,
    get_speaker_client,
    get_storage,
    get_transcriber,
    get_voice_profile_service,
)
from voicesign.app.main import app
from voicesign.database import EnrollmentStore, SigningStore, UserStore
from voicesign.domain.models import User
from voicesign.domain_service import ProfileLockRegistry, VoiceProfileService
from voicesign.gateways.media_fetcher import HttpMediaFetcher
from voicesign.gateways.settings import SpeakerRecognitionSettings
from voicesign.gateways.speaker_recognition import MockSpeakerRecognitionClient
from voicesign.gateways.storages import LocalStorage


class RecordingJobQueue:
    """Job queue that only records what was enqueued."""

    def __init__(self) -> None:
        self.jobs: list[tuple[str, dict[str, Any]]] = []

    def enqueue(self, name: str, payload: dict[str, Any]) -> str:
        self.jobs.append((name, payload))
        return f"job-{len(self.jobs)}"


class PassthroughConverter:
    """Audio converter that returns its input unchanged."""

    def convert_to_wav(self, audio_data: bytes) -> bytes:
        return audio_data


def make_wav_bytes(
    seconds: float = 1.0,
    sample_rate: int = 16000,
    channels: int = 1,
    frequency: float = 440.0,
    amplitude: float = 0.5,
) -> bytes:
    """Build a PCM16 WAV file holding a sine wave."""
    t = np.linspace(0, seconds, int(sample_rate * seconds), endpoint=False, dtype=np.float32)
    tone = (np.sin(2 * np.pi * frequency * t) * amplitude * 32767).astype(np.int16)
    frames = np.repeat(tone[:, None], channels, axis=1) if channels > 1 else tone

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(frames.tobytes())
    return buffer.getvalue()


@pytest.fixture(name="session")
def session_fixture():
    """In-memory database session."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="user_store")
def user_store_fixture(session: Session) -> UserStore:
    return UserStore(session)


@pytest.fixture(name="enrollment_store")
def enrollment_store_fixture(session: Session) -> EnrollmentStore:
    return EnrollmentStore(session)


@pytest.fixture(name="signing_store")
def signing_store_fixture(session: Session) -> SigningStore:
    return SigningStore(session)


@pytest.fixture(name="user")
def user_fixture(user_store: UserStore) -> User:
    """A registered user without a voice profile."""
    return user_store.create_user("signer@example.com", name="Test Signer")


@pytest.fixture(name="storage")
def storage_fixture(tmp_path: Path) -> LocalStorage:
    """Local storage rooted in a temporary directory."""
    return LocalStorage(base_path=str(tmp_path / "storage"))


@pytest.fixture(name="speaker_settings")
def speaker_settings_fixture() -> SpeakerRecognitionSettings:
    return SpeakerRecognitionSettings(subscription_key=None, mock_latency=0.0)


@pytest.fixture(name="speaker_client")
def speaker_client_fixture(
    speaker_settings: SpeakerRecognitionSettings,
) -> MockSpeakerRecognitionClient:
    """Mock speaker recognition client without simulated latency."""
    return MockSpeakerRecognitionClient(speaker_settings)


@pytest.fixture(name="job_queue")
def job_queue_fixture() -> RecordingJobQueue:
    return RecordingJobQueue()


@pytest.fixture(name="locks")
def locks_fixture() -> ProfileLockRegistry:
    return ProfileLockRegistry()


@pytest.fixture(name="wav_audio")
def wav_audio_fixture() -> bytes:
    """One second of 16 kHz mono tone."""
    return make_wav_bytes()


@pytest.fixture(name="wav_factory")
def wav_factory_fixture():
    """Factory for WAV bytes with custom length, rate and channels."""
    return make_wav_bytes


@pytest.fixture(name="audio_converter")
def audio_converter_fixture() -> PassthroughConverter:
    return PassthroughConverter()


class FixedTranscriber:
    """Transcriber that always returns the same text."""

    def __init__(self, transcript: str = "I agree to the terms and conditions") -> None:
        self.transcript = transcript
        self.calls: list[bytes] = []

    def transcribe(self, audio_bytes: bytes) -> str:
        self.calls.append(audio_bytes)
        return self.transcript


@pytest.fixture(name="transcriber")
def transcriber_fixture() -> FixedTranscriber:
    return FixedTranscriber()


@pytest.fixture(name="client")
def client_fixture(
    session: Session,
    storage: LocalStorage,
    speaker_client: MockSpeakerRecognitionClient,
    job_queue: RecordingJobQueue,
    transcriber: FixedTranscriber,
    audio_converter: PassthroughConverter,
    locks: ProfileLockRegistry,
) -> Iterator[TestClient]:
    """API client wired to the in-memory database and fake gateways."""

    def get_voice_profile_service_override() -> VoiceProfileService:
        return VoiceProfileService(
            speaker_client=speaker_client,
            enrollment_store=EnrollmentStore(session),
            user_store=UserStore(session),
            audio_converter=audio_converter,
            locks=locks,
        )

    app.dependency_overrides[get_db] = lambda: session
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_speaker_client] = lambda: speaker_client
    app.dependency_overrides[get_job_queue] = lambda: job_queue
    app.dependency_overrides[get_transcriber] = lambda: transcriber
    app.dependency_overrides[get_media_fetcher] = lambda: HttpMediaFetcher()
    app.dependency_overrides[get_voice_profile_service] = get_voice_profile_service_override

    yield TestClient(app)

    app.dependency_overrides.clear()
