"""Deterministic stand-in for the speaker recognition service.

Used when no subscription key is configured, so that enrollment and
signing can run end to end in development and tests.
"""

import itertools
import logging
import threading
import time
import uuid

from voicesign.domain.protocols.speaker_recognition import (
    EnrollmentStatus,
    ProfileCheck,
    ProfileEnrollment,
    RecognitionResult,
    VerificationOutcome,
)
from voicesign.gateways.exceptions import AudioTooSmallError
from voicesign.gateways.settings import SpeakerRecognitionSettings

logger = logging.getLogger(__name__)

MOCK_NAMESPACE = uuid.UUID("6f1c2d8e-5b0a-4c3e-9a57-2f4d1e8b7c90")
MOCK_SCORE = 0.9


class MockSpeakerRecognitionClient:
    """SpeakerRecognitionClientProtocol implementation without network access."""

    def __init__(self, settings: SpeakerRecognitionSettings) -> None:
        self.min_audio_bytes = settings.min_audio_bytes
        self.latency = settings.mock_latency
        self._counter = itertools.count(1)
        self._lock = threading.Lock()
        self._deleted: set[str] = set()

    def _simulate_latency(self) -> None:
        if self.latency > 0:
            time.sleep(self.latency)

    def _check_size(self, audio: bytes) -> None:
        if len(audio) < self.min_audio_bytes:
            raise AudioTooSmallError(
                f"Audio buffer is too small ({len(audio)} bytes, "
                f"minimum {self.min_audio_bytes})"
            )

    def _enrolled(self, profile_id: str) -> ProfileEnrollment:
        return ProfileEnrollment(
            profile_id=profile_id,
            enrollment_status=EnrollmentStatus.ENROLLED.value,
            enrollments_count=1,
            enrollments_length=20.0,
            enrollments_speech_length=20.0,
        )

    def create_profile(self) -> str:
        self._simulate_latency()
        with self._lock:
            n = next(self._counter)
        profile_id = str(uuid.uuid5(MOCK_NAMESPACE, f"profile-{n}"))
        logger.info(f"[mock] Created voice profile {profile_id}")
        return profile_id

    def enroll(self, profile_id: str, audio: bytes) -> ProfileEnrollment:
        self._check_size(audio)
        self._simulate_latency()
        return self._enrolled(profile_id)

    def create_voice_profile(self, audio: bytes) -> ProfileEnrollment:
        self._check_size(audio)
        return self.enroll(self.create_profile(), audio)

    def get_profile_status(self, profile_id: str) -> ProfileEnrollment:
        return self._enrolled(profile_id)

    def check_profile_exists(self, profile_id: str) -> ProfileCheck:
        if not profile_id:
            return ProfileCheck(exists=False, details="No profile ID provided")
        if profile_id in self._deleted:
            return ProfileCheck(
                exists=False, details="Service returned status 404: profile deleted"
            )
        return ProfileCheck(
            exists=True,
            details=f"Profile exists with status: {EnrollmentStatus.ENROLLED.value}",
            enrollment_status=EnrollmentStatus.ENROLLED.value,
            remaining_speech_length=0.0,
        )

    def verify(
        self, profile_id: str, audio: bytes, check_status: bool = True
    ) -> VerificationOutcome:
        if len(audio) < self.min_audio_bytes:
            return VerificationOutcome(
                recognition_result=RecognitionResult.REJECT,
                score=0.0,
                profile_id=profile_id,
                error_details="Audio sample is too small to verify (less than 1KB)",
            )
        self._simulate_latency()
        if profile_id in self._deleted:
            return VerificationOutcome(
                recognition_result=RecognitionResult.REJECT,
                score=0.0,
                profile_id=profile_id,
                error_details=f"Profile {profile_id} not found",
            )
        return VerificationOutcome(
            recognition_result=RecognitionResult.ACCEPT,
            score=MOCK_SCORE,
            profile_id=profile_id,
        )

    def delete_profile(self, profile_id: str) -> bool:
        self._simulate_latency()
        self._deleted.add(profile_id)
        logger.info(f"[mock] Deleted voice profile {profile_id}")
        return True
