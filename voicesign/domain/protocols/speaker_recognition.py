"""Speaker recognition service Protocol and result types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol


class RecognitionResult(str, Enum):
    ACCEPT = "Accept"
    REJECT = "Reject"


class EnrollmentStatus(str, Enum):
    ENROLLING = "Enrolling"
    TRAINING = "Training"
    ENROLLED = "Enrolled"


@dataclass
class ProfileEnrollment:
    """Profile state reported by the speaker recognition service."""

    profile_id: str
    enrollment_status: str
    enrollments_count: int = 0
    enrollments_length: float = 0.0
    enrollments_speech_length: float = 0.0
    remaining_enrollments_speech_length: float = 0.0

    @property
    def is_enrolled(self) -> bool:
        return self.enrollment_status == EnrollmentStatus.ENROLLED.value


@dataclass
class VerificationOutcome:
    """Raw verification result. Failures are reported here, never raised."""

    recognition_result: RecognitionResult
    score: float
    profile_id: str | None = None
    error_details: str | None = None

    @property
    def accepted(self) -> bool:
        return self.recognition_result == RecognitionResult.ACCEPT


@dataclass
class ProfileCheck:
    exists: bool
    details: str
    enrollment_status: str | None = None
    remaining_speech_length: float | None = None
    raw: dict[str, Any] = field(default_factory=dict)


class SpeakerRecognitionClientProtocol(Protocol):
    """Protocol for the external speaker recognition service."""

    def create_profile(self) -> str:
        """Allocate a new profile.

        Returns:
            The new profile id
        """
        ...

    def enroll(self, profile_id: str, audio: bytes) -> ProfileEnrollment:
        """Submit an audio sample to a profile.

        Args:
            profile_id: Target profile
            audio: Audio bytes (WAV, WebM, MP3 or Ogg)

        Returns:
            The profile's enrollment state after the sample

        Raises:
            AudioTooSmallError: If the buffer is under the minimum size
            SpeakerRecognitionError: On network or API failure
        """
        ...

    def create_voice_profile(self, audio: bytes) -> ProfileEnrollment:
        """Create a profile and enroll it with one sample."""
        ...

    def verify(
        self, profile_id: str, audio: bytes, check_status: bool = True
    ) -> VerificationOutcome:
        """Verify audio against a profile.

        Args:
            profile_id: Profile to compare against
            audio: Audio bytes
            check_status: Reject without calling verify when not enrolled

        Returns:
            VerificationOutcome, Reject with score 0 on any failure
        """
        ...

    def get_profile_status(self, profile_id: str) -> ProfileEnrollment:
        """Get a profile's enrollment state."""
        ...

    def check_profile_exists(self, profile_id: str) -> ProfileCheck:
        """Report whether the profile exists at the service, never raising."""
        ...

    def delete_profile(self, profile_id: str) -> bool:
        """Delete a profile.

        Returns:
            True if deleted, False if the service refused
        """
        ...
