"""Voice profile lifecycle: create, verify, re-enroll.

All profile mutations for one user are serialized through
``ProfileLockRegistry`` and every successful profile change updates the
user record and the active enrollment in one commit.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from voicesign.database.exceptions import DatabaseError, UserNotFoundError
from voicesign.domain.models import ProcessingStatus, SecurityAuditLogType
from voicesign.domain.protocols import (
    AudioConverterProtocol,
    EnrollmentStoreProtocol,
    ProfileCheck,
    SpeakerRecognitionClientProtocol,
    UserStoreProtocol,
)
from voicesign.engine import AudioConversionError
from voicesign.gateways.exceptions import SpeakerRecognitionError

from .profile_locks import ProfileLockRegistry, profile_locks
from .settings import settings

logger = logging.getLogger(__name__)


@dataclass
class EnrollmentResult:
    success: bool
    profile_id: str | None = None
    enrollment_status: str | None = None
    enrollment_id: int | None = None
    error: str | None = None


@dataclass
class VerificationResult:
    verified: bool
    score: float
    threshold: float
    details: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


class VoiceProfileService:
    """Service for voice profile creation, verification and re-enrollment."""

    def __init__(
        self,
        speaker_client: SpeakerRecognitionClientProtocol,
        enrollment_store: EnrollmentStoreProtocol,
        user_store: UserStoreProtocol,
        audio_converter: AudioConverterProtocol,
        threshold: float = settings.verification_threshold,
        locks: ProfileLockRegistry = profile_locks,
    ) -> None:
        """Initialize voice profile service.

        Args:
            speaker_client: Speaker recognition client (HTTP or mock).
            enrollment_store: Store for enrollment records.
            user_store: Store for users and security audit logs.
            audio_converter: Converter used to normalize samples to WAV.
            threshold: Minimum score for an accepted verification.
            locks: Per-user lock registry.
        """
        self.speaker_client = speaker_client
        self.enrollment_store = enrollment_store
        self.user_store = user_store
        self.audio_converter = audio_converter
        self.threshold = threshold
        self.locks = locks

    def _to_wav(self, audio: bytes) -> bytes:
        try:
            wav = self.audio_converter.convert_to_wav(audio)
        except AudioConversionError as e:
            logger.warning(f"Audio conversion failed, using original bytes: {e}")
            return audio
        logger.info(f"Converted sample to WAV: {len(audio)} -> {len(wav)} bytes")
        return wav

    def _record_error(
        self,
        user_id: int,
        status: ProcessingStatus,
        message: str,
        enrollment_id: int | None,
    ) -> None:
        try:
            self.enrollment_store.mark_active_error(
                user_id, status, message, enrollment_id=enrollment_id
            )
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Failed to record enrollment error for user {user_id}: {e}")

    def _discard_profile(self, profile_id: str) -> None:
        try:
            if not self.speaker_client.delete_profile(profile_id):
                logger.warning(f"Orphaned voice profile {profile_id} was not deleted")
        except SpeakerRecognitionError as e:
            logger.warning(f"Failed to delete orphaned voice profile {profile_id}: {e}")

    def create_user_profile(
        self,
        user_id: int,
        audio: bytes,
        enrollment_id: int | None = None,
        created_status: ProcessingStatus = ProcessingStatus.ENROLLED,
        error_status: ProcessingStatus = ProcessingStatus.ERROR,
    ) -> EnrollmentResult:
        """Create a profile from one sample and attach it to the user.

        Never raises for service or database failures; the error is stored
        on the enrollment and returned in the result.

        Args:
            user_id: Owning user.
            audio: Enrollment sample.
            enrollment_id: Enrollment to attach to, defaults to the latest active one.
            created_status: Status recorded when the service reports Enrolled.
            error_status: Status recorded on failure.

        Returns:
            EnrollmentResult with the new profile id on success.
        """
        logger.info(f"Creating voice profile for user {user_id}: {len(audio)} bytes")
        with self.locks.hold(user_id):
            try:
                profile = self.speaker_client.create_voice_profile(audio)
            except SpeakerRecognitionError as e:
                logger.error(f"Voice profile creation failed for user {user_id}: {e}")
                self._record_error(user_id, error_status, str(e), enrollment_id)
                return EnrollmentResult(success=False, error=str(e))

            status = created_status if profile.is_enrolled else ProcessingStatus.ENROLLING
            try:
                enrollment = self.enrollment_store.attach_profile(
                    user_id,
                    profile.profile_id,
                    status,
                    enrollment_complete=profile.is_enrolled,
                    enrollment_id=enrollment_id,
                )
            except (DatabaseError, SQLAlchemyError) as e:
                logger.error(f"Failed to store voice profile for user {user_id}: {e}")
                self._discard_profile(profile.profile_id)
                self._record_error(user_id, error_status, str(e), enrollment_id)
                return EnrollmentResult(success=False, error=str(e))

        logger.info(
            f"Voice profile {profile.profile_id} attached to user {user_id} "
            f"({profile.enrollment_status})"
        )
        return EnrollmentResult(
            success=True,
            profile_id=profile.profile_id,
            enrollment_status=profile.enrollment_status,
            enrollment_id=enrollment.id,
        )

    def verify_user_voice(
        self,
        user_id: int,
        audio: bytes,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> VerificationResult:
        """Verify a sample against the user's active profile.

        Args:
            user_id: User claiming the voice.
            audio: Fresh voice sample in any supported container.
            ip_address: Client address for the security audit log.
            user_agent: Client user agent for the security audit log.

        Returns:
            VerificationResult; failures are reported in ``details`` or ``error``.
        """
        logger.info(f"Verifying voice for user {user_id}: {len(audio)} bytes")
        try:
            enrollment = self.enrollment_store.get_latest_active_with_profile(user_id)
            if enrollment is None or not enrollment.voice_profile_id:
                return VerificationResult(
                    verified=False,
                    score=0.0,
                    threshold=self.threshold,
                    details={"error": "No voice profile found for verification"},
                )
            if enrollment.processing_status == ProcessingStatus.ENROLLING:
                return VerificationResult(
                    verified=False,
                    score=0.0,
                    threshold=self.threshold,
                    details={"error": "Voice enrollment is not complete"},
                )

            profile_id = enrollment.voice_profile_id
            check = self.speaker_client.check_profile_exists(profile_id)
            if not check.exists:
                return VerificationResult(
                    verified=False,
                    score=0.0,
                    threshold=self.threshold,
                    details={
                        "error": "Voice profile not found in speaker service",
                        "serviceDetails": check.details,
                    },
                )

            outcome = self.speaker_client.verify(profile_id, self._to_wav(audio))
        except (SpeakerRecognitionError, DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Voice verification failed for user {user_id}: {e}")
            return VerificationResult(
                verified=False, score=0.0, threshold=self.threshold, error=str(e)
            )

        verified = outcome.accepted and outcome.score >= self.threshold
        self._audit_sign_in(user_id, verified, ip_address, user_agent)
        self._touch_last_used(user_id, profile_id)

        logger.info(
            f"Verification for user {user_id}: {outcome.recognition_result.value}, "
            f"score={outcome.score:.3f}, threshold={self.threshold}"
        )
        details: dict[str, Any] = {"result": outcome.recognition_result.value}
        if outcome.error_details:
            details["errorDetails"] = outcome.error_details
        return VerificationResult(
            verified=verified,
            score=outcome.score,
            threshold=self.threshold,
            details=details,
        )

    def _audit_sign_in(
        self,
        user_id: int,
        verified: bool,
        ip_address: str | None,
        user_agent: str | None,
    ) -> None:
        log_type = SecurityAuditLogType.SIGN_IN if verified else SecurityAuditLogType.SIGN_IN_FAIL
        try:
            self.user_store.add_security_audit_log(
                user_id, log_type, ip_address=ip_address, user_agent=user_agent
            )
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Failed to write security audit log for user {user_id}: {e}")

    def _touch_last_used(self, user_id: int, profile_id: str) -> None:
        try:
            self.enrollment_store.touch_last_used(user_id, profile_id)
        except (DatabaseError, SQLAlchemyError) as e:
            logger.error(f"Failed to update lastUsedAt for user {user_id}: {e}")

    def re_enroll_user_voice(
        self, user_id: int, audio: bytes, video_url: str | None = None
    ) -> EnrollmentResult:
        """Replace the user's profile with one built from a new sample.

        The old profile is deleted best-effort. A new enrollment record is
        created and the previous active ones are retired once the new
        profile is attached.
        """
        with self.locks.hold(user_id):
            try:
                user = self.user_store.get_user(user_id)
            except UserNotFoundError:
                return EnrollmentResult(success=False, error="User not found")

            if user.voice_profile_id:
                try:
                    deleted = self.speaker_client.delete_profile(user.voice_profile_id)
                except SpeakerRecognitionError as e:
                    deleted = False
                    logger.warning(f"Error deleting old voice profile: {e}")
                if not deleted:
                    logger.warning(
                        f"Old voice profile {user.voice_profile_id} could not be deleted, "
                        "continuing with re-enrollment"
                    )

            enrollment = self.enrollment_store.create_enrollment(
                user_id, video_url=video_url, status=ProcessingStatus.PROFILE_CREATING
            )
            return self.create_user_profile(user_id, audio, enrollment_id=enrollment.id)

    def check_profile(self, profile_id: str) -> ProfileCheck:
        """Report whether a profile exists at the speaker service."""
        return self.speaker_client.check_profile_exists(profile_id)

    def check_user_profile(self, user_id: int) -> dict[str, Any]:
        """Diagnostics for the user's active profile."""
        enrollment = self.enrollment_store.get_latest_active_with_profile(user_id)
        if enrollment is None or not enrollment.voice_profile_id:
            return {"exists": False, "details": "User has no active voice profile ID"}

        check = self.check_profile(enrollment.voice_profile_id)
        return {
            "exists": check.exists,
            "details": check.details,
            "profileId": enrollment.voice_profile_id,
            "enrollmentId": enrollment.id,
        }

    def perform_long_enrollment(self, user_id: int, samples: list[bytes]) -> EnrollmentResult:
        """Enroll several samples until the service reports the profile enrolled.

        The first sample creates the profile when the user has none (or the
        service no longer knows it). Remaining samples are enrolled one by
        one; a failing sample is logged and skipped.
        """
        if not samples:
            return EnrollmentResult(
                success=False, error="No audio samples provided for enrollment"
            )

        with self.locks.hold(user_id):
            try:
                user = self.user_store.get_user(user_id)
            except UserNotFoundError:
                return EnrollmentResult(success=False, error="User not found")

            profile_id = user.voice_profile_id
            status = "Enrolling"
            remaining = 20.0

            check = self.check_profile(profile_id) if profile_id else None
            if check is not None and check.exists:
                status = check.enrollment_status or status
                if check.remaining_speech_length is not None:
                    remaining = float(check.remaining_speech_length)
            else:
                created = self.create_user_profile(user_id, samples[0])
                if not created.success:
                    return created
                profile_id = created.profile_id
                status = created.enrollment_status or status

            assert profile_id is not None
            if status == "Enrolled":
                return EnrollmentResult(
                    success=True, profile_id=profile_id, enrollment_status=status
                )

            for index, sample in enumerate(samples[1:], start=2):
                try:
                    enrollment = self.speaker_client.enroll(profile_id, self._to_wav(sample))
                except SpeakerRecognitionError as e:
                    logger.warning(f"Enrollment failed for sample {index}: {e}")
                    continue
                status = enrollment.enrollment_status
                remaining = enrollment.remaining_enrollments_speech_length
                if enrollment.is_enrolled:
                    break

            enrolled = status == "Enrolled"
            try:
                stored = self.enrollment_store.attach_profile(
                    user_id,
                    profile_id,
                    ProcessingStatus.ENROLLED if enrolled else ProcessingStatus.ENROLLING,
                    enrollment_complete=enrolled,
                )
            except (DatabaseError, SQLAlchemyError) as e:
                logger.error(f"Failed to store long enrollment for user {user_id}: {e}")
                return EnrollmentResult(success=False, profile_id=profile_id, error=str(e))

        return EnrollmentResult(
            success=True,
            profile_id=profile_id,
            enrollment_status=status,
            enrollment_id=stored.id,
            error=None
            if enrolled
            else f"Enrollment still incomplete. Remaining speech needed: {remaining:g} seconds",
        )
