"""Enrollment state machine: upload, extraction job, profile creation, pending sweep."""

import logging
import time
from dataclasses import dataclass
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from voicesign.database.exceptions import DatabaseError
from voicesign.domain.models import ProcessingStatus, VoiceEnrollment
from voicesign.domain.protocols import (
    EnrollmentStoreProtocol,
    JobQueueProtocol,
    StorageProtocol,
)
from voicesign.engine import extension_for_content_type, format_bytes
from voicesign.gateways.exceptions import GatewayError

from .audio_extraction import AudioExtractionService
from .exceptions import (
    AudioTooSmallForProfileError,
    EnrollmentError,
    NoAudioAvailableError,
    VoiceSignError,
)
from .settings import settings
from .voice_profile import EnrollmentResult, VoiceProfileService

logger = logging.getLogger(__name__)

EXTRACT_AUDIO_JOB = "internal.extract-audio"
PROCESS_PENDING_JOB = "internal.process-pending-voice-enrollments"


@dataclass
class TempUpload:
    success: bool
    video_url: str
    duration: int | None


def _recording_extension(content_type: str | None, is_audio_only: bool) -> str:
    ext = extension_for_content_type(content_type)
    if ext == "bin" and is_audio_only:
        return "webm"
    return ext


class EnrollmentService:
    """Service owning the VoiceEnrollment lifecycle."""

    def __init__(
        self,
        enrollment_store: EnrollmentStoreProtocol,
        storage: StorageProtocol,
        job_queue: JobQueueProtocol,
        extraction_service: AudioExtractionService,
        profile_service: VoiceProfileService,
        min_audio_bytes: int = settings.min_audio_bytes,
    ) -> None:
        """Initialize enrollment service.

        Args:
            enrollment_store: Store for enrollment records.
            storage: Object storage for recordings.
            job_queue: Queue for extraction and sweep jobs.
            extraction_service: Audio extraction stage.
            profile_service: Voice profile service.
            min_audio_bytes: Smallest audio accepted for profile creation.
        """
        self.enrollment_store = enrollment_store
        self.storage = storage
        self.job_queue = job_queue
        self.extraction_service = extraction_service
        self.profile_service = profile_service
        self.min_audio_bytes = min_audio_bytes

    def upload_recording(
        self,
        user_id: int,
        data: bytes,
        content_type: str | None,
        duration: int | None = None,
        is_audio_only: bool = False,
    ) -> VoiceEnrollment:
        """Store a recording, create its enrollment and schedule extraction.

        Args:
            user_id: Owning user.
            data: Recording bytes.
            content_type: MIME type reported by the client.
            duration: Recording length in seconds, if known.
            is_audio_only: True when the client recorded audio without video.

        Returns:
            The enrollment as it stands after scheduling extraction.
        """
        if not data:
            raise EnrollmentError("Recording is empty")

        ext = _recording_extension(content_type, is_audio_only)
        path = f"{settings.enrollment_upload_folder}/{user_id}/{int(time.time() * 1000)}.{ext}"
        video_url = self.storage.upload(data, path, content_type=content_type)
        logger.info(f"Stored recording for user {user_id}: {format_bytes(len(data))} at {path}")

        enrollment = self.enrollment_store.create_enrollment(
            user_id, video_url=video_url, video_duration=duration
        )
        assert enrollment.id is not None
        self.request_extraction(enrollment.id)
        return self.enrollment_store.get_enrollment(enrollment.id)

    def temp_upload(
        self,
        data: bytes,
        content_type: str | None,
        duration: int | None = None,
        is_audio_only: bool = False,
    ) -> TempUpload:
        """Store a recording made before the account exists."""
        if not data:
            raise EnrollmentError("Recording is empty")

        ext = _recording_extension(content_type, is_audio_only)
        path = f"{settings.temp_upload_folder}/temp_{int(time.time() * 1000)}.{ext}"
        video_url = self.storage.upload(data, path, content_type=content_type)
        logger.info(f"Stored temporary recording: {format_bytes(len(data))} at {path}")
        return TempUpload(success=True, video_url=video_url, duration=duration)

    def request_extraction(self, enrollment_id: int) -> str:
        """Enqueue the extraction job for an enrollment."""
        return self.job_queue.enqueue(EXTRACT_AUDIO_JOB, {"enrollmentId": enrollment_id})

    def request_pending_profile_creation(self, user_id: int) -> str:
        """Enqueue the pending-enrollment sweep, e.g. after e-mail confirmation."""
        return self.job_queue.enqueue(PROCESS_PENDING_JOB, {"userId": user_id})

    def handle_extraction_job(self, payload: dict[str, Any]) -> str:
        """Run the extraction job. Errors propagate so the job is marked failed."""
        return self.extraction_service.extract_audio(int(payload["enrollmentId"]))

    def handle_pending_job(self, payload: dict[str, Any]) -> list[EnrollmentResult]:
        return self.process_pending_enrollments(int(payload["userId"]))

    def create_profile_for_enrollment(self, user_id: int, enrollment_id: int) -> EnrollmentResult:
        """Create a voice profile from an enrollment's extracted audio.

        Raises:
            EnrollmentNotFoundError: If the enrollment is not the user's
            NoAudioAvailableError: If extraction has not produced audio
            AudioTooSmallForProfileError: If the audio is under the minimum size
            EnrollmentError: If the audio cannot be fetched
        """
        enrollment = self.enrollment_store.get_enrollment_for_user(enrollment_id, user_id)
        if enrollment.voice_profile_id:
            logger.info(f"Enrollment {enrollment_id} already has a profile, skipping")
            return EnrollmentResult(
                success=True,
                profile_id=enrollment.voice_profile_id,
                enrollment_status=enrollment.processing_status.value,
                enrollment_id=enrollment_id,
            )
        if not enrollment.audio_url:
            raise NoAudioAvailableError("No audio available for this enrollment")

        self.enrollment_store.update_status(enrollment_id, ProcessingStatus.PROFILE_CREATING)
        try:
            audio = self.extraction_service.fetch_stored_media(enrollment.audio_url)
        except GatewayError as e:
            message = f"Failed to fetch enrollment audio: {e}"
            self.enrollment_store.update_status(
                enrollment_id, ProcessingStatus.PROFILE_ERROR, message
            )
            raise EnrollmentError(message) from e

        if len(audio) < self.min_audio_bytes:
            message = "Audio buffer is too small"
            self.enrollment_store.update_status(
                enrollment_id, ProcessingStatus.PROFILE_ERROR, message
            )
            raise AudioTooSmallForProfileError(message)

        return self.profile_service.create_user_profile(
            user_id,
            audio,
            enrollment_id=enrollment_id,
            created_status=ProcessingStatus.PROFILE_CREATED,
            error_status=ProcessingStatus.PROFILE_ERROR,
        )

    def process_pending_enrollments(self, user_id: int) -> list[EnrollmentResult]:
        """Create profiles for every enrollment waiting on one.

        Enrollments are processed one after another; a failure on one is
        recorded on it and does not stop the others.
        """
        pending = self.enrollment_store.list_pending_profile_creation(user_id)
        logger.info(f"Processing {len(pending)} pending voice enrollments for user {user_id}")

        results: list[EnrollmentResult] = []
        for enrollment in pending:
            assert enrollment.id is not None
            try:
                result = self.create_profile_for_enrollment(user_id, enrollment.id)
            except (VoiceSignError, GatewayError, DatabaseError, SQLAlchemyError) as e:
                logger.error(f"Pending enrollment {enrollment.id} failed: {e}")
                result = EnrollmentResult(
                    success=False, enrollment_id=enrollment.id, error=str(e)
                )
            results.append(result)
        return results

    def get_user_voice_enrollment(self, user_id: int) -> VoiceEnrollment | None:
        """Get the user's authoritative (latest active) enrollment."""
        return self.enrollment_store.get_latest_active(user_id)
