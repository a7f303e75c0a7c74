"""Tests for EnrollmentService."""

from pathlib import Path

import pytest

from voicesign.database import EnrollmentStore, UserStore
from voicesign.database.exceptions import EnrollmentNotFoundError
from voicesign.domain.models import ProcessingStatus, User, VoiceEnrollment
from voicesign.domain_service import (
    EXTRACT_AUDIO_JOB,
    PROCESS_PENDING_JOB,
    AudioExtractionService,
    AudioTooSmallForProfileError,
    EnrollmentError,
    EnrollmentService,
    NoAudioAvailableError,
    ProfileLockRegistry,
    VoiceProfileService,
)
from voicesign.engine import TranscodeResult
from voicesign.gateways.media_fetcher import HttpMediaFetcher
from voicesign.gateways.speaker_recognition import MockSpeakerRecognitionClient
from voicesign.gateways.storages import LocalStorage

AUDIO = b"RIFF" + b"\x01" * 4000


def fixed_transcode(source: Path) -> TranscodeResult:
    return TranscodeResult(data=AUDIO, sample_rate=16000, sample_count=320000, peak_level=0.5)


@pytest.fixture(name="service")
def service_fixture(
    enrollment_store: EnrollmentStore,
    user_store: UserStore,
    storage: LocalStorage,
    job_queue,
    speaker_client: MockSpeakerRecognitionClient,
    audio_converter,
    locks: ProfileLockRegistry,
) -> EnrollmentService:
    extraction_service = AudioExtractionService(
        enrollment_store=enrollment_store,
        storage=storage,
        media_fetcher=HttpMediaFetcher(),
        transcode=fixed_transcode,
    )
    profile_service = VoiceProfileService(
        speaker_client=speaker_client,
        enrollment_store=enrollment_store,
        user_store=user_store,
        audio_converter=audio_converter,
        locks=locks,
    )
    return EnrollmentService(
        enrollment_store=enrollment_store,
        storage=storage,
        job_queue=job_queue,
        extraction_service=extraction_service,
        profile_service=profile_service,
    )


def _extracted_enrollment(
    enrollment_store: EnrollmentStore, storage: LocalStorage, user: User, audio: bytes, name: str
) -> VoiceEnrollment:
    enrollment = enrollment_store.create_enrollment(user.id, video_url=f"{name}.webm")
    enrollment_store.update_status(enrollment.id, ProcessingStatus.PROCESSING)
    audio_url = storage.upload(audio, f"voice-audio/{name}.wav")
    return enrollment_store.mark_audio_extracted(enrollment.id, audio_url)


class TestUpload:
    """Tests for recording uploads."""

    def test_upload_stores_recording_and_queues_extraction(
        self, service: EnrollmentService, storage: LocalStorage, job_queue, user: User
    ) -> None:
        enrollment = service.upload_recording(
            user.id, b"webm-bytes", content_type="video/webm", duration=25
        )

        assert enrollment.processing_status == ProcessingStatus.UPLOADED
        assert enrollment.video_duration == 25
        assert f"voice-enrollments/{user.id}/" in enrollment.video_url
        assert enrollment.video_url.endswith(".webm")
        assert storage.download(enrollment.video_url) == b"webm-bytes"
        assert job_queue.jobs == [(EXTRACT_AUDIO_JOB, {"enrollmentId": enrollment.id})]

    def test_audio_only_unknown_type_uses_webm(
        self, service: EnrollmentService, user: User
    ) -> None:
        enrollment = service.upload_recording(
            user.id, b"bytes", content_type=None, is_audio_only=True
        )

        assert enrollment.video_url.endswith(".webm")

    def test_empty_recording(self, service: EnrollmentService, user: User) -> None:
        with pytest.raises(EnrollmentError):
            service.upload_recording(user.id, b"", content_type="video/webm")

    def test_temp_upload(self, service: EnrollmentService, storage: LocalStorage) -> None:
        result = service.temp_upload(b"signup", content_type="audio/mpeg", duration=12)

        assert result.success
        assert result.duration == 12
        assert "temp-voice-enrollments/temp_" in result.video_url
        assert result.video_url.endswith(".mp3")
        assert storage.download(result.video_url) == b"signup"


class TestJobs:
    """Tests for the background job entry points."""

    def test_extraction_job(
        self, service: EnrollmentService, enrollment_store: EnrollmentStore, user: User
    ) -> None:
        enrollment = service.upload_recording(user.id, b"webm-bytes", content_type="video/webm")

        audio_url = service.handle_extraction_job({"enrollmentId": enrollment.id})

        stored = enrollment_store.get_enrollment(enrollment.id)
        assert stored.audio_url == audio_url
        assert stored.processing_status == ProcessingStatus.AUDIO_EXTRACTED

    def test_request_pending_profile_creation(
        self, service: EnrollmentService, job_queue, user: User
    ) -> None:
        job_id = service.request_pending_profile_creation(user.id)

        assert job_id == "job-1"
        assert job_queue.jobs == [(PROCESS_PENDING_JOB, {"userId": user.id})]


class TestCreateProfileForEnrollment:
    """Tests for create_profile_for_enrollment."""

    def test_creates_profile(
        self,
        service: EnrollmentService,
        enrollment_store: EnrollmentStore,
        user_store: UserStore,
        storage: LocalStorage,
        user: User,
    ) -> None:
        enrollment = _extracted_enrollment(enrollment_store, storage, user, AUDIO, "a")

        result = service.create_profile_for_enrollment(user.id, enrollment.id)

        assert result.success
        stored = enrollment_store.get_enrollment(enrollment.id)
        assert stored.processing_status == ProcessingStatus.PROFILE_CREATED
        assert stored.voice_profile_id == result.profile_id
        assert not stored.ready_for_profile_creation
        assert user_store.get_user(user.id).voice_profile_id == result.profile_id

    def test_existing_profile_is_returned(
        self,
        service: EnrollmentService,
        enrollment_store: EnrollmentStore,
        storage: LocalStorage,
        user: User,
    ) -> None:
        enrollment = _extracted_enrollment(enrollment_store, storage, user, AUDIO, "a")
        first = service.create_profile_for_enrollment(user.id, enrollment.id)

        second = service.create_profile_for_enrollment(user.id, enrollment.id)

        assert second.profile_id == first.profile_id

    def test_no_audio(
        self, service: EnrollmentService, enrollment_store: EnrollmentStore, user: User
    ) -> None:
        enrollment = enrollment_store.create_enrollment(user.id, video_url="a.webm")

        with pytest.raises(NoAudioAvailableError):
            service.create_profile_for_enrollment(user.id, enrollment.id)

    def test_audio_too_small(
        self,
        service: EnrollmentService,
        enrollment_store: EnrollmentStore,
        storage: LocalStorage,
        user: User,
    ) -> None:
        enrollment = _extracted_enrollment(enrollment_store, storage, user, b"\x01" * 500, "a")

        with pytest.raises(AudioTooSmallForProfileError):
            service.create_profile_for_enrollment(user.id, enrollment.id)

        failed = enrollment_store.get_enrollment(enrollment.id)
        assert failed.processing_status == ProcessingStatus.PROFILE_ERROR
        assert failed.processing_error == "Audio buffer is too small"

    def test_missing_audio_file(
        self,
        service: EnrollmentService,
        enrollment_store: EnrollmentStore,
        storage: LocalStorage,
        user: User,
    ) -> None:
        enrollment = _extracted_enrollment(enrollment_store, storage, user, AUDIO, "a")
        storage.delete(enrollment.audio_url)

        with pytest.raises(EnrollmentError, match="Failed to fetch enrollment audio"):
            service.create_profile_for_enrollment(user.id, enrollment.id)

        assert (
            enrollment_store.get_enrollment(enrollment.id).processing_status
            == ProcessingStatus.PROFILE_ERROR
        )

    def test_foreign_enrollment(
        self,
        service: EnrollmentService,
        enrollment_store: EnrollmentStore,
        user_store: UserStore,
        storage: LocalStorage,
        user: User,
    ) -> None:
        enrollment = _extracted_enrollment(enrollment_store, storage, user, AUDIO, "a")
        other = user_store.create_user("other@example.com")

        with pytest.raises(EnrollmentNotFoundError):
            service.create_profile_for_enrollment(other.id, enrollment.id)


class TestProcessPendingEnrollments:
    def test_failure_does_not_stop_the_sweep(
        self,
        service: EnrollmentService,
        enrollment_store: EnrollmentStore,
        storage: LocalStorage,
        user: User,
    ) -> None:
        small = _extracted_enrollment(enrollment_store, storage, user, b"\x01" * 500, "small")
        good = _extracted_enrollment(enrollment_store, storage, user, AUDIO, "good")

        results = service.process_pending_enrollments(user.id)

        assert [r.success for r in results] == [False, True]
        assert results[0].enrollment_id == small.id
        assert results[0].error == "Audio buffer is too small"
        assert results[1].enrollment_id == good.id
        assert service.get_user_voice_enrollment(user.id).id == good.id

    def test_nothing_pending(self, service: EnrollmentService, user: User) -> None:
        assert service.handle_pending_job({"userId": user.id}) == []
