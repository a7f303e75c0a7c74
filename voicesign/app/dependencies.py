"""Dependency injection for FastAPI."""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Header, HTTPException, status
from sqlmodel import Session

from voicesign.database import EnrollmentStore, SigningStore, UserStore, get_session
from voicesign.domain.protocols import (
    JobQueueProtocol,
    MediaFetcherProtocol,
    SpeakerRecognitionClientProtocol,
    StorageProtocol,
    TranscriberProtocol,
)
from voicesign.domain_service import (
    AudioExtractionService,
    EnrollmentService,
    FieldSigningService,
    VoiceProfileService,
)
from voicesign.domain_service.settings import settings as service_settings
from voicesign.engine import AudioConverter
from voicesign.gateways import loader
from voicesign.gateways.job_queues import CeleryJobQueue, DirectJobQueue
from voicesign.gateways.settings import celery_settings


def get_db() -> Generator[Session, None, None]:
    """Get database session."""
    yield from get_session()


def get_current_user_id(
    x_user_id: Annotated[int | None, Header()] = None,
) -> int:
    """Get the authenticated user's id.

    Session handling lives in the platform's auth layer, which forwards
    the authenticated user id in the X-User-Id header.
    """
    if x_user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return x_user_id


def get_storage() -> StorageProtocol:
    """Get the object storage."""
    return loader.get_storage()


def get_speaker_client() -> SpeakerRecognitionClientProtocol:
    """Get the speaker recognition client."""
    return loader.get_speaker_client()


def get_transcriber() -> TranscriberProtocol:
    """Get the speech-to-text transcriber."""
    return loader.get_transcriber()


def get_media_fetcher() -> MediaFetcherProtocol:
    return loader.get_media_fetcher()


def get_job_queue() -> JobQueueProtocol:
    """Get the job queue selected by VOICESIGN_SERVICE_JOB_BACKEND."""
    if service_settings.job_backend == "celery":
        return CeleryJobQueue(celery_settings)
    from voicesign.worker.jobs import JOB_HANDLERS

    return DirectJobQueue(JOB_HANDLERS)


def get_enrollment_store(session: Annotated[Session, Depends(get_db)]) -> EnrollmentStore:
    """Get enrollment store with injected session."""
    return EnrollmentStore(session)


def get_user_store(session: Annotated[Session, Depends(get_db)]) -> UserStore:
    """Get user store with injected session."""
    return UserStore(session)


def get_signing_store(session: Annotated[Session, Depends(get_db)]) -> SigningStore:
    """Get signing store with injected session."""
    return SigningStore(session)


def get_voice_profile_service(
    speaker_client: Annotated[SpeakerRecognitionClientProtocol, Depends(get_speaker_client)],
    enrollment_store: Annotated[EnrollmentStore, Depends(get_enrollment_store)],
    user_store: Annotated[UserStore, Depends(get_user_store)],
) -> VoiceProfileService:
    return VoiceProfileService(
        speaker_client=speaker_client,
        enrollment_store=enrollment_store,
        user_store=user_store,
        audio_converter=AudioConverter(),
    )


def get_enrollment_service(
    enrollment_store: Annotated[EnrollmentStore, Depends(get_enrollment_store)],
    storage: Annotated[StorageProtocol, Depends(get_storage)],
    media_fetcher: Annotated[MediaFetcherProtocol, Depends(get_media_fetcher)],
    job_queue: Annotated[JobQueueProtocol, Depends(get_job_queue)],
    profile_service: Annotated[VoiceProfileService, Depends(get_voice_profile_service)],
) -> EnrollmentService:
    extraction_service = AudioExtractionService(
        enrollment_store=enrollment_store,
        storage=storage,
        media_fetcher=media_fetcher,
    )
    return EnrollmentService(
        enrollment_store=enrollment_store,
        storage=storage,
        job_queue=job_queue,
        extraction_service=extraction_service,
        profile_service=profile_service,
    )


def get_field_signing_service(
    signing_store: Annotated[SigningStore, Depends(get_signing_store)],
    transcriber: Annotated[TranscriberProtocol, Depends(get_transcriber)],
) -> FieldSigningService:
    return FieldSigningService(
        signing_store=signing_store,
        transcriber=transcriber,
    )


# Type aliases for dependency injection
DbSession = Annotated[Session, Depends(get_db)]
CurrentUserId = Annotated[int, Depends(get_current_user_id)]
StorageDep = Annotated[StorageProtocol, Depends(get_storage)]
TranscriberDep = Annotated[TranscriberProtocol, Depends(get_transcriber)]
EnrollmentStoreDep = Annotated[EnrollmentStore, Depends(get_enrollment_store)]
SigningStoreDep = Annotated[SigningStore, Depends(get_signing_store)]
VoiceProfileServiceDep = Annotated[VoiceProfileService, Depends(get_voice_profile_service)]
EnrollmentServiceDep = Annotated[EnrollmentService, Depends(get_enrollment_service)]
FieldSigningServiceDep = Annotated[FieldSigningService, Depends(get_field_signing_service)]
