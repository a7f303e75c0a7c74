"""Background job handlers.

Each handler opens its own database session and builds the services it
needs, so it can run in a Celery worker process or inline in the API.
"""

import logging
from typing import Any

from sqlmodel import Session

from voicesign.database import EnrollmentStore, UserStore
from voicesign.database.session import engine
from voicesign.domain_service import (
    EXTRACT_AUDIO_JOB,
    PROCESS_PENDING_JOB,
    AudioExtractionService,
    EnrollmentResult,
    EnrollmentService,
    VoiceProfileService,
)
from voicesign.engine import AudioConverter
from voicesign.gateways.job_queues import DirectJobQueue
from voicesign.gateways.loader import get_media_fetcher, get_speaker_client, get_storage

logger = logging.getLogger(__name__)


def build_enrollment_service(session: Session) -> EnrollmentService:
    """Wire an EnrollmentService on a session."""
    enrollment_store = EnrollmentStore(session)
    storage = get_storage()
    extraction_service = AudioExtractionService(
        enrollment_store=enrollment_store,
        storage=storage,
        media_fetcher=get_media_fetcher(),
    )
    profile_service = VoiceProfileService(
        speaker_client=get_speaker_client(),
        enrollment_store=enrollment_store,
        user_store=UserStore(session),
        audio_converter=AudioConverter(),
    )
    return EnrollmentService(
        enrollment_store=enrollment_store,
        storage=storage,
        job_queue=DirectJobQueue(JOB_HANDLERS),
        extraction_service=extraction_service,
        profile_service=profile_service,
    )


def run_extract_audio(payload: dict[str, Any]) -> str:
    """Job ``internal.extract-audio``: payload ``{"enrollmentId": int}``."""
    with Session(engine) as session:
        return build_enrollment_service(session).handle_extraction_job(payload)


def run_process_pending(payload: dict[str, Any]) -> list[EnrollmentResult]:
    """Job ``internal.process-pending-voice-enrollments``: payload ``{"userId": int}``."""
    with Session(engine) as session:
        results = build_enrollment_service(session).handle_pending_job(payload)
    failed = [r for r in results if not r.success]
    logger.info(
        f"Pending enrollment sweep for user {payload.get('userId')}: "
        f"{len(results) - len(failed)} succeeded, {len(failed)} failed"
    )
    return results


JOB_HANDLERS = {
    EXTRACT_AUDIO_JOB: run_extract_audio,
    PROCESS_PENDING_JOB: run_process_pending,
}
