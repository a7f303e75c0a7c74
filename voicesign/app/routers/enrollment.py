"""Voice enrollment endpoints."""

import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status

from ..dependencies import (
    CurrentUserId,
    EnrollmentServiceDep,
    EnrollmentStoreDep,
    VoiceProfileServiceDep,
)
from ..schemas.enrollment import (
    EnrollmentIdRequest,
    EnrollmentResponse,
    EnrollmentUploadResponse,
    JobQueuedResponse,
    ProfileResultResponse,
    TempUploadResponse,
)
from ._uploads import read_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/voice-enrollment", tags=["voice-enrollment"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=EnrollmentUploadResponse,
)
def upload_enrollment(
    user_id: CurrentUserId,
    enrollment_service: EnrollmentServiceDep,
    file: Annotated[UploadFile | None, File()] = None,
    duration: Annotated[int | None, Form()] = None,
    is_audio_only: Annotated[bool, Form(alias="isAudioOnly")] = False,
) -> EnrollmentUploadResponse:
    """Store an enrollment recording and schedule audio extraction."""
    upload, data = read_upload(file)
    enrollment = enrollment_service.upload_recording(
        user_id,
        data,
        content_type=upload.content_type,
        duration=duration,
        is_audio_only=is_audio_only,
    )
    assert enrollment.id is not None
    return EnrollmentUploadResponse(
        enrollment_id=enrollment.id,
        status=enrollment.processing_status,
    )


@router.get("", response_model=EnrollmentResponse | None)
def get_enrollment(
    user_id: CurrentUserId,
    enrollment_service: EnrollmentServiceDep,
) -> EnrollmentResponse | None:
    """Get the caller's latest active enrollment."""
    enrollment = enrollment_service.get_user_voice_enrollment(user_id)
    if enrollment is None:
        return None
    return EnrollmentResponse.from_domain(enrollment)


@router.post("/temp-upload", response_model=TempUploadResponse)
def temp_upload(
    enrollment_service: EnrollmentServiceDep,
    file: Annotated[UploadFile | None, File()] = None,
    duration: Annotated[int | None, Form()] = None,
    is_audio_only: Annotated[bool, Form(alias="isAudioOnly")] = False,
) -> TempUploadResponse:
    """Store a recording made during signup, before the account exists."""
    upload, data = read_upload(file)
    result = enrollment_service.temp_upload(
        data,
        content_type=upload.content_type,
        duration=duration,
        is_audio_only=is_audio_only,
    )
    return TempUploadResponse(
        success=result.success,
        video_url=result.video_url,
        duration=result.duration,
    )


def _require_enrollment_id(request: EnrollmentIdRequest) -> int:
    if request.enrollment_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Enrollment ID is required",
        )
    return request.enrollment_id


@router.post(
    "/extract-audio",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=JobQueuedResponse,
)
def extract_audio(
    request: EnrollmentIdRequest,
    user_id: CurrentUserId,
    enrollment_store: EnrollmentStoreDep,
    enrollment_service: EnrollmentServiceDep,
) -> JobQueuedResponse:
    """Re-queue audio extraction for one of the caller's enrollments."""
    enrollment_id = _require_enrollment_id(request)
    enrollment_store.get_enrollment_for_user(enrollment_id, user_id)
    job_id = enrollment_service.request_extraction(enrollment_id)
    return JobQueuedResponse(job_id=job_id)


@router.post("/create-profile", response_model=ProfileResultResponse)
def create_profile(
    request: EnrollmentIdRequest,
    user_id: CurrentUserId,
    enrollment_service: EnrollmentServiceDep,
) -> ProfileResultResponse:
    """Create a voice profile from an enrollment's extracted audio."""
    enrollment_id = _require_enrollment_id(request)
    result = enrollment_service.create_profile_for_enrollment(user_id, enrollment_id)
    if not result.success:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=result.error or "Failed to create voice profile",
        )
    return ProfileResultResponse.from_result(result)


@router.post("/re-enroll", response_model=ProfileResultResponse)
def re_enroll(
    user_id: CurrentUserId,
    profile_service: VoiceProfileServiceDep,
    file: Annotated[UploadFile | None, File()] = None,
) -> ProfileResultResponse:
    """Replace the caller's voice profile with one built from a new sample."""
    _, data = read_upload(file)
    result = profile_service.re_enroll_user_voice(user_id, data)
    if not result.success:
        logger.warning(f"Re-enrollment failed for user {user_id}: {result.error}")
    return ProfileResultResponse.from_result(result)


@router.post("/long-enrollment", response_model=ProfileResultResponse)
def long_enrollment(
    user_id: CurrentUserId,
    profile_service: VoiceProfileServiceDep,
    files: Annotated[list[UploadFile] | None, File()] = None,
) -> ProfileResultResponse:
    """Enroll several samples until the speaker service reports Enrolled."""
    samples = [read_upload(f)[1] for f in files or []]
    result = profile_service.perform_long_enrollment(user_id, samples)
    return ProfileResultResponse.from_result(result)


@router.post(
    "/process-pending",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=JobQueuedResponse,
)
def process_pending(
    user_id: CurrentUserId,
    enrollment_service: EnrollmentServiceDep,
) -> JobQueuedResponse:
    """Queue profile creation for enrollments waiting on email confirmation."""
    job_id = enrollment_service.request_pending_profile_creation(user_id)
    return JobQueuedResponse(job_id=job_id)
