from datetime import datetime

from pydantic import Field

from voicesign.domain.models import ProcessingStatus, VoiceEnrollment
from voicesign.domain_service import EnrollmentResult

from ._base import CamelModel


class EnrollmentUploadResponse(CamelModel):
    """Response to an accepted enrollment recording."""

    enrollment_id: int = Field(..., description="Enrollment record ID")
    status: ProcessingStatus = Field(..., description="Processing status after scheduling")


class EnrollmentResponse(CamelModel):
    """The user's authoritative voice enrollment."""

    id: int
    public_id: str
    status: ProcessingStatus = Field(..., description="Processing status")
    is_active: bool
    video_url: str | None = None
    video_duration: int | None = Field(None, description="Recording length in seconds")
    audio_url: str | None = None
    voice_profile_id: str | None = None
    processing_error: str | None = None
    ready_for_profile_creation: bool = False
    last_used_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, enrollment: VoiceEnrollment) -> "EnrollmentResponse":
        assert enrollment.id is not None
        return cls(
            id=enrollment.id,
            public_id=enrollment.public_id,
            status=enrollment.processing_status,
            is_active=enrollment.is_active,
            video_url=enrollment.video_url,
            video_duration=enrollment.video_duration,
            audio_url=enrollment.audio_url,
            voice_profile_id=enrollment.voice_profile_id,
            processing_error=enrollment.processing_error,
            ready_for_profile_creation=enrollment.ready_for_profile_creation,
            last_used_at=enrollment.last_used_at,
            created_at=enrollment.created_at,
            updated_at=enrollment.updated_at,
        )


class TempUploadResponse(CamelModel):
    success: bool
    video_url: str = Field(..., description="Storage reference of the uploaded recording")
    duration: int | None = None


class EnrollmentIdRequest(CamelModel):
    enrollment_id: int | None = Field(None, description="Enrollment record ID")


class JobQueuedResponse(CamelModel):
    job_id: str = Field(..., description="Queue job ID")
    status: str = "queued"


class ProfileResultResponse(CamelModel):
    """Outcome of a profile creation or re-enrollment."""

    success: bool
    profile_id: str | None = None
    enrollment_status: str | None = Field(None, description="Status reported by the speaker service")
    enrollment_id: int | None = None
    error: str | None = None

    @classmethod
    def from_result(cls, result: EnrollmentResult) -> "ProfileResultResponse":
        return cls(
            success=result.success,
            profile_id=result.profile_id,
            enrollment_status=result.enrollment_status,
            enrollment_id=result.enrollment_id,
            error=result.error,
        )
