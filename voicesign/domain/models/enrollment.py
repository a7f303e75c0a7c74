"""Voice enrollment domain model and its processing-status state machine."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from voicesign.domain.models._helpers import _generate_ulid, _utc_now


class ProcessingStatus(str, Enum):
    """Pipeline progress of a voice enrollment."""

    UPLOADED = "UPLOADED"
    PROCESSING = "PROCESSING"
    AUDIO_EXTRACTED = "AUDIO_EXTRACTED"
    PROFILE_CREATING = "PROFILE_CREATING"
    PROFILE_CREATED = "PROFILE_CREATED"
    ENROLLING = "ENROLLING"
    ENROLLED = "ENROLLED"
    ERROR = "ERROR"
    PROFILE_ERROR = "PROFILE_ERROR"

    @property
    def is_error(self) -> bool:
        return self in (ProcessingStatus.ERROR, ProcessingStatus.PROFILE_ERROR)

    @property
    def in_progress(self) -> bool:
        return self in (
            ProcessingStatus.PROCESSING,
            ProcessingStatus.PROFILE_CREATING,
            ProcessingStatus.ENROLLING,
        )

    def can_transition_to(self, target: "ProcessingStatus") -> bool:
        """Check whether moving from this status to target is an expected edge."""
        return target in TRANSITIONS[self]


_PROFILE_OUTCOMES = frozenset(
    {
        ProcessingStatus.PROFILE_CREATED,
        ProcessingStatus.ENROLLED,
        ProcessingStatus.ENROLLING,
        ProcessingStatus.PROFILE_ERROR,
        ProcessingStatus.ERROR,
    }
)

# Re-enrollment may move any settled enrollment back through profile creation.
TRANSITIONS: dict[ProcessingStatus, frozenset[ProcessingStatus]] = {
    ProcessingStatus.UPLOADED: frozenset(
        {ProcessingStatus.PROCESSING, ProcessingStatus.ERROR}
    ),
    ProcessingStatus.PROCESSING: frozenset(
        {
            ProcessingStatus.PROCESSING,
            ProcessingStatus.AUDIO_EXTRACTED,
            ProcessingStatus.ERROR,
        }
    ),
    ProcessingStatus.AUDIO_EXTRACTED: frozenset(
        {ProcessingStatus.PROFILE_CREATING} | _PROFILE_OUTCOMES
    ),
    ProcessingStatus.PROFILE_CREATING: _PROFILE_OUTCOMES,
    ProcessingStatus.ENROLLING: _PROFILE_OUTCOMES,
    ProcessingStatus.ENROLLED: _PROFILE_OUTCOMES,
    ProcessingStatus.PROFILE_CREATED: _PROFILE_OUTCOMES,
    ProcessingStatus.PROFILE_ERROR: frozenset({ProcessingStatus.PROFILE_CREATING})
    | _PROFILE_OUTCOMES,
    ProcessingStatus.ERROR: frozenset(
        {ProcessingStatus.PROCESSING, ProcessingStatus.PROFILE_CREATING}
    )
    | _PROFILE_OUTCOMES,
}


@dataclass
class VoiceEnrollment:
    """One durable record per enrollment attempt."""

    user_id: int
    id: int | None = None
    public_id: str = field(default_factory=_generate_ulid)
    is_active: bool = True
    video_url: str | None = None
    video_duration: int | None = None
    audio_url: str | None = None
    voice_profile_id: str | None = None
    processing_status: ProcessingStatus = ProcessingStatus.UPLOADED
    processing_error: str | None = None
    is_processed: bool = False
    ready_for_profile_creation: bool = False
    last_used_at: datetime | None = None
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)
