"""Domain service layer."""

from voicesign.domain_service.audio_extraction import AudioExtractionService
from voicesign.domain_service.enrollment import (
    EXTRACT_AUDIO_JOB,
    PROCESS_PENDING_JOB,
    EnrollmentService,
    TempUpload,
)
from voicesign.domain_service.exceptions import (
    AudioTooSmallForProfileError,
    DocumentNotPendingError,
    EnrollmentError,
    ExtractionError,
    FieldAlreadyInsertedError,
    InvalidVoiceFieldError,
    MissingVoiceRecordingError,
    NoAudioAvailableError,
    PhraseVerificationFailedError,
    RecipientAlreadySignedError,
    SigningError,
    VoiceSignError,
)
from voicesign.domain_service.field_signing import FieldSigningService
from voicesign.domain_service.profile_locks import ProfileLockRegistry, profile_locks
from voicesign.domain_service.voice_profile import (
    EnrollmentResult,
    VerificationResult,
    VoiceProfileService,
)

__all__ = [
    "EXTRACT_AUDIO_JOB",
    "PROCESS_PENDING_JOB",
    "AudioExtractionService",
    "AudioTooSmallForProfileError",
    "DocumentNotPendingError",
    "EnrollmentError",
    "EnrollmentResult",
    "EnrollmentService",
    "ExtractionError",
    "FieldAlreadyInsertedError",
    "FieldSigningService",
    "InvalidVoiceFieldError",
    "MissingVoiceRecordingError",
    "NoAudioAvailableError",
    "PhraseVerificationFailedError",
    "ProfileLockRegistry",
    "RecipientAlreadySignedError",
    "SigningError",
    "TempUpload",
    "VerificationResult",
    "VoiceProfileService",
    "VoiceSignError",
    "profile_locks",
]
