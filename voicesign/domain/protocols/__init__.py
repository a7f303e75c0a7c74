"""Domain protocols."""

from voicesign.domain.protocols.audio import AudioConverterProtocol
from voicesign.domain.protocols.job_queue import JobQueueProtocol
from voicesign.domain.protocols.speaker_recognition import (
    EnrollmentStatus,
    ProfileCheck,
    ProfileEnrollment,
    RecognitionResult,
    SpeakerRecognitionClientProtocol,
    VerificationOutcome,
)
from voicesign.domain.protocols.storage import MediaFetcherProtocol, StorageProtocol
from voicesign.domain.protocols.store import (
    EnrollmentStoreProtocol,
    SigningStoreProtocol,
    UserStoreProtocol,
)
from voicesign.domain.protocols.transcriber import TranscriberProtocol

__all__ = [
    "AudioConverterProtocol",
    "EnrollmentStatus",
    "EnrollmentStoreProtocol",
    "JobQueueProtocol",
    "MediaFetcherProtocol",
    "ProfileCheck",
    "ProfileEnrollment",
    "RecognitionResult",
    "SigningStoreProtocol",
    "SpeakerRecognitionClientProtocol",
    "StorageProtocol",
    "TranscriberProtocol",
    "UserStoreProtocol",
    "VerificationOutcome",
]
