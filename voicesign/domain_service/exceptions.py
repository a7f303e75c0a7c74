"""Domain service exceptions."""


class VoiceSignError(Exception):
    """Base exception for voice enrollment and signing."""

    pass


class EnrollmentError(VoiceSignError):
    """Enrollment request cannot be processed."""

    pass


class NoAudioAvailableError(EnrollmentError):
    """Enrollment has no extracted audio yet."""

    pass


class AudioTooSmallForProfileError(EnrollmentError):
    """Fetched audio is too small to create a profile from."""

    pass


class ExtractionError(VoiceSignError):
    """Audio extraction failed."""

    pass


class SigningError(VoiceSignError):
    """Base exception for voice field signing preconditions."""

    pass


class FieldAlreadyInsertedError(SigningError):
    pass


class DocumentNotPendingError(SigningError):
    """Document is deleted, a draft, or already completed."""

    pass


class RecipientAlreadySignedError(SigningError):
    pass


class MissingVoiceRecordingError(SigningError):
    pass


class InvalidVoiceFieldError(SigningError):
    """Field is not a voice signature field."""

    pass


class PhraseVerificationFailedError(SigningError):
    """Transcript does not match the field's required phrase in strict mode."""

    def __init__(self, message: str, missing_words: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing_words = missing_words or []
