"""Store Protocols for data persistence."""

from typing import Any, Protocol

from voicesign.domain.models import (
    Document,
    DocumentAuditLogType,
    Field,
    ProcessingStatus,
    Recipient,
    SecurityAuditLogType,
    Signature,
    SignedField,
    User,
    VoiceEnrollment,
)


class UserStoreProtocol(Protocol):
    """Protocol for User persistence."""

    def get_user(self, user_id: int) -> User:
        """Get a user by id.

        Args:
            user_id: The user's id

        Returns:
            The User instance
        """
        ...

    def add_security_audit_log(
        self,
        user_id: int,
        log_type: SecurityAuditLogType,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Append a security audit log entry."""
        ...


class EnrollmentStoreProtocol(Protocol):
    """Protocol for VoiceEnrollment persistence."""

    def create_enrollment(
        self,
        user_id: int,
        video_url: str | None = None,
        video_duration: int | None = None,
        status: ProcessingStatus = ProcessingStatus.UPLOADED,
    ) -> VoiceEnrollment:
        """Create a new active enrollment.

        Args:
            user_id: Owning user
            video_url: Location of the raw recording
            video_duration: Recording length in seconds
            status: Initial processing status

        Returns:
            The created VoiceEnrollment instance
        """
        ...

    def get_enrollment(self, enrollment_id: int) -> VoiceEnrollment:
        """Get an enrollment by id."""
        ...

    def get_enrollment_for_user(self, enrollment_id: int, user_id: int) -> VoiceEnrollment:
        """Get an enrollment only if it belongs to the user."""
        ...

    def get_latest_active(self, user_id: int) -> VoiceEnrollment | None:
        """Get the user's most recent active enrollment."""
        ...

    def get_latest_active_with_profile(self, user_id: int) -> VoiceEnrollment | None:
        """Get the user's most recent active enrollment that has a profile."""
        ...

    def list_pending_profile_creation(self, user_id: int) -> list[VoiceEnrollment]:
        """List enrollments with audio but no profile yet."""
        ...

    def update_status(
        self,
        enrollment_id: int,
        status: ProcessingStatus,
        error: str | None = None,
    ) -> VoiceEnrollment:
        """Move an enrollment to a new processing status."""
        ...

    def mark_audio_extracted(
        self,
        enrollment_id: int,
        audio_url: str,
        video_duration: int | None = None,
    ) -> VoiceEnrollment:
        """Record a successful audio extraction."""
        ...

    def attach_profile(
        self,
        user_id: int,
        profile_id: str,
        status: ProcessingStatus,
        enrollment_complete: bool = True,
        enrollment_id: int | None = None,
    ) -> VoiceEnrollment:
        """Point the user and their authoritative enrollment at a profile.

        Args:
            user_id: Owning user
            profile_id: Profile id from the speaker recognition service
            status: Status to record on the enrollment
            enrollment_complete: Value for the user's completion flag
            enrollment_id: Target enrollment, defaults to the latest active one

        Returns:
            The updated VoiceEnrollment instance
        """
        ...

    def mark_active_error(
        self,
        user_id: int,
        status: ProcessingStatus,
        error: str,
        enrollment_id: int | None = None,
    ) -> None:
        """Store an error on the given or latest active enrollment."""
        ...

    def touch_last_used(self, user_id: int, profile_id: str) -> int:
        """Set lastUsedAt on active enrollments with the profile."""
        ...


class SigningStoreProtocol(Protocol):
    """Protocol for the document-side records touched by voice signing."""

    def get_document(self, document_id: int) -> Document:
        """Get a document by id."""
        ...

    def get_recipient_by_token(self, token: str) -> Recipient:
        """Get the recipient that owns a signing token."""
        ...

    def get_signable_field(self, field_id: int, recipient: Recipient) -> Field:
        """Get a field the recipient is allowed to fill."""
        ...

    def get_field(self, field_id: int) -> Field:
        """Get a field by id."""
        ...

    def get_signature_for_field(self, field_id: int) -> Signature | None:
        """Get the signature attached to a field, if any."""
        ...

    def insert_voice_signature(
        self,
        field_id: int,
        recipient: Recipient,
        voice_signature_url: str,
        transcript: str | None,
        metadata: dict[str, Any] | None,
        audit_type: DocumentAuditLogType,
        audit_data: dict[str, Any],
    ) -> SignedField:
        """Atomically insert the field, upsert its signature and log it.

        Args:
            field_id: Field being signed
            recipient: Recipient performing the insertion
            voice_signature_url: Audio reference or base64 data
            transcript: Transcript stored for display
            metadata: Signature metadata
            audit_type: Inserted or prefilled
            audit_data: Audit log payload

        Returns:
            The inserted field with its signature
        """
        ...
