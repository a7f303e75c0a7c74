"""Database models (SQLModel)."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Column, Text
from sqlmodel import Field, SQLModel
from ulid import ULID


def _generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


def _utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(UTC)


class UserModel(SQLModel, table=True):
    """Platform user, restricted to the columns the voice pipeline touches."""

    __tablename__ = "users"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    public_id: str = Field(
        default_factory=_generate_ulid,
        unique=True,
        index=True,
        max_length=26,
    )
    email: str = Field(unique=True, index=True, max_length=255)
    name: str | None = Field(default=None, max_length=255)
    email_verified: datetime | None = Field(default=None)
    voice_profile_id: str | None = Field(default=None, max_length=64)
    voice_enrollment_complete: bool = Field(default=False)
    voice_enrollment_date: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class VoiceEnrollmentModel(SQLModel, table=True):
    """One row per enrollment attempt."""

    __tablename__ = "voice_enrollments"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    public_id: str = Field(
        default_factory=_generate_ulid,
        unique=True,
        index=True,
        max_length=26,
    )
    user_id: int = Field(foreign_key="users.id", index=True)
    is_active: bool = Field(default=True, index=True)
    video_url: str | None = Field(default=None, max_length=2048)
    video_duration: int | None = Field(default=None)  # seconds
    audio_url: str | None = Field(default=None, max_length=2048)
    voice_profile_id: str | None = Field(default=None, max_length=64, index=True)
    processing_status: str = Field(default="UPLOADED", max_length=32)
    processing_error: str | None = Field(default=None, sa_column=Column(Text))
    is_processed: bool = Field(default=False)
    ready_for_profile_creation: bool = Field(default=False)
    last_used_at: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)


class UserSecurityAuditLogModel(SQLModel, table=True):
    """Security events (voice sign-in accept/reject)."""

    __tablename__ = "user_security_audit_logs"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    type: str = Field(max_length=32)
    ip_address: str | None = Field(default=None, max_length=64)
    user_agent: str | None = Field(default=None, max_length=512)
    created_at: datetime = Field(default_factory=_utc_now)


class DocumentModel(SQLModel, table=True):
    __tablename__ = "documents"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    owner_id: int = Field(foreign_key="users.id", index=True)
    title: str = Field(max_length=255)
    status: str = Field(default="PENDING", max_length=16)
    deleted_at: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=_utc_now)


class RecipientModel(SQLModel, table=True):
    __tablename__ = "recipients"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    document_id: int = Field(foreign_key="documents.id", index=True)
    email: str = Field(max_length=255)
    name: str = Field(default="", max_length=255)
    token: str = Field(unique=True, index=True, max_length=255)
    role: str = Field(default="SIGNER", max_length=16)
    signing_status: str = Field(default="NOT_SIGNED", max_length=16)
    signing_order: int | None = Field(default=None)


class FieldModel(SQLModel, table=True):
    __tablename__ = "fields"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    secondary_id: str = Field(
        default_factory=_generate_ulid,
        unique=True,
        max_length=26,
    )
    document_id: int = Field(foreign_key="documents.id", index=True)
    recipient_id: int | None = Field(default=None, foreign_key="recipients.id", index=True)
    type: str = Field(max_length=32)
    inserted: bool = Field(default=False)
    custom_text: str = Field(default="", sa_column=Column(Text, nullable=False, default=""))
    field_meta: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))


class SignatureModel(SQLModel, table=True):
    """Signature of record attached to one field."""

    __tablename__ = "signatures"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    field_id: int = Field(foreign_key="fields.id", unique=True, index=True)
    recipient_id: int = Field(foreign_key="recipients.id", index=True)
    voice_signature_url: str | None = Field(default=None, sa_column=Column(Text))
    voice_signature_transcript: str | None = Field(default=None, sa_column=Column(Text))
    voice_signature_metadata: dict[str, Any] | None = Field(
        default=None, sa_column=Column(JSON)
    )
    voice_signature_created_at: datetime | None = Field(default=None)
    created_at: datetime = Field(default_factory=_utc_now)


class DocumentAuditLogModel(SQLModel, table=True):
    __tablename__ = "document_audit_logs"  # pyright: ignore[reportAssignmentType]

    id: int | None = Field(default=None, primary_key=True)
    document_id: int = Field(foreign_key="documents.id", index=True)
    type: str = Field(max_length=64)
    email: str | None = Field(default=None, max_length=255)
    name: str | None = Field(default=None, max_length=255)
    data: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=_utc_now)
