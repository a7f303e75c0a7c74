"""Document, recipient, field and signature models consumed by voice signing."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from voicesign.domain.models._helpers import _generate_ulid, _utc_now


class DocumentStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class RecipientRole(str, Enum):
    SIGNER = "SIGNER"
    APPROVER = "APPROVER"
    VIEWER = "VIEWER"
    CC = "CC"
    ASSISTANT = "ASSISTANT"


class SigningStatus(str, Enum):
    NOT_SIGNED = "NOT_SIGNED"
    SIGNED = "SIGNED"
    REJECTED = "REJECTED"


class FieldType(str, Enum):
    SIGNATURE = "SIGNATURE"
    FREE_SIGNATURE = "FREE_SIGNATURE"
    VOICE_SIGNATURE = "VOICE_SIGNATURE"
    INITIALS = "INITIALS"
    NAME = "NAME"
    EMAIL = "EMAIL"
    DATE = "DATE"
    TEXT = "TEXT"


class DocumentAuditLogType(str, Enum):
    DOCUMENT_FIELD_INSERTED = "DOCUMENT_FIELD_INSERTED"
    DOCUMENT_FIELD_PREFILLED = "DOCUMENT_FIELD_PREFILLED"


@dataclass
class Document:
    title: str
    owner_id: int
    id: int | None = None
    status: DocumentStatus = DocumentStatus.PENDING
    deleted_at: datetime | None = None
    created_at: datetime = field(default_factory=_utc_now)


@dataclass
class Recipient:
    document_id: int
    email: str
    token: str
    name: str = ""
    id: int | None = None
    role: RecipientRole = RecipientRole.SIGNER
    signing_status: SigningStatus = SigningStatus.NOT_SIGNED
    signing_order: int | None = None


@dataclass
class VoiceSignatureFieldMeta:
    """Per-field phrase-matching policy."""

    required_phrase: str | None = None
    strict_matching: bool = False

    @classmethod
    def from_field_meta(cls, field_meta: dict[str, Any] | None) -> "VoiceSignatureFieldMeta":
        """Read the policy from a field's stored meta, ignoring unrelated keys."""
        if not field_meta:
            return cls()
        phrase = field_meta.get("requiredPhrase")
        if not isinstance(phrase, str) or not phrase.strip():
            phrase = None
        return cls(
            required_phrase=phrase,
            strict_matching=field_meta.get("strictMatching") is True,
        )

    def to_field_meta(self) -> dict[str, Any]:
        return {
            "type": "voiceSignature",
            "requiredPhrase": self.required_phrase,
            "strictMatching": self.strict_matching,
        }


@dataclass
class Field:
    document_id: int
    type: FieldType
    recipient_id: int | None = None
    id: int | None = None
    secondary_id: str = field(default_factory=_generate_ulid)
    inserted: bool = False
    custom_text: str = ""
    field_meta: dict[str, Any] | None = None


@dataclass
class Signature:
    field_id: int
    recipient_id: int
    id: int | None = None
    voice_signature_url: str | None = None
    voice_signature_transcript: str | None = None
    voice_signature_metadata: dict[str, Any] | None = None
    voice_signature_created_at: datetime | None = None
    created_at: datetime = field(default_factory=_utc_now)


@dataclass
class DocumentAuditLog:
    document_id: int
    type: DocumentAuditLogType
    data: dict[str, Any]
    email: str | None = None
    name: str | None = None
    id: int | None = None
    created_at: datetime = field(default_factory=_utc_now)


@dataclass
class SignedField:
    """A field after insertion, with its attached signature."""

    field: Field
    signature: Signature
