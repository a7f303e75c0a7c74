"""Domain models."""

from voicesign.domain.models.enrollment import (
    TRANSITIONS,
    ProcessingStatus,
    VoiceEnrollment,
)
from voicesign.domain.models.signing import (
    Document,
    DocumentAuditLog,
    DocumentAuditLogType,
    DocumentStatus,
    Field,
    FieldType,
    Recipient,
    RecipientRole,
    Signature,
    SignedField,
    SigningStatus,
    VoiceSignatureFieldMeta,
)
from voicesign.domain.models.user import SecurityAuditLogType, User

__all__ = [
    "TRANSITIONS",
    "Document",
    "DocumentAuditLog",
    "DocumentAuditLogType",
    "DocumentStatus",
    "Field",
    "FieldType",
    "ProcessingStatus",
    "Recipient",
    "RecipientRole",
    "SecurityAuditLogType",
    "Signature",
    "SignedField",
    "SigningStatus",
    "User",
    "VoiceEnrollment",
    "VoiceSignatureFieldMeta",
]
