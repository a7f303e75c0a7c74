from datetime import datetime
from typing import Any

from pydantic import Field as SchemaField

from voicesign.domain.models import FieldType, SignedField

from ._base import CamelModel


class SignVoiceFieldRequest(CamelModel):
    """Voice signature submission for one field."""

    token: str = SchemaField(..., description="Recipient signing token", min_length=1)
    field_id: int = SchemaField(..., description="Field ID")
    value: str = SchemaField(..., description="Voice recording as Base64 or a Base64 data URL")
    metadata: str | dict[str, Any] | None = SchemaField(
        None,
        description="Recorder metadata as a JSON string or object",
    )
    is_base64: bool = True


class SignatureResponse(CamelModel):
    id: int
    recipient_id: int
    voice_signature_url: str | None = None
    voice_signature_transcript: str | None = None
    voice_signature_metadata: dict[str, Any] | None = None
    voice_signature_created_at: datetime | None = None


class SignedFieldResponse(CamelModel):
    """Inserted field with its attached signature."""

    id: int
    secondary_id: str
    document_id: int
    recipient_id: int | None = None
    type: FieldType
    inserted: bool
    custom_text: str = ""
    signature: SignatureResponse

    @classmethod
    def from_domain(cls, signed: SignedField) -> "SignedFieldResponse":
        field, signature = signed.field, signed.signature
        assert field.id is not None and signature.id is not None
        return cls(
            id=field.id,
            secondary_id=field.secondary_id,
            document_id=field.document_id,
            recipient_id=field.recipient_id,
            type=field.type,
            inserted=field.inserted,
            custom_text=field.custom_text,
            signature=SignatureResponse(
                id=signature.id,
                recipient_id=signature.recipient_id,
                voice_signature_url=signature.voice_signature_url,
                voice_signature_transcript=signature.voice_signature_transcript,
                voice_signature_metadata=signature.voice_signature_metadata,
                voice_signature_created_at=signature.voice_signature_created_at,
            ),
        )


class TranscriptCheckRequest(CamelModel):
    field_id: int


class TranscriptionResponse(CamelModel):
    transcript: str
