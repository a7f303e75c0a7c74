"""Voice signature field signing workflow."""

import logging
from datetime import UTC, datetime
from typing import Any

from voicesign.domain.audio_data import decode_audio_data
from voicesign.domain.models import (
    DocumentAuditLogType,
    DocumentStatus,
    Field,
    FieldType,
    Recipient,
    RecipientRole,
    SignedField,
    SigningStatus,
    VoiceSignatureFieldMeta,
)
from voicesign.domain.protocols import (
    SigningStoreProtocol,
    TranscriberProtocol,
)
from voicesign.domain.signature_metadata import decode_signature_metadata
from voicesign.domain.transcript_matching import match_transcript
from voicesign.gateways.exceptions import GatewayError

from .exceptions import (
    DocumentNotPendingError,
    FieldAlreadyInsertedError,
    InvalidVoiceFieldError,
    MissingVoiceRecordingError,
    PhraseVerificationFailedError,
    RecipientAlreadySignedError,
)
from .settings import settings

logger = logging.getLogger(__name__)


class FieldSigningService:
    """Service for inserting voice signature fields."""

    def __init__(
        self,
        signing_store: SigningStoreProtocol,
        transcriber: TranscriberProtocol | None = None,
        transcribe_missing: bool = settings.transcribe_missing_transcript,
    ) -> None:
        """Initialize field signing service.

        Args:
            signing_store: Store for documents, fields and signatures.
            transcriber: Speech-to-text used when no transcript was submitted.
            transcribe_missing: Enable the server-side transcription fallback.
        """
        self.signing_store = signing_store
        self.transcriber = transcriber
        self.transcribe_missing = transcribe_missing

    def _check_preconditions(self, recipient: Recipient, field: Field) -> None:
        document = self.signing_store.get_document(field.document_id)
        if document.deleted_at is not None:
            raise DocumentNotPendingError(f"Document {document.id} has been deleted")
        if document.status != DocumentStatus.PENDING:
            raise DocumentNotPendingError(f"Document {document.id} must be pending for signing")
        if recipient.signing_status == SigningStatus.SIGNED:
            raise RecipientAlreadySignedError(f"Recipient {recipient.id} has already signed")
        if field.inserted:
            raise FieldAlreadyInsertedError(f"Field {field.id} has already been inserted")
        if field.type != FieldType.VOICE_SIGNATURE:
            raise InvalidVoiceFieldError(f"Field {field.id} is not a voice signature field")

    def _transcribe(self, value: str) -> str:
        if self.transcriber is None:
            return ""
        try:
            return self.transcriber.transcribe(decode_audio_data(value))
        except (ValueError, GatewayError) as e:
            logger.warning(f"Server-side transcription failed: {e}")
            return ""

    def sign_voice_field(
        self,
        token: str,
        field_id: int,
        value: str,
        metadata: str | dict[str, Any] | None = None,
        is_base64: bool = True,
    ) -> SignedField:
        """Insert a voice signature into a field.

        Args:
            token: Recipient signing token.
            field_id: Field to sign.
            value: Base64 audio, optionally as a data URL.
            metadata: JSON metadata sent by the recorder; malformed input is tolerated.
            is_base64: Must be True; other recording references are rejected.

        Returns:
            The inserted field with its signature.

        Raises:
            RecipientNotFoundError: If the token is unknown.
            FieldNotFoundError: If the recipient cannot fill the field.
            SigningError: If a signing precondition fails, or the transcript does
                not match a required phrase under strict matching.
        """
        recipient = self.signing_store.get_recipient_by_token(token)
        field = self.signing_store.get_signable_field(field_id, recipient)
        self._check_preconditions(recipient, field)
        if not is_base64 or not value or not value.strip():
            raise MissingVoiceRecordingError("Voice signature field must have a voice recording")

        decoded = decode_signature_metadata(metadata)
        policy = VoiceSignatureFieldMeta.from_field_meta(field.field_meta)

        transcript = decoded.metadata.transcript
        if policy.required_phrase and not transcript and self.transcribe_missing:
            logger.info(f"No transcript submitted for field {field_id}, transcribing")
            transcript = self._transcribe(value)

        update: dict[str, Any] = {"transcript": transcript or None}
        if decoded.error:
            update["metadata_error"] = decoded.error
        if policy.required_phrase:
            match = match_transcript(transcript, policy.required_phrase, policy.strict_matching)
            if not match.matched and policy.strict_matching:
                raise PhraseVerificationFailedError(
                    "Spoken phrase does not match the required phrase",
                    missing_words=match.missing_words,
                )
            if not match.matched:
                logger.warning(
                    f"Field {field_id}: transcript does not match required phrase, "
                    f"missing {match.missing_words}"
                )
            update.update(
                required_phrase=policy.required_phrase,
                strict_matching=policy.strict_matching,
                is_verified=match.matched,
                verified_at=datetime.now(UTC),
                missing_words=match.missing_words or None,
            )
        stored_metadata = decoded.metadata.model_copy(update=update).to_storage()

        is_prefill = recipient.role == RecipientRole.ASSISTANT and field.recipient_id != recipient.id
        audit_type = (
            DocumentAuditLogType.DOCUMENT_FIELD_PREFILLED
            if is_prefill
            else DocumentAuditLogType.DOCUMENT_FIELD_INSERTED
        )
        audit_data = {
            "recipientEmail": recipient.email,
            "recipientId": recipient.id,
            "recipientName": recipient.name,
            "recipientRole": recipient.role.value,
            "fieldId": field.secondary_id,
            "field": {"type": field.type.value, "data": value},
        }

        assert field.id is not None
        signed = self.signing_store.insert_voice_signature(
            field.id,
            recipient,
            voice_signature_url=value,
            transcript=transcript or None,
            metadata=stored_metadata,
            audit_type=audit_type,
            audit_data=audit_data,
        )
        logger.info(f"Voice signature stored for field {field_id} by recipient {recipient.id}")
        return signed

    def transcript_diagnostics(self, field_id: int) -> dict[str, Any]:
        """Report what was stored for a voice signature, without the audio."""
        field = self.signing_store.get_field(field_id)
        signature = self.signing_store.get_signature_for_field(field_id)
        metadata = signature.voice_signature_metadata if signature else None
        transcript_meta = metadata.get("transcript") if isinstance(metadata, dict) else None

        preview = None
        if isinstance(transcript_meta, str) and transcript_meta:
            preview = transcript_meta[:50] + ("..." if len(transcript_meta) > 50 else "")

        return {
            "field": {
                "id": field.id,
                "type": field.type.value,
                "inserted": field.inserted,
            },
            "signatureExists": signature is not None,
            "hasVoiceData": bool(signature and signature.voice_signature_url),
            "hasTranscript": bool(signature and signature.voice_signature_transcript),
            "hasMetadata": metadata is not None,
            "transcriptValue": signature.voice_signature_transcript if signature else None,
            "metadata": {
                "hasTranscriptInMetadata": bool(transcript_meta),
                "transcriptLength": len(transcript_meta) if isinstance(transcript_meta, str) else 0,
                "transcriptPreview": preview,
                "duration": metadata.get("duration") if isinstance(metadata, dict) else None,
            },
        }
