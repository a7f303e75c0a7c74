"""Tests for FieldSigningService."""

import base64
import json
from datetime import UTC, datetime
from pathlib import Path

import pytest
from sqlmodel import Session

from voicesign.database import SigningStore
from voicesign.database.exceptions import FieldNotFoundError, RecipientNotFoundError
from voicesign.database.models import DocumentModel, RecipientModel
from voicesign.domain.models import (
    Document,
    DocumentAuditLogType,
    DocumentStatus,
    FieldType,
    Recipient,
    RecipientRole,
    User,
)
from voicesign.domain_service import (
    DocumentNotPendingError,
    FieldAlreadyInsertedError,
    FieldSigningService,
    InvalidVoiceFieldError,
    MissingVoiceRecordingError,
    PhraseVerificationFailedError,
    RecipientAlreadySignedError,
)

PHRASE = "I agree to the terms and conditions"
AUDIO = b"\x1a\x45\xdf\xa3voice-signature"
VALUE = "data:audio/webm;base64," + base64.b64encode(AUDIO).decode()


class FakeTranscriber:
    def __init__(self, transcript: str) -> None:
        self.transcript = transcript
        self.calls: list[bytes] = []

    def transcribe(self, audio_bytes: bytes) -> str:
        self.calls.append(audio_bytes)
        return self.transcript


@pytest.fixture(name="document")
def document_fixture(signing_store: SigningStore, user: User) -> Document:
    return signing_store.create_document(user.id, "Service agreement")


@pytest.fixture(name="signer")
def signer_fixture(signing_store: SigningStore, document: Document) -> Recipient:
    return signing_store.add_recipient(
        document.id, "signer@example.com", token="signer-token", name="Sam Signer", signing_order=2
    )


@pytest.fixture(name="service")
def service_fixture(signing_store: SigningStore) -> FieldSigningService:
    return FieldSigningService(signing_store)


def _voice_field(
    signing_store: SigningStore,
    document: Document,
    recipient: Recipient,
    phrase: str | None = None,
    strict: bool = False,
) -> int:
    meta = {"type": "voiceSignature", "requiredPhrase": phrase, "strictMatching": strict}
    field = signing_store.add_field(document.id, FieldType.VOICE_SIGNATURE, recipient.id, meta)
    assert field.id is not None
    return field.id


def _metadata(transcript: str | None) -> str:
    return json.dumps({"duration": 4.2, "mimeType": "audio/webm", "transcript": transcript})


class TestPhraseVerification:
    """Tests for required-phrase checks during signing."""

    def test_strict_match_is_verified(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _voice_field(signing_store, document, signer, PHRASE, strict=True)

        signed = service.sign_voice_field(
            "signer-token", field_id, VALUE, _metadata("I agree to the terms and conditions.")
        )

        assert signed.field.inserted
        metadata = signed.signature.voice_signature_metadata
        assert metadata["isVerified"] is True
        assert metadata["requiredPhrase"] == PHRASE
        assert metadata["strictMatching"] is True
        assert metadata["duration"] == 4.2
        assert "verifiedAt" in metadata
        assert "missingWords" not in metadata
        assert signed.signature.voice_signature_url == VALUE
        assert (
            signed.signature.voice_signature_transcript == "I agree to the terms and conditions."
        )

    def test_strict_mismatch_is_rejected(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _voice_field(signing_store, document, signer, PHRASE, strict=True)

        with pytest.raises(PhraseVerificationFailedError) as exc_info:
            service.sign_voice_field("signer-token", field_id, VALUE, _metadata("I agree"))

        assert exc_info.value.missing_words == ["to", "the", "terms", "and", "conditions"]
        assert not signing_store.get_field(field_id).inserted
        assert signing_store.get_signature_for_field(field_id) is None
        assert signing_store.list_audit_logs(document.id) == []

    def test_lenient_mismatch_is_stored_unverified(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _voice_field(signing_store, document, signer, PHRASE)

        signed = service.sign_voice_field("signer-token", field_id, VALUE, _metadata("I agree"))

        metadata = signed.signature.voice_signature_metadata
        assert signed.field.inserted
        assert metadata["isVerified"] is False
        assert metadata["strictMatching"] is False
        assert "terms" in metadata["missingWords"]

    def test_no_required_phrase(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _voice_field(signing_store, document, signer)

        signed = service.sign_voice_field("signer-token", field_id, VALUE, _metadata(None))

        metadata = signed.signature.voice_signature_metadata
        assert "isVerified" not in metadata
        assert "requiredPhrase" not in metadata
        assert signed.signature.voice_signature_transcript is None


class TestServerTranscription:
    """Tests for transcribing audio when the client sent no transcript."""

    def test_transcribes_missing_transcript(
        self, signing_store: SigningStore, document: Document, signer: Recipient
    ) -> None:
        transcriber = FakeTranscriber("I agree to the terms and conditions")
        service = FieldSigningService(signing_store, transcriber=transcriber)
        field_id = _voice_field(signing_store, document, signer, PHRASE, strict=True)

        signed = service.sign_voice_field("signer-token", field_id, VALUE, _metadata(None))

        assert transcriber.calls == [AUDIO]
        assert signed.signature.voice_signature_metadata["isVerified"] is True
        assert signed.signature.voice_signature_transcript == PHRASE

    def test_client_transcript_wins(
        self, signing_store: SigningStore, document: Document, signer: Recipient
    ) -> None:
        transcriber = FakeTranscriber("something else")
        service = FieldSigningService(signing_store, transcriber=transcriber)
        field_id = _voice_field(signing_store, document, signer, PHRASE)

        service.sign_voice_field("signer-token", field_id, VALUE, _metadata(PHRASE))

        assert transcriber.calls == []

    def test_fallback_disabled(
        self, signing_store: SigningStore, document: Document, signer: Recipient
    ) -> None:
        transcriber = FakeTranscriber(PHRASE)
        service = FieldSigningService(
            signing_store, transcriber=transcriber, transcribe_missing=False
        )
        field_id = _voice_field(signing_store, document, signer, PHRASE, strict=True)

        with pytest.raises(PhraseVerificationFailedError):
            service.sign_voice_field("signer-token", field_id, VALUE, _metadata(None))

        assert transcriber.calls == []


class TestMetadataHandling:
    def test_malformed_metadata_is_tolerated(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _voice_field(signing_store, document, signer)

        signed = service.sign_voice_field("signer-token", field_id, VALUE, "{not json")

        assert signed.field.inserted
        assert signed.signature.voice_signature_metadata["metadataError"].startswith(
            "Invalid JSON"
        )

    def test_dict_metadata(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _voice_field(signing_store, document, signer, PHRASE)

        signed = service.sign_voice_field(
            "signer-token", field_id, VALUE, {"transcript": PHRASE, "duration": 3}
        )

        assert signed.signature.voice_signature_metadata["isVerified"] is True


class TestAuditLog:
    def test_signer_insert_is_logged(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _voice_field(signing_store, document, signer)

        signed = service.sign_voice_field("signer-token", field_id, VALUE)

        logs = signing_store.list_audit_logs(document.id)
        assert [log.type for log in logs] == [DocumentAuditLogType.DOCUMENT_FIELD_INSERTED]
        assert logs[0].data["fieldId"] == signed.field.secondary_id
        assert logs[0].data["recipientRole"] == "SIGNER"
        assert logs[0].data["field"] == {"type": "VOICE_SIGNATURE", "data": VALUE}

    def test_assistant_prefill_is_logged(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        signing_store.add_recipient(
            document.id,
            "assistant@example.com",
            token="assistant-token",
            role=RecipientRole.ASSISTANT,
            signing_order=1,
        )
        field_id = _voice_field(signing_store, document, signer)

        service.sign_voice_field("assistant-token", field_id, VALUE)

        logs = signing_store.list_audit_logs(document.id)
        assert [log.type for log in logs] == [DocumentAuditLogType.DOCUMENT_FIELD_PREFILLED]
        assert logs[0].email == "assistant@example.com"


class TestPreconditions:
    """Tests for signing preconditions."""

    def test_unknown_token(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _voice_field(signing_store, document, signer)

        with pytest.raises(RecipientNotFoundError):
            service.sign_voice_field("wrong-token", field_id, VALUE)

    def test_unknown_field(self, service: FieldSigningService, signer: Recipient) -> None:
        with pytest.raises(FieldNotFoundError):
            service.sign_voice_field("signer-token", 999, VALUE)

    def test_missing_recording(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _voice_field(signing_store, document, signer)

        with pytest.raises(MissingVoiceRecordingError):
            service.sign_voice_field("signer-token", field_id, "   ")

    def test_non_base64_value_is_rejected(
        self,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
        tmp_path: Path,
    ) -> None:
        secret = tmp_path / "server_secret.txt"
        secret.write_bytes(b"SERVER-ONLY-SECRET")
        transcriber = FakeTranscriber(PHRASE)
        service = FieldSigningService(signing_store, transcriber=transcriber)
        field_id = _voice_field(signing_store, document, signer, PHRASE, strict=True)

        with pytest.raises(MissingVoiceRecordingError):
            service.sign_voice_field("signer-token", field_id, str(secret), is_base64=False)

        assert transcriber.calls == []
        assert not signing_store.get_field(field_id).inserted
        assert signing_store.get_signature_for_field(field_id) is None

    def test_already_inserted(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _voice_field(signing_store, document, signer)
        service.sign_voice_field("signer-token", field_id, VALUE)

        with pytest.raises(FieldAlreadyInsertedError):
            service.sign_voice_field("signer-token", field_id, VALUE)

    def test_not_a_voice_field(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field = signing_store.add_field(document.id, FieldType.SIGNATURE, signer.id)

        with pytest.raises(InvalidVoiceFieldError):
            service.sign_voice_field("signer-token", field.id, VALUE)

    def test_recipient_already_signed(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        session: Session,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _voice_field(signing_store, document, signer)
        model = session.get(RecipientModel, signer.id)
        model.signing_status = "SIGNED"
        session.add(model)
        session.commit()

        with pytest.raises(RecipientAlreadySignedError):
            service.sign_voice_field("signer-token", field_id, VALUE)

    def test_draft_document(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        user: User,
    ) -> None:
        draft = signing_store.create_document(user.id, "Draft", status=DocumentStatus.DRAFT)
        recipient = signing_store.add_recipient(draft.id, "d@example.com", token="draft-token")
        field_id = _voice_field(signing_store, draft, recipient)

        with pytest.raises(DocumentNotPendingError):
            service.sign_voice_field("draft-token", field_id, VALUE)

    def test_deleted_document(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        session: Session,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _voice_field(signing_store, document, signer)
        model = session.get(DocumentModel, document.id)
        model.deleted_at = datetime.now(UTC)
        session.add(model)
        session.commit()

        with pytest.raises(DocumentNotPendingError):
            service.sign_voice_field("signer-token", field_id, VALUE)


class TestTranscriptDiagnostics:
    def test_reports_stored_transcript(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _voice_field(signing_store, document, signer)
        long_transcript = "word " * 20
        service.sign_voice_field("signer-token", field_id, VALUE, _metadata(long_transcript))

        report = service.transcript_diagnostics(field_id)

        assert report["field"] == {"id": field_id, "type": "VOICE_SIGNATURE", "inserted": True}
        assert report["signatureExists"]
        assert report["hasVoiceData"]
        assert report["hasTranscript"]
        assert report["metadata"]["transcriptLength"] == len(long_transcript)
        assert report["metadata"]["transcriptPreview"] == long_transcript[:50] + "..."
        assert report["metadata"]["duration"] == 4.2

    def test_unsigned_field(
        self,
        service: FieldSigningService,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _voice_field(signing_store, document, signer)

        report = service.transcript_diagnostics(field_id)

        assert not report["signatureExists"]
        assert not report["hasMetadata"]
        assert report["transcriptValue"] is None
