"""Tests for voice signing, transcription and transcript diagnostics endpoints."""

import base64
import json

import pytest
from fastapi.testclient import TestClient

from voicesign.database import SigningStore
from voicesign.domain.models import Document, FieldType, Recipient, User

PHRASE = "I agree to the terms and conditions"
VALUE = "data:audio/webm;base64," + base64.b64encode(b"\x1a\x45\xdf\xa3voice").decode()


@pytest.fixture(name="document")
def document_fixture(signing_store: SigningStore, user: User) -> Document:
    return signing_store.create_document(user.id, "Service agreement")


@pytest.fixture(name="signer")
def signer_fixture(signing_store: SigningStore, document: Document) -> Recipient:
    return signing_store.add_recipient(document.id, "signer@example.com", token="signer-token")


def _field(
    signing_store: SigningStore, document: Document, signer: Recipient, strict: bool = True
) -> int:
    field = signing_store.add_field(
        document.id,
        FieldType.VOICE_SIGNATURE,
        signer.id,
        {"type": "voiceSignature", "requiredPhrase": PHRASE, "strictMatching": strict},
    )
    assert field.id is not None
    return field.id


def _sign(client: TestClient, field_id: int, transcript: str | None, token: str = "signer-token"):
    return client.post(
        "/api/fields/sign-voice",
        json={
            "token": token,
            "fieldId": field_id,
            "value": VALUE,
            "metadata": json.dumps({"duration": 3.5, "transcript": transcript}),
            "isBase64": True,
        },
    )


class TestSignVoiceField:
    """Tests for POST /api/fields/sign-voice."""

    def test_signs_field(
        self,
        client: TestClient,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _field(signing_store, document, signer)

        response = _sign(client, field_id, PHRASE)

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == field_id
        assert data["inserted"] is True
        assert data["type"] == "VOICE_SIGNATURE"
        assert data["signature"]["voiceSignatureUrl"] == VALUE
        assert data["signature"]["voiceSignatureTranscript"] == PHRASE
        assert data["signature"]["voiceSignatureMetadata"]["isVerified"] is True

    def test_phrase_mismatch(
        self,
        client: TestClient,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _field(signing_store, document, signer)

        response = _sign(client, field_id, "I agree to the terms")

        assert response.status_code == 422
        assert response.json()["missingWords"] == ["and", "conditions"]
        assert not signing_store.get_field(field_id).inserted

    def test_server_transcribes_when_transcript_missing(
        self,
        client: TestClient,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
        transcriber,
    ) -> None:
        field_id = _field(signing_store, document, signer)

        response = _sign(client, field_id, None)

        assert response.status_code == 200
        assert len(transcriber.calls) == 1
        assert response.json()["signature"]["voiceSignatureTranscript"] == PHRASE

    def test_unknown_token(
        self,
        client: TestClient,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _field(signing_store, document, signer)

        response = _sign(client, field_id, PHRASE, token="bogus")

        assert response.status_code == 404

    def test_already_inserted(
        self,
        client: TestClient,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _field(signing_store, document, signer)
        _sign(client, field_id, PHRASE)

        response = _sign(client, field_id, PHRASE)

        assert response.status_code == 409

    def test_missing_recording(
        self,
        client: TestClient,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
    ) -> None:
        field_id = _field(signing_store, document, signer)

        response = client.post(
            "/api/fields/sign-voice",
            json={"token": "signer-token", "fieldId": field_id, "value": ""},
        )

        assert response.status_code == 400

    def test_non_base64_value_is_rejected(
        self,
        client: TestClient,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
        transcriber,
    ) -> None:
        field_id = _field(signing_store, document, signer)

        response = client.post(
            "/api/fields/sign-voice",
            json={
                "token": "signer-token",
                "fieldId": field_id,
                "value": "http://169.254.169.254/latest/meta-data",
                "isBase64": False,
            },
        )

        assert response.status_code == 400
        assert transcriber.calls == []
        assert not signing_store.get_field(field_id).inserted


class TestTranscription:
    """Tests for POST /api/voice-transcription."""

    def test_transcribes_audio(self, client: TestClient, user: User, transcriber) -> None:
        response = client.post(
            "/api/voice-transcription",
            headers={"X-User-Id": str(user.id)},
            files={"audio": ("clip.webm", b"\x1a\x45\xdf\xa3clip", "audio/webm")},
        )

        assert response.status_code == 200
        assert response.json() == {"transcript": PHRASE}
        assert transcriber.calls == [b"\x1a\x45\xdf\xa3clip"]

    def test_rejects_non_audio(self, client: TestClient, user: User) -> None:
        response = client.post(
            "/api/voice-transcription",
            headers={"X-User-Id": str(user.id)},
            files={"audio": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Uploaded file must be an audio recording"

    def test_missing_audio(self, client: TestClient, user: User) -> None:
        response = client.post(
            "/api/voice-transcription", headers={"X-User-Id": str(user.id)}, data={}
        )

        assert response.status_code == 400


class TestTranscriptCheck:
    def test_reports_signed_field(
        self,
        client: TestClient,
        signing_store: SigningStore,
        document: Document,
        signer: Recipient,
        user: User,
    ) -> None:
        field_id = _field(signing_store, document, signer)
        _sign(client, field_id, PHRASE)

        response = client.post(
            "/api/debug/voice-transcript-check",
            headers={"X-User-Id": str(user.id)},
            json={"fieldId": field_id},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["signatureExists"] is True
        assert data["hasTranscript"] is True
        assert data["transcriptValue"] == PHRASE
        assert data["metadata"]["duration"] == 3.5

    def test_unknown_field(self, client: TestClient, user: User) -> None:
        response = client.post(
            "/api/debug/voice-transcript-check",
            headers={"X-User-Id": str(user.id)},
            json={"fieldId": 999},
        )

        assert response.status_code == 404
