"""Tests for the deterministic speaker recognition client."""

import pytest

from voicesign.gateways.exceptions import AudioTooSmallError
from voicesign.gateways.settings import SpeakerRecognitionSettings
from voicesign.gateways.speaker_recognition import (
    HttpSpeakerRecognitionClient,
    MockSpeakerRecognitionClient,
    create_speaker_recognition_client,
)


class TestMockSpeakerRecognitionClient:
    def test_profile_ids_are_deterministic(self) -> None:
        settings = SpeakerRecognitionSettings(mock_latency=0.0)
        first = MockSpeakerRecognitionClient(settings)
        second = MockSpeakerRecognitionClient(settings)

        assert first.create_profile() == second.create_profile()
        assert first.create_profile() != first.create_profile()

    def test_create_voice_profile_is_enrolled(
        self, speaker_client: MockSpeakerRecognitionClient, wav_audio: bytes
    ) -> None:
        enrollment = speaker_client.create_voice_profile(wav_audio)

        assert enrollment.is_enrolled

    def test_small_buffer_rejected(self, speaker_client: MockSpeakerRecognitionClient) -> None:
        with pytest.raises(AudioTooSmallError):
            speaker_client.create_voice_profile(b"\x00" * 500)

    def test_verify_accepts(
        self, speaker_client: MockSpeakerRecognitionClient, wav_audio: bytes
    ) -> None:
        profile_id = speaker_client.create_voice_profile(wav_audio).profile_id

        outcome = speaker_client.verify(profile_id, wav_audio)

        assert outcome.accepted
        assert outcome.score == pytest.approx(0.9)

    def test_deleted_profile_is_gone(
        self, speaker_client: MockSpeakerRecognitionClient, wav_audio: bytes
    ) -> None:
        profile_id = speaker_client.create_voice_profile(wav_audio).profile_id

        assert speaker_client.delete_profile(profile_id)
        assert not speaker_client.check_profile_exists(profile_id).exists
        assert not speaker_client.verify(profile_id, wav_audio).accepted


class TestFactory:
    def test_mock_without_key(self) -> None:
        client = create_speaker_recognition_client(SpeakerRecognitionSettings())

        assert isinstance(client, MockSpeakerRecognitionClient)

    def test_http_with_key(self) -> None:
        client = create_speaker_recognition_client(
            SpeakerRecognitionSettings(subscription_key="key")
        )

        assert isinstance(client, HttpSpeakerRecognitionClient)
