"""Tests for the faster-whisper transcriber and model loader."""

from types import SimpleNamespace
from unittest.mock import Mock, patch

import pytest

from voicesign.gateways.exceptions import TranscriptionError
from voicesign.gateways.transcription import WhisperTranscriber, model_loader


@pytest.fixture(name="model")
def model_fixture() -> Mock:
    model = Mock()
    model.transcribe.return_value = (
        iter([SimpleNamespace(text=" I agree"), SimpleNamespace(text=" to the terms. ")]),
        SimpleNamespace(language="en"),
    )
    return model


class TestWhisperTranscriber:
    def test_joins_segments(self, model: Mock, wav_audio: bytes) -> None:
        transcriber = WhisperTranscriber(model, language="en")

        text = transcriber.transcribe(wav_audio)

        assert text == "I agree to the terms."
        path = model.transcribe.call_args.args[0]
        assert path.endswith(".wav")
        assert model.transcribe.call_args.kwargs["language"] == "en"

    def test_undecodable_audio(self, model: Mock) -> None:
        with pytest.raises(TranscriptionError):
            WhisperTranscriber(model).transcribe(b"not audio at all")

        model.transcribe.assert_not_called()

    def test_model_failure(self, model: Mock, wav_audio: bytes) -> None:
        model.transcribe.side_effect = RuntimeError("CUDA out of memory")

        with pytest.raises(TranscriptionError, match="Transcription failed"):
            WhisperTranscriber(model).transcribe(wav_audio)


class TestModelLoader:
    def test_loads_once(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(model_loader, "_whisper_model", None)

        with patch("voicesign.gateways.transcription.model_loader.WhisperModel") as mock_cls:
            first = model_loader.get_whisper_model()
            second = model_loader.get_whisper_model()

        assert first is second
        mock_cls.assert_called_once()
