"""Whisper model loading."""

import logging

from faster_whisper import WhisperModel

from voicesign.gateways.settings import whisper_settings

logger = logging.getLogger(__name__)

# Singleton model instance
_whisper_model: WhisperModel | None = None


def get_whisper_model() -> WhisperModel:
    """Get the Whisper model, loading it on first use.

    Returns:
        WhisperModel: Loaded model instance
    """
    if _whisper_model is None:
        load_whisper_model()
    assert _whisper_model is not None
    return _whisper_model


def load_whisper_model() -> None:
    """Load the Whisper model.

    Called at API or worker startup so the first signing request does not
    pay the model load time.
    """
    global _whisper_model

    logger.info(
        f"Loading Whisper model: {whisper_settings.model_size} "
        f"(device={whisper_settings.device}, "
        f"compute_type={whisper_settings.compute_type}, "
        f"local_files_only={whisper_settings.local_files_only})"
    )

    _whisper_model = WhisperModel(
        whisper_settings.model_size,
        device=whisper_settings.device,
        compute_type=whisper_settings.compute_type,
        local_files_only=whisper_settings.local_files_only,
    )

    logger.info("Whisper model loaded successfully")
