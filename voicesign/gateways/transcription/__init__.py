from .model_loader import get_whisper_model, load_whisper_model
from .whisper_transcriber import WhisperTranscriber

__all__ = ["WhisperTranscriber", "get_whisper_model", "load_whisper_model"]
