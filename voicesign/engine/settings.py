"""Engine settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Audio transcoding settings."""

    model_config = SettingsConfigDict(
        env_prefix="VOICESIGN_ENGINE_",
        env_file=".env",
        extra="ignore",
    )

    # Speaker recognition requires 16 kHz mono 16-bit PCM
    target_sample_rate: int = 16000
    target_layout: str = "mono"
    output_codec: str = "pcm_s16le"
    output_format: str = "wav"

    # Peak level (0.0-1.0) under which a recording is logged as silent
    silence_peak_threshold: float = 0.01


settings = EngineSettings()
