"""Domain service settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class DomainServiceSettings(BaseSettings):
    """Domain service configuration settings."""

    model_config = SettingsConfigDict(
        env_prefix="VOICESIGN_SERVICE_",
        env_file=".env",
        extra="ignore",
    )

    # Verification settings
    verification_threshold: float = 0.5
    min_audio_bytes: int = 1000

    # Storage settings
    presign_ttl_seconds: int = 900
    temp_upload_folder: str = "temp-voice-enrollments"
    enrollment_upload_folder: str = "voice-enrollments"
    extracted_audio_folder: str = "voice-audio"
    scratch_prefix: str = "voice-enrollment-"

    # Background jobs: "direct" runs inline, "celery" sends to the worker
    job_backend: str = "direct"

    # Signing settings
    transcribe_missing_transcript: bool = True


settings = DomainServiceSettings()
