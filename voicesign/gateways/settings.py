"""Gateway settings."""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class SpeakerRecognitionSettings(BaseSettings):
    """Speaker recognition service settings.

    When no subscription key is configured the deterministic mock client is used.
    """

    model_config = SettingsConfigDict(
        env_prefix="VOICESIGN_SPEAKER_",
        env_file=".env",
        extra="ignore",
    )

    subscription_key: SecretStr | None = None
    region: str = "eastus"
    endpoint: str | None = None
    locale: str = "en-us"
    timeout: float = 30.0  # seconds
    min_audio_bytes: int = 1000
    mock_latency: float = 0.5  # seconds

    @property
    def base_url(self) -> str:
        if self.endpoint:
            return self.endpoint.rstrip("/")
        return (
            f"https://{self.region}.api.cognitive.microsoft.com"
            "/speaker/verification/v2.0"
        )

    @property
    def use_mock(self) -> bool:
        return self.subscription_key is None or not self.subscription_key.get_secret_value()


class StorageSettings(BaseSettings):
    """Object storage settings."""

    model_config = SettingsConfigDict(
        env_prefix="VOICESIGN_STORAGE_",
        env_file=".env",
        extra="ignore",
    )

    storage_type: str = "local"  # "local" or "gcs"
    gcs_bucket_name: str | None = None
    gcs_project_id: str | None = None
    local_base_path: str = "./data/storage"
    download_timeout: float = 60.0  # seconds


class WhisperSettings(BaseSettings):
    """faster-whisper transcription settings."""

    model_config = SettingsConfigDict(
        env_prefix="VOICESIGN_WHISPER_",
        env_file=".env",
        extra="ignore",
    )

    model_size: str = "base"
    device: str = "cpu"
    compute_type: str = "int8"
    language: str = "en"
    local_files_only: bool = False


class CelerySettings(BaseSettings):
    """Celery broker settings."""

    model_config = SettingsConfigDict(
        env_prefix="VOICESIGN_CELERY_",
        env_file=".env",
        extra="ignore",
    )

    broker_url: str = "redis://localhost:6379/0"
    result_backend: str = "redis://localhost:6379/0"
    task_default_queue: str = "voicesign"


speaker_settings = SpeakerRecognitionSettings()
storage_settings = StorageSettings()
whisper_settings = WhisperSettings()
celery_settings = CelerySettings()
