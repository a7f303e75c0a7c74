from voicesign.domain.protocols.storage import StorageProtocol
from voicesign.gateways.settings import StorageSettings

from .gcs_storage import GCSStorage
from .local_storage import LocalStorage


def create_storage(settings: StorageSettings) -> StorageProtocol:
    """Create the configured storage backend."""
    if settings.storage_type == "gcs":
        if not settings.gcs_bucket_name:
            raise ValueError(
                "VOICESIGN_STORAGE_GCS_BUCKET_NAME must be set when storage_type is 'gcs'"
            )
        if not settings.gcs_project_id:
            raise ValueError(
                "VOICESIGN_STORAGE_GCS_PROJECT_ID must be set when storage_type is 'gcs'"
            )
        return GCSStorage(
            bucket_name=settings.gcs_bucket_name,
            project_id=settings.gcs_project_id,
        )
    return LocalStorage(base_path=settings.local_base_path)
