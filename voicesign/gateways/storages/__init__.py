from .factory import create_storage
from .gcs_storage import GCSStorage
from .local_storage import LocalStorage

__all__ = ["GCSStorage", "LocalStorage", "create_storage"]
