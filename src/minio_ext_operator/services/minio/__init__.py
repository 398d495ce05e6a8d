from .base import StorageAdmin
from .client import MinioStorageAdmin

__all__ = ["StorageAdmin", "MinioStorageAdmin"]
