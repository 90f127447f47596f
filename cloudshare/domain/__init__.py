"""Domain layer: entities, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from cloudshare.domain.entities import BundleRecord, FileRecord
from cloudshare.domain.enums import (
    BundleState,
    ResourceKind,
    StorageBackendKind,
    StoreMode,
)
from cloudshare.domain.exceptions import (
    BundleNotFoundException,
    CloudShareException,
    DownloadFailedException,
    FileNotAvailableException,
    FileNotFoundException,
    StorageDegradedException,
    UploadFailedException,
    ValidationException,
)

__all__ = [
    "BundleNotFoundException",
    "BundleRecord",
    "BundleState",
    "CloudShareException",
    "DownloadFailedException",
    "FileNotAvailableException",
    "FileNotFoundException",
    "FileRecord",
    "ResourceKind",
    "StorageBackendKind",
    "StorageDegradedException",
    "StoreMode",
    "UploadFailedException",
    "ValidationException",
]
