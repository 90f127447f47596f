"""Storage: local filesystem and S3-compatible backends.

Factory creates backends from cloudshare.core.config. Implementations are
loaded lazily inside StorageFactory so boto3 is only imported when the s3
backend is configured.

Implementations implement StorageProtocol (upload, resolve_download, delete).
"""

from cloudshare.infrastructure.external.storage.factory import StorageFactory
from cloudshare.infrastructure.external.storage.protocol import (
    DownloadTarget,
    LocalFileTarget,
    ProxyTarget,
    RedirectTarget,
    StorageProtocol,
    StoredObject,
)

__all__ = [
    "DownloadTarget",
    "LocalFileTarget",
    "ProxyTarget",
    "RedirectTarget",
    "StorageFactory",
    "StorageProtocol",
    "StoredObject",
]
