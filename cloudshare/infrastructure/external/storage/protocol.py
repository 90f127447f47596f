"""Storage backend protocol (DIP). Implementations: LocalStorageService, S3StorageService."""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from cloudshare.domain.entities.bundle import FileRecord
from cloudshare.domain.enums import ResourceKind, StorageBackendKind


@dataclass(frozen=True)
class StoredObject:
    """Backend reference returned by a successful upload."""

    backend: StorageBackendKind
    storage_key: str
    remote_object_id: str | None = None
    url: str | None = None


@dataclass(frozen=True)
class RedirectTarget:
    """Send the client elsewhere (backend URL that forces an attachment)."""

    url: str


@dataclass(frozen=True)
class ProxyTarget:
    """Stream bytes from this upstream URL through the service."""

    url: str


@dataclass(frozen=True)
class LocalFileTarget:
    """Serve bytes straight from local disk."""

    path: Path


DownloadTarget = RedirectTarget | ProxyTarget | LocalFileTarget


class StorageProtocol(Protocol):
    """Protocol for file storage backends (local disk, S3-compatible)."""

    kind: StorageBackendKind

    async def upload(
        self,
        source: Path,
        storage_key: str,
        content_type: str,
        resource_kind: ResourceKind,
    ) -> StoredObject:
        """Copy an ingested file into the backend under storage_key."""
        ...

    async def resolve_download(self, file: FileRecord) -> DownloadTarget:
        """Return where the bytes for file can be fetched from."""
        ...

    async def delete(self, file: FileRecord) -> bool:
        """Delete file. Returns True if deleted, False if not found."""
        ...
