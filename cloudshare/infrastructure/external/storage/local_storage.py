"""Local filesystem storage with path validation and atomic writes."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import aiofiles
import aiofiles.os

from cloudshare.domain.entities.bundle import FileRecord
from cloudshare.domain.enums import ResourceKind, StorageBackendKind
from cloudshare.infrastructure.exceptions import (
    StorageDeleteError,
    StorageNotFoundError,
    StoragePermissionError,
    StorageUploadError,
)
from cloudshare.infrastructure.external.storage.protocol import (
    DownloadTarget,
    LocalFileTarget,
    StoredObject,
)
from cloudshare.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class LocalStorageService:
    """Local filesystem storage with atomic writes and path traversal protection.

    Paths are validated against storage_root. Writes use temp file + rename,
    so a partially copied file is never visible under its storage key.
    """

    CHUNK_SIZE = 64 * 1024  # 64KB

    kind = StorageBackendKind.LOCAL

    def __init__(self, storage_root: str | Path) -> None:
        """Initialize local storage.

        Args:
            storage_root: Base directory for all files.
        """
        self.storage_root = Path(storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True, mode=0o750)

    def _get_full_path(self, storage_key: str) -> Path:
        """Resolve and validate path under storage_root. Raises StoragePermissionError if traversal."""
        full_path = (self.storage_root / storage_key).resolve()
        try:
            full_path.relative_to(self.storage_root)
        except ValueError as e:
            raise StoragePermissionError(storage_key, "path_validation") from e
        if full_path == self.storage_root:
            raise StoragePermissionError(storage_key, "path_validation")
        return full_path

    async def upload(
        self,
        source: Path,
        storage_key: str,
        content_type: str,
        resource_kind: ResourceKind,
    ) -> StoredObject:
        """Copy source under storage_root/storage_key (atomic rename)."""
        try:
            target_path = self._get_full_path(storage_key)
            target_path.parent.mkdir(parents=True, exist_ok=True, mode=0o750)

            temp_fd, temp_path = tempfile.mkstemp(
                dir=target_path.parent,
                prefix=".tmp_",
                suffix=target_path.suffix,
            )
            os.close(temp_fd)
            try:
                async with aiofiles.open(source, "rb") as src, aiofiles.open(
                    temp_path, "wb"
                ) as dst:
                    while True:
                        chunk = await src.read(self.CHUNK_SIZE)
                        if not chunk:
                            break
                        await dst.write(chunk)
                os.chmod(temp_path, 0o640)
                os.replace(temp_path, target_path)
            finally:
                if Path(temp_path).exists():
                    os.unlink(temp_path)
        except StoragePermissionError:
            raise
        except Exception as e:
            raise StorageUploadError(storage_key, str(e)) from e

        logger.debug("Stored %s locally (%s)", storage_key, content_type)
        return StoredObject(backend=self.kind, storage_key=storage_key)

    async def resolve_download(self, file: FileRecord) -> DownloadTarget:
        """Serve from disk, or StorageNotFoundError if the file is gone."""
        file_path = self._get_full_path(file.storage_key)
        if not await aiofiles.os.path.isfile(file_path):
            raise StorageNotFoundError(file.storage_key)
        return LocalFileTarget(path=file_path)

    async def delete(self, file: FileRecord) -> bool:
        """Delete file and any now-empty parent directories. Returns True if deleted."""
        storage_key = file.storage_key
        try:
            file_path = self._get_full_path(storage_key)
            if not file_path.exists():
                return False
            await aiofiles.os.remove(file_path)
            parent = file_path.parent
            while parent != self.storage_root:
                try:
                    if not any(parent.iterdir()):
                        parent.rmdir()
                        parent = parent.parent
                    else:
                        break
                except OSError:
                    break
            return True
        except Exception as e:
            raise StorageDeleteError(storage_key, str(e)) from e
