"""Storage service factory: creates local or S3 backend from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from cloudshare.domain.enums import StorageBackendKind
from cloudshare.infrastructure.external.storage.protocol import StorageProtocol

if TYPE_CHECKING:
    from cloudshare.core.config import Settings


class StorageFactory:
    """Factory for storage service instances based on configuration."""

    @staticmethod
    def create_storage_service(settings: "Settings | None" = None) -> StorageProtocol:
        """Create the backend new uploads are written to.

        Args:
            settings: Application settings; if None, uses get_settings().

        Returns:
            LocalStorageService or S3StorageService.

        Raises:
            ValueError: Unknown backend or missing required config.
        """
        from cloudshare.core.config import get_settings

        s = settings or get_settings()
        backend = s.storage_backend.lower()

        if backend == "local":
            return StorageFactory._create_local(s)
        if backend == "s3":
            if not s.s3_bucket:
                raise ValueError("S3_BUCKET required for s3 backend")
            from cloudshare.infrastructure.external.storage.s3_storage import (
                S3StorageService,
            )

            return S3StorageService(
                bucket=s.s3_bucket,
                region=s.s3_region,
                endpoint_url=s.s3_endpoint_url,
                access_key=s.s3_access_key,
                secret_key=(
                    s.s3_secret_key.get_secret_value() if s.s3_secret_key else None
                ),
                key_prefix=s.s3_key_prefix,
                url_ttl_seconds=s.presigned_url_ttl_seconds,
            )
        raise ValueError(
            f"Unknown storage backend: {backend}. Supported: 'local', 's3'"
        )

    @staticmethod
    def create_backends(
        settings: "Settings | None" = None,
        upload_backend: StorageProtocol | None = None,
    ) -> dict[StorageBackendKind, StorageProtocol]:
        """Build the registry used to serve and delete stored files.

        Contains the upload backend plus the local backend, which is always
        registered so records written before a backend switch stay servable.
        """
        from cloudshare.core.config import get_settings

        s = settings or get_settings()
        primary = upload_backend or StorageFactory.create_storage_service(s)
        backends: dict[StorageBackendKind, StorageProtocol] = {primary.kind: primary}
        if StorageBackendKind.LOCAL not in backends:
            backends[StorageBackendKind.LOCAL] = StorageFactory._create_local(s)
        return backends

    @staticmethod
    def _create_local(s: "Settings") -> StorageProtocol:
        from cloudshare.infrastructure.external.storage.local_storage import (
            LocalStorageService,
        )

        if not s.storage_root:
            raise ValueError("STORAGE_ROOT required for local backend")
        return LocalStorageService(storage_root=s.storage_root)
