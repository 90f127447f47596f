"""S3-compatible object storage (AWS S3, MinIO, etc.) with presigned URLs."""

from __future__ import annotations

import asyncio
from pathlib import Path
from urllib.parse import quote

import boto3
from botocore.exceptions import ClientError

from cloudshare.domain.entities.bundle import FileRecord
from cloudshare.domain.enums import ResourceKind, StorageBackendKind
from cloudshare.infrastructure.exceptions import (
    StorageDeleteError,
    StorageDownloadError,
    StorageNotFoundError,
    StorageUploadError,
)
from cloudshare.infrastructure.external.storage.protocol import (
    DownloadTarget,
    ProxyTarget,
    RedirectTarget,
    StoredObject,
)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


class S3StorageService:
    """S3-compatible storage with presigned URLs.

    Uses boto3 (sync) via asyncio.to_thread for async API. Compatible with
    AWS S3, MinIO, DigitalOcean Spaces. Uploads go through the managed
    transfer (multipart above the SDK threshold).

    Raw objects are proxied from a presigned GET; transformable objects are
    redirected to a presigned GET that overrides Content-Disposition so the
    browser saves them under the original name.
    """

    kind = StorageBackendKind.REMOTE

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        key_prefix: str = "cloudshare",
        url_ttl_seconds: int = 3600,
        client=None,
    ) -> None:
        """Initialize S3 client.

        Args:
            bucket: Bucket name.
            region: AWS region.
            endpoint_url: Custom endpoint (MinIO/Spaces).
            access_key: Optional; uses env/IAM if not set.
            secret_key: Optional.
            key_prefix: Folder all object keys live under.
            url_ttl_seconds: Lifetime of presigned URLs.
            client: Pre-built boto3 client (tests).
        """
        self.bucket = bucket
        self.region = region
        self.key_prefix = key_prefix.strip("/")
        self.url_ttl_seconds = url_ttl_seconds
        if client is None:
            extra = {} if endpoint_url is None else {"endpoint_url": endpoint_url}
            client = boto3.client(
                "s3",
                region_name=region,
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                **extra,
            )
        self._client = client

    def object_key(self, storage_key: str) -> str:
        return f"{self.key_prefix}/{storage_key}" if self.key_prefix else storage_key

    async def upload(
        self,
        source: Path,
        storage_key: str,
        content_type: str,
        resource_kind: ResourceKind,
    ) -> StoredObject:
        """Upload source under <prefix>/<storage_key>."""
        key = self.object_key(storage_key)

        def _upload() -> None:
            self._client.upload_file(
                str(source),
                self.bucket,
                key,
                ExtraArgs={
                    "ContentType": content_type,
                    "Metadata": {"resource-kind": resource_kind.value},
                },
            )

        try:
            await asyncio.to_thread(_upload)
        except Exception as e:
            raise StorageUploadError(key, str(e)) from e
        return StoredObject(
            backend=self.kind,
            storage_key=storage_key,
            remote_object_id=key,
            url=f"s3://{self.bucket}/{key}",
        )

    async def resolve_download(self, file: FileRecord) -> DownloadTarget:
        """Return a proxy or redirect target at a presigned GET URL."""
        key = file.remote_object_id or self.object_key(file.storage_key)
        params = {"Bucket": self.bucket, "Key": key}
        if file.resource_kind == ResourceKind.TRANSFORMABLE:
            params["ResponseContentDisposition"] = (
                f"attachment; filename*=UTF-8''{quote(file.original_name, safe='')}"
            )

        def _presign() -> str:
            try:
                self._client.head_object(Bucket=self.bucket, Key=key)
            except ClientError as e:
                if e.response["Error"]["Code"] in _MISSING_CODES:
                    raise StorageNotFoundError(key) from e
                raise StorageDownloadError(key, str(e)) from e
            return self._client.generate_presigned_url(
                "get_object",
                Params=params,
                ExpiresIn=self.url_ttl_seconds,
            )

        try:
            url = await asyncio.to_thread(_presign)
        except (StorageNotFoundError, StorageDownloadError):
            raise
        except Exception as e:
            raise StorageDownloadError(key, str(e)) from e

        if file.resource_kind == ResourceKind.TRANSFORMABLE:
            return RedirectTarget(url=url)
        return ProxyTarget(url=url)

    async def delete(self, file: FileRecord) -> bool:
        """Delete object. Returns True if deleted."""
        key = file.remote_object_id or self.object_key(file.storage_key)

        def _delete() -> bool:
            try:
                self._client.head_object(Bucket=self.bucket, Key=key)
            except ClientError as e:
                if e.response["Error"]["Code"] in _MISSING_CODES:
                    return False
                raise StorageDeleteError(key, str(e)) from e
            self._client.delete_object(Bucket=self.bucket, Key=key)
            return True

        try:
            return await asyncio.to_thread(_delete)
        except StorageDeleteError:
            raise
        except Exception as e:
            raise StorageDeleteError(key, str(e)) from e
