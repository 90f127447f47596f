"""Download dispatch: file id in, bytes or a redirect out.

- raw files are proxy-streamed from the backend (never fully buffered)
- transformable files redirect to a backend URL forcing an attachment
- locally stored files are served from disk
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping

import aiofiles.os
import httpx

from cloudshare.application.dtos.transfer import DownloadResult
from cloudshare.domain.entities.bundle import FileRecord
from cloudshare.domain.enums import StorageBackendKind
from cloudshare.domain.exceptions import (
    DownloadFailedException,
    FileNotAvailableException,
    FileNotFoundException,
)
from cloudshare.infrastructure.exceptions import StorageException, StorageNotFoundError
from cloudshare.infrastructure.external.storage.protocol import (
    LocalFileTarget,
    ProxyTarget,
    RedirectTarget,
    StorageProtocol,
)
from cloudshare.infrastructure.persistence.bundle_store import BundleRecordStore

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "application/octet-stream"


class DownloadDispatcher:
    """Resolves a file id to a stream, a redirect or a local path."""

    CHUNK_SIZE = 64 * 1024  # 64KB

    def __init__(
        self,
        store: BundleRecordStore,
        backends: Mapping[StorageBackendKind, StorageProtocol],
        http_client: httpx.AsyncClient,
    ) -> None:
        self._store = store
        self._backends = backends
        self._http = http_client

    async def dispatch(self, file_id: str) -> DownloadResult:
        """Resolve file_id to a DownloadResult.

        Raises:
            FileNotFoundException: Unknown or expired id, or bytes gone from the backend.
            FileNotAvailableException: Record has no usable backend reference.
            DownloadFailedException: Backend unreachable or refused.
        """
        file = await self._store.get_file(file_id)
        backend = self._backends.get(file.backend)
        if backend is None or not file.has_backend_reference:
            logger.warning(
                "File %s has no usable %s backend reference", file_id, file.backend.value
            )
            raise FileNotAvailableException(file_id)

        try:
            target = await backend.resolve_download(file)
        except StorageNotFoundError as e:
            logger.warning("File %s missing from %s backend", file_id, file.backend.value)
            raise FileNotFoundException(file_id) from e
        except StorageException as e:
            logger.error("Could not resolve download for %s: %s", file_id, e.message)
            raise DownloadFailedException(file_id, e.message) from e

        media_type = file.mimetype or DEFAULT_MEDIA_TYPE
        if isinstance(target, RedirectTarget):
            logger.info("Redirecting download of %s (%s)", file.original_name, file_id)
            return DownloadResult(
                filename=file.original_name,
                media_type=media_type,
                redirect_url=target.url,
            )
        if isinstance(target, LocalFileTarget):
            try:
                stat = await aiofiles.os.stat(target.path)
            except FileNotFoundError as e:
                logger.warning("File %s vanished from local disk", file_id)
                raise FileNotFoundException(file_id) from e
            logger.info("Serving %s (%s) from local disk", file.original_name, file_id)
            return DownloadResult(
                filename=file.original_name,
                media_type=media_type,
                content_length=stat.st_size,
                path=target.path,
            )
        if isinstance(target, ProxyTarget):
            return await self._open_proxy(file, target.url, media_type)
        raise DownloadFailedException(file_id, f"unsupported target {target!r}")

    async def _open_proxy(
        self, file: FileRecord, url: str, media_type: str
    ) -> DownloadResult:
        request = self._http.build_request("GET", url)
        try:
            response = await self._http.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.error("Upstream for %s unreachable: %s", file.id, e)
            raise DownloadFailedException(file.id, str(e)) from e
        if response.status_code >= 400:
            await response.aclose()
            logger.error(
                "Upstream for %s answered %d", file.id, response.status_code
            )
            raise DownloadFailedException(
                file.id, f"upstream returned {response.status_code}"
            )

        length = response.headers.get("content-length")
        logger.info("Proxy-streaming %s (%s)", file.original_name, file.id)
        return DownloadResult(
            filename=file.original_name,
            media_type=media_type,
            content_length=int(length) if length and length.isdigit() else None,
            chunks=self._relay(file.id, response),
        )

    async def _relay(
        self, file_id: str, response: httpx.Response
    ) -> AsyncIterator[bytes]:
        """Yield upstream bytes; a broken stream surfaces as DownloadFailedException."""
        try:
            async for chunk in response.aiter_bytes(self.CHUNK_SIZE):
                yield chunk
        except httpx.HTTPError as e:
            logger.error("Stream for %s broke mid-transfer: %s", file_id, e)
            raise DownloadFailedException(file_id, str(e)) from e
        finally:
            await response.aclose()
