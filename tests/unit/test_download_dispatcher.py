"""DownloadDispatcher: proxy stream, redirect, local serve, and failure mapping."""

from datetime import timedelta
from unittest.mock import AsyncMock

import httpx
import pytest

from cloudshare.application.use_cases.downloads import DownloadDispatcher
from cloudshare.domain.entities.bundle import BundleRecord, FileRecord
from cloudshare.domain.enums import ResourceKind, StorageBackendKind
from cloudshare.domain.exceptions import (
    DownloadFailedException,
    FileNotAvailableException,
    FileNotFoundException,
)
from cloudshare.infrastructure.external.storage.local_storage import LocalStorageService
from cloudshare.infrastructure.external.storage.protocol import LocalFileTarget


async def _collect(chunks) -> bytes:
    return b"".join([chunk async for chunk in chunks])


def _remote_file(file_id: str, name: str, kind: ResourceKind, key: str | None) -> FileRecord:
    return FileRecord(
        id=file_id,
        original_name=name,
        storage_key=f"b/{file_id}",
        mimetype="application/pdf" if kind == ResourceKind.RAW else "image/png",
        size=7,
        backend=StorageBackendKind.REMOTE,
        remote_object_id=key,
        resource_kind=kind,
    )


async def _save(store, clock, *files: FileRecord, bundle_id: str = "b") -> None:
    now = clock()
    await store.save(
        BundleRecord(
            id=bundle_id,
            upload_date=now,
            expires_at=now + timedelta(minutes=10),
            files=files,
        )
    )


class _BrokenStream(httpx.AsyncByteStream):
    async def __aiter__(self):
        yield b"first-chunk"
        raise httpx.ReadError("connection reset")


@pytest.fixture
def local_backend(settings) -> LocalStorageService:
    return LocalStorageService(settings.storage_root)


def _dispatcher(store, remote_backend, local_backend, handler) -> DownloadDispatcher:
    backends = {
        StorageBackendKind.REMOTE: remote_backend,
        StorageBackendKind.LOCAL: local_backend,
    }
    return DownloadDispatcher(
        store, backends, httpx.AsyncClient(transport=httpx.MockTransport(handler))
    )


async def test_raw_file_is_proxy_streamed(store, clock, remote_backend, local_backend) -> None:
    remote_backend.objects["remote/b/f1"] = b"%PDF-1.7"
    await _save(store, clock, _remote_file("f1", "report.pdf", ResourceKind.RAW, "remote/b/f1"))
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, content=b"%PDF-1.7")

    result = await _dispatcher(store, remote_backend, local_backend, handler).dispatch("f1")

    assert seen == ["https://objects.test/remote/b/f1"]
    assert result.filename == "report.pdf"
    assert result.media_type == "application/pdf"
    assert result.content_length == 8
    assert result.redirect_url is None
    assert await _collect(result.chunks) == b"%PDF-1.7"


async def test_transformable_file_redirects(store, clock, remote_backend, local_backend) -> None:
    remote_backend.objects["remote/b/img"] = b"png"
    await _save(
        store, clock, _remote_file("img", "holiday photo.png", ResourceKind.TRANSFORMABLE, "remote/b/img")
    )

    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("redirects must not proxy bytes")

    result = await _dispatcher(store, remote_backend, local_backend, handler).dispatch("img")
    assert result.is_redirect
    assert result.redirect_url == (
        "https://objects.test/remote/b/img?attachment=holiday%20photo.png"
    )


async def test_upstream_error_status_is_download_failed(
    store, clock, remote_backend, local_backend
) -> None:
    remote_backend.objects["remote/b/f1"] = b"data"
    await _save(store, clock, _remote_file("f1", "a.bin", ResourceKind.RAW, "remote/b/f1"))
    dispatcher = _dispatcher(
        store, remote_backend, local_backend, lambda request: httpx.Response(503)
    )
    with pytest.raises(DownloadFailedException) as exc_info:
        await dispatcher.dispatch("f1")
    assert "503" in exc_info.value.details["reason"]


async def test_unreachable_upstream_is_download_failed(
    store, clock, remote_backend, local_backend
) -> None:
    remote_backend.objects["remote/b/f1"] = b"data"
    await _save(store, clock, _remote_file("f1", "a.bin", ResourceKind.RAW, "remote/b/f1"))

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("no route to host")

    with pytest.raises(DownloadFailedException):
        await _dispatcher(store, remote_backend, local_backend, handler).dispatch("f1")


async def test_mid_stream_failure_is_download_failed(
    store, clock, remote_backend, local_backend
) -> None:
    remote_backend.objects["remote/b/f1"] = b"data"
    await _save(store, clock, _remote_file("f1", "big.iso", ResourceKind.RAW, "remote/b/f1"))
    dispatcher = _dispatcher(
        store,
        remote_backend,
        local_backend,
        lambda request: httpx.Response(200, stream=_BrokenStream()),
    )
    result = await dispatcher.dispatch("f1")
    with pytest.raises(DownloadFailedException) as exc_info:
        await _collect(result.chunks)
    assert "connection reset" in exc_info.value.details["reason"]


async def test_unknown_file_is_not_found(store, remote_backend, local_backend) -> None:
    dispatcher = _dispatcher(store, remote_backend, local_backend, lambda r: httpx.Response(200))
    with pytest.raises(FileNotFoundException):
        await dispatcher.dispatch("ghost")


async def test_record_without_reference_is_not_available(
    store, clock, remote_backend, local_backend
) -> None:
    await _save(store, clock, _remote_file("f1", "a.bin", ResourceKind.RAW, None))
    dispatcher = _dispatcher(store, remote_backend, local_backend, lambda r: httpx.Response(200))
    with pytest.raises(FileNotAvailableException):
        await dispatcher.dispatch("f1")


async def test_unregistered_backend_is_not_available(store, clock, local_backend) -> None:
    await _save(store, clock, _remote_file("f1", "a.bin", ResourceKind.RAW, "remote/b/f1"))
    dispatcher = DownloadDispatcher(
        store,
        {StorageBackendKind.LOCAL: local_backend},
        httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))),
    )
    with pytest.raises(FileNotAvailableException):
        await dispatcher.dispatch("f1")


async def test_local_file_is_served_from_disk(
    store, clock, remote_backend, local_backend
) -> None:
    path = local_backend.storage_root / "b" / "f1.txt"
    path.parent.mkdir(parents=True)
    path.write_bytes(b"hello local")
    await _save(
        store,
        clock,
        FileRecord(
            id="f1",
            original_name="hello.txt",
            storage_key="b/f1.txt",
            mimetype="text/plain",
            size=11,
            backend=StorageBackendKind.LOCAL,
        ),
    )
    dispatcher = _dispatcher(store, remote_backend, local_backend, lambda r: httpx.Response(200))
    result = await dispatcher.dispatch("f1")
    assert result.path == path
    assert result.content_length == 11
    assert result.filename == "hello.txt"


async def test_local_file_missing_on_disk_is_not_found(
    store, clock, remote_backend, local_backend
) -> None:
    await _save(
        store,
        clock,
        FileRecord(
            id="f1",
            original_name="gone.txt",
            storage_key="b/gone.txt",
            size=1,
            backend=StorageBackendKind.LOCAL,
        ),
    )
    dispatcher = _dispatcher(store, remote_backend, local_backend, lambda r: httpx.Response(200))
    with pytest.raises(FileNotFoundException):
        await dispatcher.dispatch("f1")


async def test_local_file_removed_after_resolve_is_not_found(
    store, clock, remote_backend, local_backend
) -> None:
    await _save(
        store,
        clock,
        FileRecord(
            id="f1",
            original_name="swept.txt",
            storage_key="b/swept.txt",
            size=1,
            backend=StorageBackendKind.LOCAL,
        ),
    )
    # Resolved while present, swept before the size could be read.
    local_backend.resolve_download = AsyncMock(
        return_value=LocalFileTarget(path=local_backend.storage_root / "b" / "swept.txt")
    )
    dispatcher = _dispatcher(store, remote_backend, local_backend, lambda r: httpx.Response(200))
    with pytest.raises(FileNotFoundException):
        await dispatcher.dispatch("f1")
