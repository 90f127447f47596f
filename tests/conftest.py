"""Pytest configuration and fixtures for cloudshare.

HTTP tests run against create_app() through httpx's ASGITransport with a
service container injected on app.state (the lifespan is not run), so each
test gets its own records file, storage root and clock.
"""

import asyncio
import itertools
from datetime import UTC, datetime, timedelta
from pathlib import Path
from urllib.parse import quote

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from cloudshare.application.dtos.transfer import IngestedFile
from cloudshare.core.config import Settings
from cloudshare.core.container import ServiceContainer
from cloudshare.domain.entities.bundle import FileRecord
from cloudshare.domain.enums import ResourceKind, StorageBackendKind
from cloudshare.infrastructure.exceptions import (
    StorageDeleteError,
    StorageNotFoundError,
    StorageUploadError,
)
from cloudshare.infrastructure.external.storage.protocol import (
    DownloadTarget,
    ProxyTarget,
    RedirectTarget,
    StoredObject,
)
from cloudshare.infrastructure.persistence.bundle_store import BundleRecordStore
from cloudshare.main import create_app

START = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

# Uploads whose content starts with this marker fail in InMemoryRemoteBackend.
FAIL_MARKER = b"FAIL"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = START) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


class InMemoryRemoteBackend:
    """Remote backend double: objects live in a dict, served over a mock HTTP transport."""

    kind = StorageBackendKind.REMOTE
    base_url = "https://objects.test"

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.uploaded: list[str] = []
        self.deleted: list[str] = []
        self.delete_failures: set[str] = set()

    async def upload(
        self,
        source: Path,
        storage_key: str,
        content_type: str,
        resource_kind: ResourceKind,
    ) -> StoredObject:
        data = source.read_bytes()
        await asyncio.sleep(0)
        if data.startswith(FAIL_MARKER):
            raise StorageUploadError(storage_key, "simulated outage")
        key = f"remote/{storage_key}"
        self.objects[key] = data
        self.uploaded.append(key)
        return StoredObject(
            backend=self.kind,
            storage_key=storage_key,
            remote_object_id=key,
            url=f"{self.base_url}/{key}",
        )

    async def resolve_download(self, file: FileRecord) -> DownloadTarget:
        key = file.remote_object_id or ""
        if key not in self.objects:
            raise StorageNotFoundError(key)
        if file.resource_kind == ResourceKind.TRANSFORMABLE:
            return RedirectTarget(
                url=f"{self.base_url}/{key}?attachment={quote(file.original_name)}"
            )
        return ProxyTarget(url=f"{self.base_url}/{key}")

    async def delete(self, file: FileRecord) -> bool:
        key = file.remote_object_id or ""
        if key in self.delete_failures:
            raise StorageDeleteError(key, "simulated outage")
        self.deleted.append(key)
        return self.objects.pop(key, None) is not None


def make_object_transport(backend: InMemoryRemoteBackend) -> httpx.MockTransport:
    """Serve InMemoryRemoteBackend objects the way an object store would."""

    def handler(request: httpx.Request) -> httpx.Response:
        key = request.url.path.lstrip("/")
        data = backend.objects.get(key)
        if data is None:
            return httpx.Response(404, content=b"NoSuchKey")
        return httpx.Response(
            200,
            content=data,
            headers={
                "content-type": "binary/octet-stream",
                "content-disposition": f'inline; filename="{key}"',
            },
        )

    return httpx.MockTransport(handler)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Isolated settings: local storage, durable records under tmp_path."""
    return Settings(
        _env_file=None,
        storage_backend="local",
        storage_root=str(tmp_path / "uploads"),
        upload_temp_dir=str(tmp_path / "incoming"),
        records_path=str(tmp_path / "db.json"),
        sweeper_enabled=False,
        rate_limit_enabled=False,
    )


@pytest.fixture
async def store(settings: Settings, clock: FakeClock) -> BundleRecordStore:
    """Durable store on a fresh records file."""
    s = BundleRecordStore(settings.records_path, clock=clock)
    await s.initialize()
    return s


@pytest.fixture
def remote_backend() -> InMemoryRemoteBackend:
    return InMemoryRemoteBackend()


@pytest.fixture
def make_ingested(tmp_path: Path):
    """Factory writing bytes to a temp file and describing it as an ingested upload."""
    counter = itertools.count()
    spool = tmp_path / "spool"
    spool.mkdir()

    def _make(
        name: str, content: bytes, mimetype: str = "application/octet-stream"
    ) -> IngestedFile:
        path = spool / f"part-{next(counter)}"
        path.write_bytes(content)
        return IngestedFile(
            original_name=name, mimetype=mimetype, size=len(content), path=path
        )

    return _make


@pytest.fixture
async def services(settings: Settings, clock: FakeClock) -> ServiceContainer:
    """Container with the local backend and a durable store."""
    container = await ServiceContainer.build(settings, clock=clock)
    yield container
    await container.aclose()


@pytest.fixture
async def remote_services(
    settings: Settings,
    clock: FakeClock,
    remote_backend: InMemoryRemoteBackend,
) -> ServiceContainer:
    """Container whose uploads go to InMemoryRemoteBackend, proxied via MockTransport."""
    container = await ServiceContainer.build(
        settings,
        clock=clock,
        upload_backend=remote_backend,
        http_client=httpx.AsyncClient(transport=make_object_transport(remote_backend)),
    )
    yield container
    await container.aclose()


def _client_for(settings: Settings, container: ServiceContainer) -> AsyncClient:
    app = create_app(settings)
    app.state.services = container
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
async def client(settings: Settings, services: ServiceContainer) -> AsyncClient:
    """Async HTTP client against the app with the local-backend container."""
    async with _client_for(settings, services) as ac:
        yield ac


@pytest.fixture
async def remote_client(
    settings: Settings, remote_services: ServiceContainer
) -> AsyncClient:
    """Async HTTP client against the app with the remote-backend container."""
    async with _client_for(settings, remote_services) as ac:
        yield ac
