"""UploadOrchestrator: all-or-nothing commit, compensating deletes, TTL handling."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from cloudshare.application.use_cases.uploads import UploadOrchestrator
from cloudshare.domain.enums import ResourceKind, StorageBackendKind
from cloudshare.domain.exceptions import (
    BundleNotFoundException,
    UploadFailedException,
    ValidationException,
)

FAIL_MARKER = b"FAIL"


@pytest.fixture
def orchestrator(store, remote_backend) -> UploadOrchestrator:
    return UploadOrchestrator(store, remote_backend)


async def test_commits_bundle_with_files_in_upload_order(
    orchestrator, store, remote_backend, make_ingested, clock
) -> None:
    files = [
        make_ingested("a.txt", b"alpha", "text/plain"),
        make_ingested("photo.JPG", b"\xff\xd8jpeg", "image/jpeg"),
        make_ingested("setup.exe", b"MZ...", "application/x-msdownload"),
    ]
    bundle = await orchestrator.create_bundle(files, "5")

    assert [f.original_name for f in bundle.files] == ["a.txt", "photo.JPG", "setup.exe"]
    assert bundle.upload_date == clock()
    assert bundle.expires_at == clock() + timedelta(minutes=5)
    assert [f.resource_kind for f in bundle.files] == [
        ResourceKind.RAW,
        ResourceKind.TRANSFORMABLE,
        ResourceKind.RAW,
    ]
    assert all(f.backend == StorageBackendKind.REMOTE for f in bundle.files)
    assert all(f.storage_key.startswith(f"{bundle.id}/") for f in bundle.files)
    assert bundle.files[1].storage_key.endswith(".jpg")
    assert len({f.id for f in bundle.files}) == 3
    assert await store.get_bundle(bundle.id) == bundle
    assert len(remote_backend.objects) == 3


async def test_temp_files_removed_after_success(orchestrator, make_ingested) -> None:
    files = [make_ingested("a.txt", b"a"), make_ingested("b.txt", b"b")]
    await orchestrator.create_bundle(files)
    assert not any(f.path.exists() for f in files)


async def test_no_files_is_a_validation_error(orchestrator) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await orchestrator.create_bundle([], "10")
    assert exc_info.value.message == "No files uploaded"


async def test_one_failure_aborts_whole_bundle(
    orchestrator, store, remote_backend, make_ingested
) -> None:
    files = [
        make_ingested("one.txt", b"one"),
        make_ingested("broken.bin", FAIL_MARKER + b" payload"),
        make_ingested("three.txt", b"three"),
    ]
    with pytest.raises(UploadFailedException) as exc_info:
        await orchestrator.create_bundle(files, "10")

    exc = exc_info.value
    assert exc.details["filename"] == "broken.bin"
    assert exc.details["failed_files"] == ["broken.bin"]
    assert "simulated outage" in exc.message
    # Every sibling that reached the backend was deleted again.
    assert sorted(remote_backend.deleted) == sorted(remote_backend.uploaded)
    assert len(remote_backend.uploaded) == 2
    assert remote_backend.objects == {}
    assert await store.load() == []
    assert not any(f.path.exists() for f in files)


async def test_all_failures_are_listed(orchestrator, make_ingested) -> None:
    files = [
        make_ingested("x.bin", FAIL_MARKER),
        make_ingested("y.bin", FAIL_MARKER),
    ]
    with pytest.raises(UploadFailedException) as exc_info:
        await orchestrator.create_bundle(files)
    assert exc_info.value.details["failed_files"] == ["x.bin", "y.bin"]


async def test_commit_failure_compensates_every_upload(
    store, remote_backend, make_ingested
) -> None:
    store.save = AsyncMock(side_effect=ValueError("Bundle already exists"))
    orchestrator = UploadOrchestrator(store, remote_backend)
    files = [make_ingested("a.txt", b"a"), make_ingested("b.txt", b"b")]

    with pytest.raises(UploadFailedException) as exc_info:
        await orchestrator.create_bundle(files)

    assert "commit failed" in exc_info.value.message
    assert sorted(remote_backend.deleted) == sorted(remote_backend.uploaded)
    assert remote_backend.objects == {}


async def test_failed_compensating_delete_does_not_mask_upload_error(
    orchestrator, remote_backend, make_ingested
) -> None:
    files = [make_ingested("ok.txt", b"ok"), make_ingested("bad.bin", FAIL_MARKER)]
    original_delete = remote_backend.delete

    async def failing_delete(file):
        await original_delete(file)
        raise RuntimeError("delete exploded")

    remote_backend.delete = failing_delete
    with pytest.raises(UploadFailedException):
        await orchestrator.create_bundle(files)
    assert len(remote_backend.deleted) == 1


async def test_failed_bundle_id_never_becomes_visible(
    orchestrator, store, make_ingested, monkeypatch
) -> None:
    from cloudshare.application.use_cases import uploads

    ids = iter(["bundle-x", "file-1", "file-2"])
    monkeypatch.setattr(uploads, "generate_cuid", lambda: next(ids))
    files = [make_ingested("a.txt", b"a"), make_ingested("b.bin", FAIL_MARKER)]
    with pytest.raises(UploadFailedException):
        await orchestrator.create_bundle(files)
    with pytest.raises(BundleNotFoundException):
        await store.get_bundle("bundle-x")


@pytest.mark.parametrize(
    ("expiry", "minutes"),
    [(None, 60), ("abc", 60), ("0", 60), ("-3", 1), ("99999", 10080), (15, 15)],
)
async def test_expiry_is_defaulted_and_clamped(
    orchestrator, make_ingested, clock, expiry, minutes
) -> None:
    bundle = await orchestrator.create_bundle([make_ingested("a.txt", b"a")], expiry)
    assert bundle.expires_at - bundle.upload_date == timedelta(minutes=minutes)


async def test_local_backend_upload(store, settings, make_ingested) -> None:
    from cloudshare.infrastructure.external.storage.local_storage import (
        LocalStorageService,
    )

    local = LocalStorageService(settings.storage_root)
    orchestrator = UploadOrchestrator(store, local)
    bundle = await orchestrator.create_bundle([make_ingested("notes.md", b"# hi")])
    record = bundle.files[0]
    assert record.backend == StorageBackendKind.LOCAL
    assert record.remote_object_id is None
    assert (local.storage_root / record.storage_key).read_bytes() == b"# hi"
