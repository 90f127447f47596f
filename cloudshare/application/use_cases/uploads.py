"""Upload orchestration: ingested temp files in, exactly one committed bundle out (or none).

Per-file backend uploads run concurrently and are joined before deciding.
If any upload fails, or the final store commit fails, every object that did
reach the backend is deleted again and UploadFailedException is raised; no
record is ever saved for a partial bundle.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from collections.abc import Sequence
from datetime import timedelta
from typing import Any

import aiofiles.os

from cloudshare.application.dtos.transfer import IngestedFile
from cloudshare.application.services.expiry_policy import resolve_expiry_minutes
from cloudshare.application.services.file_classifier import (
    classify_resource_kind,
    describe_category,
    format_bytes,
)
from cloudshare.domain.entities.bundle import BundleRecord, FileRecord
from cloudshare.domain.enums import BundleState
from cloudshare.domain.exceptions import UploadFailedException, ValidationException
from cloudshare.infrastructure.external.storage.protocol import StorageProtocol
from cloudshare.infrastructure.persistence.bundle_store import BundleRecordStore
from cloudshare.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)

_SAFE_EXTENSION = re.compile(r"\.[A-Za-z0-9]{1,16}")


def _storage_extension(filename: str) -> str:
    """Lower-cased extension of an untrusted filename, or '' if it looks odd."""
    ext = os.path.splitext(os.path.basename(filename.replace("\\", "/")))[1]
    return ext.lower() if _SAFE_EXTENSION.fullmatch(ext) else ""


class UploadOrchestrator:
    """Turns a batch of ingested files plus a TTL into one committed BundleRecord."""

    def __init__(
        self,
        store: BundleRecordStore,
        backend: StorageProtocol,
        default_expiry_minutes: int = 60,
        min_expiry_minutes: int = 1,
        max_expiry_minutes: int = 10080,
    ) -> None:
        self._store = store
        self._backend = backend
        self._default_expiry = default_expiry_minutes
        self._min_expiry = min_expiry_minutes
        self._max_expiry = max_expiry_minutes

    async def create_bundle(
        self,
        files: Sequence[IngestedFile],
        expiry: Any = None,
    ) -> BundleRecord:
        """Upload every file and commit the bundle.

        Temporary files are removed whatever the outcome.

        Args:
            files: Spooled uploads in the order they were received.
            expiry: Requested TTL in minutes (any type; defaulted and clamped).

        Returns:
            The committed bundle.

        Raises:
            ValidationException: No files.
            UploadFailedException: Any backend upload or the commit failed.
        """
        if not files:
            raise ValidationException("No files uploaded", field="files")

        minutes = resolve_expiry_minutes(
            expiry,
            default=self._default_expiry,
            minimum=self._min_expiry,
            maximum=self._max_expiry,
        )
        bundle_id = generate_cuid()
        state = BundleState.PENDING
        logger.info(
            "Bundle %s %s: %d file(s), expires in %d min",
            bundle_id,
            state.value,
            len(files),
            minutes,
        )

        try:
            results = await asyncio.gather(
                *(self._upload_one(bundle_id, f) for f in files),
                return_exceptions=True,
            )
        finally:
            await self._discard_temp_files(files)

        uploaded: list[FileRecord] = []
        failed: list[tuple[IngestedFile, BaseException]] = []
        for ingested, result in zip(files, results):
            if isinstance(result, BaseException):
                failed.append((ingested, result))
            else:
                uploaded.append(result)

        if failed:
            for ingested, exc in failed:
                logger.error(
                    "Upload of %s in bundle %s failed: %s",
                    ingested.original_name,
                    bundle_id,
                    exc,
                )
            await self._compensate(bundle_id, uploaded)
            state = BundleState.ABORTED
            logger.warning("Bundle %s %s", bundle_id, state.value)
            first_file, first_exc = failed[0]
            raise UploadFailedException(
                first_file.original_name,
                _describe(first_exc),
                [f.original_name for f, _ in failed],
            )

        now = self._store.now()
        bundle = BundleRecord(
            id=bundle_id,
            upload_date=now,
            expires_at=now + timedelta(minutes=minutes),
            files=tuple(uploaded),
        )
        try:
            await self._store.save(bundle)
        except Exception as e:
            logger.exception("Commit of bundle %s failed", bundle_id)
            await self._compensate(bundle_id, uploaded)
            state = BundleState.ABORTED
            logger.warning("Bundle %s %s", bundle_id, state.value)
            raise UploadFailedException(None, f"commit failed: {e}") from e

        state = BundleState.COMMITTED
        logger.info(
            "Bundle %s %s with %d file(s), expires at %s",
            bundle_id,
            state.value,
            len(uploaded),
            bundle.expires_at.isoformat(),
        )
        return bundle

    async def _upload_one(self, bundle_id: str, ingested: IngestedFile) -> FileRecord:
        file_id = generate_cuid()
        kind = classify_resource_kind(ingested.original_name, ingested.mimetype)
        storage_key = f"{bundle_id}/{file_id}{_storage_extension(ingested.original_name)}"
        logger.info(
            "Uploading %s (%s, %s) as %s",
            ingested.original_name,
            describe_category(ingested.original_name, ingested.mimetype),
            format_bytes(ingested.size),
            kind.value,
        )
        stored = await self._backend.upload(
            ingested.path, storage_key, ingested.mimetype, kind
        )
        logger.info("Uploaded %s -> %s", ingested.original_name, stored.storage_key)
        return FileRecord(
            id=file_id,
            original_name=ingested.original_name,
            storage_key=stored.storage_key,
            mimetype=ingested.mimetype,
            size=ingested.size,
            backend=stored.backend,
            remote_object_id=stored.remote_object_id,
            url=stored.url,
            resource_kind=kind,
        )

    async def _compensate(self, bundle_id: str, uploaded: Sequence[FileRecord]) -> None:
        """Delete every object that reached the backend for an aborted bundle."""
        if not uploaded:
            return
        logger.warning(
            "Rolling back %d uploaded file(s) of bundle %s", len(uploaded), bundle_id
        )
        results = await asyncio.gather(
            *(self._backend.delete(f) for f in uploaded),
            return_exceptions=True,
        )
        for file, result in zip(uploaded, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Compensating delete of %s failed: %s", file.storage_key, result
                )

    async def _discard_temp_files(self, files: Sequence[IngestedFile]) -> None:
        for f in files:
            try:
                await aiofiles.os.remove(f.path)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("Could not remove temp file %s: %s", f.path, e)


def _describe(exc: BaseException) -> str:
    details = getattr(exc, "details", None)
    if isinstance(details, dict) and details.get("reason"):
        return str(details["reason"])
    return str(exc) or exc.__class__.__name__
