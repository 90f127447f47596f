"""Expiry sweeper: periodically prunes expired bundles and deletes their files.

The store prune is authoritative. Backend deletes afterwards are best-effort:
failures are logged and never retried, so a backend object can outlive its
record when the backend misbehaves.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping

from cloudshare.application.dtos.transfer import SweepResult
from cloudshare.domain.entities.bundle import BundleRecord
from cloudshare.domain.enums import StorageBackendKind
from cloudshare.infrastructure.external.storage.protocol import StorageProtocol
from cloudshare.infrastructure.persistence.bundle_store import BundleRecordStore

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Background task bounding how long expired bundles linger."""

    def __init__(
        self,
        store: BundleRecordStore,
        backends: Mapping[StorageBackendKind, StorageProtocol],
        interval_seconds: float = 60.0,
    ) -> None:
        self._store = store
        self._backends = backends
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def sweep_once(self) -> SweepResult:
        """Prune the store, then delete every file of every pruned bundle."""
        expired = await self._store.prune_expired()
        deleted = 0
        failures = 0
        for bundle in expired:
            d, f = await self._delete_files(bundle)
            deleted += d
            failures += f
        if expired:
            logger.info(
                "Sweep pruned %d bundle(s), deleted %d file(s), %d delete failure(s)",
                len(expired),
                deleted,
                failures,
            )
        return SweepResult(
            bundles_pruned=len(expired),
            files_deleted=deleted,
            delete_failures=failures,
        )

    async def _delete_files(self, bundle: BundleRecord) -> tuple[int, int]:
        deleted = 0
        failures = 0
        for file in bundle.files:
            backend = self._backends.get(file.backend)
            if backend is None:
                logger.warning(
                    "No %s backend registered; leaving %s (bundle %s) in place",
                    file.backend.value,
                    file.storage_key,
                    bundle.id,
                )
                failures += 1
                continue
            try:
                removed = await backend.delete(file)
            except Exception:
                logger.exception(
                    "Failed to delete %s from %s backend (bundle %s)",
                    file.storage_key,
                    file.backend.value,
                    bundle.id,
                )
                failures += 1
                continue
            if removed:
                deleted += 1
                logger.debug("Deleted expired file %s", file.storage_key)
            else:
                logger.debug("Expired file %s was already gone", file.storage_key)
        return deleted, failures

    async def run(self) -> None:
        """Sweep every interval until cancelled. A failed tick never stops the loop."""
        logger.info("Expiry sweeper started (every %ss)", self.interval_seconds)
        try:
            while True:
                await asyncio.sleep(self.interval_seconds)
                try:
                    await self.sweep_once()
                except Exception:
                    logger.exception("Expiry sweep failed")
        except asyncio.CancelledError:
            logger.info("Expiry sweeper cancelled")
            raise

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self.run(), name="expiry-sweeper")

    async def stop(self) -> None:
        task = self._task
        self._task = None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
