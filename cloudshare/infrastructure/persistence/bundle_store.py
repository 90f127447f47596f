"""Bundle record store: one JSON snapshot holding every bundle.

Two modes, picked once by initialize():

- durable: every mutation rewrites the whole snapshot atomically (temp file
  in the same directory, then os.replace). load() reads it fresh.
- volatile: in-memory only. Used when the snapshot cannot be written; a
  durable store that fails a write drops to volatile for good.

save() and prune_expired() both read-modify-write the whole set and are
serialised by one asyncio.Lock. The in-memory mirror of the last written
set only changes under that lock or in initialize(); readers never touch it.
Expired bundles are invisible to reads before the sweeper removes them.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

import aiofiles
import aiofiles.os

from cloudshare.domain.entities.bundle import BundleRecord, FileRecord
from cloudshare.domain.enums import StoreMode
from cloudshare.domain.exceptions import (
    BundleNotFoundException,
    FileNotFoundException,
    StorageDegradedException,
)
from cloudshare.shared.telemetry.logging import get_logger
from cloudshare.shared.utils.datetime import utc_now

logger = get_logger(__name__)

Clock = Callable[[], datetime]


class BundleRecordStore:
    """Single source of truth for bundle and file metadata."""

    def __init__(self, path: str | Path | None, clock: Clock = utc_now) -> None:
        """Create a store.

        Args:
            path: Snapshot file; None means volatile from the start.
            clock: Returns the current UTC time (injectable for tests).
        """
        self.path = Path(path) if path is not None else None
        self._clock = clock
        self._lock = asyncio.Lock()
        self._mirror: list[BundleRecord] = []
        self._mode = StoreMode.VOLATILE

    @property
    def mode(self) -> StoreMode:
        return self._mode

    def now(self) -> datetime:
        return self._clock()

    async def initialize(self) -> StoreMode:
        """Probe the durable medium and select the operating mode.

        Creates an empty snapshot when none exists, reads and validates the
        current one, and writes it back to prove the medium is writable.
        Any failure leaves the store volatile with a warning.
        """
        if self.path is None:
            logger.warning("No records path configured; bundle store is volatile")
            return self._mode
        try:
            await asyncio.to_thread(self.path.parent.mkdir, parents=True, exist_ok=True)
            if not await aiofiles.os.path.exists(self.path):
                await self._write_snapshot([])
            records = await self._read_snapshot()
            await self._write_snapshot(records)
        except (OSError, ValueError, StorageDegradedException) as e:
            logger.warning(
                "Bundle store at %s is not usable (%s); running in volatile mode, "
                "bundles will not survive a restart",
                self.path,
                e,
            )
            self._mode = StoreMode.VOLATILE
            return self._mode
        self._mirror = records
        self._mode = StoreMode.DURABLE
        logger.info(
            "Bundle store is durable at %s (%d bundles)", self.path, len(records)
        )
        return self._mode

    async def load(self) -> list[BundleRecord]:
        """Return every stored bundle in insertion order (expired included)."""
        return list(await self._read_all())

    async def save(self, bundle: BundleRecord) -> None:
        """Append bundle and persist the whole set.

        Raises:
            ValueError: A bundle with this id is already stored.
        """
        async with self._lock:
            records = await self._read_all()
            if any(r.id == bundle.id for r in records):
                raise ValueError(f"Bundle {bundle.id} already exists")
            records.append(bundle)
            await self._persist(records)
        logger.debug("Saved bundle %s (%d files)", bundle.id, len(bundle.files))

    async def get_bundle(self, bundle_id: str) -> BundleRecord:
        """Return a live bundle.

        Raises:
            BundleNotFoundException: Absent, or present but expired.
        """
        now = self.now()
        for record in await self._read_all():
            if record.id == bundle_id:
                if record.is_expired(now):
                    break
                return record
        raise BundleNotFoundException(bundle_id)

    async def get_file(self, file_id: str) -> FileRecord:
        """Scan live bundles for a file id.

        Raises:
            FileNotFoundException: No live bundle carries this file.
        """
        now = self.now()
        for record in await self._read_all():
            if record.is_expired(now):
                continue
            found = record.find_file(file_id)
            if found is not None:
                return found
        raise FileNotFoundException(file_id)

    async def prune_expired(self) -> list[BundleRecord]:
        """Drop every bundle with expires_at <= now and return the dropped ones.

        The snapshot is only rewritten when something expired.
        """
        async with self._lock:
            records = await self._read_all()
            now = self.now()
            active: list[BundleRecord] = []
            expired: list[BundleRecord] = []
            for record in records:
                (expired if record.is_expired(now) else active).append(record)
            if expired:
                await self._persist(active)
        return expired

    async def _read_all(self) -> list[BundleRecord]:
        if self._mode is StoreMode.VOLATILE:
            return list(self._mirror)
        try:
            records = await self._read_snapshot()
        except (OSError, ValueError) as e:
            logger.error(
                "Failed to read bundle store %s, serving last known records: %s",
                self.path,
                e,
            )
            return list(self._mirror)
        return records

    async def _persist(self, records: list[BundleRecord]) -> None:
        self._mirror = list(records)
        if self._mode is not StoreMode.DURABLE:
            return
        try:
            await self._write_snapshot(records)
        except StorageDegradedException as e:
            self._mode = StoreMode.VOLATILE
            logger.error("Durable write failed: %s", e.details.get("reason"))
            logger.warning(
                "Bundle store switched to volatile mode; new bundles will not "
                "survive a restart"
            )

    async def _read_snapshot(self) -> list[BundleRecord]:
        if self.path is None:
            raise ValueError("no records path configured")
        async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
            content = await f.read()
        data = json.loads(content) if content.strip() else []
        if not isinstance(data, list):
            raise ValueError("bundle snapshot must be a JSON array")
        return [BundleRecord.model_validate(item) for item in data]

    async def _write_snapshot(self, records: list[BundleRecord]) -> None:
        if self.path is None:
            raise StorageDegradedException("", "no records path configured")
        payload = json.dumps([r.to_json() for r in records], indent=2)
        temp_path: str | None = None
        try:
            temp_fd, temp_path = tempfile.mkstemp(
                dir=self.path.parent,
                prefix=f".{self.path.name}.",
                suffix=".tmp",
            )
            os.close(temp_fd)
            async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(temp_path, self.path)
        except OSError as e:
            raise StorageDegradedException(str(self.path), str(e)) from e
        finally:
            if temp_path is not None and os.path.exists(temp_path):
                os.unlink(temp_path)
