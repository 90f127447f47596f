"""Composition root: one store, one backend registry, one HTTP client.

Routes reach these through request.app.state.services; nothing here is a
module-level global, so tests build their own container (volatile store,
fake backends, mocked HTTP transport) and inject it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

import httpx

from cloudshare.application.services.expiry_sweeper import ExpirySweeper
from cloudshare.application.use_cases.downloads import DownloadDispatcher
from cloudshare.application.use_cases.uploads import UploadOrchestrator
from cloudshare.core.config import Settings
from cloudshare.domain.enums import StorageBackendKind
from cloudshare.infrastructure.external.storage import StorageFactory, StorageProtocol
from cloudshare.infrastructure.persistence.bundle_store import BundleRecordStore, Clock
from cloudshare.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Everything the HTTP layer and the sweeper need, built once per app."""

    settings: Settings
    store: BundleRecordStore
    upload_backend: StorageProtocol
    backends: Mapping[StorageBackendKind, StorageProtocol]
    http_client: httpx.AsyncClient
    orchestrator: UploadOrchestrator
    dispatcher: DownloadDispatcher
    sweeper: ExpirySweeper

    @classmethod
    async def build(
        cls,
        settings: Settings,
        *,
        clock: Clock = utc_now,
        store: BundleRecordStore | None = None,
        upload_backend: StorageProtocol | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> "ServiceContainer":
        """Wire the services for settings.

        Keyword overrides replace individual collaborators (tests). A store
        passed in is used as-is; otherwise one is created and initialized.
        """
        if store is None:
            store = BundleRecordStore(settings.records_path, clock=clock)
            await store.initialize()
        backend = upload_backend or StorageFactory.create_storage_service(settings)
        backends = StorageFactory.create_backends(settings, upload_backend=backend)
        client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.upstream_timeout_seconds, connect=30.0),
            follow_redirects=True,
        )
        logger.info(
            "Services ready: upload backend=%s, store=%s",
            backend.kind.value,
            store.mode.value,
        )
        return cls(
            settings=settings,
            store=store,
            upload_backend=backend,
            backends=backends,
            http_client=client,
            orchestrator=UploadOrchestrator(
                store,
                backend,
                default_expiry_minutes=settings.default_expiry_minutes,
                min_expiry_minutes=settings.min_expiry_minutes,
                max_expiry_minutes=settings.max_expiry_minutes,
            ),
            dispatcher=DownloadDispatcher(store, backends, client),
            sweeper=ExpirySweeper(
                store, backends, interval_seconds=settings.sweep_interval_seconds
            ),
        )

    async def aclose(self) -> None:
        """Stop the sweeper and close the shared HTTP client."""
        await self.sweeper.stop()
        await self.http_client.aclose()
        logger.info("HTTP client closed")
