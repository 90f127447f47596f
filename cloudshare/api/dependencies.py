"""Route dependencies: everything comes from the container on app.state."""

from fastapi import Request

from cloudshare.application.use_cases.downloads import DownloadDispatcher
from cloudshare.core.container import ServiceContainer
from cloudshare.infrastructure.persistence.bundle_store import BundleRecordStore


def get_services(request: Request) -> ServiceContainer:
    """Service container built by the lifespan (or injected by tests)."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise RuntimeError("Service container is not initialized")
    return services


def get_store(request: Request) -> BundleRecordStore:
    return get_services(request).store


def get_download_dispatcher(request: Request) -> DownloadDispatcher:
    return get_services(request).dispatcher
