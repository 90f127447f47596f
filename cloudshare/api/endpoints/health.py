"""Health check endpoint; reports whether bundle records are durable."""

from fastapi import APIRouter, Depends

from cloudshare.api.dependencies import get_store
from cloudshare.infrastructure.persistence.bundle_store import BundleRecordStore
from cloudshare.schemas.responses import HealthResponse

router = APIRouter()


@router.get("", response_model=HealthResponse)
def health_check(store: BundleRecordStore = Depends(get_store)) -> HealthResponse:
    """Return ok and the record store mode (durable or volatile)."""
    return HealthResponse(store_mode=store.mode.value)
