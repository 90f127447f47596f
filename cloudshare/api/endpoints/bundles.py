"""Bundle metadata API."""

from fastapi import APIRouter, Depends

from cloudshare.api.dependencies import get_store
from cloudshare.domain.entities.bundle import BundleRecord
from cloudshare.infrastructure.persistence.bundle_store import BundleRecordStore

router = APIRouter()


@router.get(
    "/bundle/{bundle_id}",
    response_model=BundleRecord,
    responses={404: {"description": "Bundle not found or expired"}},
)
async def get_bundle(
    bundle_id: str,
    store: BundleRecordStore = Depends(get_store),
) -> BundleRecord:
    """Return a live bundle; 404 once it has expired, even before it is swept."""
    return await store.get_bundle(bundle_id)
