"""API router aggregation. Mounted at /api by main."""

from fastapi import APIRouter

from cloudshare.api.endpoints import bundles, downloads, health, uploads

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(uploads.router, tags=["uploads"])
api_router.include_router(bundles.router, tags=["bundles"])
api_router.include_router(downloads.router, tags=["downloads"])
