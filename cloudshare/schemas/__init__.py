"""API response schemas."""

from cloudshare.schemas.responses import HealthResponse, UploadResponse

__all__ = ["HealthResponse", "UploadResponse"]
