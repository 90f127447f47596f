"""Response bodies that are not a domain record on their own."""

from typing import Literal

from pydantic import BaseModel

from cloudshare.domain.entities.bundle import BundleRecord


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    store_mode: str


class UploadResponse(BaseModel):
    """POST /api/upload success body."""

    message: str = "Upload successful"
    bundle: BundleRecord
