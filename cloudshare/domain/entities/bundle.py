"""Bundle and file record entities.

A bundle is a TTL-bounded group of uploaded files, visible or invisible as a
unit. Records are frozen: once committed they are only ever deleted whole.
Field names are snake_case in Python and camelCase on the wire and on disk.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from cloudshare.domain.enums import ResourceKind, StorageBackendKind
from cloudshare.shared.utils.datetime import ensure_utc

_RECORD_CONFIG = ConfigDict(
    frozen=True,
    alias_generator=to_camel,
    populate_by_name=True,
    extra="ignore",
)


class FileRecord(BaseModel):
    """One stored file inside a bundle.

    ``backend`` is the discriminant naming which storage backend owns the
    bytes; download and delete dispatch on it alone.
    """

    model_config = _RECORD_CONFIG

    id: str = Field(..., min_length=1)
    original_name: str
    storage_key: str
    mimetype: str = "application/octet-stream"
    size: int = Field(..., ge=0)
    backend: StorageBackendKind
    remote_object_id: str | None = None
    url: str | None = None
    resource_kind: ResourceKind = ResourceKind.RAW

    @property
    def has_backend_reference(self) -> bool:
        """True when the owning backend has something to serve from."""
        if self.backend == StorageBackendKind.REMOTE:
            return bool(self.remote_object_id)
        return bool(self.storage_key)


class BundleRecord(BaseModel):
    """A committed bundle: id, upload/expiry timestamps, files in upload order."""

    model_config = _RECORD_CONFIG

    id: str = Field(..., min_length=1)
    type: Literal["bundle"] = "bundle"
    upload_date: AwareDatetime
    expires_at: AwareDatetime
    files: tuple[FileRecord, ...] = Field(..., min_length=1)

    @field_validator("upload_date", "expires_at", mode="before")
    @classmethod
    def _as_utc(cls, v: Any) -> Any:
        if isinstance(v, datetime):
            return ensure_utc(v)
        return v

    @model_validator(mode="after")
    def _expiry_after_upload(self) -> "BundleRecord":
        if self.expires_at <= self.upload_date:
            raise ValueError("expiresAt must be later than uploadDate")
        return self

    def is_expired(self, now: datetime) -> bool:
        """Return True once now has reached expires_at."""
        return self.expires_at <= now

    def find_file(self, file_id: str) -> FileRecord | None:
        for file in self.files:
            if file.id == file_id:
                return file
        return None

    def to_json(self) -> dict[str, Any]:
        """Wire/disk representation (camelCase, ISO timestamps)."""
        return self.model_dump(mode="json", by_alias=True)
