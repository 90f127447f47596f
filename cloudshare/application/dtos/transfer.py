"""DTOs for upload, download and sweep use cases."""

from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class IngestedFile:
    """A multipart part already spooled to a local temporary file."""

    original_name: str
    mimetype: str
    size: int
    path: Path


@dataclass(frozen=True)
class DownloadResult:
    """How to answer a download request. Exactly one of chunks, redirect_url, path is set."""

    filename: str
    media_type: str
    content_length: int | None = None
    chunks: AsyncIterator[bytes] | None = None
    redirect_url: str | None = None
    path: Path | None = None

    @property
    def is_redirect(self) -> bool:
        return self.redirect_url is not None


@dataclass(frozen=True)
class SweepResult:
    """Counts from one sweeper tick."""

    bundles_pruned: int
    files_deleted: int
    delete_failures: int
