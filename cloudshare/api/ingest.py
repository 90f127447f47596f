"""Spool multipart uploads to temporary files for the upload orchestrator."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from cloudshare.application.dtos.transfer import IngestedFile
from cloudshare.domain.exceptions import UploadFailedException

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024  # 1MB
DEFAULT_MIMETYPE = "application/octet-stream"


def display_name(filename: str) -> str:
    """Client filename without any directory part the browser may have sent."""
    return os.path.basename(filename.replace("\\", "/")).strip()


async def spool_upload(upload: UploadFile, temp_dir: str | None = None) -> IngestedFile:
    """Copy one part to a fresh temp file (chunked) and describe it."""
    name = display_name(upload.filename or "")
    fd, raw_path = tempfile.mkstemp(dir=temp_dir, prefix="cloudshare-", suffix=".part")
    os.close(fd)
    path = Path(raw_path)
    size = 0
    try:
        async with aiofiles.open(path, "wb") as out:
            while chunk := await upload.read(CHUNK_SIZE):
                await out.write(chunk)
                size += len(chunk)
    except BaseException:
        await _remove(path)
        raise
    return IngestedFile(
        original_name=name,
        mimetype=upload.content_type or DEFAULT_MIMETYPE,
        size=size,
        path=path,
    )


async def ingest_uploads(
    uploads: Sequence[UploadFile], temp_dir: str | None = None
) -> list[IngestedFile]:
    """Spool every named part; parts without a filename are skipped.

    If any part fails to spool, the ones already written are removed.

    Raises:
        UploadFailedException: A part could not be written to disk.
    """
    if temp_dir:
        await aiofiles.os.makedirs(temp_dir, exist_ok=True)
    ingested: list[IngestedFile] = []
    for upload in uploads:
        if not upload.filename or not display_name(upload.filename):
            continue
        try:
            ingested.append(await spool_upload(upload, temp_dir))
        except OSError as e:
            logger.error("Could not spool %s: %s", upload.filename, e)
            for f in ingested:
                await _remove(f.path)
            raise UploadFailedException(
                display_name(upload.filename), str(e), [display_name(upload.filename)]
            ) from e
    return ingested


async def _remove(path: Path) -> None:
    try:
        await aiofiles.os.remove(path)
    except FileNotFoundError:
        pass
