"""Resource kind, category and byte formatting."""

import pytest

from cloudshare.application.services.file_classifier import (
    classify_resource_kind,
    describe_category,
    format_bytes,
)
from cloudshare.domain.enums import ResourceKind


@pytest.mark.parametrize(
    ("filename", "mimetype", "expected"),
    [
        ("photo.jpg", "image/jpeg", ResourceKind.TRANSFORMABLE),
        ("PHOTO.PNG", None, ResourceKind.TRANSFORMABLE),
        ("clip.mkv", "application/octet-stream", ResourceKind.TRANSFORMABLE),
        ("noext", "video/mp4", ResourceKind.TRANSFORMABLE),
        ("report.pdf", "application/pdf", ResourceKind.RAW),
        ("archive.zip", "application/zip", ResourceKind.RAW),
        ("song.mp3", "audio/mpeg", ResourceKind.RAW),
        ("script.ts", "video/mp2t", ResourceKind.TRANSFORMABLE),
        ("setup.exe", "application/x-msdownload", ResourceKind.RAW),
        # Restricted extensions stay raw even when the client claims an image.
        ("evil.exe", "image/png", ResourceKind.RAW),
        ("lib.so", "video/mp4", ResourceKind.RAW),
    ],
)
def test_classify_resource_kind(filename, mimetype, expected) -> None:
    assert classify_resource_kind(filename, mimetype) == expected


@pytest.mark.parametrize(
    ("filename", "mimetype", "expected"),
    [
        ("a.heic", None, "Image"),
        ("a.webm", None, "Video"),
        ("a.flac", None, "Audio"),
        ("a.docx", None, "Document"),
        ("a.7z", None, "Archive"),
        ("a.py", None, "Code/Text"),
        ("README", "text/plain", "Code/Text"),
        ("a.msi", None, "Executable"),
        ("a.weird", "application/octet-stream", "Other"),
    ],
)
def test_describe_category(filename, mimetype, expected) -> None:
    assert describe_category(filename, mimetype) == expected


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (5 * 1024 * 1024, "5 MB"),
        (500 * 1024 * 1024, "500 MB"),
        (3 * 1024**3 + 1024**3 // 4, "3.25 GB"),
    ],
)
def test_format_bytes(size, expected) -> None:
    assert format_bytes(size) == expected
