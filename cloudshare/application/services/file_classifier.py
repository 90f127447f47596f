"""File classification: resource kind, display category and byte formatting."""

import os

from cloudshare.domain.enums import ResourceKind

IMAGE_EXTENSIONS = frozenset({
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".svg", ".webp", ".ico",
    ".tiff", ".tif", ".heic", ".heif", ".cr2", ".nef", ".arw", ".dng",
})
VIDEO_EXTENSIONS = frozenset({
    ".mp4", ".avi", ".mov", ".wmv", ".flv", ".mkv", ".webm", ".m4v",
    ".mpg", ".mpeg", ".3gp", ".ogv", ".vob", ".mts",
})
AUDIO_EXTENSIONS = frozenset({
    ".mp3", ".wav", ".flac", ".aac", ".ogg", ".wma", ".m4a", ".opus",
    ".aiff", ".ape", ".alac", ".mid", ".midi",
})
DOCUMENT_EXTENSIONS = frozenset({
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx", ".txt",
    ".rtf", ".odt", ".ods", ".odp", ".pages", ".numbers", ".key",
})
ARCHIVE_EXTENSIONS = frozenset({
    ".zip", ".rar", ".7z", ".tar", ".gz", ".bz2", ".xz", ".iso", ".dmg", ".pkg",
})
CODE_EXTENSIONS = frozenset({
    ".js", ".py", ".java", ".cpp", ".c", ".cs", ".php", ".html", ".css",
    ".json", ".xml", ".sql", ".ps1", ".rb", ".go", ".rs", ".swift", ".kt",
    ".jsx", ".tsx", ".vue",
})
# Never delivered through a transformation URL, whatever the mimetype claims.
RESTRICTED_EXTENSIONS = frozenset({
    ".exe", ".msi", ".app", ".apk", ".deb", ".rpm", ".bat", ".sh", ".jar",
    ".dll", ".so", ".dylib",
})
EXECUTABLE_EXTENSIONS = RESTRICTED_EXTENSIONS | {".dmg"}

_BYTE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def _extension(filename: str) -> str:
    return os.path.splitext(filename)[1].lower()


def classify_resource_kind(filename: str, mimetype: str | None) -> ResourceKind:
    """Images and video are transformable; everything else is raw."""
    ext = _extension(filename)
    if ext in RESTRICTED_EXTENSIONS:
        return ResourceKind.RAW
    mimetype = (mimetype or "").lower()
    if ext in IMAGE_EXTENSIONS or ext in VIDEO_EXTENSIONS:
        return ResourceKind.TRANSFORMABLE
    if mimetype.startswith("image/") or mimetype.startswith("video/"):
        return ResourceKind.TRANSFORMABLE
    return ResourceKind.RAW


def describe_category(filename: str, mimetype: str | None) -> str:
    """Human-readable category for log lines (Image, Video, Audio, ...)."""
    ext = _extension(filename)
    mimetype = (mimetype or "").lower()
    if ext in IMAGE_EXTENSIONS or mimetype.startswith("image/"):
        return "Image"
    if ext in VIDEO_EXTENSIONS or mimetype.startswith("video/"):
        return "Video"
    if ext in AUDIO_EXTENSIONS or mimetype.startswith("audio/"):
        return "Audio"
    if ext in DOCUMENT_EXTENSIONS:
        return "Document"
    if ext in ARCHIVE_EXTENSIONS:
        return "Archive"
    if ext in EXECUTABLE_EXTENSIONS:
        return "Executable"
    if ext in CODE_EXTENSIONS or "text/" in mimetype:
        return "Code/Text"
    return "Other"


def format_bytes(size: int) -> str:
    """Format a byte count, e.g. 1536 -> '1.5 KB'."""
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_BYTE_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{round(value, 2):g} {_BYTE_UNITS[unit]}"
