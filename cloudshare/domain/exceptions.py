"""Domain exceptions for CloudShare.

Defines domain-level exceptions for the bundle lifecycle. These exceptions
are independent of infrastructure concerns. Presentation layer maps them
to HTTP responses in exception handlers.
"""

from typing import Any


class CloudShareException(Exception):
    """Base exception for all CloudShare application errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. bundle_id, file_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body: error code, message and details."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(CloudShareException):
    """Raised when input validation fails (e.g. no files in an upload)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class BundleNotFoundException(CloudShareException):
    """Raised when a bundle is absent or has lazily expired."""

    def __init__(self, bundle_id: str) -> None:
        super().__init__(
            "Bundle not found or expired",
            "BUNDLE_NOT_FOUND",
            {"bundle_id": bundle_id},
        )


class FileNotFoundException(CloudShareException):
    """Raised when no live bundle carries the requested file id."""

    def __init__(self, file_id: str) -> None:
        super().__init__(
            "File not found or expired",
            "FILE_NOT_FOUND",
            {"file_id": file_id},
        )


class FileNotAvailableException(CloudShareException):
    """Raised when a file record has no backend reference to serve from."""

    def __init__(self, file_id: str) -> None:
        super().__init__(
            "File not available",
            "FILE_NOT_AVAILABLE",
            {"file_id": file_id},
        )


class UploadFailedException(CloudShareException):
    """Raised when a bundle could not be committed.

    Names the first offending file and its cause; every failed file is
    listed in details.failed_files. Compensating deletes have already
    been issued by the time this is raised.
    """

    def __init__(
        self,
        filename: str | None,
        reason: str,
        failed_files: list[str] | None = None,
    ) -> None:
        if filename:
            message = f"Upload failed for {filename}: {reason}"
        else:
            message = f"Upload failed: {reason}"
        super().__init__(
            message,
            "UPLOAD_FAILED",
            {"filename": filename, "reason": reason, "failed_files": failed_files or []},
        )


class DownloadFailedException(CloudShareException):
    """Raised when a backend is unreachable or a stream breaks mid-transfer."""

    def __init__(self, file_id: str, reason: str) -> None:
        super().__init__(
            "Download failed",
            "DOWNLOAD_FAILED",
            {"file_id": file_id, "reason": reason},
        )


class StorageDegradedException(CloudShareException):
    """Durable record persistence is unwritable.

    Only raised inside the record store's writer, which catches it, logs
    it and switches to volatile mode. Never reaches a client.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"Record store degraded to volatile mode: {reason}",
            "STORAGE_DEGRADED",
            {"path": path, "reason": reason},
        )
