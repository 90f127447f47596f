"""Domain enumerations for CloudShare.

Enums represent fixed sets of domain values (e.g. resource kind, backend).
"""

from enum import Enum


class ResourceKind(str, Enum):
    """How a stored file is delivered on download.

    RAW files are proxy-streamed through the service; TRANSFORMABLE files
    (images, video) are served by redirecting to a backend URL that forces
    an attachment under the original name.
    """

    RAW = "raw"
    TRANSFORMABLE = "transformable"


class StorageBackendKind(str, Enum):
    """Which backend holds a file's bytes (the FileRecord discriminant)."""

    REMOTE = "remote"
    LOCAL = "local"


class BundleState(str, Enum):
    """Lifecycle of a bundle under construction.

    PENDING is never externally observable; COMMITTED and ABORTED are terminal.
    """

    PENDING = "pending"
    COMMITTED = "committed"
    ABORTED = "aborted"


class StoreMode(str, Enum):
    """Operating mode of the bundle record store."""

    DURABLE = "durable"
    VOLATILE = "volatile"
