"""Shared utilities: telemetry (logging) and cross-cutting helpers.

Used by domain, application, and infrastructure. No business logic.
"""

from cloudshare.shared.utils import (
    content_disposition,
    ensure_utc,
    generate_cuid,
    utc_now,
)

__all__ = [
    "content_disposition",
    "ensure_utc",
    "generate_cuid",
    "utc_now",
]
