"""Shared utilities: datetime, generators, HTTP header helpers."""

from cloudshare.shared.utils.datetime import ensure_utc, utc_now
from cloudshare.shared.utils.generators import generate_cuid
from cloudshare.shared.utils.headers import content_disposition

__all__ = [
    "content_disposition",
    "ensure_utc",
    "generate_cuid",
    "utc_now",
]
