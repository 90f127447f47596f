"""Application services: classification, expiry policy, and the expiry sweeper."""

from cloudshare.application.services.expiry_policy import resolve_expiry_minutes
from cloudshare.application.services.expiry_sweeper import ExpirySweeper
from cloudshare.application.services.file_classifier import (
    classify_resource_kind,
    describe_category,
    format_bytes,
)

__all__ = [
    "ExpirySweeper",
    "classify_resource_kind",
    "describe_category",
    "format_bytes",
    "resolve_expiry_minutes",
]
