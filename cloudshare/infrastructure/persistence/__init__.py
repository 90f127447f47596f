"""Persistence: bundle record store."""

from cloudshare.infrastructure.persistence.bundle_store import BundleRecordStore

__all__ = ["BundleRecordStore"]
