"""Domain entities: bundle and file records."""

from cloudshare.domain.entities.bundle import BundleRecord, FileRecord

__all__ = ["BundleRecord", "FileRecord"]
