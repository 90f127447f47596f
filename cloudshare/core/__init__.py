"""Core: config, composition root, and application bootstrap."""

from cloudshare.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
