"""Telemetry: application-wide logging configuration."""

from cloudshare.shared.telemetry.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
