"""External services (object storage)."""
