"""Application layer: upload/download use cases and supporting services."""
