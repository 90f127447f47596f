"""HTTP API: routes under /api."""

from cloudshare.api.router import api_router

__all__ = ["api_router"]
