"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports. create_app() calls configure_limiter()
with its settings; the upload limit string is read on each checked request.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from cloudshare.core.config import Settings

limiter = Limiter(key_func=get_remote_address)

UPLOAD_LIMIT = "30/minute"

_upload_limit = UPLOAD_LIMIT


def configure_limiter(settings: Settings) -> None:
    """Apply the app's rate limit settings to the shared limiter."""
    global _upload_limit
    limiter.enabled = settings.rate_limit_enabled
    _upload_limit = settings.upload_rate_limit or UPLOAD_LIMIT


def upload_limit_value() -> str:
    return _upload_limit


limit_upload = limiter.limit(upload_limit_value)
