"""HTTP middleware: timeout, request size limit, request ID, access log, security headers.

Applied in main app; order matters (with add_middleware the last one added
is outermost, so main adds them innermost first).
"""

from cloudshare.middleware.access_log import AccessLogMiddleware
from cloudshare.middleware.request_id import RequestIDMiddleware
from cloudshare.middleware.request_size_limit import RequestSizeLimitMiddleware
from cloudshare.middleware.security_headers import SecurityHeadersMiddleware
from cloudshare.middleware.timeout import TimeoutMiddleware

__all__ = [
    "AccessLogMiddleware",
    "RequestIDMiddleware",
    "RequestSizeLimitMiddleware",
    "SecurityHeadersMiddleware",
    "TimeoutMiddleware",
]
