"""FastAPI application entry point.

Wiring only: lifespan, exception handlers, middleware, routers, pages.
No business logic here. See cloudshare.core.lifespan and
cloudshare.core.exception_handlers.

Settings are loaded inside create_app() so that tests can pass their own
(or set env and clear the get_settings cache) before building the app.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from cloudshare.api import api_router
from cloudshare.core.config import Settings, get_settings
from cloudshare.core.exception_handlers import register_exception_handlers
from cloudshare.core.lifespan import create_lifespan
from cloudshare.core.limiter import configure_limiter, limiter
from cloudshare.middleware import (
    AccessLogMiddleware,
    RequestIDMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
    TimeoutMiddleware,
)
from cloudshare.pages import PAGE_CSP, render_expired_page, render_view_page


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and return the FastAPI application. Settings are resolved here (deferred from import)."""
    settings = settings or get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )
    app.state.settings = settings

    configure_limiter(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    register_exception_handlers(app)

    # Last added = outermost. Order: timeout → size limit → request ID → access log → security → CORS.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", settings.request_id_header],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)
    app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_upload_size)
    app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)

    app.include_router(api_router, prefix="/api")

    @app.get("/view/{bundle_id}", response_class=HTMLResponse, include_in_schema=False)
    def view_bundle(bundle_id: str) -> HTMLResponse:
        """Share page; the bundle itself is fetched client-side."""
        return HTMLResponse(
            content=render_view_page(settings.app_name),
            headers={"Content-Security-Policy": PAGE_CSP},
        )

    @app.get("/expired", response_class=HTMLResponse, include_in_schema=False)
    def expired() -> HTMLResponse:
        """Shown once a bundle has expired or never existed."""
        return HTMLResponse(
            content=render_expired_page(settings.app_name),
            headers={"Content-Security-Policy": PAGE_CSP},
        )

    return app


app = create_app()
