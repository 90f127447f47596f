"""HTML pages served outside the JSON API."""

from cloudshare.pages.view import PAGE_CSP, render_expired_page, render_view_page

__all__ = ["PAGE_CSP", "render_expired_page", "render_view_page"]
