"""HTTP header helpers for download responses."""

from urllib.parse import quote


def _ascii_fallback(filename: str) -> str:
    """Plain-ASCII filename for the legacy filename= parameter (no quotes, no control chars)."""
    cleaned = "".join(
        ch if 32 <= ord(ch) < 127 and ch not in {'"', "\\"} else "_"
        for ch in filename
    )
    return cleaned.strip() or "download"


def content_disposition(filename: str, disposition: str = "attachment") -> str:
    """Build a Content-Disposition value carrying the original filename.

    Emits both the ASCII fallback (filename=) and the RFC 5987 encoded form
    (filename*=) so non-ASCII names survive. The filename is untrusted
    input: quotes, backslashes and control characters never reach the
    quoted form.

    Args:
        filename: Original (display) filename.
        disposition: "attachment" (force download) or "inline".

    Returns:
        Header value, e.g. attachment; filename="a.txt"; filename*=UTF-8''a.txt
    """
    encoded = quote(filename, safe="")
    return (
        f'{disposition}; filename="{_ascii_fallback(filename)}"; '
        f"filename*=UTF-8''{encoded}"
    )
