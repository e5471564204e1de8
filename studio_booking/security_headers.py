"""
Security headers middleware.

The API only serves JSON, so the content policy forbids everything except
same-origin requests and framing by the studio website (the booking widget).
"""

import logging
from typing import Callable, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from . import config

logger = logging.getLogger(__name__)


def get_csp_policy() -> str:
    frame_ancestors = " ".join(origin.strip() for origin in config.ALLOWED_ORIGINS if origin.strip())
    directives = [
        "default-src 'none'",
        f"frame-ancestors 'self' {frame_ancestors}".rstrip(),
        "base-uri 'none'",
        "form-action 'self'",
    ]
    return "; ".join(directives)


def get_permissions_policy() -> str:
    features = ["camera=()", "geolocation=()", "microphone=()", "payment=()", "usb=()"]
    return ", ".join(features)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds security headers to every response except excluded paths (health checks)"""

    def __init__(self, app, exclude_paths: Optional[list[str]] = None):
        super().__init__(app)
        self.exclude_paths = exclude_paths or []

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        if any(request.url.path.startswith(path) for path in self.exclude_paths):
            return response

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = get_csp_policy()
        response.headers["Permissions-Policy"] = get_permissions_policy()

        if config.IS_PRODUCTION:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        # Availability changes with every booking
        if "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store"

        return response
