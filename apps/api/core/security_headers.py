"""
Security Headers Middleware

Adds the standard hardening headers to every response.
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from core.config import settings


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds security headers to all responses.

    Strict-Transport-Security and Content-Security-Policy are only sent
    outside DEBUG.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = (
            "camera=(), "
            "geolocation=(), "
            "microphone=(), "
            "payment=(), "
            "usb=()"
        )

        if not settings.DEBUG:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
            # JSON API: nothing here should ever be framed or load sub-resources.
            response.headers["Content-Security-Policy"] = (
                "default-src 'none'; "
                f"connect-src 'self' {settings.WEB_APP_BASE_URL}; "
                "frame-ancestors 'none';"
            )

        return response
