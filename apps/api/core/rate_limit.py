"""
Rate Limiting Middleware

Fixed-window request counting in Redis, per caller (user id or IP) and
endpoint group. Fails open when Redis is unavailable.
"""
import time
import logging
from typing import Tuple
from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from core.config import settings
from core.cache import get_redis_client
from core.security import get_user_id_from_token

logger = logging.getLogger(__name__)

EXEMPT_PATHS = {"/health", "/ping", "/docs", "/openapi.json", "/redoc"}

# Tighter limits per path prefix (requests per window); longest prefix wins.
ENDPOINT_LIMITS = {
    "/v1/auth/signin": 10,
    "/v1/auth/signup": 5,
    "/v1/contact-requests": 20,
    "/v1/discussions/reports": 10,
    "/v1/admin": 50,
}


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Rate limiting middleware (fixed window per key)."""

    def __init__(self, app, default_limit: int = 60, window: int = 60):
        super().__init__(app)
        self.default_limit = default_limit
        self.window = window  # seconds

    async def dispatch(self, request: Request, call_next):
        if not settings.RATE_LIMIT_ENABLED or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        bucket, limit = self._bucket_for(request.url.path)
        allowed, remaining, reset_time = self._hit(f"rate_limit:{self._caller(request)}:{bucket}", limit)

        headers = {
            "X-RateLimit-Limit": str(limit),
            "X-RateLimit-Remaining": str(remaining),
            "X-RateLimit-Reset": str(reset_time),
        }
        if not allowed:
            headers["Retry-After"] = str(max(0, reset_time - int(time.time())))
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": "Rate limit exceeded", "error_code": "RATE_LIMITED", "reset_at": reset_time},
                headers=headers,
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response

    def _caller(self, request: Request) -> str:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            user_id = get_user_id_from_token(auth_header.split(" ", 1)[1])
            if user_id:
                return f"user:{user_id}"
        return f"ip:{request.client.host if request.client else 'unknown'}"

    def _bucket_for(self, path: str) -> Tuple[str, int]:
        matches = [prefix for prefix in ENDPOINT_LIMITS if path.startswith(prefix)]
        if matches:
            prefix = max(matches, key=len)
            return prefix, ENDPOINT_LIMITS[prefix]
        return "default", self.default_limit

    def _hit(self, key: str, limit: int) -> Tuple[bool, int, int]:
        """
        Count one request against the key's window.

        Returns:
            (allowed, remaining, reset_time)
        """
        now = int(time.time())
        redis_client = get_redis_client()
        if not redis_client:
            return True, limit, now + self.window

        try:
            pipe = redis_client.pipeline()
            pipe.incr(key)
            pipe.ttl(key)
            count, ttl = pipe.execute()
            if ttl < 0:
                redis_client.expire(key, self.window)
                ttl = self.window
        except Exception as e:
            logger.error(f"Rate limit check error: {e}")
            return True, limit, now + self.window

        return count <= limit, max(0, limit - count), now + ttl
