"""
FastAPI application entry point.

Sets up middleware, error handling, health/setup endpoints and routers.
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from routers import (
    admin,
    athletes,
    auth,
    contact_requests,
    conversations,
    discussions,
    feed,
    notifications,
    onboarding,
    profile,
    schools,
    search,
    shortlist,
    stats_providers,
)
from core.config import settings
from core.database import check_db_connection, is_configured
from core.logging import setup_logging
from core.exceptions import APIException
from core.rate_limit import RateLimitMiddleware
from core.security_headers import SecurityHeadersMiddleware
from services.stats_providers import StatsProviderRegistry
import logging
import time

APP_VERSION = "1.0.0"

setup_logging()
logger = logging.getLogger(__name__)

if settings.SENTRY_DSN:
    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.ENVIRONMENT,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                SqlalchemyIntegration(),
            ],
            send_default_pii=False,
            before_send=lambda event, hint: _filter_sensitive_data(event),
        )
        logger.info(f"Sentry initialized for environment: {settings.ENVIRONMENT}")
    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}")


def _filter_sensitive_data(event):
    """Strip credentials before sending to Sentry."""
    if "request" in event and "headers" in event["request"]:
        headers = event["request"]["headers"]
        if isinstance(headers, dict):
            headers.pop("authorization", None)
            headers.pop("cookie", None)
    return event


app = FastAPI(
    title="Recruiting Marketplace API",
    description="Connects high-school athletes with college coaches: profiles, school interest, search, messaging and forums",
    version=APP_VERSION,
    docs_url="/docs" if (settings.DEBUG or settings.EXPOSE_API_DOCS) else None,
    redoc_url="/redoc" if (settings.DEBUG or settings.EXPOSE_API_DOCS) else None,
)

if settings.DEBUG:
    allowed_origins = ["*"]
elif settings.CORS_ORIGINS:
    allowed_origins = [origin.strip() for origin in settings.CORS_ORIGINS.split(",")]
else:
    allowed_origins = [settings.WEB_APP_BASE_URL, "http://localhost:3000", "http://127.0.0.1:3000"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(SecurityHeadersMiddleware)

if settings.RATE_LIMIT_ENABLED:
    app.add_middleware(
        RateLimitMiddleware,
        default_limit=settings.RATE_LIMIT_PER_MINUTE,
        window=60,
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing information."""
    start_time = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(
            f"Request failed: {request.method} {request.url.path}",
            exc_info=True,
            extra={
                "extra_fields": {
                    "method": request.method,
                    "path": request.url.path,
                    "error": str(e),
                }
            }
        )
        raise

    process_time = time.time() - start_time
    logger.info(
        f"Response: {request.method} {request.url.path} - {response.status_code}",
        extra={
            "extra_fields": {
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "process_time_ms": round(process_time * 1000, 2),
                "client_ip": request.client.host if request.client else None,
            }
        }
    )
    response.headers["X-Process-Time"] = str(process_time)
    return response


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "")


@app.exception_handler(APIException)
async def api_exception_handler(request: Request, exc: APIException):
    """
    Browsers hitting a gated page are redirected to the UI route the error
    names (sign-in, profile, dashboard); API clients get JSON with the same
    route in `redirect_to`.
    """
    if exc.redirect_to and _wants_html(request):
        return RedirectResponse(
            url=f"{settings.WEB_APP_BASE_URL.rstrip('/')}{exc.redirect_to}",
            status_code=status.HTTP_307_TEMPORARY_REDIRECT,
        )

    content = {"detail": exc.detail, "error_code": exc.error_code}
    if exc.redirect_to:
        content["redirect_to"] = exc.redirect_to
    if exc.error_code == "SETUP_REQUIRED":
        content["setup_required"] = True
        content["missing"] = getattr(exc, "missing", [])
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(
        f"Unhandled exception: {exc}",
        exc_info=True,
        extra={
            "extra_fields": {
                "method": request.method,
                "path": request.url.path,
            }
        }
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def _setup_status() -> dict:
    missing = settings.missing_setup_keys
    return {"setup_required": bool(missing), "missing": missing}


@app.get("/health")
async def health():
    """
    Health check for load balancers.

    - 200: database reachable
    - 503: database unreachable, or not configured (setup_required)
    """
    setup = _setup_status()
    if setup["setup_required"]:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "setup_required", **setup},
        )

    if not check_db_connection():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unhealthy", "database": "unavailable"},
        )

    return {"status": "healthy", "timestamp": time.time()}


@app.get("/health/detailed")
async def health_detailed():
    """Per-dependency status for dashboards. Always 200."""
    from core.cache import get_redis_client

    checks = {
        "database": {"status": "unconfigured" if not is_configured() else "unknown", "latency_ms": None},
        "redis": {"status": "unknown", "latency_ms": None},
    }

    if is_configured():
        start = time.time()
        checks["database"]["status"] = "healthy" if check_db_connection() else "unhealthy"
        checks["database"]["latency_ms"] = round((time.time() - start) * 1000, 2)

    start = time.time()
    try:
        client = get_redis_client()
        if client:
            client.ping()
            checks["redis"]["status"] = "healthy"
        else:
            checks["redis"]["status"] = "unavailable"
        checks["redis"]["latency_ms"] = round((time.time() - start) * 1000, 2)
    except Exception as e:
        checks["redis"]["status"] = "error"
        checks["redis"]["error"] = str(e)

    return {
        "status": "healthy" if checks["database"]["status"] == "healthy" else "degraded",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": time.time(),
        "checks": checks,
        "stats_providers": [p.name for p in StatsProviderRegistry.list_providers()],
        **_setup_status(),
    }


@app.get("/v1/setup")
async def setup_status():
    """What the UI needs to render (or skip) its setup-required banner."""
    return _setup_status()


@app.get("/ping")
async def ping():
    """No dependencies checked."""
    return {"pong": True}


app.include_router(auth.router)
app.include_router(auth.callback_router)
app.include_router(onboarding.router)
app.include_router(profile.router)
app.include_router(athletes.router)
app.include_router(search.router)
app.include_router(shortlist.router)
app.include_router(schools.router)
app.include_router(contact_requests.router)
app.include_router(conversations.router)
app.include_router(notifications.router)
app.include_router(feed.router)
app.include_router(discussions.router)
app.include_router(admin.router)
app.include_router(stats_providers.router)
