import logging
from urllib.parse import urlparse

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.core.rate_limiter import rate_limiter
from app.logging_config import request_path_var, setup_logging
from app.routers import cv
from app.routers.cv import ANALYZE_PATHS, GENERATE_PATH

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="CV Gateway API",
    description="CV analysis relay to the scoring service, and CV PDF generation.",
    version="1.0.0",
)

cors_origins = [o.strip() for o in settings.cors_allow_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(cv.router)


@app.exception_handler(RequestValidationError)
async def invalid_body_handler(request, exc):
    logger.info("Invalid request body on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": "Invalid request body"})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    logger.exception("Unhandled server error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.middleware("http")
async def apply_rate_limits(request, call_next):
    path = request.url.path
    if request.method == "OPTIONS":
        return await call_next(request)

    client_ip = request.client.host if request.client else "unknown"
    limit = None
    if path in ANALYZE_PATHS:
        limit = settings.rate_limit_analyze_per_min
    elif path == GENERATE_PATH:
        limit = settings.rate_limit_generate_per_min

    if limit is not None and limit > 0:
        allowed, retry_after = rate_limiter.allow(f"{client_ip}:{path}", limit=limit, window_seconds=60)
        if not allowed:
            logger.info("Rate limit hit: ip=%s path=%s", client_ip, path)
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests. Please retry shortly."},
                headers={"Retry-After": str(retry_after)},
            )

    return await call_next(request)


# Registered last so it wraps the rate limiter too.
@app.middleware("http")
async def bind_request_path(request, call_next):
    token = request_path_var.set(f"{request.method} {request.url.path}")
    try:
        return await call_next(request)
    finally:
        request_path_var.reset(token)


@app.get("/health/live")
def health_live():
    return {"status": "ok"}


@app.on_event("startup")
def on_startup():
    logger.info("Starting CV Gateway API; scoring service at %s", settings.scoring_service_url)
    env = (settings.app_env or "development").lower()
    upstream_host = urlparse(settings.scoring_service_url).hostname
    if not upstream_host:
        raise RuntimeError(f"SCORING_SERVICE_URL is not a valid URL: {settings.scoring_service_url!r}")
    if env in {"production", "prod"}:
        if "*" in cors_origins:
            raise RuntimeError("Wildcard CORS origin is not allowed in production")
        if upstream_host in {"127.0.0.1", "localhost"}:
            logger.warning("SCORING_SERVICE_URL points at loopback in production. Set SCORING_SERVICE_URL in .env.")


@app.get("/")
def root():
    return {"message": "CV Gateway API. POST a PDF to /api/analyze-cv or CV JSON to /api/generate-cv."}
