"""
FastAPI web application for the Valhalla dashboard.
"""
import os
from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse, JSONResponse
from starlette.middleware.gzip import GZipMiddleware

from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from web.config import VERSION, WEB_HOST, WEB_PORT
from web.routes import api, pages
from web.routes.api._deps import limiter
from web.middleware import RequestLoggingMiddleware, RequestTimeoutMiddleware
from core.config import config, validate_config, ConfigurationError
from core.observability import setup_logging, get_logger
from core.sheets import get_sheets_client

# Configure structured logging
# Use JSON format in production (LOG_FORMAT=json), human-readable otherwise
log_format = os.getenv("LOG_FORMAT", "text")
log_level = os.getenv("LOG_LEVEL", "INFO")
setup_logging(level=log_level, json_format=(log_format == "json"))
logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Valhalla Dashboard",
    description="Sales, lead and YouTube attribution dashboard backed by Google Sheets",
    version=VERSION,
    default_response_class=ORJSONResponse
)

# Add rate limiter to app state
app.state.limiter = limiter

# Custom rate limit exceeded handler
@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    logger.warning(f"Rate limit exceeded for {get_remote_address(request)}")
    return JSONResponse(
        status_code=429,
        content={
            "error": "Rate limit exceeded",
            "detail": "Too many requests. Please try again later.",
            "retry_after": exc.detail
        }
    )

# Add request logging middleware (adds correlation IDs and timing)
app.add_middleware(RequestLoggingMiddleware)

# Must be AFTER logging so correlation_id is set when timeout fires
app.add_middleware(RequestTimeoutMiddleware)

# Add Gzip compression (min 500 bytes to compress)
app.add_middleware(GZipMiddleware, minimum_size=500)

# Include routers
app.include_router(pages.router)
app.include_router(api.router, prefix="/api")


@app.on_event("startup")
async def startup_event():
    logger.info("Valhalla Dashboard starting...")

    # Validate configuration early - fail fast with clear errors
    try:
        validate_config(require_sheets=True)
        logger.info("Configuration validated")
    except ConfigurationError as e:
        logger.critical(f"Configuration error: {e}")
        raise SystemExit(1)

    logger.info(
        f"Dashboard ready (timezone {config.dashboard.timezone}, "
        f"sheet cache {config.cache.ttl_seconds}s)"
    )


@app.on_event("shutdown")
async def shutdown_event():
    await get_sheets_client().invalidate()
    logger.info("Valhalla Dashboard stopped")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("web.main:app", host=WEB_HOST, port=WEB_PORT)
