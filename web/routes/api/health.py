"""Health check and metrics endpoints."""
import time

from fastapi import APIRouter, Request

from core.config import config
from core.observability import get_correlation_id, metrics
from web.config import VERSION
from web.schemas import HealthResponse, MetricsResponse
from ._deps import limiter, get_logger, START_TIME

router = APIRouter()
logger = get_logger(__name__)


@router.get("/health", response_model=HealthResponse)
@limiter.limit("60/minute")
async def health_check(request: Request):
    """Health check endpoint for Docker/load balancer monitoring."""
    sheets = config.sheets
    configured = bool(sheets.has_credentials and sheets.sales_sheet_id and sheets.lead_flow_sheet_id)
    if not configured:
        logger.debug("Health check: sheets not configured")

    return {
        "status": "healthy" if configured else "degraded",
        "version": VERSION,
        "uptime_seconds": int(time.time() - START_TIME),
        "correlation_id": get_correlation_id(),
        "sheets_configured": configured,
    }


@router.get("/metrics", response_model=MetricsResponse)
@limiter.limit("60/minute")
async def get_metrics_endpoint(request: Request):
    """Get application metrics."""
    return {
        "uptime_seconds": int(time.time() - START_TIME),
        "correlation_id": get_correlation_id(),
        **metrics.get_stats(),
    }
