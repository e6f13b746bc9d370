"""Sales-call KPIs, trend and recent calls."""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from web.schemas import SalesResponse
from web.services import dashboard_service
from ._deps import (
    limiter, get_sheets, get_today, build_filter_query,
    SheetsClient, ValidationError,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/sales", response_model=SalesResponse)
@limiter.limit("30/minute")
async def get_sales(
    request: Request,
    start: Optional[str] = Query(None, description="Start date (YYYY-MM-DD)"),
    end: Optional[str] = Query(None, description="End date (YYYY-MM-DD)"),
    preset: Optional[str] = Query(None, description="Preset key; overrides start/end"),
    platform: Optional[str] = Query(None, description="Exact platform match"),
    closer: Optional[str] = Query(None, description="Exact closer name"),
    setter: Optional[str] = Query(None, description="Exact setter name"),
    client: SheetsClient = Depends(get_sheets),
    today: date = Depends(get_today),
):
    """Sales dashboard: cash, show/close rates, daily cash trend."""
    try:
        query = build_filter_query(
            start, end, {"platform": platform, "closer": closer, "setter": setter},
            preset=preset, today=today,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return await dashboard_service.get_sales_view(client, query, today)
