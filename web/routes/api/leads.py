"""Lead and lead-flow endpoints."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from web.schemas import LeadFlowResponse, LeadsResponse
from web.services import dashboard_service
from ._deps import (
    limiter, get_sheets, get_today, build_filter_query,
    SheetsClient, ValidationError,
)

router = APIRouter()


@router.get("/leads", response_model=LeadsResponse)
@limiter.limit("30/minute")
async def get_leads(
    request: Request,
    start: Optional[str] = Query(None, description="Start date (YYYY-MM-DD)"),
    end: Optional[str] = Query(None, description="End date (YYYY-MM-DD)"),
    preset: Optional[str] = Query(None, description="Preset key; overrides start/end"),
    client: SheetsClient = Depends(get_sheets),
    today: date = Depends(get_today),
):
    """Lead volume, qualification rate and cash-on-hand breakdown."""
    try:
        query = build_filter_query(start, end, {}, preset=preset, today=today)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return await dashboard_service.get_leads_view(client, query, today)


@router.get("/lead-flow", response_model=LeadFlowResponse)
@limiter.limit("30/minute")
async def get_lead_flow(
    request: Request,
    start: Optional[str] = Query(None, description="Start date (YYYY-MM-DD)"),
    end: Optional[str] = Query(None, description="End date (YYYY-MM-DD)"),
    preset: Optional[str] = Query(None, description="Preset key; overrides start/end"),
    source: Optional[str] = Query(None, description="Exact utm_source match"),
    goal: Optional[str] = Query(None, description="Exact goal match"),
    client: SheetsClient = Depends(get_sheets),
    today: date = Depends(get_today),
):
    """Lead-flow applications broken down by source, goal, revenue and investment."""
    try:
        query = build_filter_query(
            start, end, {"source": source, "goal": goal}, preset=preset, today=today,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return await dashboard_service.get_lead_flow_view(client, query, today)
