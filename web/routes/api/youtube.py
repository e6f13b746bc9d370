"""YouTube attribution, archive toggling and tracking-link generation."""
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from core.archive import ArchiveStore
from core.attribution import build_tracking_link, extract_video_id
from web.schemas import ArchiveToggleResponse, TrackingLinkResponse, YouTubeResponse
from web.services import dashboard_service
from ._deps import (
    limiter, get_sheets, get_today, get_archive_store, build_filter_query,
    validate_video_id, SheetsClient, ValidationError,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/youtube", response_model=YouTubeResponse)
@limiter.limit("30/minute")
async def get_youtube(
    request: Request,
    start: Optional[str] = Query(None, description="Start date (YYYY-MM-DD)"),
    end: Optional[str] = Query(None, description="End date (YYYY-MM-DD)"),
    preset: Optional[str] = Query(None, description="Preset key; overrides start/end"),
    sort: Optional[str] = Query(None, description="aov, cash_call, cash_app or cash_optin"),
    client: SheetsClient = Depends(get_sheets),
    store: ArchiveStore = Depends(get_archive_store),
    today: date = Depends(get_today),
):
    """Per-video funnel stats joined from leads and sales calls."""
    try:
        query = build_filter_query(start, end, {}, sort=sort, preset=preset, today=today)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return await dashboard_service.get_youtube_view(client, query, store.load(), today)


@router.post("/youtube/archive/{video_id}", response_model=ArchiveToggleResponse)
@limiter.limit("30/minute")
async def toggle_archive(
    request: Request,
    video_id: str,
    store: ArchiveStore = Depends(get_archive_store),
):
    """Archive a video, or restore it if already archived."""
    try:
        validate_video_id(video_id)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    archived = store.toggle(video_id)
    store.persist(archived)
    logger.info(f"Video {video_id} {'archived' if video_id in archived else 'restored'}")
    return {
        "video_id": video_id,
        "archived": video_id in archived,
        "archived_ids": sorted(archived),
    }


@router.get("/utm", response_model=TrackingLinkResponse)
@limiter.limit("60/minute")
async def get_tracking_link(
    request: Request,
    base_url: Optional[str] = Query(None, description="Landing page URL"),
    video_url: Optional[str] = Query(None, description="YouTube URL or video ID"),
):
    """Build a UTM-tagged landing-page link for a video."""
    video_id = extract_video_id(video_url)
    return {"video_id": video_id, "link": build_tracking_link(base_url, video_id)}
