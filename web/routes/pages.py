"""
Page routes for serving the server-rendered dashboard.

Every page decodes its filters from the URL, renders the shared picker
partial and redirects `?preset=` links to the canonical start/end URL.
"""
import logging
from datetime import date
from typing import Any, Dict, Iterable, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from core.archive import ArchiveStore
from core.attribution import SORT_KEYS, build_tracking_link, extract_video_id
from core.config import config
from core.filters import resolve_preset
from core.query import FilterQuery, build_url, merge_query
from core.sheets import SheetsClient
from web.config import TEMPLATES_DIR, VERSION
from web.routes.api._deps import (
    get_archive_store,
    get_sheets,
    get_today,
    validate_month,
    validate_picks,
    validate_preset,
    validate_sort,
    validate_video_id,
    ValidationError,
)
from web.services import dashboard_service
from web.services.picker_service import PICKER_KEYS, build_picker_view, restore_picker

router = APIRouter(tags=["pages"])
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
logger = logging.getLogger(__name__)

PRESET_KEY = "preset"

NAV_LINKS = (
    ("/", "Sales"),
    ("/leads", "Leads"),
    ("/lead-flow", "Lead Flow"),
    ("/youtube", "YouTube"),
)


# ─── Shared page plumbing ─────────────────────────────────────────────────────

def _preset_redirect(request: Request, today: date) -> Optional[RedirectResponse]:
    """Resolve ?preset= into start/end and redirect; None when absent."""
    raw = request.query_params.get(PRESET_KEY)
    if raw is None:
        return None

    params = {
        k: v for k, v in request.query_params.items()
        if k != PRESET_KEY and k not in PICKER_KEYS
    }
    try:
        preset = validate_preset(raw)
    except ValidationError as e:
        logger.warning(f"Ignoring preset: {e}")
        preset = None
    if preset is not None:
        params = merge_query(params, resolve_preset(preset, today))
    return RedirectResponse(build_url(request.url.path, params), status_code=302)


def _page_query(request: Request, extra_keys: Iterable[str]) -> FilterQuery:
    query = FilterQuery.from_params(request.query_params, extra_keys)
    return FilterQuery(query.date_range, query.extras, validate_sort(query.sort))


def _picker_context(request: Request, query: FilterQuery, today: date) -> Dict[str, Any]:
    params = request.query_params
    try:
        picks = validate_picks(params.getlist("pick"))
        month = validate_month(params.get("month"))
    except ValidationError as e:
        logger.warning(f"Resetting picker state: {e}")
        picks, month = [], None

    picker = restore_picker(today, query.date_range, picks, month, is_open=params.get("open") == "1")
    return build_picker_view(request.url.path, query.to_params(), picker, query.date_range)


def _render(
    request: Request,
    template: str,
    query: FilterQuery,
    today: date,
    view: Dict[str, Any],
    **context: Any,
) -> HTMLResponse:
    return templates.TemplateResponse(request, template, {
        "version": VERSION,
        "nav_links": NAV_LINKS,
        "current_path": request.url.path,
        "query": query,
        "view": view,
        "picker": _picker_context(request, query, today),
        **context,
    })


# ─── Pages ────────────────────────────────────────────────────────────────────

@router.get("/", response_class=HTMLResponse)
async def sales_page(
    request: Request,
    client: SheetsClient = Depends(get_sheets),
    today: date = Depends(get_today),
):
    """Sales dashboard."""
    redirect = _preset_redirect(request, today)
    if redirect:
        return redirect

    query = _page_query(request, config.dashboard.sales_filter_keys)
    view = await dashboard_service.get_sales_view(client, query, today)
    return _render(request, "sales.html", query, today, view)


@router.get("/leads", response_class=HTMLResponse)
async def leads_page(
    request: Request,
    client: SheetsClient = Depends(get_sheets),
    today: date = Depends(get_today),
):
    """Lead qualification dashboard."""
    redirect = _preset_redirect(request, today)
    if redirect:
        return redirect

    query = _page_query(request, ())
    view = await dashboard_service.get_leads_view(client, query, today)
    return _render(request, "leads.html", query, today, view)


@router.get("/lead-flow", response_class=HTMLResponse)
async def lead_flow_page(
    request: Request,
    client: SheetsClient = Depends(get_sheets),
    today: date = Depends(get_today),
):
    """Lead-flow application breakdowns."""
    redirect = _preset_redirect(request, today)
    if redirect:
        return redirect

    query = _page_query(request, config.dashboard.lead_flow_filter_keys)
    view = await dashboard_service.get_lead_flow_view(client, query, today)
    return _render(request, "lead_flow.html", query, today, view)


@router.get("/youtube", response_class=HTMLResponse)
async def youtube_page(
    request: Request,
    client: SheetsClient = Depends(get_sheets),
    store: ArchiveStore = Depends(get_archive_store),
    today: date = Depends(get_today),
):
    """YouTube attribution with archive controls and the UTM link builder."""
    redirect = _preset_redirect(request, today)
    if redirect:
        return redirect

    query = _page_query(request, ())
    view = await dashboard_service.get_youtube_view(client, query, store.load(), today)

    base_url = request.query_params.get("base_url") or config.attribution.default_landing_url
    video_url = request.query_params.get("video_url") or ""
    tracking_link = None
    if video_url:
        tracking_link = build_tracking_link(base_url, extract_video_id(video_url))

    return _render(
        request, "youtube.html", query, today, view,
        sort_links=[
            (key, build_url("/youtube", {**query.to_params(), "sort": key})) for key in SORT_KEYS
        ],
        archive_query=build_url("", query.to_params()),
        base_url=base_url,
        video_url=video_url,
        tracking_link=tracking_link,
    )


@router.post("/youtube/archive/{video_id}")
async def toggle_archive(
    request: Request,
    video_id: str,
    store: ArchiveStore = Depends(get_archive_store),
):
    """Archive or restore a video, then return to the page with its filters."""
    try:
        validate_video_id(video_id)
    except ValidationError as e:
        logger.warning(f"Archive toggle rejected: {e}")
    else:
        store.persist(store.toggle(video_id))

    query = _page_query(request, ())
    return RedirectResponse(build_url("/youtube", query.to_params()), status_code=303)
