"""Date picker endpoints: resolved presets and calendar grids."""
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from core.filters import PRESETS, resolve_preset
from core.query import decode
from web.schemas import CalendarResponse, PresetResponse
from web.services.picker_service import calendar_view, restore_picker
from ._deps import (
    limiter, get_today, validate_month, validate_picks,
    ValidationError,
)

router = APIRouter()


@router.get("/presets", response_model=List[PresetResponse])
@limiter.limit("60/minute")
async def get_presets(request: Request, today: date = Depends(get_today)):
    """Preset shortcuts resolved against today."""
    result = []
    for preset in PRESETS:
        resolved = resolve_preset(preset, today)
        result.append({
            "key": preset.key,
            "label": preset.label,
            "start": resolved.start_str,
            "end": resolved.end_str,
        })
    return result


@router.get("/calendar", response_model=CalendarResponse)
@limiter.limit("60/minute")
async def get_calendar(
    request: Request,
    month: Optional[str] = Query(None, description="Calendar month (YYYY-MM)"),
    pick: List[str] = Query(default=[], description="Clicks so far (YYYY-MM-DD)"),
    start: Optional[str] = Query(None, description="Committed start (YYYY-MM-DD)"),
    end: Optional[str] = Query(None, description="Committed end (YYYY-MM-DD)"),
    today: date = Depends(get_today),
):
    """
    Picker calendar for one month.

    Clicks are replayed through the selection state machine, so the
    response shows exactly what the picker would highlight.
    """
    try:
        cursor = validate_month(month)
        picks = validate_picks(pick)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    # A malformed committed range is dropped, as on the pages
    current, _ = decode({"start": start or "", "end": end or ""}, extra_keys=())

    picker = restore_picker(today, current, picks, cursor)
    return calendar_view(picker)
