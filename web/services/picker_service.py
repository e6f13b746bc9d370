"""
Date picker rendering adapter for server-rendered pages.

The picker lives entirely in the URL while it is open:

    open=1        picker shown
    pick=<date>   clicks so far (0-2), replayed through RangeSelection
    month=YYYY-MM calendar cursor

Every calendar cell, preset and navigation control is a link that carries
the page's filter query plus the next picker state. Apply writes start/end
from the selection (with nothing picked it behaves like Cancel), and the
All Time preset clears them directly. Cancel drops the picker keys and keeps
the committed range untouched.
"""
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple

from core.dates import shift_month
from core.filters import PRESETS, DateRange, get_range_label, resolve_preset
from core.query import build_url, merge_query
from core.selection import WEEKDAY_HEADERS, AnchoredAt, Committed, DateRangePicker

OPEN_KEY = "open"
PICK_KEY = "pick"
MONTH_KEY = "month"
PICKER_KEYS = (OPEN_KEY, PICK_KEY, MONTH_KEY)


def month_key(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def restore_picker(
    today: date,
    current: DateRange,
    picks: List[date],
    month: Optional[Tuple[int, int]] = None,
    is_open: bool = True,
) -> DateRangePicker:
    """Rebuild picker state from its URL keys."""
    picker = DateRangePicker(today)
    if not is_open:
        return picker
    picker.open(current)
    for day in picks:
        picker.click(day)
    if month:
        picker.view_year, picker.view_month = month
    return picker


def selection_state_name(picker: DateRangePicker) -> str:
    state = picker.selection.state
    if isinstance(state, Committed):
        return "committed"
    if isinstance(state, AnchoredAt):
        return "anchored"
    return "empty"


def selection_picks(picker: DateRangePicker) -> List[date]:
    """Clicks that reproduce the current selection when replayed."""
    state = picker.selection.state
    if isinstance(state, Committed):
        return [state.range.start, state.range.end]
    if isinstance(state, AnchoredAt):
        return [state.anchor]
    return []


def calendar_view(picker: DateRangePicker) -> Dict[str, Any]:
    """Calendar grid and pending selection as plain data."""
    grid = picker.grid()
    pending = picker.pending_range()
    prev_year, prev_month = shift_month(grid.year, grid.month, -1)
    next_year, next_month = shift_month(grid.year, grid.month, 1)
    return {
        "year": grid.year,
        "month": grid.month,
        "title": grid.title,
        "leading_blanks": grid.leading_blanks,
        "weekdays": list(WEEKDAY_HEADERS),
        "days": [
            {"day": c.day, "key": c.key, "in_range": c.in_range, "endpoint": c.endpoint}
            for c in grid.days
        ],
        "state": selection_state_name(picker),
        "pending": {
            "start": pending.start_str,
            "end": pending.end_str,
            "label": get_range_label(pending),
        },
        "previous_month": month_key(prev_year, prev_month),
        "next_month": month_key(next_year, next_month),
    }


def build_picker_view(
    path: str,
    params: Mapping[str, str],
    picker: DateRangePicker,
    current: DateRange,
) -> Dict[str, Any]:
    """
    Template context for the shared picker partial.

    Args:
        path: Page path the links point back to
        params: The page's filter query, without picker keys
        picker: Restored picker state
        current: Committed range from the URL
    """
    base = {k: v for k, v in params.items() if k not in PICKER_KEYS}

    view: Dict[str, Any] = {
        "is_open": picker.is_open,
        "label": get_range_label(current, picker.today),
        "toggle_url": build_url(path, base) if picker.is_open else build_url(path, {**base, OPEN_KEY: "1"}),
    }
    if not picker.is_open:
        return view

    view_month = month_key(picker.view_year, picker.view_month)
    picks = [d.isoformat() for d in selection_picks(picker)]

    def picker_url(next_picks: List[str], cursor: str) -> str:
        return build_url(path, {**base, OPEN_KEY: "1", PICK_KEY: next_picks, MONTH_KEY: cursor})

    anchor = picker.selection.state.anchor if isinstance(picker.selection.state, AnchoredAt) else None
    calendar = calendar_view(picker)
    for cell in calendar["days"]:
        next_picks = [anchor.isoformat(), cell["key"]] if anchor else [cell["key"]]
        cell["url"] = picker_url(next_picks, view_month)

    presets = []
    for preset in PRESETS:
        resolved = resolve_preset(preset, picker.today)
        if resolved.is_unbounded:
            url = build_url(path, merge_query(base, resolved))
        else:
            url = picker_url([resolved.start_str, resolved.end_str], view_month)
        presets.append({
            "key": preset.key,
            "label": preset.label,
            "url": url,
            "active": picker.pending_range() == resolved and picker.selection.committed_range is not None,
        })

    cancel_url = build_url(path, base)
    # Nothing picked yet: applying keeps the committed range
    if selection_state_name(picker) == "empty":
        apply_url = cancel_url
    else:
        apply_url = build_url(path, picker.commit(base))

    view.update({
        "calendar": calendar,
        "presets": presets,
        "previous_url": picker_url(picks, calendar["previous_month"]),
        "next_url": picker_url(picks, calendar["next_month"]),
        "apply_url": apply_url,
        "cancel_url": cancel_url,
        "reset_url": picker_url([], view_month),
    })
    return view
