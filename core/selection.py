"""
Date range picker state.

One state machine serves every page's picker:

    Empty --click(d)--> AnchoredAt(d) --click(d2)--> Committed(min, max)
    Committed --click(d3)--> AnchoredAt(d3)

DateRangePicker wraps it with the open/closed flag and the month cursor,
and month_grid() turns it into a calendar view model for templates.
"""
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Mapping, Optional, Union

from core.dates import days_in_month, first_weekday_of_month, shift_month, to_key
from core.filters import DateRange, Preset, resolve_preset
from core.query import merge_query


@dataclass(frozen=True)
class Empty:
    """No endpoint chosen yet."""


@dataclass(frozen=True)
class AnchoredAt:
    """One endpoint chosen, waiting for the second click."""
    anchor: date


@dataclass(frozen=True)
class Committed:
    """Both endpoints chosen; the next click starts over."""
    range: DateRange


SelectionState = Union[Empty, AnchoredAt, Committed]


class RangeSelection:
    """Two-click range selection. Every click is valid input."""

    def __init__(self, state: Optional[SelectionState] = None):
        self.state: SelectionState = state or Empty()

    def click(self, day: date) -> SelectionState:
        if isinstance(self.state, AnchoredAt):
            self.state = Committed(DateRange.ordered(self.state.anchor, day))
        else:
            self.state = AnchoredAt(day)
        return self.state

    def reset(self) -> None:
        self.state = Empty()

    @property
    def committed_range(self) -> Optional[DateRange]:
        if isinstance(self.state, Committed):
            return self.state.range
        return None

    def is_in_range(self, day: date) -> bool:
        if isinstance(self.state, Committed):
            return self.state.range.start <= day <= self.state.range.end
        if isinstance(self.state, AnchoredAt):
            return day == self.state.anchor
        return False

    def is_endpoint(self, day: date) -> bool:
        if isinstance(self.state, Committed):
            return day in (self.state.range.start, self.state.range.end)
        if isinstance(self.state, AnchoredAt):
            return day == self.state.anchor
        return False

    @classmethod
    def replay(cls, clicks: List[date]) -> "RangeSelection":
        """Rebuild a selection from the clicks made so far."""
        selection = cls()
        for day in clicks:
            selection.click(day)
        return selection


class DateRangePicker:
    """
    Picker surface state: open flag, in-progress selection, month cursor.

    The selection is never persisted; only commit() produces a query.
    """

    def __init__(self, today: date):
        self.today = today
        self.is_open = False
        self.selection = RangeSelection()
        self.view_year = today.year
        self.view_month = today.month

    def open(self, current: Optional[DateRange] = None) -> None:
        """Open the picker with an empty selection, viewing the current start month."""
        self.is_open = True
        self.selection.reset()
        focus = (current.start if current and current.start else None) or self.today
        self.view_year, self.view_month = focus.year, focus.month

    def close(self) -> None:
        """Close without committing; the selection is discarded."""
        self.is_open = False
        self.selection.reset()

    def toggle(self, current: Optional[DateRange] = None) -> None:
        if self.is_open:
            self.close()
        else:
            self.open(current)

    def click(self, day: date) -> SelectionState:
        return self.selection.click(day)

    def apply_preset(self, preset: Union[Preset, str], now: Optional[date] = None) -> DateRange:
        """Select the preset's range; the picker stays open for review."""
        resolved = resolve_preset(preset, now or self.today)
        if resolved.is_unbounded:
            self.selection.reset()
        else:
            self.selection.state = Committed(resolved)
        return resolved

    def previous_month(self) -> None:
        self.view_year, self.view_month = shift_month(self.view_year, self.view_month, -1)

    def next_month(self) -> None:
        self.view_year, self.view_month = shift_month(self.view_year, self.view_month, 1)

    def pending_range(self) -> DateRange:
        """Range that commit() would write (a lone anchor commits that single day)."""
        state = self.selection.state
        if isinstance(state, Committed):
            return state.range
        if isinstance(state, AnchoredAt):
            return DateRange(state.anchor, state.anchor)
        return DateRange()

    def commit(self, current_query: Mapping[str, str]) -> Dict[str, str]:
        """Write the selection into the query (other keys kept) and close."""
        query = merge_query(current_query, self.pending_range())
        self.is_open = False
        self.selection.reset()
        return query

    def grid(self) -> "MonthGrid":
        return month_grid(self.view_year, self.view_month, self.selection)


@dataclass(frozen=True)
class DayCell:
    day: int
    key: str
    in_range: bool
    endpoint: bool


@dataclass(frozen=True)
class MonthGrid:
    year: int
    month: int
    leading_blanks: int
    days: List[DayCell]

    @property
    def title(self) -> str:
        return date(self.year, self.month, 1).strftime("%B %Y")


WEEKDAY_HEADERS = ("Su", "Mo", "Tu", "We", "Th", "Fr", "Sa")


def month_grid(year: int, month: int, selection: RangeSelection) -> MonthGrid:
    """Calendar cells for one month with range highlighting."""
    cells = []
    for day_number in range(1, days_in_month(year, month) + 1):
        day = date(year, month, day_number)
        cells.append(DayCell(
            day=day_number,
            key=to_key(day),
            in_range=selection.is_in_range(day),
            endpoint=selection.is_endpoint(day),
        ))
    return MonthGrid(year, month, first_weekday_of_month(year, month), cells)
