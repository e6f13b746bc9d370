"""
Dashboard service: sheet rows in, page view models out.

Each page follows the same pipeline:
    fetch rows -> map columns -> filter by FilterQuery -> aggregate
The build_* functions are pure and take already-typed records; the get_*
coroutines add fetching through the sheets client.
"""
import logging
from dataclasses import asdict
from datetime import date
from typing import Any, Callable, Dict, FrozenSet, List, Sequence, Tuple, Type, TypeVar

from core.aggregation import (
    aggregate,
    daily_trend,
    filter_records,
    percentage,
    safe_divide,
    unique_values,
)
from core.attribution import attribute_calls, sort_video_stats, totals
from core.columns import ColumnMap, ColumnSpec
from core.config import config
from core.exceptions import MissingColumn
from core.filters import DateRange, get_range_label
from core.models import (
    LEAD_COLUMNS,
    LEAD_FLOW_COLUMNS,
    SALES_COLUMNS,
    Lead,
    LeadFlowSubmission,
    SalesCall,
)
from core.query import FilterQuery
from core.sheets import SheetData, SheetsClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ─── Loading ───────────────────────────────────────────────────────────────────

def map_records(
    sheet: SheetData,
    specs: Sequence[ColumnSpec],
    record_type: Type[T],
) -> Tuple[List[T], List[str]]:
    """
    Build typed records from a sheet.

    Returns:
        (records, warnings); a missing required column yields no records
        and one warning instead of an error page
    """
    if sheet.is_empty:
        return [], []
    try:
        columns = ColumnMap.build(sheet.headers, specs)
    except MissingColumn as e:
        logger.error(f"Cannot map {record_type.__name__} rows: {e}", extra={"headers": sheet.headers})
        return [], [str(e)]
    if columns.missing:
        logger.debug(f"{record_type.__name__}: optional columns not found: {columns.missing}")
    return [record_type.from_row(row, columns) for row in sheet.rows], []


async def load_sales_calls(client: SheetsClient) -> Tuple[List[SalesCall], List[str]]:
    sheet = await client.get_sheet(config.sheets.sales_sheet_id)
    return map_records(sheet, SALES_COLUMNS, SalesCall)


async def load_leads(client: SheetsClient) -> Tuple[List[Lead], List[str]]:
    sheet = await client.get_sheet(config.sheets.lead_flow_sheet_id)
    return map_records(sheet, LEAD_COLUMNS, Lead)


async def load_lead_flow(client: SheetsClient) -> Tuple[List[LeadFlowSubmission], List[str]]:
    sheet = await client.get_sheet(config.sheets.lead_flow_sheet_id)
    return map_records(sheet, LEAD_FLOW_COLUMNS, LeadFlowSubmission)


# ─── Shared helpers ────────────────────────────────────────────────────────────

def _trend(records: Sequence[Any], date_range: DateRange, value_of: Callable[[Any], float], today: date) -> List[Dict]:
    points = daily_trend(records, date_range, value_of, today, max_days=config.dashboard.max_trend_days)
    return [asdict(p) for p in points]


def _breakdown(records: Sequence[Any], key_fn: Callable[[Any], str]) -> List[Dict[str, Any]]:
    """Counts per key with share of total, most common first."""
    counts = aggregate(records).grouped_count_by(key_fn)
    total = len(records)
    return [
        {"label": label, "count": count, "percentage": round(percentage(count, total), 1)}
        for label, count in counts.items()
    ]


def _range_info(date_range: DateRange, today: date) -> Dict[str, Any]:
    return {
        "start": date_range.start_str,
        "end": date_range.end_str,
        "label": get_range_label(date_range, today),
    }


# ─── Sales ─────────────────────────────────────────────────────────────────────

def build_sales_view(
    calls: Sequence[SalesCall],
    leads: Sequence[Lead],
    query: FilterQuery,
    today: date,
) -> Dict[str, Any]:
    """Sales-call KPIs for the main dashboard."""
    performance = filter_records(calls, query.date_range, query.extras)
    applications = len(filter_records(leads, query.date_range))

    total_cash = aggregate(performance).sum_by_field("cash")
    mrr_cash = aggregate(c for c in performance if c.is_mrr).sum_by_field("cash")

    appointments = [c for c in performance if c.is_appointment]
    stats = aggregate(appointments)
    calls_due = stats.total_count
    calls_taken = stats.count_where(lambda c: c.is_taken)
    calls_closed = stats.count_where(lambda c: c.is_closed)

    return {
        "range": _range_info(query.date_range, today),
        "filters": dict(query.extras),
        "summary": {
            "total_cash": round(total_cash, 2),
            "mrr_cash": round(mrr_cash, 2),
            "new_cash": round(total_cash - mrr_cash, 2),
            "total_revenue": round(stats.sum_by_field("revenue"), 2),
            "applications": applications,
            "calls_due": calls_due,
            "calls_taken": calls_taken,
            "calls_closed": calls_closed,
            "show_rate": round(percentage(calls_taken, calls_due), 1),
            "close_rate": round(percentage(calls_closed, calls_taken), 1),
            "avg_cash_per_appointment": round(safe_divide(total_cash, calls_due), 2),
            "avg_cash_per_close": round(safe_divide(total_cash, calls_closed), 2),
            "avg_cash_per_application": round(safe_divide(total_cash, applications), 2),
        },
        "trend": _trend(performance, query.date_range, lambda c: c.cash, today),
        "recent_calls": [c.to_dict() for c in appointments[:config.dashboard.recent_rows_limit]],
        "options": {
            "platforms": unique_values(calls, "platform"),
            "closers": unique_values(calls, "closer"),
            "setters": unique_values(calls, "setter"),
        },
    }


async def get_sales_view(client: SheetsClient, query: FilterQuery, today: date) -> Dict[str, Any]:
    calls, call_warnings = await load_sales_calls(client)
    leads, lead_warnings = await load_leads(client)
    view = build_sales_view(calls, leads, query, today)
    view["warnings"] = call_warnings + lead_warnings
    return view


# ─── Leads ─────────────────────────────────────────────────────────────────────

def build_leads_view(leads: Sequence[Lead], query: FilterQuery, today: date) -> Dict[str, Any]:
    """Lead volume, qualification and cash-on-hand breakdown."""
    filtered = filter_records(leads, query.date_range)
    total = len(filtered)
    qualified = aggregate(filtered).count_where(lambda l: l.is_qualified)

    return {
        "range": _range_info(query.date_range, today),
        "summary": {
            "total_leads": total,
            "qualified_leads": qualified,
            "qualification_rate": round(percentage(qualified, total), 1),
        },
        "fund_breakdown": _breakdown(filtered, lambda l: l.funds or "Unknown"),
        "trend": _trend(filtered, query.date_range, lambda l: 1, today),
        "recent_leads": [l.to_dict() for l in filtered[:config.dashboard.recent_rows_limit]],
    }


async def get_leads_view(client: SheetsClient, query: FilterQuery, today: date) -> Dict[str, Any]:
    leads, warnings = await load_leads(client)
    view = build_leads_view(leads, query, today)
    view["warnings"] = warnings
    return view


# ─── Lead flow ─────────────────────────────────────────────────────────────────

def build_lead_flow_view(
    submissions: Sequence[LeadFlowSubmission],
    query: FilterQuery,
    today: date,
) -> Dict[str, Any]:
    """Application breakdowns for the lead-flow page."""
    filtered = filter_records(submissions, query.date_range, query.extras)
    over_time = aggregate(s for s in filtered if s.parsed_date).grouped_count_by(
        lambda s: s.parsed_date.date().isoformat()
    )

    return {
        "range": _range_info(query.date_range, today),
        "filters": dict(query.extras),
        "total_applicants": len(filtered),
        "applicants_over_time": [
            {"date": key, "count": over_time[key]} for key in sorted(over_time)
        ],
        "source_breakdown": _breakdown(filtered, lambda s: s.utm_source or "Unknown"),
        "revenue_breakdown": _breakdown(filtered, lambda s: s.monthly_rev or "Unknown"),
        "goal_breakdown": _breakdown(filtered, lambda s: s.goal or "Unknown"),
        "investment_breakdown": _breakdown(filtered, lambda s: s.investment_amount or "Unknown"),
        "options": {
            "sources": unique_values(submissions, "utm_source"),
            "goals": unique_values(submissions, "goal"),
        },
        "submissions": [s.to_dict() for s in filtered],
    }


async def get_lead_flow_view(client: SheetsClient, query: FilterQuery, today: date) -> Dict[str, Any]:
    submissions, warnings = await load_lead_flow(client)
    view = build_lead_flow_view(submissions, query, today)
    view["warnings"] = warnings
    return view


# ─── YouTube ───────────────────────────────────────────────────────────────────

def build_youtube_view(
    leads: Sequence[Lead],
    calls: Sequence[SalesCall],
    query: FilterQuery,
    archived: FrozenSet[str],
    today: date,
) -> Dict[str, Any]:
    """Per-video attribution, split into active and archived videos."""
    stats = attribute_calls(
        filter_records(leads, query.date_range),
        filter_records(calls, query.date_range),
    )
    ordered = sort_video_stats(stats, query.sort)
    active = [s for s in ordered if s.video_id not in archived]
    hidden = [s for s in ordered if s.video_id in archived]

    return {
        "range": _range_info(query.date_range, today),
        "sort": query.sort,
        "totals": totals(active).to_dict(),
        "videos": [s.to_dict() for s in active],
        "archived": [s.to_dict() for s in hidden],
    }


async def get_youtube_view(
    client: SheetsClient,
    query: FilterQuery,
    archived: FrozenSet[str],
    today: date,
) -> Dict[str, Any]:
    leads, lead_warnings = await load_leads(client)
    calls, call_warnings = await load_sales_calls(client)
    view = build_youtube_view(leads, calls, query, archived, today)
    view["warnings"] = lead_warnings + call_warnings
    return view
