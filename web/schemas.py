"""
Pydantic response models for API endpoints.

Provides type-safe response models with automatic validation and documentation.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


# ═══════════════════════════════════════════════════════════════════════════════
# COMMON MODELS
# ═══════════════════════════════════════════════════════════════════════════════

class RangeInfo(BaseModel):
    """Applied date range."""
    start: Optional[str] = Field(None, description="Inclusive start (YYYY-MM-DD)")
    end: Optional[str] = Field(None, description="Inclusive end (YYYY-MM-DD)")
    label: str


class TrendPoint(BaseModel):
    """One day of a chart series."""
    key: str
    label: str
    value: float


class BreakdownItem(BaseModel):
    """Count per category with share of total."""
    label: str
    count: int
    percentage: float


# ═══════════════════════════════════════════════════════════════════════════════
# HEALTH CHECK
# ═══════════════════════════════════════════════════════════════════════════════

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(description="Service status: healthy or degraded")
    version: str = Field(description="Application version")
    uptime_seconds: int = Field(description="Uptime in seconds")
    correlation_id: Optional[str] = Field(None, description="Request correlation ID")
    sheets_configured: bool = Field(description="Whether sheet ids and credentials are set")


class TimingStats(BaseModel):
    """Timing statistics for one operation."""
    count: int
    avg_ms: float
    min_ms: float
    max_ms: float
    p50_ms: float


class MetricsResponse(BaseModel):
    """Application metrics response."""
    uptime_seconds: int
    correlation_id: Optional[str] = None
    requests: Dict[str, int] = Field(default_factory=dict)
    errors: Dict[str, int] = Field(default_factory=dict)
    timing: Dict[str, TimingStats] = Field(default_factory=dict)


# ═══════════════════════════════════════════════════════════════════════════════
# SALES
# ═══════════════════════════════════════════════════════════════════════════════

class SalesSummary(BaseModel):
    """Sales-call KPIs."""
    total_cash: float
    mrr_cash: float
    new_cash: float
    total_revenue: float
    applications: int
    calls_due: int
    calls_taken: int
    calls_closed: int
    show_rate: float = Field(description="Taken / due, percent")
    close_rate: float = Field(description="Closed / taken, percent")
    avg_cash_per_appointment: float
    avg_cash_per_close: float
    avg_cash_per_application: float


class SalesCallItem(BaseModel):
    date: str
    closer: str
    setter: str
    prospect: str
    outcome: str
    platform: str
    cash: float
    revenue: float


class SalesOptions(BaseModel):
    """Values for the filter dropdowns."""
    platforms: List[str]
    closers: List[str]
    setters: List[str]


class SalesResponse(BaseModel):
    range: RangeInfo
    filters: Dict[str, str]
    summary: SalesSummary
    trend: List[TrendPoint]
    recent_calls: List[SalesCallItem]
    options: SalesOptions
    warnings: List[str] = Field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# LEADS
# ═══════════════════════════════════════════════════════════════════════════════

class LeadsSummary(BaseModel):
    total_leads: int
    qualified_leads: int
    qualification_rate: float


class LeadItem(BaseModel):
    first_name: str
    last_name: str
    email: str
    source: str
    utm_content: str
    funds: str
    date: str
    qualified: bool


class LeadsResponse(BaseModel):
    range: RangeInfo
    summary: LeadsSummary
    fund_breakdown: List[BreakdownItem]
    trend: List[TrendPoint]
    recent_leads: List[LeadItem]
    warnings: List[str] = Field(default_factory=list)


class DailyCount(BaseModel):
    date: str
    count: int


class LeadFlowOptions(BaseModel):
    sources: List[str]
    goals: List[str]


class LeadFlowResponse(BaseModel):
    range: RangeInfo
    filters: Dict[str, str]
    total_applicants: int
    applicants_over_time: List[DailyCount]
    source_breakdown: List[BreakdownItem]
    revenue_breakdown: List[BreakdownItem]
    goal_breakdown: List[BreakdownItem]
    investment_breakdown: List[BreakdownItem]
    options: LeadFlowOptions
    submissions: List[Dict[str, Any]]
    warnings: List[str] = Field(default_factory=list)


# ═══════════════════════════════════════════════════════════════════════════════
# YOUTUBE ATTRIBUTION
# ═══════════════════════════════════════════════════════════════════════════════

class VideoStatsResponse(BaseModel):
    """Funnel stats for one video."""
    video_id: str
    leads: int
    qualified: int
    calls: int
    taken: int
    closed: int
    cash: float
    revenue: float
    show_rate: float
    close_rate: float
    aov: float
    cash_per_call: float
    cash_per_application: float
    cash_per_optin: float


class YouTubeResponse(BaseModel):
    range: RangeInfo
    sort: Optional[str] = None
    totals: VideoStatsResponse
    videos: List[VideoStatsResponse]
    archived: List[VideoStatsResponse]
    warnings: List[str] = Field(default_factory=list)


class ArchiveToggleResponse(BaseModel):
    video_id: str
    archived: bool
    archived_ids: List[str]


class TrackingLinkResponse(BaseModel):
    video_id: str
    link: str


# ═══════════════════════════════════════════════════════════════════════════════
# DATE PICKER
# ═══════════════════════════════════════════════════════════════════════════════

class PresetResponse(BaseModel):
    """A preset resolved against today."""
    key: str
    label: str
    start: Optional[str] = None
    end: Optional[str] = None


class CalendarDay(BaseModel):
    day: int
    key: str
    in_range: bool
    endpoint: bool


class CalendarResponse(BaseModel):
    """Picker calendar for one month."""
    year: int
    month: int
    title: str
    leading_blanks: int
    weekdays: List[str]
    days: List[CalendarDay]
    state: str = Field(description="empty, anchored or committed")
    pending: RangeInfo
    previous_month: str
    next_month: str
