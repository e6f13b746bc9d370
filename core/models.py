"""
Domain models for spreadsheet rows.

Typed records built from Google Sheets rows through a ColumnMap. These
models are the single source of truth for field names used by filters,
aggregations and the web layer.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from core.aggregation import parse_money
from core.columns import ColumnMap, ColumnSpec
from core.config import config
from core.dates import parse_record_datetime


def _contains_any(text: str, keywords: Sequence[str]) -> bool:
    lowered = text.lower()
    return any(k.lower() in lowered for k in keywords)


# ═══════════════════════════════════════════════════════════════════════════════
# COLUMN SPECS
# ═══════════════════════════════════════════════════════════════════════════════

SALES_COLUMNS: List[ColumnSpec] = [
    ColumnSpec.of("timestamp", "timestamp"),
    ColumnSpec.of("date", "date call was taken", required=True),
    ColumnSpec.of("closer", "closer name"),
    ColumnSpec.of("setter", "setter name"),
    ColumnSpec.of("prospect", "prospect name"),
    ColumnSpec.of("outcome", "call outcome"),
    ColumnSpec.of("platform", "what platform did"),
    ColumnSpec.of("cash", "cash collected"),
    ColumnSpec.of("revenue", "revenue generated"),
]

LEAD_COLUMNS: List[ColumnSpec] = [
    ColumnSpec.of("first_name", "first name"),
    ColumnSpec.of("last_name", "last name"),
    ColumnSpec.of("email", "email"),
    ColumnSpec.of("source", "utm_source"),
    ColumnSpec.of("utm_content", "utm_content"),
    ColumnSpec.of("funds", "funds"),
    # "Submitted At" beats a generic "Date" column when both exist
    ColumnSpec.of("date", "submitted at", "submitted", "date", required=True),
]

LEAD_FLOW_COLUMNS: List[ColumnSpec] = [
    ColumnSpec.of("utm_source", "utm_source"),
    ColumnSpec.of("utm_medium", "utm_medium"),
    ColumnSpec.of("utm_campaign", "utm_campaign"),
    ColumnSpec.of("utm_content", "utm_content"),
    ColumnSpec.of("utm_term", "utm_term"),
    ColumnSpec.of("submitted_at", "submitted at", "submitted", required=True),
    ColumnSpec.of("goal", "goal"),
    ColumnSpec.of("monthly_rev", "monthly rev", "monthly revenue"),
    ColumnSpec.of("first_name", "first name"),
    ColumnSpec.of("last_name", "last name"),
    ColumnSpec.of("phone", "phone"),
    ColumnSpec.of("email", "email"),
    ColumnSpec.of("familiarity", "familiar"),
    ColumnSpec.of("desired_income", "desired income"),
    ColumnSpec.of("biggest_issue", "biggest issue"),
    ColumnSpec.of("investment_amount", "invest"),
    ColumnSpec.of("credit_score", "credit"),
]


# ═══════════════════════════════════════════════════════════════════════════════
# RECORDS
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class SalesCall:
    """One row of the sales-call tracker."""
    date: str = ""
    timestamp: str = ""
    closer: str = "N/A"
    setter: str = "N/A"
    prospect: str = "N/A"
    outcome: str = "N/A"
    platform: str = "Other"
    cash: float = 0.0
    revenue: float = 0.0

    @classmethod
    def from_row(cls, row: Mapping[str, Any], columns: ColumnMap) -> "SalesCall":
        """Create SalesCall from a sheet row."""
        return cls(
            date=columns.get(row, "date"),
            timestamp=columns.get(row, "timestamp"),
            closer=columns.get(row, "closer", "N/A"),
            setter=columns.get(row, "setter", "N/A"),
            prospect=columns.get(row, "prospect", "N/A"),
            outcome=columns.get(row, "outcome", "N/A"),
            platform=columns.get(row, "platform", "Other"),
            cash=parse_money(columns.get(row, "cash")),
            revenue=parse_money(columns.get(row, "revenue")),
        )

    @property
    def parsed_date(self) -> Optional[datetime]:
        return parse_record_datetime(self.date, config.dashboard.timezone)

    @property
    def is_mrr(self) -> bool:
        """Recurring payment rather than a new sale."""
        return config.dashboard.mrr_keyword in self.outcome.lower()

    @property
    def is_appointment(self) -> bool:
        """A real booked call: not MRR/downsell and not a test prospect."""
        settings = config.dashboard
        return (
            not _contains_any(self.outcome, settings.non_appointment_keywords)
            and settings.test_prospect_keyword not in self.prospect.lower()
        )

    @property
    def is_taken(self) -> bool:
        return not _contains_any(self.outcome, config.dashboard.not_taken_keywords)

    @property
    def is_closed(self) -> bool:
        return _contains_any(self.outcome, config.dashboard.closed_keywords)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "closer": self.closer,
            "setter": self.setter,
            "prospect": self.prospect,
            "outcome": self.outcome,
            "platform": self.platform,
            "cash": self.cash,
            "revenue": self.revenue,
        }


@dataclass
class Lead:
    """One opt-in / application from the lead sheet."""
    first_name: str = "Unknown"
    last_name: str = ""
    email: str = "N/A"
    source: str = "Organic"
    utm_content: str = ""
    funds: str = "Unknown"
    date: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any], columns: ColumnMap) -> "Lead":
        """Create Lead from a sheet row."""
        return cls(
            first_name=columns.get(row, "first_name", "Unknown"),
            last_name=columns.get(row, "last_name"),
            email=columns.get(row, "email", "N/A"),
            source=columns.get(row, "source", "Organic"),
            utm_content=columns.get(row, "utm_content"),
            funds=columns.get(row, "funds", "Unknown"),
            date=columns.get(row, "date"),
        )

    @property
    def parsed_date(self) -> Optional[datetime]:
        return parse_record_datetime(self.date, config.dashboard.timezone)

    @property
    def full_name(self) -> str:
        """Get lead's full name."""
        return " ".join(p for p in (self.first_name, self.last_name) if p).strip()

    @property
    def is_qualified(self) -> bool:
        """Has stated funds above the lowest bracket."""
        return bool(self.funds) and not any(
            marker in self.funds for marker in config.dashboard.unqualified_funds
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "source": self.source,
            "utm_content": self.utm_content,
            "funds": self.funds,
            "date": self.date,
            "qualified": self.is_qualified,
        }


@dataclass
class LeadFlowSubmission:
    """One application from the lead-flow form sheet."""
    submitted_at: str = ""
    utm_source: str = ""
    utm_medium: str = ""
    utm_campaign: str = ""
    utm_content: str = ""
    utm_term: str = ""
    goal: str = ""
    monthly_rev: str = ""
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    email: str = ""
    familiarity: str = ""
    desired_income: str = ""
    biggest_issue: str = ""
    investment_amount: str = ""
    credit_score: str = ""

    @classmethod
    def from_row(cls, row: Mapping[str, Any], columns: ColumnMap) -> "LeadFlowSubmission":
        """Create LeadFlowSubmission from a sheet row."""
        values = {spec.field: columns.get(row, spec.field) for spec in LEAD_FLOW_COLUMNS}
        return cls(**values)

    @property
    def parsed_date(self) -> Optional[datetime]:
        return parse_record_datetime(self.submitted_at, config.dashboard.timezone)

    @property
    def source(self) -> str:
        """Alias used by the `source` query filter."""
        return self.utm_source

    def to_dict(self) -> Dict[str, Any]:
        return {spec.field: getattr(self, spec.field) for spec in LEAD_FLOW_COLUMNS}
