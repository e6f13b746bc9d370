"""
Pytest configuration and shared fixtures.
"""
import os

# Sheet ids must differ so the fake client can tell the sheets apart;
# set before core.config is imported anywhere.
os.environ.setdefault("SHEET_ID", "sales-sheet")
os.environ.setdefault("LEAD_FLOW_SHEET_ID", "lead-flow-sheet")
os.environ.setdefault("DASHBOARD_TIMEZONE", "America/New_York")

import pytest
from datetime import date
from typing import Dict, List

from core.config import config
from core.sheets import SheetData, rows_from_values


SALES_VALUES: List[List[str]] = [
    [
        "Timestamp", "Date Call Was Taken", "Closer Name", "Setter Name", "Prospect Name",
        "Call Outcome", "What platform did the lead come from?", "Cash Collected", "Revenue Generated",
    ],
    ["3/1/2024 9:00:00", "2024-03-01", "Alice", "Sam", "John Smith", "Closed - Full Pay", "YouTube", "$1,200.50", "$3,000"],
    ["3/2/2024 9:00:00", "2024-03-02", "Bob", "Sam", "Jane Doe", "No Show", "Instagram", "$0", "$0"],
    ["3/5/2024 9:00:00", "2024-03-05", "Alice", "Kim", "Mark Lee", "Deposit Collected", "YouTube", "$500", "$2,000"],
    ["3/6/2024 9:00:00", "2024-03-06", "Alice", "Kim", "john smith", "MRR Payment", "YouTube", "$300", "$0"],
    ["3/7/2024 9:00:00", "2024-03-07", "Bob", "Sam", "Test Prospect", "Closed", "Instagram", "$100", "$100"],
    ["", "", "Bob", "Kim", "Amy Wong", "Rescheduled", "", "", ""],
]

LEAD_FLOW_VALUES: List[List[str]] = [
    [
        "Submitted At", "First Name", "Last Name", "Email", "utm_source", "utm_content",
        "Available Funds", "Goal", "Monthly Revenue", "How much can you invest?",
    ],
    ["2024-03-01 10:00:00", "John", "Smith", "john@example.com", "youtube", "https://youtu.be/vid1", "$5k-$10k", "Scale", "$10k+", "$5k"],
    ["2024-03-03", "Mark", "Lee", "mark@example.com", "youtube", "vid2", "$0-$500", "Start", "$0", "$500"],
    ["2024-03-04", "Jane", "Doe", "jane@example.com", "instagram", "", "$1k-$5k", "Scale", "$1k-$5k", "$1k"],
    ["2024-03-08", "Pat", "Kim", "pat@example.com", "YouTube", "https://www.youtube.com/watch?v=vid1&t=10", "Unknown", "Start", "$0", "$500"],
]


class FakeSheetsClient:
    """Stands in for SheetsClient: serves fixed SheetData by sheet id."""

    def __init__(self, sheets: Dict[str, SheetData]):
        self.sheets = sheets
        self.requests: List[str] = []

    async def get_sheet(self, sheet_id: str) -> SheetData:
        self.requests.append(sheet_id)
        return self.sheets.get(sheet_id, SheetData())

    async def invalidate(self, sheet_id: str = None) -> None:
        pass


@pytest.fixture
def sales_sheet() -> SheetData:
    """Sales-call tracker rows (one row has no date)."""
    return rows_from_values(SALES_VALUES)


@pytest.fixture
def lead_flow_sheet() -> SheetData:
    """Lead / application form rows."""
    return rows_from_values(LEAD_FLOW_VALUES)


@pytest.fixture
def fake_sheets(sales_sheet, lead_flow_sheet) -> FakeSheetsClient:
    """Sheets client serving the sample sales and lead-flow sheets."""
    return FakeSheetsClient({
        config.sheets.sales_sheet_id: sales_sheet,
        config.sheets.lead_flow_sheet_id: lead_flow_sheet,
    })


@pytest.fixture
def today() -> date:
    """Fixed dashboard day used as "now" in tests."""
    return date(2024, 3, 10)


@pytest.fixture
def empty_sheets() -> FakeSheetsClient:
    """Sheets client whose fetches all failed (every sheet empty)."""
    return FakeSheetsClient({})
