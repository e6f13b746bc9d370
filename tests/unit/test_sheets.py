"""
Tests for core.sheets module.
"""
import pytest

from core.config import SheetsConfig
from core.exceptions import SheetsConnectionError, SheetsDataError
from core.sheets import SheetData, SheetsClient, rows_from_values


class TestRowsFromValues:
    """Tests for rows_from_values."""

    def test_header_and_rows(self):
        data = rows_from_values([["Name", "Cash"], ["Alice", "$10"]])
        assert data.headers == ["Name", "Cash"]
        assert data.rows == [{"Name": "Alice", "Cash": "$10"}]

    def test_short_rows_padded(self):
        data = rows_from_values([["Name", "Cash", "Date"], ["Alice"]])
        assert data.rows == [{"Name": "Alice", "Cash": "", "Date": ""}]

    def test_blank_rows_skipped(self):
        data = rows_from_values([["Name"], ["", ], ["  "], ["Bob"]])
        assert data.rows == [{"Name": "Bob"}]

    def test_duplicate_headers_suffixed(self):
        data = rows_from_values([["Date", "Date", "Date"], ["a", "b", "c"]])
        assert data.headers == ["Date", "Date_1", "Date_2"]
        assert data.rows[0]["Date_2"] == "c"

    def test_headers_stripped(self):
        assert rows_from_values([[" Name "]]).headers == ["Name"]

    def test_header_only(self):
        data = rows_from_values([["Name"]])
        assert data.is_empty

    def test_empty_raises(self):
        with pytest.raises(SheetsDataError):
            rows_from_values([])


def _client(**kwargs) -> SheetsClient:
    settings = SheetsConfig(service_account_email="", private_key="")
    return SheetsClient(settings=settings, **kwargs)


class TestSheetsClient:
    """Tests for SheetsClient."""

    def test_fetch_without_sheet_id(self):
        with pytest.raises(SheetsDataError):
            _client().fetch("")

    def test_fetch_without_credentials(self):
        with pytest.raises(SheetsConnectionError) as exc_info:
            _client().fetch("sheet-1")
        assert "credentials" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_failure_returns_empty_sheet(self):
        """Fetch errors never reach the caller."""
        data = await _client().get_sheet("sheet-1")
        assert isinstance(data, SheetData)
        assert data.is_empty

    @pytest.mark.asyncio
    async def test_results_cached(self):
        client = _client(ttl_seconds=60)
        calls = []

        def fake_fetch(sheet_id):
            calls.append(sheet_id)
            return rows_from_values([["Name"], ["Alice"]])

        client.fetch = fake_fetch
        first = await client.get_sheet("sheet-1")
        second = await client.get_sheet("sheet-1")
        assert first is second
        assert calls == ["sheet-1"]

    @pytest.mark.asyncio
    async def test_invalidate(self):
        client = _client(ttl_seconds=60)
        calls = []

        def fake_fetch(sheet_id):
            calls.append(sheet_id)
            return rows_from_values([["Name"], ["Alice"]])

        client.fetch = fake_fetch
        await client.get_sheet("sheet-1")
        await client.invalidate()
        await client.get_sheet("sheet-1")
        assert calls == ["sheet-1", "sheet-1"]

    @pytest.mark.asyncio
    async def test_zero_ttl_disables_cache(self):
        client = _client(ttl_seconds=0)
        calls = []

        def fake_fetch(sheet_id):
            calls.append(sheet_id)
            return rows_from_values([["Name"], ["Alice"]])

        client.fetch = fake_fetch
        await client.get_sheet("sheet-1")
        await client.get_sheet("sheet-1")
        assert len(calls) == 2
