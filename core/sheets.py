"""
Google Sheets client.

Reads the first worksheet of a spreadsheet as a header row plus row dicts.
Failures never propagate into the dashboard: they are logged and an empty
sheet is returned, so pages render with no data instead of erroring.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import gspread
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials

from core.config import SheetsConfig, config
from core.exceptions import SheetsConnectionError, SheetsDataError, SheetsError
from core.observability import Timer, metrics

logger = logging.getLogger(__name__)

TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass
class SheetData:
    """Header row and data rows of one worksheet."""
    headers: List[str] = field(default_factory=list)
    rows: List[Dict[str, str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.rows


def rows_from_values(values: List[List[Any]]) -> SheetData:
    """
    Turn get_all_values() output into SheetData.

    Duplicate headers get a numeric suffix ("Date", "Date_1") so no column
    is silently overwritten; short rows are padded with "".
    """
    if not values:
        raise SheetsDataError("Worksheet is empty")

    seen: Dict[str, int] = {}
    headers = []
    for raw in values[0]:
        header = str(raw).strip()
        if header in seen:
            seen[header] += 1
            headers.append(f"{header}_{seen[header]}")
        else:
            seen[header] = 0
            headers.append(header)

    rows = []
    for raw_row in values[1:]:
        if not any(str(cell).strip() for cell in raw_row):
            continue
        padded = list(raw_row) + [""] * (len(headers) - len(raw_row))
        rows.append({h: str(v) for h, v in zip(headers, padded)})
    return SheetData(headers, rows)


class SheetsClient:
    """
    Service-account Google Sheets reader with a small in-memory TTL cache.
    """

    def __init__(self, settings: SheetsConfig = None, ttl_seconds: int = None):
        self.settings = settings or config.sheets
        self.ttl_seconds = config.cache.ttl_seconds if ttl_seconds is None else ttl_seconds
        self._gc: Optional[gspread.Client] = None
        self._cache: Dict[str, Tuple[SheetData, float]] = {}
        self._lock = asyncio.Lock()

    def _client(self) -> gspread.Client:
        if self._gc is None:
            if not self.settings.has_credentials:
                raise SheetsConnectionError("Google service account credentials are not configured")
            credentials = Credentials.from_service_account_info(
                {
                    "type": "service_account",
                    "client_email": self.settings.service_account_email,
                    "private_key": self.settings.private_key,
                    "token_uri": TOKEN_URI,
                },
                scopes=list(self.settings.scopes),
            )
            self._gc = gspread.authorize(credentials)
        return self._gc

    def fetch(self, sheet_id: str) -> SheetData:
        """
        Read the first worksheet (blocking).

        Raises:
            SheetsConnectionError: Auth or network failure
            SheetsDataError: Missing sheet id or empty worksheet
        """
        if not sheet_id:
            raise SheetsDataError("Spreadsheet id is not configured")
        try:
            with Timer(f"sheets.fetch {sheet_id[:8]}", logger) as timer:
                worksheet = self._client().open_by_key(sheet_id).get_worksheet(0)
                if worksheet is None:
                    raise SheetsDataError("Spreadsheet has no worksheets", sheet_id=sheet_id)
                values = worksheet.get_all_values()
            metrics.record_timing("sheets.fetch", timer.elapsed_ms)
        except (gspread.exceptions.GSpreadException, GoogleAuthError, OSError, ValueError) as e:
            raise SheetsConnectionError("Failed to read spreadsheet", str(e), sheet_id=sheet_id)
        return rows_from_values(values)

    async def get_sheet(self, sheet_id: str) -> SheetData:
        """Cached, non-blocking fetch; returns an empty SheetData on failure."""
        async with self._lock:
            cached = self._cache.get(sheet_id)
            if cached and time.time() - cached[1] < self.ttl_seconds:
                return cached[0]

        try:
            data = await asyncio.to_thread(self.fetch, sheet_id)
        except SheetsError as e:
            logger.error(f"Sheet fetch failed: {e}", extra={"sheet_id": sheet_id})
            metrics.record_error(type(e).__name__)
            return SheetData()

        async with self._lock:
            self._cache[sheet_id] = (data, time.time())
        logger.debug(f"Fetched {len(data.rows)} rows", extra={"sheet_id": sheet_id})
        return data

    async def invalidate(self, sheet_id: str = None) -> None:
        async with self._lock:
            if sheet_id is None:
                self._cache.clear()
            else:
                self._cache.pop(sheet_id, None)


_client: Optional[SheetsClient] = None


def get_sheets_client() -> SheetsClient:
    """Get singleton sheets client."""
    global _client
    if _client is None:
        _client = SheetsClient()
    return _client
