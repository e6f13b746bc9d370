"""
Custom exception hierarchy for the Valhalla dashboard.

Exception Hierarchy:
    ValhallaError (base)
    ├── SheetsError            - Spreadsheet fetch failed
    │   ├── SheetsConnectionError  - Network/auth issues
    │   └── SheetsDataError        - Worksheet has unexpected structure
    └── MissingColumn          - Required header not found in the sheet

    ValidationError            - Input validation failed
    └── InvalidDateFormat      - Malformed YYYY-MM-DD key
"""
from typing import Any, Optional, Sequence


class ValhallaError(Exception):
    """Base exception for all dashboard data errors."""

    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class SheetsError(ValhallaError):
    """Reading a Google Sheet failed."""

    def __init__(self, message: str, details: str = None, sheet_id: str = None):
        super().__init__(message, details)
        self.sheet_id = sheet_id


class SheetsConnectionError(SheetsError):
    """
    Network or authentication failure talking to Google Sheets.

    The sheets client converts this into an empty result.
    """


class SheetsDataError(SheetsError):
    """
    Worksheet content has an unexpected structure.

    Usually an empty sheet or a missing header row.
    """


class MissingColumn(ValhallaError):
    """
    A required column could not be matched against the header row.

    Raised once when the column map is built, not per row.
    """

    def __init__(self, field: str, search_terms: Sequence[str], headers: Sequence[str] = ()):
        self.field = field
        self.search_terms = tuple(search_terms)
        self.headers = tuple(headers)
        terms = ", ".join(repr(t) for t in self.search_terms)
        super().__init__(
            f"No column found for '{field}'",
            f"searched for {terms}",
        )


class ValidationError(Exception):
    """
    Input validation failed.

    Used for validating query parameters before processing.
    """

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value!r})"
        return f"{self.field}: {self.message}"


class InvalidDateFormat(ValidationError):
    """A date key is not a valid YYYY-MM-DD calendar date."""

    def __init__(self, value: Any, field: Optional[str] = "date"):
        super().__init__(field, "Invalid date format. Expected YYYY-MM-DD", value)
