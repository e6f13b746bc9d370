"""
Spreadsheet header mapping.

Sheets are edited by hand, so columns are located by case-insensitive
substring match ("Cash Collected ($)" matches "cash collected"). The match
is resolved once per header row into an explicit field -> header table.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from core.exceptions import MissingColumn


@dataclass(frozen=True)
class ColumnSpec:
    """
    A recognised field and the header fragments that identify it.

    Search terms are tried in order; the first one that matches any header
    wins, so put the most specific term first.
    """
    field: str
    search_terms: Tuple[str, ...]
    required: bool = False

    @classmethod
    def of(cls, field: str, *search_terms: str, required: bool = False) -> "ColumnSpec":
        return cls(field, tuple(search_terms), required)


def _normalize(text: Any) -> str:
    return str(text or "").strip().lower()


def find_header(headers: Sequence[str], search_terms: Iterable[str]) -> Optional[str]:
    """First header containing one of the search terms, honouring term order."""
    normalized = [(_normalize(h), h) for h in headers]
    for term in search_terms:
        needle = _normalize(term)
        if not needle:
            continue
        for lowered, original in normalized:
            if needle in lowered:
                return original
    return None


@dataclass
class ColumnMap:
    """Resolved field -> header table for one worksheet."""
    columns: Dict[str, str] = field(default_factory=dict)
    missing: List[str] = field(default_factory=list)

    @classmethod
    def build(cls, headers: Sequence[str], specs: Iterable[ColumnSpec]) -> "ColumnMap":
        """
        Match every column spec against the header row.

        Raises:
            MissingColumn: If a required column spec matches no header
        """
        columns: Dict[str, str] = {}
        missing: List[str] = []
        for spec in specs:
            header = find_header(headers, spec.search_terms)
            if header is None:
                if spec.required:
                    raise MissingColumn(spec.field, spec.search_terms, headers)
                missing.append(spec.field)
                continue
            columns[spec.field] = header
        return cls(columns, missing)

    def has(self, field_name: str) -> bool:
        return field_name in self.columns

    def get(self, row: Mapping[str, Any], field_name: str, default: str = "") -> str:
        """Cell value for a field, stripped; default when unmapped or blank."""
        header = self.columns.get(field_name)
        if header is None:
            return default
        value = row.get(header)
        if value is None:
            return default
        text = str(value).strip()
        return text or default
