"""
Helper Functions for staffdesk row handling

Shared utility functions used by the import pipeline, the file parsers and
the API error handlers.  Everything here is pure: no I/O, no store access.
"""

import math
import numbers
import re
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional

from config import EXCEL_SERIAL_DATE_BASE

# Canonical import/export columns, in template order
EMPLOYEE_COLUMNS = ["name", "email", "phoneNumber", "address", "dateOfBirth", "position"]

_DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y/%m/%d",
    "%d %b %Y",
    "%d %b %Y %H:%M",
]

_SERIAL_BASE = datetime.strptime(EXCEL_SERIAL_DATE_BASE, "%Y-%m-%d").date()

# Lookup key (lowercase, no separators) -> canonical column
_COLUMN_LOOKUP = {re.sub(r"[\s_\-]", "", col).lower(): col for col in EMPLOYEE_COLUMNS}


# =====================================================================
# CELL VALUES
# =====================================================================

def is_blank(value: Any) -> bool:
    """True for None, NaN/NaT and empty or whitespace-only strings."""
    if value is None:
        return True
    # NaN and NaT never compare equal to themselves
    if value != value:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def coerce_cell(value: Any) -> Any:
    """
    Normalize one spreadsheet/CSV cell.

    Handles:
      - None / NaN / blank strings -> None
      - whole floats from Excel (1234567890.0) -> '1234567890'
      - date / datetime objects -> returned unchanged (parsed later)
      - everything else -> stripped string
    """
    if is_blank(value):
        return None
    if isinstance(value, (datetime, date)):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float):
        if math.isinf(value):
            return str(value)
        return str(int(value)) if value.is_integer() else str(value)
    return str(value).strip()


def json_safe_row(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of a raw row that json.dumps accepts (echoed back in import errors)."""
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        if is_blank(value) and not isinstance(value, str):
            out[str(key)] = None
        elif isinstance(value, (datetime, date)):
            out[str(key)] = value.isoformat()
        elif isinstance(value, (str, int, float, bool)):
            out[str(key)] = value
        else:
            out[str(key)] = str(value)
    return out


# =====================================================================
# DATE CONVERSION
# =====================================================================

def parse_date(value: Any) -> Optional[date]:
    """
    Parse a cell holding a date in any of the formats seen in uploads.

    Handles:
      - date / datetime objects (pandas Timestamps included)
      - ISO dates: '1990-05-20', '1990-05-20 00:00:00', '1990-05-20T00:00:00.000Z'
      - Human dates: '20 May 1990', '1990/05/20'
      - Excel serial numbers, from numeric cells only: 32283 or 32283.0

    Returns None for blanks and for anything that does not parse.
    """
    if is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bool):
        return None

    if isinstance(value, numbers.Real):
        if not math.isfinite(value):
            return None
        days = int(value)
        if 2 <= days <= 99998:
            return _SERIAL_BASE + timedelta(days=days)
        return None

    text = str(value).strip()

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


# =====================================================================
# COLUMN STANDARDIZATION
# =====================================================================

def standardize_column_name(name: Any) -> str:
    """Map a header like 'Phone Number' / 'phone_number' to 'phoneNumber'.

    Unknown headers come back stripped but otherwise unchanged.
    """
    text = str(name).replace("\ufeff", "").strip()
    key = re.sub(r"[\s_\-]", "", text).lower()
    return _COLUMN_LOOKUP.get(key, text)


def standardize_row(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Canonical column -> coerced cell, for the known employee columns only."""
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        column = standardize_column_name(key)
        if column in _COLUMN_LOOKUP.values() and out.get(column) is None:
            out[column] = coerce_cell(value)
    return out


def raw_cell(raw: Mapping[str, Any], column: str) -> Any:
    """First non-blank uncoerced value whose header maps to ``column``."""
    for key, value in raw.items():
        if standardize_column_name(key) == column and not is_blank(value):
            return value
    return None


def drop_blank_rows(rows: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Remove rows where every cell is blank (trailing spreadsheet rows)."""
    return [dict(row) for row in rows if not all(is_blank(v) for v in row.values())]


# =====================================================================
# VALIDATION MESSAGES
# =====================================================================

_LOCATION_PREFIXES = {"body", "query", "path", "header", "form", "file"}


def validation_error_details(errors: Iterable[Mapping[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic error dicts into [{'field', 'message'}]."""
    details = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        details.append({"field": ".".join(loc) or "request", "message": str(err.get("msg", ""))})
    return details


def format_validation_errors(errors: Iterable[Mapping[str, Any]]) -> str:
    """'field: message, field: message': one entry per violated constraint."""
    return ", ".join(f"{d['field']}: {d['message']}" for d in validation_error_details(errors))
