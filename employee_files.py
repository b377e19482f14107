"""
Tabular file handling for employee import/export

Parsing:
  CSV   -> polars (every column read as text, no type inference)
  Excel -> pandas + openpyxl (object dtype so dates and serials survive)

Both parsers return a list of raw row dicts with fully blank rows removed;
header standardization and cell coercion happen later in the import validator
so the raw values can be echoed back in error entries.

Export:
  CSV   -> polars write_csv
  Excel -> pandas to_excel (openpyxl engine), sheet "Employees"
"""

from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
import polars as pl

from api.models import Employee
from config import TEMPLATE_DIR
from errors import NotFoundError, ValidationError
from helpers import EMPLOYEE_COLUMNS, drop_blank_rows
from logger_config import setup_logger

logger = setup_logger(__name__)

_TEMPLATE_DIR = TEMPLATE_DIR

EXPORT_COLUMNS = ["id"] + EMPLOYEE_COLUMNS

CSV_MEDIA_TYPE = "text/csv"
EXCEL_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Import/export route kinds: file extension written, upload extensions and MIME types accepted
FILE_KINDS = {
    "csv": {
        "extension": "csv",
        "upload_extensions": {".csv"},
        "media_types": {"text/csv", "application/csv", "application/vnd.ms-excel"},
        "download_type": CSV_MEDIA_TYPE,
    },
    "excel": {
        "extension": "xlsx",
        "upload_extensions": {".xlsx", ".xls"},
        "media_types": {EXCEL_MEDIA_TYPE, "application/vnd.ms-excel"},
        "download_type": EXCEL_MEDIA_TYPE,
    },
}

TEMPLATE_SAMPLE = {
    "name": "John Doe",
    "email": "john.doe@company.com",
    "phoneNumber": "081234567890",
    "address": "Jl. Sudirman No. 1, Jakarta",
    "dateOfBirth": "1990-05-20",
    "position": "Software Engineer",
}


# =====================================================================
# UPLOAD CHECKS
# =====================================================================

def is_accepted_upload(kind: str, filename: Optional[str], content_type: Optional[str]) -> bool:
    """Extension or MIME type must match the import route's file kind."""
    accepted = FILE_KINDS[kind]
    suffix = Path(filename or "").suffix.lower()
    mime = (content_type or "").split(";")[0].strip().lower()
    return suffix in accepted["upload_extensions"] or mime in accepted["media_types"]


# =====================================================================
# PARSING
# =====================================================================

def parse_csv_rows(content: bytes) -> List[Dict[str, Any]]:
    """Parse CSV bytes into raw row dicts.  Raises ValidationError when empty or unreadable."""
    if not content or not content.strip():
        raise ValidationError("CSV file is empty")

    try:
        df = pl.read_csv(
            BytesIO(content),
            infer_schema_length=0,
            truncate_ragged_lines=True,
            encoding="utf8-lossy",
        )
    except pl.exceptions.NoDataError:
        raise ValidationError("CSV file is empty")
    except pl.exceptions.PolarsError as exc:
        raise ValidationError(f"Unable to read CSV file: {exc}")

    rows = drop_blank_rows(df.to_dicts())
    if not rows:
        raise ValidationError("CSV file is empty")

    logger.debug(f"Parsed {len(rows)} CSV rows ({len(df.columns)} columns)")
    return rows


def parse_excel_rows(content: bytes) -> List[Dict[str, Any]]:
    """Parse the first worksheet of an Excel workbook into raw row dicts."""
    if not content:
        raise ValidationError("Excel file is empty")

    try:
        df = pd.read_excel(BytesIO(content), sheet_name=0, dtype=object)
    except Exception as exc:
        raise ValidationError(f"Unable to read Excel file: {exc}")

    # Unnamed spacer columns have no header and never hold employee data
    df = df.loc[:, [not str(col).startswith("Unnamed:") for col in df.columns]]
    rows = drop_blank_rows(df.to_dict(orient="records"))
    if not rows:
        raise ValidationError("Excel file is empty")

    logger.debug(f"Parsed {len(rows)} Excel rows ({len(df.columns)} columns)")
    return rows


def parse_rows(kind: str, content: bytes) -> List[Dict[str, Any]]:
    if kind == "csv":
        return parse_csv_rows(content)
    return parse_excel_rows(content)


def read_rows_from_path(path: Path) -> List[Dict[str, Any]]:
    """Parse a local .csv/.xlsx/.xls file (used by the CLI)."""
    suffix = path.suffix.lower()
    for kind, info in FILE_KINDS.items():
        if suffix in info["upload_extensions"]:
            return parse_rows(kind, path.read_bytes())
    raise ValidationError("Invalid file format. Only CSV and Excel files are allowed")


# =====================================================================
# EXPORT
# =====================================================================

def _export_records(employees: Iterable[Employee], blank: Optional[str] = "") -> List[Dict[str, Optional[str]]]:
    records = []
    for emp in employees:
        records.append({
            "id": str(emp.id),
            "name": emp.name,
            "email": emp.email,
            "phoneNumber": emp.phone_number or blank,
            "address": emp.address or blank,
            "dateOfBirth": emp.date_of_birth.isoformat() if emp.date_of_birth else blank,
            "position": emp.position or blank,
        })
    return records


def export_csv_bytes(employees: Iterable[Employee]) -> bytes:
    # nulls are written as empty fields
    records = _export_records(employees, blank=None)
    df = pl.DataFrame(records, schema={col: pl.String for col in EXPORT_COLUMNS})
    return df.write_csv().encode("utf-8")


def export_excel_bytes(employees: Iterable[Employee]) -> bytes:
    records = _export_records(employees)
    df = pd.DataFrame(records, columns=EXPORT_COLUMNS)
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Employees")
    return buffer.getvalue()


def export_filename(kind: str, now: Optional[datetime] = None) -> str:
    """employees_export_2024-05-20_08-30-00.csv (UTC)."""
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%d_%H-%M-%S")
    return f"employees_export_{stamp}.{FILE_KINDS[kind]['extension']}"


# =====================================================================
# TEMPLATES
# =====================================================================

def template_path(kind: str) -> Path:
    """Location of the import template; NotFoundError when it is missing."""
    path = Path(_TEMPLATE_DIR) / f"template_import.{FILE_KINDS[kind]['extension']}"
    if not path.is_file():
        raise NotFoundError("Template file not found", detail={"file": path.name})
    return path


def write_templates(target_dir: Optional[Path] = None) -> List[Path]:
    """Write template_import.csv and template_import.xlsx (header plus one sample row)."""
    out_dir = Path(target_dir or _TEMPLATE_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)

    csv_path = out_dir / "template_import.csv"
    pl.DataFrame([TEMPLATE_SAMPLE], schema={col: pl.String for col in EMPLOYEE_COLUMNS}).write_csv(csv_path)

    xlsx_path = out_dir / "template_import.xlsx"
    pd.DataFrame([TEMPLATE_SAMPLE], columns=EMPLOYEE_COLUMNS).to_excel(
        xlsx_path, index=False, sheet_name="Employees", engine="openpyxl"
    )

    logger.info(f"Import templates written to {out_dir}")
    return [csv_path, xlsx_path]
