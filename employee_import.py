"""
Employee import pipeline

Turns an ordered batch of raw rows (parsed CSV/Excel rows or a JSON array)
into employee records, one row at a time:

    validate -> duplicate lookup -> insert

A rejected row is appended to the outcome and the loop moves on; one bad row
never aborts the batch and never rolls back rows that were already stored.
Rows are processed strictly in order, so when two rows in the same batch
share an email the later one is rejected as a duplicate of the earlier one.

No notifications are sent from here.  Callers read ``ImportOutcome.created``
and ``ImportOutcome.summary()`` to decide what to dispatch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from pydantic import ValidationError as PydanticValidationError

from api.models import Employee, EmployeeCreate
from config import FIRST_DATA_ROW
from errors import DuplicateError
from helpers import format_validation_errors, is_blank, json_safe_row, parse_date, raw_cell, standardize_row
from logger_config import setup_logger

logger = setup_logger(__name__)

REQUIRED_FIELDS_MESSAGE = "Name and email are required"
DUPLICATE_EMAIL_MESSAGE = "Email already exists"
INVALID_DATE_MESSAGE = "dateOfBirth: must be a valid date (YYYY-MM-DD)"


class ImportErrorKind(str, Enum):
    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    CONSTRAINT_VIOLATION = "ConstraintViolation"
    DUPLICATE_EMAIL = "DuplicateEmail"
    PERSISTENCE_ERROR = "PersistenceError"


class RowRejected(Exception):
    """A single row cannot become an employee record."""

    def __init__(self, row: int, kind: ImportErrorKind, reason: str) -> None:
        super().__init__(f"Row {row}: {reason}")
        self.row = row
        self.kind = kind
        self.reason = reason


class EmployeeWriter(Protocol):
    """The slice of EmployeeStore the pipeline needs."""

    def find_by_email(self, email: str) -> Optional[Employee]: ...

    def insert(self, candidate: EmployeeCreate) -> Employee: ...


@dataclass(frozen=True)
class RowFailure:
    row: int
    data: Dict[str, Any]
    reason: str
    kind: ImportErrorKind

    def to_dict(self) -> Dict[str, Any]:
        return {"row": self.row, "data": self.data, "reason": self.reason, "kind": self.kind.value}


@dataclass
class ImportOutcome:
    """Aggregated result of one import call.  Never persisted."""

    imported: int = 0
    failed: int = 0
    errors: List[RowFailure] = field(default_factory=list)
    created: List[Employee] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.imported + self.failed

    def record_success(self, employee: Employee) -> None:
        self.imported += 1
        self.created.append(employee)

    def record_failure(self, raw: Mapping[str, Any], rejected: RowRejected) -> None:
        self.failed += 1
        self.errors.append(RowFailure(rejected.row, json_safe_row(raw), rejected.reason, rejected.kind))

    def summary(self) -> Dict[str, int]:
        return {"imported": self.imported, "failed": self.failed, "total": self.total}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "imported": self.imported,
            "failed": self.failed,
            "errors": [e.to_dict() for e in self.errors],
        }

    def message(self) -> str:
        if self.failed > 0:
            return (
                f"Import completed with some errors. "
                f"Imported: {self.imported}, Failed: {self.failed}"
            )
        return f"Successfully imported {self.imported} employees"


# =====================================================================
# VALIDATOR
# =====================================================================

def validate_row(raw: Mapping[str, Any], row_number: int) -> EmployeeCreate:
    """
    Check one raw row and return the normalized candidate.

    Raises RowRejected with:
      - MissingRequiredField when name or email is absent/blank (no further checks)
      - ConstraintViolation listing every violated length/format constraint
    """
    row = standardize_row(raw)

    if is_blank(row.get("name")) or is_blank(row.get("email")):
        raise RowRejected(row_number, ImportErrorKind.MISSING_REQUIRED_FIELD, REQUIRED_FIELDS_MESSAGE)

    problems: List[str] = []

    # parsed from the uncoerced cell: only numeric cells may be Excel serials
    raw_dob = raw_cell(raw, "dateOfBirth")
    dob = parse_date(raw_dob)
    if raw_dob is not None and dob is None:
        problems.append(INVALID_DATE_MESSAGE)

    candidate = {
        "name": row["name"],
        "email": row["email"],
        "phoneNumber": row.get("phoneNumber"),
        "address": row.get("address"),
        "dateOfBirth": dob,
        "position": row.get("position"),
    }
    try:
        employee = EmployeeCreate.model_validate(candidate)
    except PydanticValidationError as exc:
        problems.insert(0, format_validation_errors(exc.errors()))
        employee = None

    if problems:
        raise RowRejected(row_number, ImportErrorKind.CONSTRAINT_VIOLATION, ", ".join(problems))
    return employee


# =====================================================================
# PIPELINE
# =====================================================================

def run_import(
    rows: Iterable[Mapping[str, Any]],
    store: EmployeeWriter,
    *,
    first_row_number: int = FIRST_DATA_ROW,
) -> ImportOutcome:
    """Fold the rows into an ImportOutcome, persisting each accepted row as it goes."""
    outcome = ImportOutcome()

    for offset, raw in enumerate(rows):
        row_number = first_row_number + offset
        try:
            employee = _import_row(raw, row_number, store)
        except RowRejected as rejected:
            logger.debug(f"Import row {row_number} rejected ({rejected.kind.value}): {rejected.reason}")
            outcome.record_failure(raw, rejected)
            continue
        outcome.record_success(employee)

    logger.info(
        f"Import finished: {outcome.imported} imported, "
        f"{outcome.failed} failed, {outcome.total} total"
    )
    return outcome


def _import_row(raw: Mapping[str, Any], row_number: int, store: EmployeeWriter) -> Employee:
    candidate = validate_row(raw, row_number)

    if store.find_by_email(candidate.email) is not None:
        raise RowRejected(row_number, ImportErrorKind.DUPLICATE_EMAIL, DUPLICATE_EMAIL_MESSAGE)

    try:
        return store.insert(candidate)
    except DuplicateError:
        # Another request stored the same email between lookup and insert
        raise RowRejected(row_number, ImportErrorKind.DUPLICATE_EMAIL, DUPLICATE_EMAIL_MESSAGE)
    except Exception as exc:
        raise RowRejected(row_number, ImportErrorKind.PERSISTENCE_ERROR, str(exc) or "Unknown error") from exc
