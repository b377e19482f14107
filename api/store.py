"""EmployeeStore: the only writer of persisted employee state.

Thin wrapper over the operational SQLite database.  Every method opens its
own connection through ``get_db`` so a store instance is safe to share
between request threads and scheduled jobs.
"""
import sqlite3
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

from api.database import get_db
from api.models import Employee, EmployeeCreate
from errors import DuplicateError, InternalError

_WRITABLE_COLUMNS = ("name", "email", "phone_number", "address", "date_of_birth", "position")


def _row_to_employee(row) -> Employee:
    return Employee(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        phone_number=row["phone_number"],
        address=row["address"],
        date_of_birth=row["date_of_birth"],
        position=row["position"],
    )


def _to_db_value(value):
    return value.isoformat() if isinstance(value, date) else value


# SQLite datetime('now') layout, always UTC
_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _utc_bounds(day: date, tz: str) -> tuple[str, str]:
    """Local midnight of ``day`` in ``tz`` and of the day after, as UTC timestamps."""
    zone = ZoneInfo(tz)
    start = datetime.combine(day, time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=zone)
    return (
        start.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT),
        end.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT),
    )


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class EmployeeStore:
    def __init__(self, db_path: Path | None = None):
        self._db_path = db_path

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def find_all(self, name: str | None = None) -> list[Employee]:
        """All employees, optionally those whose name contains ``name`` (case-insensitive)."""
        with get_db(self._db_path) as con:
            if name and name.strip():
                pattern = f"%{_escape_like(name.lower())}%"
                rows = con.execute(
                    "SELECT * FROM employees WHERE LOWER(name) LIKE ? ESCAPE '\\' ORDER BY id",
                    (pattern,),
                ).fetchall()
            else:
                rows = con.execute("SELECT * FROM employees ORDER BY id").fetchall()
        return [_row_to_employee(r) for r in rows]

    def find_by_id(self, employee_id: int) -> Employee | None:
        with get_db(self._db_path) as con:
            return self._get(con, employee_id)

    def find_by_email(self, email: str) -> Employee | None:
        with get_db(self._db_path) as con:
            row = con.execute("SELECT * FROM employees WHERE email = ?", (email,)).fetchone()
        return _row_to_employee(row) if row else None

    def count(self) -> int:
        with get_db(self._db_path) as con:
            return con.execute("SELECT COUNT(*) FROM employees").fetchone()[0]

    def count_created_on(self, day: date, tz: str = "UTC") -> int:
        """Employees created during the local calendar day ``day`` in ``tz``."""
        start, end = _utc_bounds(day, tz)
        with get_db(self._db_path) as con:
            return con.execute(
                "SELECT COUNT(*) FROM employees WHERE created_at >= ? AND created_at < ?",
                (start, end),
            ).fetchone()[0]

    def count_updated_on(self, day: date, tz: str = "UTC") -> int:
        """Employees edited on ``day`` in ``tz`` that already existed before it."""
        start, end = _utc_bounds(day, tz)
        with get_db(self._db_path) as con:
            return con.execute(
                "SELECT COUNT(*) FROM employees WHERE updated_at >= ? AND updated_at < ? AND created_at < ?",
                (start, end, start),
            ).fetchone()[0]

    def find_birthdays(self, month: int, day: int) -> list[Employee]:
        with get_db(self._db_path) as con:
            rows = con.execute(
                "SELECT * FROM employees WHERE strftime('%m-%d', date_of_birth) = ? ORDER BY name",
                (f"{month:02d}-{day:02d}",),
            ).fetchall()
        return [_row_to_employee(r) for r in rows]

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def insert(self, candidate: EmployeeCreate) -> Employee:
        values = [_to_db_value(getattr(candidate, col)) for col in _WRITABLE_COLUMNS]
        try:
            with get_db(self._db_path) as con:
                cur = con.execute(
                    """INSERT INTO employees
                       (name, email, phone_number, address, date_of_birth, position)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    values,
                )
                return self._get(con, cur.lastrowid)
        except sqlite3.Error as exc:
            raise self._translate(exc, candidate.email) from exc

    def update(self, employee_id: int, changes: dict) -> Employee | None:
        """Apply a partial update; returns None when the id does not exist."""
        unknown = set(changes) - set(_WRITABLE_COLUMNS)
        if unknown:
            raise InternalError(f"Cannot update columns: {', '.join(sorted(unknown))}")
        if not changes:
            return self.find_by_id(employee_id)

        set_clause = ", ".join(f"{k} = ?" for k in changes)
        set_clause += ", updated_at = datetime('now')"
        values = [_to_db_value(v) for v in changes.values()] + [employee_id]

        try:
            with get_db(self._db_path) as con:
                if self._get(con, employee_id) is None:
                    return None
                con.execute(f"UPDATE employees SET {set_clause} WHERE id = ?", values)
                return self._get(con, employee_id)
        except sqlite3.Error as exc:
            raise self._translate(exc, changes.get("email", "")) from exc

    def delete(self, employee_id: int) -> bool:
        """Permanent delete.  False when nothing matched."""
        with get_db(self._db_path) as con:
            cur = con.execute("DELETE FROM employees WHERE id = ?", (employee_id,))
            return cur.rowcount > 0

    # ------------------------------------------------------------------

    @staticmethod
    def _get(con, employee_id: int) -> Employee | None:
        row = con.execute("SELECT * FROM employees WHERE id = ?", (employee_id,)).fetchone()
        return _row_to_employee(row) if row else None

    @staticmethod
    def _translate(exc: sqlite3.Error, email: str) -> Exception:
        if isinstance(exc, sqlite3.IntegrityError) and "employees.email" in str(exc):
            return DuplicateError(email)
        return InternalError(f"Database error: {exc}")
