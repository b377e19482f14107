"""Tests for api/store.py and api/database.py against a temporary SQLite file."""

import sqlite3
from datetime import date

import pytest

from api.database import get_db, init_db
from api.models import EmployeeCreate
from errors import DuplicateError, InternalError

pytestmark = pytest.mark.integration


def _new(name="Ann Lee", email="ann@acme.io", **extra):
    return EmployeeCreate(name=name, email=email, **extra)


def test_insert_and_find(store):
    emp = store.insert(_new(date_of_birth=date(1990, 5, 20), phone_number="0812"))
    assert emp.id > 0
    assert store.find_by_id(emp.id) == emp
    assert store.find_by_email("ANN@acme.io").id == emp.id
    assert emp.date_of_birth == date(1990, 5, 20)


def test_find_missing_returns_none(store):
    assert store.find_by_id(42) is None
    assert store.find_by_email("nobody@acme.io") is None


def test_unique_email_is_case_insensitive(store):
    store.insert(_new())
    with pytest.raises(DuplicateError) as exc_info:
        store.insert(_new(name="Other", email="Ann@Acme.io"))
    assert exc_info.value.status_code == 400
    assert store.count() == 1


def test_find_all_filters_substring_anywhere(store):
    store.insert(_new("Sara Khalil", "sara@acme.io"))
    store.insert(_new("Khalid Omar", "khalid@acme.io"))
    store.insert(_new("Bo Chen", "bo@acme.io"))
    assert [e.name for e in store.find_all("khal")] == ["Sara Khalil", "Khalid Omar"]
    assert len(store.find_all()) == 3
    assert len(store.find_all("   ")) == 3


def test_find_all_escapes_like_wildcards(store):
    store.insert(_new("Ann_Lee", "ann@acme.io"))
    store.insert(_new("AnnXLee", "annx@acme.io"))
    assert [e.name for e in store.find_all("n_l")] == ["Ann_Lee"]


def test_update_partial(store):
    emp = store.insert(_new(position="Clerk"))
    updated = store.update(emp.id, {"position": "Manager"})
    assert updated.position == "Manager"
    assert updated.name == "Ann Lee"


def test_update_missing_returns_none(store):
    assert store.update(999, {"position": "x"}) is None


def test_update_rejects_unknown_columns(store):
    emp = store.insert(_new())
    with pytest.raises(InternalError):
        store.update(emp.id, {"salary": 1})


def test_update_to_duplicate_email(store):
    store.insert(_new())
    other = store.insert(_new("Bo", "bo@acme.io"))
    with pytest.raises(DuplicateError):
        store.update(other.id, {"email": "ann@acme.io"})


def test_delete(store):
    emp = store.insert(_new())
    assert store.delete(emp.id) is True
    assert store.delete(emp.id) is False
    assert store.count() == 0


def test_daily_counts(store, tmp_db):
    old = store.insert(_new("Old", "old@acme.io"))
    store.insert(_new("New", "new@acme.io"))
    with get_db(tmp_db) as con:
        con.execute("UPDATE employees SET created_at = '2020-01-01 09:00:00' WHERE id = ?", (old.id,))
    store.update(old.id, {"position": "Lead"})

    # timestamps are written in UTC by SQLite
    with get_db(tmp_db) as con:
        db_today = con.execute("SELECT date('now')").fetchone()[0]
    today = date.fromisoformat(db_today)

    assert store.count_created_on(today) == 1
    assert store.count_updated_on(today) == 1


def test_daily_counts_follow_local_day(store, tmp_db):
    late = store.insert(_new("Late", "late@acme.io"))
    early = store.insert(_new("Early", "early@acme.io"))
    # Asia/Jakarta is UTC+7: 20:00 UTC on the 20th is 03:00 on the 21st there
    with get_db(tmp_db) as con:
        con.execute(
            "UPDATE employees SET created_at = '2024-05-20 20:00:00', updated_at = '2024-05-20 20:00:00' WHERE id = ?",
            (late.id,),
        )
        con.execute(
            "UPDATE employees SET created_at = '2024-05-20 16:30:00', updated_at = '2024-05-20 18:00:00' WHERE id = ?",
            (early.id,),
        )

    assert store.count_created_on(date(2024, 5, 21), "Asia/Jakarta") == 1
    assert store.count_created_on(date(2024, 5, 20), "Asia/Jakarta") == 1
    assert store.count_created_on(date(2024, 5, 20)) == 2
    assert store.count_updated_on(date(2024, 5, 21), "Asia/Jakarta") == 1
    assert store.count_updated_on(date(2024, 5, 20)) == 0


def test_find_birthdays(store):
    store.insert(_new("Ann", "ann@acme.io", date_of_birth=date(1990, 5, 20)))
    store.insert(_new("Bo", "bo@acme.io", date_of_birth=date(1985, 5, 20)))
    store.insert(_new("Cy", "cy@acme.io", date_of_birth=date(1985, 5, 21)))
    store.insert(_new("Di", "di@acme.io"))
    assert [e.name for e in store.find_birthdays(5, 20)] == ["Ann", "Bo"]



def test_init_db_is_idempotent_and_stamps_rows(tmp_path):
    path = tmp_path / "fresh.db"
    init_db(path)
    init_db(path)

    con = sqlite3.connect(path)
    try:
        con.execute("INSERT INTO employees (name, email) VALUES ('Ann', 'Ann@Acme.io')")
        with pytest.raises(sqlite3.IntegrityError):
            con.execute("INSERT INTO employees (name, email) VALUES ('Ann', 'ann@acme.io')")
        created_at, updated_at = con.execute("SELECT created_at, updated_at FROM employees").fetchone()
    finally:
        con.close()
    assert created_at is not None
    assert updated_at is not None
