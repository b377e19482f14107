"""Tests for manage_cli.py and seed_employees.py."""

import pytest

import employee_files
import manage_cli
import seed_employees
from api.store import EmployeeStore

pytestmark = pytest.mark.integration


def test_seed_is_idempotent(tmp_db):
    assert seed_employees.seed(tmp_db) == len(seed_employees.DEMO_EMPLOYEES)
    assert seed_employees.seed(tmp_db) == 0
    names = [e.name for e in EmployeeStore(tmp_db).find_all()]
    assert names[:3] == ["John Doe", "Jane Smith", "Bob Johnson"]


def test_cli_without_flags_prints_help(capsys):
    assert manage_cli.main([]) == 0
    assert "--import" in capsys.readouterr().out


def test_cli_init_and_seed(tmp_db):
    assert manage_cli.main(["--init-db", "--seed"]) == 0
    assert EmployeeStore().count() == len(seed_employees.DEMO_EMPLOYEES)


def test_cli_write_templates(tmp_path, monkeypatch):
    monkeypatch.setattr(employee_files, "_TEMPLATE_DIR", tmp_path)
    assert manage_cli.main(["--write-templates"]) == 0
    assert (tmp_path / "template_import.csv").is_file()
    assert (tmp_path / "template_import.xlsx").is_file()


def test_cli_import_all_valid(tmp_db, tmp_path):
    path = tmp_path / "staff.csv"
    path.write_text("name,email\nAnn,ann@acme.io\nBo,bo@acme.io\n", encoding="utf-8")
    assert manage_cli.main(["--import", str(path)]) == 0
    assert EmployeeStore().count() == 2


def test_cli_import_with_failures_exits_1(tmp_db, tmp_path):
    path = tmp_path / "staff.csv"
    path.write_text("name,email\nAnn,ann@acme.io\n,bo@acme.io\n", encoding="utf-8")
    assert manage_cli.main(["--import", str(path)]) == 1
    assert EmployeeStore().count() == 1


def test_cli_import_missing_file(tmp_db, tmp_path):
    assert manage_cli.main(["--import", str(tmp_path / "nope.csv")]) == 1


def test_cli_import_unreadable_file(tmp_db, tmp_path):
    path = tmp_path / "staff.csv"
    path.write_text("", encoding="utf-8")
    assert manage_cli.main(["--import", str(path)]) == 1
