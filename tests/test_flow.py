"""Tests for employee_flow.py Prefect tasks.

These tests use unittest.mock to isolate the tasks from Prefect's run
context and from SMTP: tasks are exercised through ``.fn()`` with
``get_run_logger`` and ``_resources`` patched.
"""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest

import employee_flow
from api.database import get_db
from api.models import EmployeeCreate
from conftest import RecordingNotifier


# =====================================================================
# helpers
# =====================================================================


def _run_task_fn(task_obj, store, notifier, today=date(2024, 5, 20)):
    """Call the underlying function of a Prefect task without a flow context."""
    log = MagicMock()
    with (
        patch("employee_flow.get_run_logger", return_value=log),
        patch("employee_flow._resources", return_value=(store, notifier)),
        patch("employee_flow._today", return_value=today),
    ):
        result = task_obj.fn()
    return result, log


# =====================================================================
# daily report
# =====================================================================


def test_daily_report_sends_stats(store):
    store.insert(EmployeeCreate(name="Ann", email="ann@acme.io"))
    notifier = RecordingNotifier()
    stats, _ = _run_task_fn(employee_flow.send_daily_report, store, notifier, today=date(1999, 1, 1))

    assert stats == {"totalEmployees": 1, "newToday": 0, "updatedToday": 0}
    assert notifier.sent == [("daily_report", "admin@acme.io", stats)]


def test_daily_report_counts_by_local_day(store, tmp_db):
    emp = store.insert(EmployeeCreate(name="Ann", email="ann@acme.io"))
    with get_db(tmp_db) as con:
        con.execute("UPDATE employees SET created_at = '2024-05-20 20:00:00' WHERE id = ?", (emp.id,))

    with patch("employee_flow.TIMEZONE", "Asia/Jakarta"):
        stats, _ = _run_task_fn(employee_flow.send_daily_report, store, RecordingNotifier(), today=date(2024, 5, 21))

    assert stats["newToday"] == 1


def test_daily_report_skips_when_not_ready(store):
    notifier = RecordingNotifier(ready=False)
    stats, log = _run_task_fn(employee_flow.send_daily_report, store, notifier)
    assert stats is None
    assert notifier.sent == []
    log.warning.assert_called_once_with(employee_flow.NOT_READY_MESSAGE)


def test_daily_report_skips_without_admin(store):
    notifier = RecordingNotifier(admin_email=None)
    _run_task_fn(employee_flow.send_daily_report, store, notifier)
    assert notifier.sent == []


def test_daily_report_store_error_is_logged_not_raised():
    broken = MagicMock()
    broken.count.side_effect = RuntimeError("no such table: employees")
    stats, log = _run_task_fn(employee_flow.send_daily_report, broken, RecordingNotifier())
    assert stats is None
    log.error.assert_called_once()


# =====================================================================
# birthday reminder
# =====================================================================


def test_birthday_reminder_lists_matches(store):
    store.insert(EmployeeCreate(name="Ann", email="ann@acme.io", date_of_birth=date(1990, 5, 20)))
    store.insert(EmployeeCreate(name="Bo", email="bo@acme.io", date_of_birth=date(1990, 6, 1)))
    notifier = RecordingNotifier()

    count, _ = _run_task_fn(employee_flow.send_birthday_reminder, store, notifier)

    assert count == 1
    assert notifier.sent == [("birthday", "admin@acme.io", [{"name": "Ann", "email": "ann@acme.io"}])]


def test_birthday_reminder_no_matches(store):
    notifier = RecordingNotifier()
    count, log = _run_task_fn(employee_flow.send_birthday_reminder, store, notifier)
    assert count == 0
    assert notifier.sent == []
    log.info.assert_any_call("No birthdays today")


def test_birthday_reminder_not_ready_still_counts(store):
    store.insert(EmployeeCreate(name="Ann", email="ann@acme.io", date_of_birth=date(1990, 5, 20)))
    notifier = RecordingNotifier(ready=False)
    count, log = _run_task_fn(employee_flow.send_birthday_reminder, store, notifier)
    assert count == 1
    assert notifier.sent == []
    log.warning.assert_called_once()


# =====================================================================
# backup reminder
# =====================================================================


def test_backup_reminder_sent(store):
    notifier = RecordingNotifier()
    sent, _ = _run_task_fn(employee_flow.send_backup_reminder, store, notifier)
    assert sent is True
    assert notifier.sent == [("generic", "admin@acme.io", employee_flow.BACKUP_SUBJECT)]


def test_backup_reminder_skipped_when_not_ready(store):
    notifier = RecordingNotifier(ready=False)
    sent, _ = _run_task_fn(employee_flow.send_backup_reminder, store, notifier)
    assert sent is False


# =====================================================================
# wiring
# =====================================================================


def test_tasks_never_retry():
    for task_obj in (
        employee_flow.send_daily_report,
        employee_flow.send_birthday_reminder,
        employee_flow.send_backup_reminder,
    ):
        assert task_obj.retries == 0


@pytest.mark.slow
def test_build_deployments_uses_cron_schedules():
    deployments = employee_flow.build_deployments()
    assert [d.name for d in deployments] == [
        "staffdesk-daily-report",
        "staffdesk-birthday-reminder",
        "staffdesk-backup-reminder",
    ]
    crons = [d.schedules[0].schedule.cron for d in deployments]
    assert crons == [cron for _, cron in employee_flow.JOBS.values()]
