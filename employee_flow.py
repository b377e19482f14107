"""Prefect flows for staffdesk scheduled jobs.

Three read-only jobs, each a flow wrapping a single task:

    daily-report        totals (all / new today / updated today) -> admin
    birthday-reminder   employees born on today's month/day     -> admin
    backup-reminder     weekly "back up the database" email     -> admin

Notifications are best-effort, so tasks never retry and never raise: a job
that cannot run (SMTP not configured, no ADMIN_EMAIL, store error) logs a
warning/error and returns.

Usage:
    python employee_flow.py                       # serve all three on their cron schedules
    python employee_flow.py daily-report          # run one job now
"""

import sys
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

sys.path.insert(0, str(Path(__file__).resolve().parent))

from prefect import flow, get_run_logger, task

from api.store import EmployeeStore
from config import CRON_BACKUP_REMINDER, CRON_BIRTHDAY_REMINDER, CRON_DAILY_REPORT, TIMEZONE
from notifications import EmailNotifier

NOT_READY_MESSAGE = "Admin email not configured or email service not ready"

BACKUP_SUBJECT = "Weekly Database Backup Reminder 💾"
BACKUP_BODY = (
    "This is a reminder to perform a database backup for the Employee Management System.\n\n"
    "Important: Regular backups help protect your data from loss.\n\n"
    "This is an automated weekly reminder."
)
BACKUP_HTML = (
    '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
    '<h1 style="color: #333;">Weekly Backup Reminder 💾</h1>'
    '<p style="font-size: 16px; line-height: 1.6; color: #555;">'
    "This is a reminder to perform a database backup for the Employee Management System.</p>"
    '<div style="background-color: #fff3cd; padding: 15px; border-left: 4px solid #ffc107; margin: 20px 0;">'
    "<strong>Important:</strong> Regular backups help protect your data from loss.</div>"
    '<p style="font-size: 14px; color: #888; margin-top: 30px;">This is an automated weekly reminder.</p>'
    "</div>"
)


def _resources() -> tuple[EmployeeStore, EmailNotifier]:
    return EmployeeStore(), EmailNotifier.from_config()


def _today() -> date:
    """Calendar date in the jobs' configured timezone."""
    return datetime.now(ZoneInfo(TIMEZONE)).date()


def _can_notify(notifier: EmailNotifier, log) -> bool:
    if notifier.is_ready and notifier.admin_email:
        return True
    log.warning(NOT_READY_MESSAGE)
    return False


# =====================================================================
# TASKS
# =====================================================================


@task(name="send-daily-report", retries=0)
def send_daily_report() -> dict | None:
    """Email the admin today's employee totals.  Returns the stats sent, or None."""
    log = get_run_logger()
    log.info("Running daily report job...")
    store, notifier = _resources()
    if not _can_notify(notifier, log):
        return None
    try:
        today = _today()
        stats = {
            "totalEmployees": store.count(),
            "newToday": store.count_created_on(today, TIMEZONE),
            "updatedToday": store.count_updated_on(today, TIMEZONE),
        }
        if notifier.send_daily_report(notifier.admin_email, stats, today=today):
            log.info("Daily report sent successfully")
        return stats
    except Exception as exc:
        log.error(f"Failed to generate daily report: {exc}")
        return None


@task(name="send-birthday-reminder", retries=0)
def send_birthday_reminder() -> int:
    """Email the admin the list of employees whose birthday is today.  Returns the match count."""
    log = get_run_logger()
    log.info("Running birthday reminder job...")
    store, notifier = _resources()
    try:
        today = _today()
        employees = store.find_birthdays(today.month, today.day)
    except Exception as exc:
        log.error(f"Failed to check birthdays: {exc}")
        return 0

    if not employees:
        log.info("No birthdays today")
        return 0
    if not _can_notify(notifier, log):
        return len(employees)

    people = [{"name": e.name, "email": e.email} for e in employees]
    if notifier.send_birthday_reminder(notifier.admin_email, people):
        log.info(f"Birthday reminder sent for {len(people)} employee(s)")
    return len(employees)


@task(name="send-backup-reminder", retries=0)
def send_backup_reminder() -> bool:
    log = get_run_logger()
    log.info("Running weekly backup reminder job...")
    _, notifier = _resources()
    if not _can_notify(notifier, log):
        return False
    sent = notifier.send_generic(notifier.admin_email, BACKUP_SUBJECT, BACKUP_BODY, html=BACKUP_HTML)
    if sent:
        log.info("Weekly backup reminder sent successfully")
    return sent


# =====================================================================
# FLOWS
# =====================================================================


@flow(name="daily-report")
def daily_report_flow():
    return send_daily_report()


@flow(name="birthday-reminder")
def birthday_reminder_flow():
    return send_birthday_reminder()


@flow(name="backup-reminder")
def backup_reminder_flow():
    return send_backup_reminder()


JOBS = {
    "daily-report": (daily_report_flow, CRON_DAILY_REPORT),
    "birthday-reminder": (birthday_reminder_flow, CRON_BIRTHDAY_REMINDER),
    "backup-reminder": (backup_reminder_flow, CRON_BACKUP_REMINDER),
}


def build_deployments() -> list:
    """One deployment per job, each on its cron schedule in TIMEZONE."""
    from prefect.client.schemas.schedules import CronSchedule

    return [
        job_flow.to_deployment(
            name=f"staffdesk-{name}",
            schedules=[CronSchedule(cron=cron, timezone=TIMEZONE)],
        )
        for name, (job_flow, cron) in JOBS.items()
    ]


def serve_jobs() -> None:
    """Block and run the three jobs on their schedules."""
    from prefect import serve

    serve(*build_deployments())


if __name__ == "__main__":
    if len(sys.argv) > 1:
        if sys.argv[1] not in JOBS:
            sys.exit(f"Unknown job '{sys.argv[1]}'. Choose from: {', '.join(JOBS)}")
        JOBS[sys.argv[1]][0]()
    else:
        serve_jobs()
