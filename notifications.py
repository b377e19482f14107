"""
Email notifications for staffdesk

EmailNotifier is constructed explicitly (see api.dependencies.get_notifier and
employee_flow._resources) and handed to whatever needs to send mail.  Callers
check ``is_ready`` / ``admin_email`` before dispatching.

Every public send_* method is best-effort: it returns True/False, logs the
outcome and never raises.  Nothing is retried.
"""

import smtplib
from datetime import date
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate
from html import escape
from typing import Iterable, List, Mapping, Optional, Sequence, Union

import config
from errors import UnconfiguredDependencyError
from logger_config import setup_logger

logger = setup_logger(__name__)

SMTP_TIMEOUT_SECONDS = 15

_WRAPPER = (
    '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
    "{body}"
    "</div>"
)
_FOOTER = '<p style="font-size: 14px; color: #888;">{text}</p>'


class EmailNotifier:
    """SMTP sender for welcome, import-summary, report and reminder emails."""

    def __init__(
        self,
        host: str = "",
        port: int = 587,
        user: str = "",
        password: str = "",
        *,
        secure: bool = False,
        from_name: str = "Employee Management System",
        from_email: str = "",
        admin_email: str = "",
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.secure = secure
        self.from_name = from_name
        self.from_email = from_email or user
        self.admin_email = admin_email or None
        self._configured = bool(host and user and password)
        self._verified = True

        if not self._configured:
            logger.warning("Email service not configured. Email features will be disabled.")

    @classmethod
    def from_config(cls) -> "EmailNotifier":
        return cls(
            config.SMTP_HOST,
            config.SMTP_PORT,
            config.SMTP_USER,
            config.SMTP_PASSWORD,
            secure=config.SMTP_SECURE,
            from_name=config.SMTP_FROM_NAME,
            from_email=config.SMTP_FROM_EMAIL,
            admin_email=config.ADMIN_EMAIL,
        )

    @property
    def is_ready(self) -> bool:
        return self._configured and self._verified

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _connect(self) -> smtplib.SMTP:
        if self.secure:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS)
        server = smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS)
        try:
            server.starttls()
        except Exception:
            server.close()
            raise
        return server

    def verify(self) -> bool:
        """Open and authenticate one SMTP session.  A failure disables sending."""
        if not self._configured:
            return False
        try:
            with self._connect() as server:
                server.login(self.user, self.password)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(f"Email service verification failed: {exc}")
            self._verified = False
            return False
        self._verified = True
        logger.info("Email service is ready to send messages")
        return True

    def _deliver(self, to: Union[str, Sequence[str]], subject: str, html: str, text: Optional[str] = None) -> None:
        if not self.is_ready:
            raise UnconfiguredDependencyError("Email service not configured")

        recipients = [to] if isinstance(to, str) else list(to)

        msg = MIMEMultipart("alternative")
        msg["From"] = formataddr((self.from_name, self.from_email))
        msg["To"] = ", ".join(recipients)
        msg["Subject"] = subject
        msg["Date"] = formatdate(localtime=True)
        if text:
            msg.attach(MIMEText(text, "plain", "utf-8"))
        msg.attach(MIMEText(html, "html", "utf-8"))

        with self._connect() as server:
            server.login(self.user, self.password)
            server.send_message(msg, to_addrs=recipients)

    # ------------------------------------------------------------------
    # Public sends (never raise)
    # ------------------------------------------------------------------

    def send_generic(
        self,
        to: Union[str, Sequence[str]],
        subject: str,
        body: str,
        *,
        html: Optional[str] = None,
    ) -> bool:
        """Plain-text email; ``html`` adds a rich alternative part."""
        try:
            self._deliver(to, subject, html or _WRAPPER.format(body=f"<p>{escape(body)}</p>"), text=body)
        except UnconfiguredDependencyError:
            logger.warning(f"Email service not configured. Skipped: {subject}")
            return False
        except Exception as exc:
            logger.error(f"Failed to send email '{subject}': {exc}")
            return False
        logger.info(f"Email sent: '{subject}' -> {to}")
        return True

    def send_welcome(self, email: str, name: str) -> bool:
        subject = "Welcome to Our Company! 🎉"
        html = _WRAPPER.format(body=(
            f'<h1 style="color: #333;">Welcome Aboard, {escape(name)}! 🎉</h1>'
            '<p style="font-size: 16px; line-height: 1.6; color: #555;">'
            "We are excited to have you as part of our team! "
            "Your employee profile has been successfully created.</p>"
            '<p style="font-size: 16px; line-height: 1.6; color: #555;">'
            "If you have any questions, please don't hesitate to reach out to the HR department.</p>"
            + _FOOTER.format(text="Best regards,<br><strong>HR Team</strong>")
        ))
        text = (
            f"Welcome Aboard, {name}!\n\n"
            "We are excited to have you as part of our team! "
            "Your employee profile has been successfully created.\n\n"
            "Best regards,\nHR Team"
        )
        return self.send_generic(email, subject, text, html=html)

    def send_import_summary(self, admin_email: str, summary: Mapping[str, int]) -> bool:
        """summary: {imported, failed, total}"""
        imported = summary.get("imported", 0)
        failed = summary.get("failed", 0)
        total = summary.get("total", imported + failed)

        subject = f"Employee Data Import Completed - {imported}/{total} records"
        html = _WRAPPER.format(body=(
            '<h1 style="color: #333;">Import Process Completed 📊</h1>'
            + _stats_box("Import Summary:", [
                ("Total Records", total),
                ("Successfully Imported", imported),
                ("Failed", failed),
            ])
            + _FOOTER.format(text="This is an automated notification from the Employee Management System.")
        ))
        text = f"Total Records: {total}\nSuccessfully Imported: {imported}\nFailed: {failed}"
        return self.send_generic(admin_email, subject, text, html=html)

    def send_daily_report(self, admin_email: str, stats: Mapping[str, int], today: Optional[date] = None) -> bool:
        """stats: {totalEmployees, newToday, updatedToday}"""
        today = today or date.today()
        subject = f"Daily Employee Report - {today.isoformat()}"
        rows = [
            ("Total Employees", stats.get("totalEmployees", 0)),
            ("New Today", stats.get("newToday", 0)),
            ("Updated Today", stats.get("updatedToday", 0)),
        ]
        html = _WRAPPER.format(body=(
            '<h1 style="color: #333;">Daily Employee Report 📈</h1>'
            + _FOOTER.format(text=f"{today:%A, %B} {today.day}, {today.year}")
            + _stats_box("Statistics:", rows)
            + _FOOTER.format(text="This is an automated daily report from the Employee Management System.")
        ))
        text = "\n".join(f"{label}: {value}" for label, value in rows)
        return self.send_generic(admin_email, subject, text, html=html)

    def send_birthday_reminder(self, admin_email: str, employees: Iterable[Mapping[str, str]]) -> bool:
        """employees: [{name, email}].  Nothing is sent for an empty list."""
        people: List[Mapping[str, str]] = list(employees)
        if not people:
            return True

        subject = f"Birthday Reminder - {len(people)} employee(s) 🎂"
        items = "".join(
            f"<li><strong>{escape(p['name'])}</strong> ({escape(p['email'])})</li>" for p in people
        )
        html = _WRAPPER.format(body=(
            '<h1 style="color: #333;">Birthday Reminder 🎂</h1>'
            '<p style="font-size: 16px; line-height: 1.6; color: #555;">'
            "The following employee(s) have birthday(s) today:</p>"
            f'<ul style="font-size: 16px; line-height: 1.8; color: #555;">{items}</ul>'
            + _FOOTER.format(text="Don't forget to wish them a happy birthday! 🎉")
        ))
        text = "Birthdays today:\n" + "\n".join(f"- {p['name']} ({p['email']})" for p in people)
        return self.send_generic(admin_email, subject, text, html=html)


def _stats_box(title: str, rows: Sequence[tuple]) -> str:
    items = "".join(f"<li><strong>{label}:</strong> {value}</li>" for label, value in rows)
    return (
        '<div style="background-color: #f5f5f5; padding: 20px; border-radius: 5px; margin: 20px 0;">'
        f'<h3 style="margin-top: 0; color: #555;">{title}</h3>'
        f'<ul style="font-size: 16px; line-height: 1.8; color: #555;">{items}</ul>'
        "</div>"
    )
