"""
E-mail notification service for Renfort.

Sends the critical-mission alert raised when a client publishes a mission
with CRITICAL urgency. Sending is best effort: ``dispatch_critical_mission_alert``
runs on a background thread and only logs failures.
"""

import smtplib
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from renfort.utils.config import MailSettings, get_settings
from renfort.utils.logger import audit_log, get_logger
from renfort.utils.constants import AuditAction

logger = get_logger(__name__)


@dataclass
class CriticalMissionAlert:
    """What the alert e-mail needs to know about a mission."""

    title: str
    job_title: str
    start_date: datetime
    city: Optional[str] = None
    client_email: Optional[str] = None

    @property
    def display_title(self) -> str:
        return self.title or self.job_title

    @property
    def readable_start(self) -> str:
        return self.start_date.strftime("%d/%m/%Y %H:%M:%S") if self.start_date else ""


@dataclass
class MailMessage:
    """A rendered e-mail."""

    to: list[str]
    subject: str
    html: str
    text: str


class NotificationService:
    """
    Outgoing e-mail notifications over SMTP.

    Usage:
        service = NotificationService()
        service.dispatch_critical_mission_alert(alert)
    """

    def __init__(
        self,
        mail_settings: Optional[MailSettings] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self._settings = mail_settings or get_settings().mail
        self._executor = executor

        if not self._settings.is_configured:
            logger.warning("SMTP not configured - e-mail notifications disabled")

    # -------------------------------------------------------------------------
    # Rendering
    # -------------------------------------------------------------------------

    def resolve_alert_recipient(self, alert: CriticalMissionAlert) -> str:
        """Configured alert address, then the client's e-mail, then the sender."""
        return (
            self._settings.alert_recipient
            or alert.client_email
            or self._settings.sender
        )

    def build_critical_mission_alert(self, alert: CriticalMissionAlert) -> MailMessage:
        """Render the alert e-mail."""
        title = alert.display_title
        city = alert.city or "N/A"
        start = alert.readable_start

        html = (
            "<h2>Nouvelle mission CRITICAL</h2>"
            f"<p><strong>Mission :</strong> {title}</p>"
            f"<p><strong>Ville :</strong> {city}</p>"
            f"<p><strong>Debut :</strong> {start}</p>"
            "<p>Merci d'assigner un talent en priorite.</p>"
        )
        text = f"Mission CRITICAL {title} - {alert.city or ''} - debut {start}"

        return MailMessage(
            to=[self.resolve_alert_recipient(alert)],
            subject=f"Mission CRITICAL : {title}",
            html=html,
            text=text,
        )

    # -------------------------------------------------------------------------
    # Sending
    # -------------------------------------------------------------------------

    def send_mail(self, message: MailMessage) -> bool:
        """
        Send an e-mail through SMTP.

        Returns False without sending when SMTP is not configured.
        SMTP errors propagate to the caller.
        """
        if not self._settings.is_configured:
            logger.warning(f"Email not sent (SMTP not configured): {message.subject}")
            return False

        mime = MIMEMultipart("alternative")
        mime["Subject"] = message.subject
        mime["From"] = self._settings.sender
        mime["To"] = ", ".join(message.to)
        mime.attach(MIMEText(message.text, "plain", "utf-8"))
        mime.attach(MIMEText(message.html, "html", "utf-8"))

        timeout = self._settings.timeout_seconds
        if self._settings.use_ssl:
            server = smtplib.SMTP_SSL(self._settings.smtp_host, self._settings.smtp_port, timeout=timeout)
        else:
            server = smtplib.SMTP(self._settings.smtp_host, self._settings.smtp_port, timeout=timeout)

        try:
            if not self._settings.use_ssl and self._settings.use_tls:
                server.starttls()
            if self._settings.smtp_user and self._settings.smtp_password:
                server.login(self._settings.smtp_user, self._settings.smtp_password)
            server.sendmail(self._settings.sender, message.to, mime.as_string())
        finally:
            server.quit()

        logger.info(f"Email sent: {message.subject}")
        return True

    def send_critical_mission_alert(self, alert: CriticalMissionAlert) -> bool:
        """Render and send the critical-mission alert synchronously."""
        message = self.build_critical_mission_alert(alert)
        sent = self.send_mail(message)
        if sent:
            audit_log(
                AuditAction.CRITICAL_ALERT_SENT.value,
                {"title": alert.display_title, "city": alert.city},
            )
        return sent

    def dispatch_critical_mission_alert(self, alert: CriticalMissionAlert) -> Future:
        """Send the alert on a background thread; failures are logged, not raised."""
        future = self._get_executor().submit(self.send_critical_mission_alert, alert)
        future.add_done_callback(_log_alert_failure)
        return future

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._settings.max_workers,
                thread_name_prefix="renfort-mail",
            )
        return self._executor

    def shutdown(self, wait: bool = True) -> None:
        """Stop the background sender."""
        if self._executor is not None:
            self._executor.shutdown(wait=wait)
            self._executor = None


def _log_alert_failure(future: Future) -> None:
    error = future.exception()
    if error is not None:
        logger.error(f"Critical mission alert failed: {error}")


# Singleton instance
_notification_service: Optional[NotificationService] = None


def get_notification_service() -> NotificationService:
    """Get the notification service singleton instance."""
    global _notification_service
    if _notification_service is None:
        _notification_service = NotificationService()
    return _notification_service
