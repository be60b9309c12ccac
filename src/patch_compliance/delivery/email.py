"""SMTP email delivery for reports."""

import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formatdate
from typing import List, Optional
from zoneinfo import ZoneInfo

import structlog

from patch_compliance.models import Report

from .exceptions import EmailDeliveryError

log = structlog.get_logger()


class EmailDelivery:
    """SMTP email delivery of the HTML report.

    The message carries the HTML report with the Markdown report as its
    plain text alternative.

    Supports:
    - Plain SMTP relay (default, port 25)
    - Port 587 with STARTTLS (explicit TLS)
    - Port 465 with implicit TLS (SMTPS)
    """

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int = 25,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        use_tls: bool = False,
        from_addr: str = "patch-report@localhost",
        subject: Optional[str] = None,
        report_title: str = "Patch Compliance Report",
        timezone: str = "UTC",
    ) -> None:
        """Initialize email delivery.

        Args:
            smtp_host: SMTP relay hostname
            smtp_port: SMTP relay port (587=STARTTLS, 465=implicit TLS)
            smtp_user: Authentication username
            smtp_password: Authentication password
            use_tls: Enable TLS encryption
            from_addr: Sender email address
            subject: Fixed subject line; built from the report when None
            report_title: Title used in the default subject
            timezone: Timezone for date formatting in subject
        """
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.use_tls = use_tls
        self.from_addr = from_addr
        self.subject = subject
        self.report_title = report_title
        self.timezone = timezone

    def build_subject(self, report: Report) -> str:
        """Build the email subject.

        Format when no subject is configured:
            "Patch Compliance Report - All Computers - 2026-10-18"
        """
        if self.subject:
            return self.subject
        date_str = report.generated_at.astimezone(ZoneInfo(self.timezone)).strftime("%Y-%m-%d")
        return f"{self.report_title} - {report.scope} - {date_str}"

    def send(
        self,
        recipients: List[str],
        subject: str,
        html_content: str,
        text_content: str,
    ) -> None:
        """Send a multipart/alternative message to recipients.

        Args:
            recipients: List of email addresses
            subject: Email subject line
            html_content: HTML body content
            text_content: Plain text fallback (the Markdown report)

        Raises:
            EmailDeliveryError: If sending fails
        """
        if not recipients:
            log.warning("email_skipped", reason="no recipients")
            return

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.from_addr
        msg["To"] = ", ".join(recipients)
        msg["Date"] = formatdate(localtime=True)
        msg.set_content(text_content)
        msg.add_alternative(html_content, subtype="html")

        try:
            context = ssl.create_default_context()

            if self.use_tls and self.smtp_port == 465:
                # Implicit TLS (SMTPS) - connection encrypted from start
                with smtplib.SMTP_SSL(
                    self.smtp_host, self.smtp_port, context=context
                ) as server:
                    if self.smtp_user and self.smtp_password:
                        server.login(self.smtp_user, self.smtp_password)
                    server.send_message(msg, from_addr=self.from_addr, to_addrs=recipients)
            else:
                # Explicit TLS (STARTTLS) or plain relay
                with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
                    if self.use_tls:
                        server.starttls(context=context)
                    if self.smtp_user and self.smtp_password:
                        server.login(self.smtp_user, self.smtp_password)
                    server.send_message(msg, from_addr=self.from_addr, to_addrs=recipients)

            log.info("email_sent", recipients_count=len(recipients), subject=subject)

        except smtplib.SMTPAuthenticationError as e:
            log.error("email_auth_failed", error=str(e))
            raise EmailDeliveryError(f"SMTP authentication failed: {e}")
        except smtplib.SMTPException as e:
            log.error("email_send_failed", error=str(e))
            raise EmailDeliveryError(f"SMTP error: {e}")
        except OSError as e:
            log.error("email_delivery_error", error=str(e))
            raise EmailDeliveryError(f"Email delivery failed: {e}")

    def deliver_report(self, report: Report, recipients: List[str]) -> None:
        """Send a rendered report.

        Raises:
            EmailDeliveryError: If sending fails
        """
        self.send(recipients, self.build_subject(report), report.html, report.markdown)
