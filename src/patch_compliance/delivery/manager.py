"""Delivery orchestration for reports."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import structlog

from patch_compliance.config import ReportSettings
from patch_compliance.models import Report

from .email import EmailDelivery
from .exceptions import DeliveryFailure
from .file import FileDelivery
from .webhook import WebhookDelivery

log = structlog.get_logger()


@dataclass
class DeliveryResult:
    """Outcome of delivering one report.

    webhook_sent and email_sent are None when that sink is not configured.
    """

    paths: List[Path] = field(default_factory=list)
    webhook_sent: Optional[bool] = None
    email_sent: Optional[bool] = None
    errors: List[str] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        """True when no configured sink failed."""
        return not self.errors


class DeliveryManager:
    """Writes the report files, then runs the optional sinks.

    The files are written first and are never touched again; a webhook or
    email failure is logged and recorded, and the next sink still runs.
    """

    def __init__(
        self,
        file_delivery: FileDelivery,
        webhook_delivery: Optional[WebhookDelivery] = None,
        email_delivery: Optional[EmailDelivery] = None,
        email_recipients: Optional[List[str]] = None,
    ) -> None:
        """Initialize delivery manager.

        Args:
            file_delivery: Configured FileDelivery instance
            webhook_delivery: Configured WebhookDelivery (None = disabled)
            email_delivery: Configured EmailDelivery (None = disabled)
            email_recipients: Recipient addresses for email delivery
        """
        self.file_delivery = file_delivery
        self.webhook_delivery = webhook_delivery
        self.email_delivery = email_delivery
        self.email_recipients = email_recipients or []

    @classmethod
    def from_settings(cls, settings: ReportSettings) -> "DeliveryManager":
        """Build the sinks the settings configure.

        The webhook needs a URL; email needs a sender, at least one
        recipient and a relay host. Anything less disables that sink.
        """
        webhook_delivery = None
        if settings.webhook_url:
            webhook_delivery = WebhookDelivery(
                url=settings.webhook_url,
                report_title=settings.report_title,
                timeout=settings.webhook_timeout,
            )

        email_delivery = None
        if settings.email_configured:
            email_delivery = EmailDelivery(
                smtp_host=settings.smtp_host,
                smtp_port=settings.smtp_port,
                smtp_user=settings.smtp_user,
                smtp_password=settings.smtp_password,
                use_tls=settings.smtp_use_tls,
                from_addr=settings.email_from,
                subject=settings.email_subject,
                report_title=settings.report_title,
                timezone=settings.timezone,
            )

        return cls(
            file_delivery=FileDelivery(
                output_dir=settings.output_dir,
                prefix=settings.report_prefix,
                timezone=settings.timezone,
            ),
            webhook_delivery=webhook_delivery,
            email_delivery=email_delivery,
            email_recipients=settings.get_email_recipients(),
        )

    def deliver(self, report: Report) -> DeliveryResult:
        """Deliver a report to every configured channel.

        Returns:
            DeliveryResult describing each channel

        Raises:
            FileDeliveryError: If the report files cannot be written; the
                optional sinks are not attempted in that case
        """
        result = DeliveryResult(paths=self.file_delivery.save(report))

        if self.webhook_delivery is None:
            log.debug("webhook_skipped", reason="not configured")
        else:
            try:
                self.webhook_delivery.send(report)
                result.webhook_sent = True
            except DeliveryFailure as e:
                log.error("delivery_failed", sink="webhook", error=str(e))
                result.webhook_sent = False
                result.errors.append(f"webhook: {e}")

        if self.email_delivery is None or not self.email_recipients:
            log.debug("email_skipped", reason="not configured")
        else:
            try:
                self.email_delivery.deliver_report(report, self.email_recipients)
                result.email_sent = True
            except DeliveryFailure as e:
                log.error("delivery_failed", sink="email", error=str(e))
                result.email_sent = False
                result.errors.append(f"email: {e}")

        return result
