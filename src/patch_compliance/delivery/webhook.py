"""Chat webhook delivery of the Markdown report."""

from typing import Any, Dict, Optional

import httpx
import structlog

from patch_compliance.models import Report

from .exceptions import WebhookDeliveryError

log = structlog.get_logger()


class WebhookDelivery:
    """POSTs {"title", "text"} JSON to an incoming chat webhook.

    The text field carries the Markdown report, which chat services that
    accept incoming webhooks render natively.
    """

    def __init__(
        self,
        url: str,
        report_title: str = "Patch Compliance Report",
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Initialize webhook delivery.

        Args:
            url: Incoming webhook URL
            report_title: Title prefix for the message
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to stub the endpoint in tests)
        """
        self.url = url
        self.report_title = report_title
        self.timeout = timeout
        self._transport = transport

    def build_payload(self, report: Report) -> Dict[str, Any]:
        """Build the JSON body for a report."""
        return {
            "title": f"{self.report_title} - {report.scope}",
            "text": report.markdown,
        }

    def send(self, report: Report) -> None:
        """POST the report to the webhook.

        Raises:
            WebhookDeliveryError: If the request fails or is rejected
        """
        payload = self.build_payload(report)
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.url, json=payload)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            log.error("webhook_rejected", status=e.response.status_code)
            raise WebhookDeliveryError(
                f"Webhook returned HTTP {e.response.status_code}"
            )
        except httpx.HTTPError as e:
            log.error("webhook_send_failed", error=str(e))
            raise WebhookDeliveryError(f"Webhook delivery failed: {e}")

        log.info("webhook_posted", title=payload["title"])
