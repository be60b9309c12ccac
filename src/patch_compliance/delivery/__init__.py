"""Delivery subsystem for report output."""

from patch_compliance.delivery.email import EmailDelivery
from patch_compliance.delivery.exceptions import (
    DeliveryFailure,
    EmailDeliveryError,
    FileDeliveryError,
    WebhookDeliveryError,
)
from patch_compliance.delivery.file import FileDelivery
from patch_compliance.delivery.manager import DeliveryManager, DeliveryResult
from patch_compliance.delivery.webhook import WebhookDelivery

__all__ = [
    "DeliveryFailure",
    "DeliveryManager",
    "DeliveryResult",
    "EmailDelivery",
    "EmailDeliveryError",
    "FileDelivery",
    "FileDeliveryError",
    "WebhookDelivery",
    "WebhookDeliveryError",
]
