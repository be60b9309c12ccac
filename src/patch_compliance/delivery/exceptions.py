"""Exceptions raised by delivery sinks."""


class DeliveryFailure(Exception):
    """Base class for report delivery errors."""

    pass


class FileDeliveryError(DeliveryFailure):
    """Raised when the report files cannot be written."""

    pass


class WebhookDeliveryError(DeliveryFailure):
    """Raised when the chat webhook POST fails."""

    pass


class EmailDeliveryError(DeliveryFailure):
    """Raised when email delivery fails."""

    pass
