"""Typed exceptions for the invoice workflow and its collaborators."""


class InvoiceValidationError(ValueError):
    """
    Invoice input rejected before anything was persisted.

    `field` names the missing or invalid input so callers can point at it.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class InvalidStatusTransitionError(ValueError):
    """Requested status change would move an invoice backwards or out of paid."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move invoice from '{current}' to '{target}'")


class StoreUnavailableError(Exception):
    """The backing store could not be reached. No partial write was attempted."""


class CounterUnavailableError(StoreUnavailableError):
    """The invoice counter store could not be reached."""


class NotificationError(Exception):
    """
    Outbound email could not be dispatched.

    The invoice is left untouched, so the send can be retried as-is.
    """


class PaymentRejectedError(ValueError):
    """Mock payment request failed validation."""
