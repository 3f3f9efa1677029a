"""Custom exceptions for the storefront console."""
from __future__ import annotations

from typing import Iterable, Sequence


class StorefrontException(Exception):
    """Base exception for all storefront errors."""

    def __init__(self, message: str, *args: object) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationException(StorefrontException):
    """Input validation errors."""

    def __init__(self, message: str, fields: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.fields = list(fields)


class ConfigurationException(StorefrontException):
    """Configuration errors."""

    pass


class DuplicateLineItemError(StorefrontException):
    """Line item with the same composite id is already in the cart."""

    def __init__(self, line_id: str, cart_kind: str) -> None:
        super().__init__(f"Item {line_id} is already in the {cart_kind} cart")
        self.line_id = line_id
        self.cart_kind = cart_kind


class EmptyCartError(StorefrontException):
    """Checkout attempted on an empty cart."""

    def __init__(self, cart_kind: str) -> None:
        super().__init__(f"The {cart_kind} cart is empty")
        self.cart_kind = cart_kind


class IncompleteWizardError(StorefrontException):
    """Product wizard submitted before every tab was completed."""

    def __init__(self, missing_tabs: Sequence[str], labels: Sequence[str] = ()) -> None:
        self.missing_tabs = list(missing_tabs)
        self.labels = list(labels) or list(missing_tabs)
        super().__init__(f"Please complete the following tabs: {', '.join(self.labels)}")


class PersistenceWriteError(StorefrontException):
    """Durable slot could not be written."""

    def __init__(self, key: str, reason: object = None) -> None:
        message = f"Failed to persist slot {key}"
        if reason is not None:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.key = key
        self.reason = reason


class CheckoutNetworkError(StorefrontException):
    """Checkout request to the backend failed."""

    def __init__(
        self,
        message: str,
        *,
        endpoint: str | None = None,
        status: int | None = None,
        submitted: int = 0,
        submitted_line_ids: list[str] | None = None,
    ) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status = status
        self.submitted = submitted
        # lines the backend accepted before a bulk borrow stopped
        self.submitted_line_ids = list(submitted_line_ids or [])
