"""Cart domain types: kinds, transaction types and line items."""
from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from typing import Any

from storefront.core.constants import BORROW_LINE_PREFIX, RENTAL_PRICE_FRACTION
from storefront.core.exceptions import ValidationException
from storefront.domain.catalog import CatalogItem, normalize_catalog_item


class CartKind:
    """Independent cart collections."""

    PURCHASE = "purchase"
    BORROW = "borrow"

    ALL = (PURCHASE, BORROW)

    @classmethod
    def validate(cls, kind: str) -> str:
        normalized = str(kind or "").strip().lower()
        if normalized not in cls.ALL:
            raise ValidationException(f"Unknown cart kind: {kind!r}", ["cart_kind"])
        return normalized


class TransactionType:
    """How a line item is acquired."""

    BUY = "buy"
    RENT = "rent"
    BORROW = "borrow"

    FOR_KIND = {
        CartKind.PURCHASE: frozenset({BUY, RENT}),
        CartKind.BORROW: frozenset({BORROW}),
    }

    @classmethod
    def validate(cls, transaction_type: str, cart_kind: str) -> str:
        normalized = str(transaction_type or "").strip().lower()
        if normalized not in cls.FOR_KIND[cart_kind]:
            raise ValidationException(
                f"Transaction type {transaction_type!r} is not allowed in the {cart_kind} cart",
                ["transaction_type"],
            )
        return normalized


class CheckoutMode:
    """Checkout flows: one combined order, or one borrow request per line."""

    COMBINED = "combined"
    BULK_BORROW = "bulk_borrow"

    FOR_KIND = {
        CartKind.PURCHASE: COMBINED,
        CartKind.BORROW: BULK_BORROW,
    }


def line_item_id(item_id: int, transaction_type: str, cart_kind: str) -> str:
    """Composite de-duplication key for a cart line."""
    if cart_kind == CartKind.BORROW:
        return f"{BORROW_LINE_PREFIX}-{int(item_id)}"
    return f"{int(item_id)}-{transaction_type}"


def rental_price(catalog_price: int) -> int:
    return math.floor(RENTAL_PRICE_FRACTION * catalog_price)


@dataclass(frozen=True, slots=True)
class CartLineItem:
    """Single line in a cart."""

    id: str
    item: CatalogItem
    transaction_type: str
    library_id: str | None = None
    added_at: float = field(default_factory=time.time)

    @property
    def item_id(self) -> int:
        return self.item.item_id

    @property
    def price(self) -> int:
        if self.transaction_type == TransactionType.BUY:
            return int(self.item.price)
        if self.transaction_type == TransactionType.RENT:
            return rental_price(int(self.item.price))
        return 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "item": self.item.to_dict(),
            "transaction_type": self.transaction_type,
            "library_id": self.library_id,
            "added_at": float(self.added_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartLineItem:
        item_data = data.get("item")
        if not isinstance(item_data, dict):
            raise ValidationException("Line item has no catalog snapshot", ["item"])
        line_id = data.get("id")
        transaction_type = data.get("transaction_type")
        if not line_id or not transaction_type:
            raise ValidationException("Line item is missing id or transaction type", ["id"])
        return cls(
            id=str(line_id),
            item=normalize_catalog_item(item_data),
            transaction_type=str(transaction_type),
            library_id=data.get("library_id"),
            added_at=float(data.get("added_at", time.time())),
        )
