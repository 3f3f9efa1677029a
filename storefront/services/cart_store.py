"""Reading-module cart store: purchase and library carts with durable slots.

Both carts live in memory and are written back to their slot after every
mutation. In-memory state stays authoritative for the session even when a
slot write fails.
"""
from __future__ import annotations

import json
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping, Protocol, Sequence

from storefront.core.constants import BORROW_CART_SLOT, PURCHASE_CART_SLOT, UNKNOWN_LIBRARY
from storefront.core.exceptions import (
    DuplicateLineItemError,
    EmptyCartError,
    PersistenceWriteError,
    StorefrontException,
    ValidationException,
)
from storefront.core.logging_config import logger
from storefront.domain.cart import (
    CartKind,
    CartLineItem,
    CheckoutMode,
    TransactionType,
    line_item_id,
)
from storefront.domain.catalog import CatalogItem, normalize_catalog_item
from storefront.integrations.slot_storage import SlotStorage


SLOT_KEYS = {
    CartKind.PURCHASE: PURCHASE_CART_SLOT,
    CartKind.BORROW: BORROW_CART_SLOT,
}


class CheckoutHandler(Protocol):
    async def checkout(
        self, cart_kind: str, lines: Sequence[CartLineItem], details: Any
    ) -> Any: ...


@dataclass(frozen=True, slots=True)
class CartEvent:
    cart_kind: str
    action: str
    line_id: str | None = None


@dataclass
class CartMutationResult:
    ok: bool
    error_key: str | None = None
    item: CartLineItem | None = None
    error: StorefrontException | None = None
    persist_error: PersistenceWriteError | None = None

    @property
    def persisted(self) -> bool:
        return self.persist_error is None


class CartStore:
    """Owns the purchase and borrow carts for one browser session."""

    def __init__(
        self,
        storage: SlotStorage,
        checkout_handler: CheckoutHandler | None = None,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._storage = storage
        self._checkout_handler = checkout_handler
        self._clock = clock
        self._subscribers: list[Callable[[CartEvent], None]] = []
        self.last_persistence_error: PersistenceWriteError | None = None
        self._carts: dict[str, list[CartLineItem]] = {
            kind: self._load(kind) for kind in CartKind.ALL
        }

    # ---- persistence -------------------------------------------------

    def _load(self, cart_kind: str) -> list[CartLineItem]:
        key = SLOT_KEYS[cart_kind]
        raw = self._storage.get(key)
        if not raw:
            return []
        try:
            payload = json.loads(raw)
        except (ValueError, UnicodeDecodeError) as exc:
            logger.warning("Discarding malformed %s cart snapshot: %s", cart_kind, exc)
            return []
        if not isinstance(payload, list):
            logger.warning("Discarding %s cart snapshot: expected a list", cart_kind)
            return []

        items: list[CartLineItem] = []
        seen: set[str] = set()
        for entry in payload:
            if not isinstance(entry, dict):
                continue
            try:
                line = CartLineItem.from_dict(entry)
                tx_type = TransactionType.validate(line.transaction_type, cart_kind)
            except (ValidationException, TypeError, ValueError, OverflowError) as exc:
                logger.warning("Skipping invalid %s cart line: %s", cart_kind, exc)
                continue
            # stored ids are not trusted; the key is always derived from item and type
            line = replace(
                line,
                id=line_item_id(line.item_id, tx_type, cart_kind),
                transaction_type=tx_type,
                library_id=(
                    line.library_id or line.item.library_id
                    if cart_kind == CartKind.BORROW
                    else None
                ),
            )
            if line.id in seen:
                continue
            seen.add(line.id)
            items.append(line)
        return items

    def _persist(self, cart_kind: str) -> PersistenceWriteError | None:
        key = SLOT_KEYS[cart_kind]
        try:
            serialized = json.dumps(
                [line.to_dict() for line in self._carts[cart_kind]], ensure_ascii=False
            ).encode("utf-8")
            self._storage.set(key, serialized)
        except PersistenceWriteError as exc:
            error = exc
        except (OSError, TypeError, ValueError) as exc:
            error = PersistenceWriteError(key, exc)
        else:
            return None

        logger.error("Cart persistence failed for %s: %s", cart_kind, error.message)
        self.last_persistence_error = error
        return error

    def reload(self) -> None:
        """Re-hydrate both carts from their slots."""
        for kind in CartKind.ALL:
            self._carts[kind] = self._load(kind)
            self._notify(CartEvent(kind, "reload"))

    # ---- subscriptions -----------------------------------------------

    def subscribe(self, callback: Callable[[CartEvent], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, event: CartEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                logger.exception("Cart subscriber failed on %s/%s", event.cart_kind, event.action)

    # ---- mutations ---------------------------------------------------

    def add(
        self,
        item: CatalogItem | Mapping[str, Any],
        transaction_type: str,
        cart_kind: str,
        *,
        price_in_paise: bool = False,
    ) -> CartMutationResult:
        kind = CartKind.validate(cart_kind)
        tx_type = TransactionType.validate(transaction_type, kind)
        snapshot = normalize_catalog_item(item, price_in_paise=price_in_paise)
        line_id = line_item_id(snapshot.item_id, tx_type, kind)

        cart = self._carts[kind]
        if any(line.id == line_id for line in cart):
            logger.info("Rejected duplicate cart line %s in %s cart", line_id, kind)
            return CartMutationResult(
                False, "duplicate", error=DuplicateLineItemError(line_id, kind)
            )

        line = CartLineItem(
            id=line_id,
            item=snapshot,
            transaction_type=tx_type,
            library_id=snapshot.library_id if kind == CartKind.BORROW else None,
            added_at=self._clock(),
        )
        cart.append(line)
        logger.info("Added %s to %s cart", line_id, kind)
        persist_error = self._persist(kind)
        self._notify(CartEvent(kind, "add", line_id))
        return CartMutationResult(True, item=line, persist_error=persist_error)

    def remove(self, line_item_id: str, cart_kind: str) -> CartMutationResult:
        kind = CartKind.validate(cart_kind)
        self._carts[kind] = [line for line in self._carts[kind] if line.id != line_item_id]
        logger.info("Removed %s from %s cart", line_item_id, kind)
        persist_error = self._persist(kind)
        self._notify(CartEvent(kind, "remove", line_item_id))
        return CartMutationResult(True, persist_error=persist_error)

    def clear(self, cart_kind: str) -> CartMutationResult:
        kind = CartKind.validate(cart_kind)
        self._carts[kind] = []
        logger.info("Cleared %s cart", kind)
        persist_error = self._persist(kind)
        self._notify(CartEvent(kind, "clear"))
        return CartMutationResult(True, persist_error=persist_error)

    # ---- views -------------------------------------------------------

    def items(self, cart_kind: str) -> tuple[CartLineItem, ...]:
        return tuple(self._carts[CartKind.validate(cart_kind)])

    def count(self, cart_kind: str) -> int:
        return len(self._carts[CartKind.validate(cart_kind)])

    def is_empty(self, cart_kind: str) -> bool:
        return self.count(cart_kind) == 0

    def contains(self, item_id: int, transaction_type: str, cart_kind: str) -> bool:
        kind = CartKind.validate(cart_kind)
        line_id = line_item_id(item_id, str(transaction_type).strip().lower(), kind)
        return any(line.id == line_id for line in self._carts[kind])

    def total_value(self, cart_kind: str) -> int:
        kind = CartKind.validate(cart_kind)
        if kind == CartKind.BORROW:
            return 0
        return sum(line.price for line in self._carts[kind])

    def grouped_by_library(self) -> dict[str, list[CartLineItem]]:
        groups: dict[str, list[CartLineItem]] = {}
        for line in self._carts[CartKind.BORROW]:
            groups.setdefault(line.library_id or UNKNOWN_LIBRARY, []).append(line)
        return groups

    # ---- checkout ----------------------------------------------------

    async def checkout(self, cart_kind: str, mode: str | None = None, details: Any = None) -> Any:
        """Hand a snapshot of the cart to the checkout handler.

        The cart is never cleared here; call ``clear`` once the backend has
        confirmed the order or borrow requests.
        """
        kind = CartKind.validate(cart_kind)
        expected_mode = CheckoutMode.FOR_KIND[kind]
        if mode is not None and mode != expected_mode:
            raise ValidationException(
                f"Checkout mode {mode!r} is not supported for the {kind} cart", ["mode"]
            )

        snapshot = tuple(self._carts[kind])
        if not snapshot:
            raise EmptyCartError(kind)
        if self._checkout_handler is None:
            raise StorefrontException("No checkout handler configured")

        logger.info("Starting %s checkout with %s line(s)", expected_mode, len(snapshot))
        return await self._checkout_handler.checkout(kind, snapshot, details)
