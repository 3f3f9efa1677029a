"""Shared pytest fixtures for cart, checkout and wizard tests."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from storefront.core.exceptions import CheckoutNetworkError
from storefront.integrations.slot_storage import MemorySlotStorage
from storefront.services.cart_store import CartStore


@dataclass
class DummyGateway:
    """Records backend calls; optionally fails after ``fail_after`` loan requests."""

    fail_after: int | None = None
    orders: list[dict[str, Any]] = field(default_factory=list)
    loans: list[dict[str, Any]] = field(default_factory=list)
    products: list[dict[str, Any]] = field(default_factory=list)
    fail_orders: bool = False
    fail_products: bool = False

    @property
    def calls(self) -> int:
        return len(self.orders) + len(self.loans) + len(self.products)

    async def create_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        if self.fail_orders:
            raise CheckoutNetworkError("backend down", endpoint="/api/orders", status=503)
        self.orders.append(payload)
        return {"orderId": 1000 + len(self.orders)}

    async def create_book_loan(self, payload: dict[str, Any]) -> dict[str, Any]:
        if self.fail_after is not None and len(self.loans) >= self.fail_after:
            raise CheckoutNetworkError("backend down", endpoint="/api/book-loans", status=503)
        self.loans.append(payload)
        return {"id": len(self.loans)}

    async def create_product(self, payload: dict[str, Any]) -> dict[str, Any]:
        if self.fail_products:
            raise CheckoutNetworkError("backend down", endpoint="/api/products", status=500)
        self.products.append(payload)
        return {"id": 77, **payload}


class TickingClock:
    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        self.now += 1
        return self.now


@pytest.fixture
def storage() -> MemorySlotStorage:
    return MemorySlotStorage()


@pytest.fixture
def gateway() -> DummyGateway:
    return DummyGateway()


@pytest.fixture
def book_a() -> dict[str, Any]:
    return {
        "id": 1,
        "title": "The Guide",
        "author": "R. K. Narayan",
        "price": 299,
        "libraryId": "lib-7",
    }


@pytest.fixture
def book_b() -> dict[str, Any]:
    return {
        "id": 2,
        "title": "Malgudi Days",
        "author": "R. K. Narayan",
        "price": 500,
        "library_id": "lib-9",
    }


@pytest.fixture
def make_store(storage):
    def _make(checkout_handler=None, slot_storage=None) -> CartStore:
        return CartStore(slot_storage or storage, checkout_handler, clock=TickingClock())

    return _make


@pytest.fixture
def make_gateway():
    return DummyGateway
