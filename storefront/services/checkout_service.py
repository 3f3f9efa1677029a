"""Checkout collaborator: turns a cart snapshot into backend requests.

Purchase carts become a single order; borrow carts become one borrow
request per line, each approved or rejected by its library.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Callable, Protocol, Sequence

from pydantic import BaseModel, Field, ValidationError, field_validator

from storefront.core.constants import (
    BORROW_REQUEST_MODULE,
    DEFAULT_BORROW_REASON,
    READING_ORDER_MODULE,
)
from storefront.core.exceptions import CheckoutNetworkError, ValidationException
from storefront.core.logging_config import logger
from storefront.domain.cart import CartKind, CartLineItem, CheckoutMode


class CheckoutGateway(Protocol):
    async def create_order(self, payload: dict[str, Any]) -> dict[str, Any]: ...

    async def create_book_loan(self, payload: dict[str, Any]) -> dict[str, Any]: ...


def _required_text(value: Any) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValueError("This field is required")
    return text


class ShippingInfo(BaseModel):
    """Delivery address for a purchase order."""

    full_name: str = Field(..., description="Recipient name")
    phone: str = Field(..., description="Contact phone")
    email: str = Field(..., description="Contact email")
    address: str = Field(..., description="Street address")
    city: str = Field(..., description="City")
    state: str = Field(..., description="State")
    pincode: str = Field(..., description="Postal code")

    @field_validator("full_name", "phone", "email", "address", "city", "state", "pincode", mode="before")
    @classmethod
    def not_blank(cls, v: Any) -> str:
        return _required_text(v)

    def to_payload(self) -> dict[str, str]:
        return {
            "fullName": self.full_name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "city": self.city,
            "state": self.state,
            "pincode": self.pincode,
        }


class PurchaseDetails(BaseModel):
    shipping: ShippingInfo
    payment_method: str = Field(..., description="Selected payment method")
    special_instructions: str = Field("", description="Optional delivery notes")

    @field_validator("payment_method", mode="before")
    @classmethod
    def payment_method_required(cls, v: Any) -> str:
        return _required_text(v)


class BorrowerInfo(BaseModel):
    """Borrower details attached to every borrow request."""

    name: str = Field(..., description="Borrower full name")
    email: str = Field(..., description="Borrower email")
    phone: str = Field(..., description="Borrower phone")
    reason: str = Field("", description="Optional reason for borrowing")

    @field_validator("name", "email", "phone", mode="before")
    @classmethod
    def not_blank(cls, v: Any) -> str:
        return _required_text(v)


@dataclass
class CheckoutResult:
    cart_kind: str
    mode: str
    submitted: int
    total_amount: int = 0
    order_id: Any | None = None
    request_ids: list[Any] = field(default_factory=list)


def _parse_details(model: type[BaseModel], details: Any) -> Any:
    if details is None:
        raise ValidationException("Checkout details are required", [model.__name__])
    if isinstance(details, model):
        return details
    try:
        return model.model_validate(details)
    except ValidationError as exc:
        missing = [".".join(str(part) for part in err["loc"]) for err in exc.errors()]
        raise ValidationException(
            f"Please fill in all required fields: {', '.join(missing)}", missing
        ) from exc


class CheckoutService:
    """Submits cart snapshots through the checkout gateway."""

    def __init__(
        self,
        gateway: CheckoutGateway,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._gateway = gateway
        self._today = today

    async def checkout(
        self, cart_kind: str, lines: Sequence[CartLineItem], details: Any
    ) -> CheckoutResult:
        if cart_kind == CartKind.PURCHASE:
            return await self.submit_order(lines, details)
        if cart_kind == CartKind.BORROW:
            return await self.submit_borrow_requests(lines, details)
        raise ValidationException(f"Unknown cart kind: {cart_kind!r}", ["cart_kind"])

    @staticmethod
    def build_order_payload(lines: Sequence[CartLineItem], details: PurchaseDetails) -> dict[str, Any]:
        items = [
            {
                "bookId": line.item_id,
                "bookName": line.item.display_name,
                "type": line.transaction_type,
                "price": line.price,
                "quantity": 1,
            }
            for line in lines
        ]
        return {
            "items": items,
            "shippingAddress": details.shipping.to_payload(),
            "paymentMethod": details.payment_method,
            "totalAmount": sum(item["price"] for item in items),
            "specialInstructions": details.special_instructions,
            "module": READING_ORDER_MODULE,
        }

    def build_borrow_payload(self, line: CartLineItem, borrower: BorrowerInfo) -> dict[str, Any]:
        return {
            "bookId": line.item_id,
            "libraryId": line.library_id,
            "borrowerName": borrower.name,
            "borrowerEmail": borrower.email,
            "borrowerPhone": borrower.phone,
            "borrowReason": borrower.reason.strip() or DEFAULT_BORROW_REASON,
            "requestDate": self._today().isoformat(),
            "module": BORROW_REQUEST_MODULE,
        }

    async def submit_order(self, lines: Sequence[CartLineItem], details: Any) -> CheckoutResult:
        purchase = _parse_details(PurchaseDetails, details)
        payload = self.build_order_payload(lines, purchase)

        response = await self._gateway.create_order(payload)
        order_id = response.get("orderId", response.get("id"))
        logger.info("Reading order %s placed with %s item(s)", order_id, len(lines))
        return CheckoutResult(
            cart_kind=CartKind.PURCHASE,
            mode=CheckoutMode.COMBINED,
            submitted=1,
            total_amount=payload["totalAmount"],
            order_id=order_id,
        )

    async def submit_borrow_requests(
        self, lines: Sequence[CartLineItem], details: Any
    ) -> CheckoutResult:
        borrower = _parse_details(BorrowerInfo, details)

        request_ids: list[Any] = []
        submitted_line_ids: list[str] = []
        for line in lines:
            try:
                response = await self._gateway.create_book_loan(
                    self.build_borrow_payload(line, borrower)
                )
            except CheckoutNetworkError as exc:
                exc.submitted = len(request_ids)
                exc.submitted_line_ids = list(submitted_line_ids)
                logger.error(
                    "Bulk borrow stopped after %s of %s request(s): %s",
                    len(request_ids),
                    len(lines),
                    exc.message,
                )
                raise
            request_ids.append(response.get("id", response.get("loanId")))
            submitted_line_ids.append(line.id)

        logger.info("Submitted %s borrow request(s)", len(request_ids))
        return CheckoutResult(
            cart_kind=CartKind.BORROW,
            mode=CheckoutMode.BULK_BORROW,
            submitted=len(request_ids),
            request_ids=request_ids,
        )
