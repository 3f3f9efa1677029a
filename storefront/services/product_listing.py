"""Product listing submission gated by the wizard."""
from __future__ import annotations

import math
from typing import Any, Mapping, Protocol

from storefront.core.constants import GROUP_BUY_MODULE, STANDARD_PRODUCT_MODULE
from storefront.core.logging_config import logger
from storefront.domain.wizard import GroupBuyChoice, ProductForm, WizardValidator


class ProductGateway(Protocol):
    async def create_product(self, payload: dict[str, Any]) -> dict[str, Any]: ...


def _to_number(value: Any, default: int = 0) -> int | float:
    """Numeric form value, kept fractional when it has a fractional part."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(number):
        return default
    return int(number) if number.is_integer() else number


def _to_int(value: Any, default: int = 0) -> int:
    return int(_to_number(value, default))


def build_product_payload(form: ProductForm) -> dict[str, Any]:
    group_buy = form.enable_group_buy is GroupBuyChoice.ENABLED
    payload: dict[str, Any] = {
        "name": form.name.strip(),
        "description": form.description.strip(),
        "category": form.category.strip(),
        "price": _to_number(form.price),
        "brand": form.brand.strip(),
        "sku": form.sku,
        "weight": form.weight,
        "dimensions": form.dimensions,
        "specifications": form.specifications,
        "tags": [tag.strip() for tag in form.tags.split(",") if tag.strip()],
        "images": list(form.images),
        "imageUrl": form.images[0] if form.images else None,
        "isActive": bool(form.is_active),
        "enableGroupBuy": group_buy,
        "module": GROUP_BUY_MODULE if group_buy else STANDARD_PRODUCT_MODULE,
    }
    original_price = _to_number(form.original_price)
    if original_price > 0:
        payload["originalPrice"] = original_price
    if group_buy:
        payload["groupBuyMinQuantity"] = _to_int(form.group_buy_min_quantity)
        payload["groupBuyDiscount"] = _to_int(form.group_buy_discount)
    return payload


class ProductListingService:
    """Creates products once every wizard tab is complete."""

    def __init__(self, gateway: ProductGateway, wizard: WizardValidator | None = None) -> None:
        self._gateway = gateway
        self.wizard = wizard or WizardValidator()

    def on_form_change(self, form_values: ProductForm | Mapping[str, Any]) -> frozenset[str]:
        return self.wizard.evaluate_all(form_values)

    async def submit(self, form_values: ProductForm | Mapping[str, Any]) -> dict[str, Any]:
        form = ProductForm.from_values(form_values)
        self.wizard.evaluate_all(form)
        self.wizard.require_ready()

        payload = build_product_payload(form)
        response = await self._gateway.create_product(payload)
        logger.info("Product %r created in %s", payload["name"], payload["module"])
        self.wizard.reset()
        return response

    def discard(self) -> None:
        self.wizard.reset()
