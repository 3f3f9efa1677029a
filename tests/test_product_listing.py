from __future__ import annotations

import pytest

from storefront.core.exceptions import CheckoutNetworkError, IncompleteWizardError
from storefront.services.product_listing import ProductListingService, build_product_payload
from storefront.domain.wizard import ProductForm

VALUES = {
    "name": "Steel Bottle",
    "description": "Keeps water cold",
    "category": "kitchen",
    "price": "499",
    "brand": "Aqua",
    "tags": "steel, bottle, ",
    "images": ["https://cdn.example.com/bottle.png"],
}


@pytest.mark.asyncio
async def test_submit_blocked_until_all_tabs_complete(gateway) -> None:
    service = ProductListingService(gateway)

    with pytest.raises(IncompleteWizardError) as exc_info:
        await service.submit(VALUES)

    assert exc_info.value.missing_tabs == ["inventory"]
    assert gateway.products == []


@pytest.mark.asyncio
async def test_submit_posts_product_and_resets_wizard(gateway) -> None:
    service = ProductListingService(gateway)
    service.wizard.go_to("inventory")

    response = await service.submit(dict(VALUES, enableGroupBuy=False))

    assert response["id"] == 77
    payload = gateway.products[0]
    assert payload["module"] == "vyronahub"
    assert payload["price"] == 499
    assert payload["tags"] == ["steel", "bottle"]
    assert payload["imageUrl"] == "https://cdn.example.com/bottle.png"
    assert "groupBuyDiscount" not in payload
    assert service.wizard.completed == frozenset()
    assert service.wizard.active_tab == "basic"


def test_group_buy_products_go_to_social_module() -> None:
    payload = build_product_payload(
        ProductForm.from_values(dict(VALUES, enableGroupBuy=True, groupBuyDiscount=15))
    )
    assert payload["module"] == "vyronasocial"
    assert payload["groupBuyMinQuantity"] == 2
    assert payload["groupBuyDiscount"] == 15


@pytest.mark.asyncio
async def test_failed_submit_keeps_wizard_state(make_gateway) -> None:
    gateway = make_gateway(fail_products=True)
    service = ProductListingService(gateway)

    with pytest.raises(CheckoutNetworkError):
        await service.submit(dict(VALUES, enableGroupBuy=True))

    assert service.wizard.is_ready()


def test_on_form_change_and_discard(gateway) -> None:
    service = ProductListingService(gateway)
    completed = service.on_form_change({"name": "A", "description": "B", "category": "C"})
    assert completed == frozenset({"basic", "images"})

    service.discard()
    assert service.wizard.completed == frozenset()


@pytest.mark.parametrize(
    "price, original_price, expected_price, expected_original",
    [
        ("0.5", None, 0.5, None),
        ("99.99", "149.50", 99.99, 149.5),
        (250, "300", 250, 300),
    ],
)
def test_prices_are_sent_without_truncation(
    price, original_price, expected_price, expected_original
) -> None:
    values = dict(VALUES, price=price, enableGroupBuy=False)
    if original_price is not None:
        values["originalPrice"] = original_price

    payload = build_product_payload(ProductForm.from_values(values))

    assert payload["price"] == expected_price
    assert type(payload["price"]) is type(expected_price)
    assert payload.get("originalPrice") == expected_original


@pytest.mark.asyncio
@pytest.mark.parametrize("price", ["inf", "1e999", "nan"])
async def test_non_finite_price_blocks_submit(gateway, price) -> None:
    service = ProductListingService(gateway)

    with pytest.raises(IncompleteWizardError) as exc_info:
        await service.submit(dict(VALUES, price=price, enableGroupBuy=False))

    assert exc_info.value.missing_tabs == ["details"]
    assert gateway.products == []
