from __future__ import annotations

import pytest

from storefront.core.exceptions import ValidationException
from storefront.domain.cart import line_item_id, rental_price
from storefront.domain.catalog import EBook, PhysicalBook, Product, normalize_catalog_item


def test_book_payload_with_camel_case_keys() -> None:
    item = normalize_catalog_item(
        {
            "id": "12",
            "title": "Gitanjali",
            "author": "Tagore",
            "price": 350,
            "rentalPrice": 99,
            "libraryId": 4,
            "libraryName": "Chennai Public Library",
        }
    )
    assert isinstance(item, PhysicalBook)
    assert item.item_id == 12
    assert item.rental_price == 99
    assert item.library_id == "4"
    assert item.library_name == "Chennai Public Library"


def test_ebook_detected_by_format() -> None:
    item = normalize_catalog_item({"id": 3, "title": "Digital", "price": 120, "format": "epub"})
    assert isinstance(item, EBook)
    assert item.format == "epub"


def test_product_payload_normalizes_to_product() -> None:
    item = normalize_catalog_item({"id": 8, "name": "Mug", "price": 250, "category": "home"})
    assert isinstance(item, Product)
    assert item.display_name == "Mug"
    assert item.library_id is None


def test_price_in_paise_is_converted_to_rupees() -> None:
    item = normalize_catalog_item({"id": 1, "title": "Book", "price": 29999}, price_in_paise=True)
    assert item.price == 299


@pytest.mark.parametrize(
    "payload",
    [
        {"title": "No id", "price": 10},
        {"id": "abc", "title": "Bad id", "price": 10},
        {"id": True, "title": "Bool id", "price": 10},
        {"id": 1, "title": "Negative", "price": -1},
        {"id": 1, "title": "Text price", "price": "free"},
        {"id": 1, "title": "Infinite", "price": float("inf")},
        {"id": 1, "title": "Overflow", "price": "1e999"},
        {"id": 1, "title": "Huge int", "price": 10**400},
    ],
)
def test_invalid_payloads_are_rejected(payload) -> None:
    with pytest.raises(ValidationException):
        normalize_catalog_item(payload)


def test_snapshot_round_trips_through_dict() -> None:
    item = normalize_catalog_item({"kind": "ebook", "id": 4, "title": "E", "price": 10})
    assert normalize_catalog_item(item.to_dict()) == item


def test_composite_ids() -> None:
    assert line_item_id(7, "buy", "purchase") == "7-buy"
    assert line_item_id(7, "rent", "purchase") == "7-rent"
    assert line_item_id(7, "borrow", "borrow") == "library-7"


def test_rental_price_is_forty_percent_floored() -> None:
    assert rental_price(500) == 200
    assert rental_price(299) == 119
