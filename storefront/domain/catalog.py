"""Catalog snapshots captured when an item is put into a cart."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Union

from storefront.core.exceptions import ValidationException


class CatalogKind:
    """Catalog entity discriminators."""

    BOOK = "book"
    EBOOK = "ebook"
    PRODUCT = "product"

    ALL = frozenset({BOOK, EBOOK, PRODUCT})


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


def _as_price(value: Any, field_name: str, *, in_paise: bool = False) -> int:
    try:
        number = float(value or 0)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValidationException(f"Invalid {field_name}: {value!r}", [field_name]) from exc
    if not math.isfinite(number):
        raise ValidationException(f"{field_name} must be a finite number", [field_name])
    price = int(number)
    if price < 0:
        raise ValidationException(f"{field_name} must not be negative", [field_name])
    return price // 100 if in_paise else price


def _as_optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True, slots=True)
class PhysicalBook:
    id: int
    title: str
    author: str
    price: int
    rental_price: int | None = None
    library_id: str | None = None
    library_name: str | None = None
    cover_image_url: str | None = None
    kind: str = CatalogKind.BOOK

    @property
    def item_id(self) -> int:
        return self.id

    @property
    def display_name(self) -> str:
        return self.title

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "price": self.price,
            "rental_price": self.rental_price,
            "library_id": self.library_id,
            "library_name": self.library_name,
            "cover_image_url": self.cover_image_url,
        }


@dataclass(frozen=True, slots=True)
class EBook:
    id: int
    title: str
    author: str
    price: int
    rental_price: int | None = None
    format: str = "pdf"
    library_id: str | None = None
    library_name: str | None = None
    cover_image_url: str | None = None
    kind: str = CatalogKind.EBOOK

    @property
    def item_id(self) -> int:
        return self.id

    @property
    def display_name(self) -> str:
        return self.title

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "price": self.price,
            "rental_price": self.rental_price,
            "format": self.format,
            "library_id": self.library_id,
            "library_name": self.library_name,
            "cover_image_url": self.cover_image_url,
        }


@dataclass(frozen=True, slots=True)
class Product:
    id: int
    name: str
    price: int
    category: str = ""
    brand: str | None = None
    kind: str = CatalogKind.PRODUCT

    @property
    def item_id(self) -> int:
        return self.id

    @property
    def display_name(self) -> str:
        return self.name

    @property
    def library_id(self) -> str | None:
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "category": self.category,
            "brand": self.brand,
        }


CatalogItem = Union[PhysicalBook, EBook, Product]


def _infer_kind(data: Mapping[str, Any]) -> str:
    kind = str(_pick(data, "kind", "type", default="") or "").strip().lower()
    if kind in CatalogKind.ALL:
        return kind
    if _pick(data, "format", "pdf_url", "pdfUrl", "file_url", "fileUrl") is not None:
        return CatalogKind.EBOOK
    if _pick(data, "title", "author") is not None:
        return CatalogKind.BOOK
    return CatalogKind.PRODUCT


def normalize_catalog_item(
    raw: CatalogItem | Mapping[str, Any], *, price_in_paise: bool = False
) -> CatalogItem:
    """Turn a loose catalog payload into a typed, immutable snapshot.

    Accepts camelCase or snake_case keys. Already-normalized items are
    returned unchanged.
    """
    if isinstance(raw, (PhysicalBook, EBook, Product)):
        return raw
    if not isinstance(raw, Mapping):
        raise ValidationException(f"Unsupported catalog item: {type(raw).__name__}", ["item"])

    raw_id = _pick(raw, "id", "item_id", "itemId", "book_id", "bookId")
    if raw_id is None or isinstance(raw_id, bool):
        raise ValidationException("Catalog item id is required", ["id"])
    try:
        item_id = int(raw_id)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValidationException(f"Invalid catalog item id: {raw_id!r}", ["id"]) from exc

    price = _as_price(raw.get("price"), "price", in_paise=price_in_paise)
    kind = _infer_kind(raw)

    if kind == CatalogKind.PRODUCT:
        return Product(
            id=item_id,
            name=str(_pick(raw, "name", "title", default="")),
            price=price,
            category=str(raw.get("category") or ""),
            brand=_as_optional_str(raw.get("brand")),
        )

    rental_raw = _pick(raw, "rental_price", "rentalPrice")
    rental_price = (
        _as_price(rental_raw, "rental_price", in_paise=price_in_paise)
        if rental_raw is not None
        else None
    )
    common = {
        "id": item_id,
        "title": str(_pick(raw, "title", "name", default="")),
        "author": str(raw.get("author") or ""),
        "price": price,
        "rental_price": rental_price,
        "library_id": _as_optional_str(_pick(raw, "library_id", "libraryId")),
        "library_name": _as_optional_str(_pick(raw, "library_name", "libraryName")),
        "cover_image_url": _as_optional_str(
            _pick(raw, "cover_image_url", "coverImageUrl", "image_url", "imageUrl")
        ),
    }
    if kind == CatalogKind.EBOOK:
        return EBook(format=str(raw.get("format") or "pdf"), **common)
    return PhysicalBook(**common)
