"""Product listing wizard: tab completion rules and submission gate."""
from __future__ import annotations

import math
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable, Mapping

from storefront.core.constants import (
    DEFAULT_GROUP_BUY_DISCOUNT,
    DEFAULT_GROUP_BUY_MIN_QUANTITY,
    TAB_BASIC,
    TAB_DETAILS,
    TAB_IMAGES,
    TAB_INVENTORY,
    WIZARD_TAB_LABELS,
    WIZARD_TABS,
)
from storefront.core.exceptions import IncompleteWizardError
from storefront.core.logging_config import logger


class GroupBuyChoice(Enum):
    """Explicit group-buy decision; UNSET means the seller has not chosen yet."""

    UNSET = "unset"
    ENABLED = "enabled"
    DISABLED = "disabled"

    @classmethod
    def coerce(cls, value: Any) -> GroupBuyChoice:
        if isinstance(value, GroupBuyChoice):
            return value
        if isinstance(value, bool):
            return cls.ENABLED if value else cls.DISABLED
        if isinstance(value, str):
            text = value.strip().lower()
            if text in {"true", "enabled", "yes", "1"}:
                return cls.ENABLED
            if text in {"false", "disabled", "no", "0"}:
                return cls.DISABLED
        return cls.UNSET

    @property
    def is_decided(self) -> bool:
        return self is not GroupBuyChoice.UNSET


_CAMEL_ALIASES = {
    "originalPrice": "original_price",
    "enableGroupBuy": "enable_group_buy",
    "groupBuyMinQuantity": "group_buy_min_quantity",
    "groupBuyDiscount": "group_buy_discount",
    "isActive": "is_active",
}


@dataclass(slots=True)
class ProductForm:
    """Values backing the product wizard."""

    name: str = ""
    description: str = ""
    category: str = ""
    price: Any = 0
    original_price: Any = 0
    brand: str = ""
    sku: str = ""
    weight: str = ""
    dimensions: str = ""
    specifications: str = ""
    tags: str = ""
    enable_group_buy: GroupBuyChoice = GroupBuyChoice.UNSET
    group_buy_min_quantity: int = DEFAULT_GROUP_BUY_MIN_QUANTITY
    group_buy_discount: int = DEFAULT_GROUP_BUY_DISCOUNT
    is_active: bool = True
    images: list[str] = field(default_factory=list)

    @classmethod
    def from_values(cls, values: ProductForm | Mapping[str, Any] | None) -> ProductForm:
        """Build a form from loose values; unknown keys are ignored."""
        if isinstance(values, ProductForm):
            return values
        if not isinstance(values, Mapping):
            return cls()

        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        for key, value in values.items():
            name = _CAMEL_ALIASES.get(key, key)
            if name in known:
                kwargs[name] = value
        kwargs["enable_group_buy"] = GroupBuyChoice.coerce(kwargs.get("enable_group_buy"))
        images = kwargs.get("images")
        kwargs["images"] = list(images) if isinstance(images, (list, tuple)) else []
        return cls(**kwargs)


def _filled(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _positive_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return False
    return math.isfinite(number) and number > 0


def is_basic_complete(form: ProductForm) -> bool:
    return _filled(form.name) and _filled(form.description) and _filled(form.category)


def is_details_complete(form: ProductForm) -> bool:
    return _positive_number(form.price) and _filled(form.brand)


def is_images_complete(form: ProductForm) -> bool:
    # Images are optional; the tab only has to be visited.
    return True


def is_inventory_complete(form: ProductForm) -> bool:
    return GroupBuyChoice.coerce(form.enable_group_buy).is_decided


TAB_RULES: dict[str, Callable[[ProductForm], bool]] = {
    TAB_BASIC: is_basic_complete,
    TAB_DETAILS: is_details_complete,
    TAB_IMAGES: is_images_complete,
    TAB_INVENTORY: is_inventory_complete,
}


class WizardValidator:
    """Tracks which wizard tabs are complete and where the seller is."""

    def __init__(self, tabs: tuple[str, ...] = WIZARD_TABS) -> None:
        self._tabs = tuple(tabs)
        self._completed: set[str] = set()
        self._active = self._tabs[0]

    @property
    def tabs(self) -> tuple[str, ...]:
        return self._tabs

    @property
    def active_tab(self) -> str:
        return self._active

    @property
    def completed(self) -> frozenset[str]:
        return frozenset(self._completed)

    def evaluate(self, tab_id: str, form_values: ProductForm | Mapping[str, Any] | None) -> bool:
        """Re-check one tab against current values and update the completed set."""
        if not isinstance(tab_id, str):
            return False
        rule = TAB_RULES.get(tab_id)
        if rule is None or tab_id not in self._tabs:
            return False
        try:
            valid = bool(rule(ProductForm.from_values(form_values)))
        except Exception as exc:
            logger.debug("Wizard tab %s treated as incomplete: %s", tab_id, exc)
            valid = False

        if valid:
            self._completed.add(tab_id)
        else:
            self._completed.discard(tab_id)
        return valid

    def evaluate_all(self, form_values: ProductForm | Mapping[str, Any] | None) -> frozenset[str]:
        form = ProductForm.from_values(form_values) if form_values is not None else ProductForm()
        for tab_id in self._tabs:
            self.evaluate(tab_id, form)
        return self.completed

    def is_complete(self, tab_id: str) -> bool:
        return tab_id in self._completed

    def is_ready(self) -> bool:
        return len(self._completed) == len(self._tabs)

    def missing_tabs(self) -> list[str]:
        return [tab for tab in self._tabs if tab not in self._completed]

    def require_ready(self) -> None:
        missing = self.missing_tabs()
        if missing:
            raise IncompleteWizardError(
                missing, [WIZARD_TAB_LABELS.get(tab, tab) for tab in missing]
            )

    def next_tab(self, current_tab: str) -> str | None:
        try:
            index = self._tabs.index(current_tab)
        except ValueError:
            return None
        if index + 1 < len(self._tabs):
            return self._tabs[index + 1]
        return None

    def next_incomplete_tab(self) -> str | None:
        for tab in self._tabs:
            if tab not in self._completed:
                return tab
        return None

    def go_to(self, tab_id: str) -> str:
        if tab_id in self._tabs:
            self._active = tab_id
        return self._active

    def advance(self) -> str:
        nxt = self.next_tab(self._active)
        if nxt is not None:
            self._active = nxt
        return self._active

    @property
    def is_last_tab(self) -> bool:
        return self._active == self._tabs[-1]

    def reset(self) -> None:
        self._completed.clear()
        self._active = self._tabs[0]
