"""Services layer - cart store, checkout and product listing."""
from storefront.services.cart_store import CartEvent, CartMutationResult, CartStore
from storefront.services.checkout_service import (
    BorrowerInfo,
    CheckoutResult,
    CheckoutService,
    PurchaseDetails,
    ShippingInfo,
)
from storefront.services.product_listing import ProductListingService

__all__ = [
    "BorrowerInfo",
    "CartEvent",
    "CartMutationResult",
    "CartStore",
    "CheckoutResult",
    "CheckoutService",
    "ProductListingService",
    "PurchaseDetails",
    "ShippingInfo",
]
