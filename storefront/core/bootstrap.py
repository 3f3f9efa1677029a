"""Wiring helpers that build the cart store and services from settings."""
from __future__ import annotations

from storefront.core.config import Settings, load_settings
from storefront.core.logging_config import logger, setup_logging
from storefront.integrations.checkout_client import CheckoutClient
from storefront.integrations.slot_storage import MemorySlotStorage, RedisSlotStorage, SlotStorage
from storefront.services.cart_store import CartStore
from storefront.services.checkout_service import CheckoutService
from storefront.services.product_listing import ProductListingService


def build_slot_storage(settings: Settings, *, namespace: str | None = None) -> SlotStorage:
    if settings.uses_redis:
        return RedisSlotStorage(
            settings.redis_url or "",
            ttl_seconds=settings.cart_ttl_seconds,
            namespace=namespace,
        )
    logger.warning("REDIS_URL is not set; cart slots are kept in memory")
    return MemorySlotStorage()


def build_checkout_client(settings: Settings) -> CheckoutClient:
    return CheckoutClient(
        settings.api_base_url, timeout_seconds=settings.checkout_timeout_seconds
    )


def build_cart_store(
    settings: Settings | None = None,
    *,
    namespace: str | None = None,
    storage: SlotStorage | None = None,
) -> CartStore:
    """Create a cart store wired to the configured slots and backend."""
    settings = settings or load_settings()
    setup_logging(settings.log_level)
    checkout = CheckoutService(build_checkout_client(settings))
    return CartStore(storage or build_slot_storage(settings, namespace=namespace), checkout)


def build_product_listing(settings: Settings | None = None) -> ProductListingService:
    settings = settings or load_settings()
    setup_logging(settings.log_level)
    return ProductListingService(build_checkout_client(settings))
