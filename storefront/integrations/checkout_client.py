"""HTTP client for the marketplace order, book-loan and product endpoints."""
from __future__ import annotations

import asyncio
from typing import Any

import aiohttp

from storefront.core.constants import (
    BOOK_LOANS_ENDPOINT,
    DEFAULT_CHECKOUT_TIMEOUT_SECONDS,
    ORDERS_ENDPOINT,
    PRODUCTS_ENDPOINT,
)
from storefront.core.exceptions import CheckoutNetworkError
from storefront.core.logging_config import logger


class CheckoutClient:
    """Thin JSON client over aiohttp.

    A session may be injected (tests, shared app session); otherwise one is
    opened per request.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = DEFAULT_CHECKOUT_TIMEOUT_SECONDS,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session

    async def _post(self, endpoint: str, payload: dict[str, Any]) -> dict[str, Any]:
        url = f"{self._base_url}{endpoint}"
        try:
            if self._session is not None:
                return await self._send(self._session, url, endpoint, payload)
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                return await self._send(session, url, endpoint, payload)
        except CheckoutNetworkError:
            raise
        except asyncio.TimeoutError as exc:
            logger.error("Request to %s timed out", endpoint)
            raise CheckoutNetworkError(f"Request to {endpoint} timed out", endpoint=endpoint) from exc
        except aiohttp.ClientError as exc:
            logger.error("Request to %s failed: %s", endpoint, exc)
            raise CheckoutNetworkError(
                f"Request to {endpoint} failed: {exc}", endpoint=endpoint
            ) from exc

    async def _send(
        self,
        session: aiohttp.ClientSession,
        url: str,
        endpoint: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        async with session.post(url, json=payload, timeout=self._timeout) as resp:
            if resp.status >= 400:
                body = await resp.text()
                logger.warning("POST %s returned %s: %s", endpoint, resp.status, body[:200])
                raise CheckoutNetworkError(
                    f"POST {endpoint} returned {resp.status}",
                    endpoint=endpoint,
                    status=resp.status,
                )
            try:
                data = await resp.json(content_type=None)
            except ValueError:
                data = None
            return data if isinstance(data, dict) else {}

    async def create_order(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._post(ORDERS_ENDPOINT, payload)

    async def create_book_loan(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._post(BOOK_LOANS_ENDPOINT, payload)

    async def create_product(self, payload: dict[str, Any]) -> dict[str, Any]:
        return await self._post(PRODUCTS_ENDPOINT, payload)
