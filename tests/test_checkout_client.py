"""CheckoutClient against a local aiohttp test server."""
from __future__ import annotations

import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from storefront.core.exceptions import CheckoutNetworkError
from storefront.integrations.checkout_client import CheckoutClient


@pytest.fixture
async def backend():
    received: list[tuple[str, dict]] = []

    async def orders(request: web.Request) -> web.Response:
        received.append(("orders", await request.json()))
        return web.json_response({"orderId": 501})

    async def book_loans(request: web.Request) -> web.Response:
        received.append(("loans", await request.json()))
        return web.json_response({"id": 9}, status=201)

    async def products(request: web.Request) -> web.Response:
        return web.json_response({"error": "invalid"}, status=422)

    async def slow(request: web.Request) -> web.Response:
        await asyncio.sleep(1)
        return web.json_response({})

    app = web.Application()
    app.router.add_post("/api/orders", orders)
    app.router.add_post("/api/book-loans", book_loans)
    app.router.add_post("/api/products", products)
    app.router.add_post("/slow/api/orders", slow)

    server = TestServer(app)
    await server.start_server()
    try:
        yield server, received
    finally:
        await server.close()


def _base_url(server: TestServer) -> str:
    return str(server.make_url("/"))


@pytest.mark.asyncio
async def test_create_order_posts_json(backend) -> None:
    server, received = backend
    client = CheckoutClient(_base_url(server))

    response = await client.create_order({"items": [], "totalAmount": 0})

    assert response == {"orderId": 501}
    assert received == [("orders", {"items": [], "totalAmount": 0})]


@pytest.mark.asyncio
async def test_create_book_loan_accepts_created_status(backend) -> None:
    server, received = backend
    client = CheckoutClient(_base_url(server))

    response = await client.create_book_loan({"bookId": 3})

    assert response == {"id": 9}
    assert received[0][0] == "loans"


@pytest.mark.asyncio
async def test_error_status_raises_network_error(backend) -> None:
    server, _ = backend
    client = CheckoutClient(_base_url(server))

    with pytest.raises(CheckoutNetworkError) as exc_info:
        await client.create_product({"name": "x"})

    assert exc_info.value.status == 422
    assert exc_info.value.endpoint == "/api/products"


@pytest.mark.asyncio
async def test_timeout_raises_network_error(backend) -> None:
    server, _ = backend
    client = CheckoutClient(f"{_base_url(server).rstrip('/')}/slow", timeout_seconds=0.1)

    with pytest.raises(CheckoutNetworkError):
        await client.create_order({})


@pytest.mark.asyncio
async def test_connection_error_raises_network_error() -> None:
    client = CheckoutClient("http://127.0.0.1:1", timeout_seconds=2)

    with pytest.raises(CheckoutNetworkError) as exc_info:
        await client.create_order({})

    assert exc_info.value.status is None
