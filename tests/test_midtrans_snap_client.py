from __future__ import annotations

import asyncio
import base64
import json

import httpx
import pytest

from scandrink_bridge.domain.errors import PaymentGatewayError
from scandrink_bridge.infrastructure.payments import (
    PRODUCTION_BASE_URL,
    SANDBOX_BASE_URL,
    MidtransSnapClient,
)

PARAMETERS = {
    "transaction_details": {"order_id": "ORDER-1", "gross_amount": 200},
    "item_details": [{"id": "Teh", "price": 100, "quantity": 2, "name": "Teh"}],
    "customer_details": {"first_name": "Budi"},
}


def test_create_transaction_posts_to_snap_endpoint_with_basic_auth() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(
            status_code=201,
            json={"token": "snap-token", "redirect_url": "https://pay.example/snap"},
        )

    client = MidtransSnapClient("SB-Mid-server-test", transport=httpx.MockTransport(handler))
    token = asyncio.run(client.create_transaction(PARAMETERS))

    assert token == "snap-token"
    assert len(requests) == 1
    request = requests[0]
    assert request.method == "POST"
    assert str(request.url) == f"{SANDBOX_BASE_URL}/snap/v1/transactions"
    expected_auth = base64.b64encode(b"SB-Mid-server-test:").decode()
    assert request.headers["Authorization"] == f"Basic {expected_auth}"
    assert request.headers["Accept"] == "application/json"
    assert json.loads(request.content.decode()) == PARAMETERS


def test_base_url_selection() -> None:
    assert MidtransSnapClient("key").base_url == SANDBOX_BASE_URL
    assert MidtransSnapClient("key", is_production=True).base_url == PRODUCTION_BASE_URL
    assert (
        MidtransSnapClient("key", base_url="https://midtrans.internal/").base_url
        == "https://midtrans.internal"
    )


def test_error_response_detail_is_reported() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code=401,
            json={"error_messages": ["Access denied due to unauthorized transaction"]},
        )

    client = MidtransSnapClient("wrong-key", transport=httpx.MockTransport(handler))

    with pytest.raises(PaymentGatewayError, match="401 Access denied"):
        asyncio.run(client.create_transaction(PARAMETERS))


def test_missing_token_is_reported() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code=201, json={"redirect_url": "https://pay.example"})

    client = MidtransSnapClient("key", transport=httpx.MockTransport(handler))

    with pytest.raises(PaymentGatewayError, match="no transaction token"):
        asyncio.run(client.create_transaction(PARAMETERS))


def test_transport_error_is_reported() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = MidtransSnapClient("key", transport=httpx.MockTransport(handler))

    with pytest.raises(PaymentGatewayError, match="connection refused"):
        asyncio.run(client.create_transaction(PARAMETERS))


def test_missing_server_key_fails_without_request() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code=201, json={"token": "unused"})

    client = MidtransSnapClient(None, transport=httpx.MockTransport(handler))

    with pytest.raises(PaymentGatewayError, match="not configured"):
        asyncio.run(client.create_transaction(PARAMETERS))

    assert requests == []
