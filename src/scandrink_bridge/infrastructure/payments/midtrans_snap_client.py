"""HTTP client for the Midtrans Snap transaction API."""

from __future__ import annotations

from typing import Any

import httpx

from scandrink_bridge.domain.errors import PaymentGatewayError
from scandrink_bridge.domain.ports import PaymentGateway

SANDBOX_BASE_URL = "https://app.sandbox.midtrans.com"
PRODUCTION_BASE_URL = "https://app.midtrans.com"


class MidtransSnapClient(PaymentGateway):
    """Wrapper around `POST /snap/v1/transactions`."""

    def __init__(
        self,
        server_key: str | None,
        *,
        is_production: bool = False,
        base_url: str | None = None,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._server_key = server_key
        default_base_url = PRODUCTION_BASE_URL if is_production else SANDBOX_BASE_URL
        self._base_url = (base_url or default_base_url).strip().rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base_url

    async def create_transaction(self, parameters: dict[str, Any]) -> str:
        """Create a Snap transaction and return its token."""

        if not self._server_key:
            raise PaymentGatewayError("Midtrans server key is not configured.")

        url = f"{self._base_url}/snap/v1/transactions"
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout_seconds,
                transport=self._transport,
                auth=httpx.BasicAuth(self._server_key, ""),
            ) as http_client:
                response = await http_client.post(
                    url,
                    json=parameters,
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            raise PaymentGatewayError(f"POST {url} failed: {exc}") from exc

        self._ensure_success(response)
        token = self._json_body(response).get("token")
        if not isinstance(token, str) or not token:
            raise PaymentGatewayError(f"POST {url} returned no transaction token.")
        return token

    def _ensure_success(self, response: httpx.Response) -> None:
        if response.is_success:
            return
        raise PaymentGatewayError(
            f"{response.request.method} {response.request.url} failed: "
            f"{response.status_code} {self._detail_from_response(response)}"
        )

    def _json_body(self, response: httpx.Response) -> dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise PaymentGatewayError("Midtrans returned a non-JSON response.") from exc
        if not isinstance(payload, dict):
            raise PaymentGatewayError("Midtrans returned an unexpected response shape.")
        return payload

    def _detail_from_response(self, response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            text = response.text.strip()
            return text or "<no response body>"

        if isinstance(payload, dict):
            messages = payload.get("error_messages")
            if isinstance(messages, list) and messages:
                return "; ".join(str(message) for message in messages)
        return str(payload)


__all__ = ["MidtransSnapClient", "PRODUCTION_BASE_URL", "SANDBOX_BASE_URL"]
