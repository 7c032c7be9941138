"""Razorpay Orders API client."""

from dataclasses import dataclass

import httpx

from parkmate.domain.billing import PaymentOrder
from parkmate.services.billing import PaymentOrderIssuer


@dataclass
class HttpxRazorpayClient(PaymentOrderIssuer):
    """Payment-order issuer backed by the Razorpay REST API."""

    key_id: str
    key_secret: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 5.0

    @classmethod
    def create(
        cls,
        key_id: str,
        key_secret: str,
        base_url: str,
        timeout_seconds: float = 5.0,
    ) -> "HttpxRazorpayClient":
        """Create a Razorpay client with a managed httpx session."""
        return cls(
            key_id=key_id,
            key_secret=key_secret,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def create_order(
        self, amount_minor_units: int, currency: str, receipt: str
    ) -> PaymentOrder:
        """Create an order for the amount in minor units."""
        response = await self.http_client.post(
            f"{self.base_url}/orders",
            auth=(self.key_id, self.key_secret),
            json={
                "amount": amount_minor_units,
                "currency": currency,
                "receipt": receipt,
            },
            timeout=self.timeout_seconds,
        )
        if response.is_error:
            raise RuntimeError(_error_description(response))
        payload = response.json()
        return PaymentOrder(
            order_id=str(payload["id"]),
            amount_minor_units=int(payload.get("amount", amount_minor_units)),
            currency=str(payload.get("currency", currency)),
            receipt=str(payload.get("receipt", receipt)),
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _error_description(response: httpx.Response) -> str:
    """Extract Razorpay's error description from a failed response."""
    try:
        payload = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    error = payload.get("error") if isinstance(payload, dict) else None
    if isinstance(error, dict) and error.get("description"):
        return str(error["description"])
    return f"HTTP {response.status_code}"
