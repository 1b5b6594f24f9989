"""Primer card rail adapter."""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Optional

import httpx

from payrail.exceptions import RailError
from payrail.models import ClientSession, Provider, RailResult
from payrail.rails.base import CardRailAdapter, response_json

logger = logging.getLogger(__name__)


class PrimerCardAdapter(CardRailAdapter):
    """Primer payments API connector."""

    SANDBOX_API_BASE = "https://api.sandbox.primer.io"
    PRODUCTION_API_BASE = "https://api.primer.io"

    def __init__(
        self,
        api_key: str,
        environment: str = "sandbox",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.environment = environment
        self.api_base = (
            self.SANDBOX_API_BASE if environment == "sandbox" else self.PRODUCTION_API_BASE
        )
        self._client = client or httpx.AsyncClient(
            base_url=self.api_base,
            timeout=timeout,
        )
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

    @property
    def provider(self) -> Provider:
        return Provider.PRIMER

    async def authorize(
        self,
        amount_minor: int,
        currency: str,
        payer_id: str,
        token: Optional[str] = None,
    ) -> RailResult:
        """Create a Primer payment."""
        payload = self._order_payload(amount_minor, currency, payer_id)
        if token:
            payload["paymentMethodToken"] = token

        data = await self._post("/payments", payload)

        logger.info(
            "Primer payment %s for customer %s: status=%s",
            data.get("id"),
            payer_id,
            data.get("status"),
        )

        return RailResult(
            provider=Provider.PRIMER,
            provider_ref=str(data.get("id", "")),
            status=str(data.get("status", "PENDING")),
            raw={**data, "provider": "primer"},
        )

    async def create_client_session(
        self,
        amount_minor: int,
        currency: str,
        payer_id: str,
    ) -> ClientSession:
        """Create a Primer client session."""
        data = await self._post(
            "/client-session",
            self._order_payload(amount_minor, currency, payer_id),
        )
        return ClientSession(client_token=str(data.get("clientToken", "")))

    async def close(self) -> None:
        """Close HTTP client."""
        await self._client.aclose()

    def _order_payload(
        self,
        amount_minor: int,
        currency: str,
        payer_id: str,
    ) -> Dict[str, Any]:
        return {
            "amount": amount_minor,
            "currency": currency,
            "orderId": f"order_{int(time.time() * 1000)}",
            "customerId": payer_id,
        }

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = await self._client.post(
                f"{self.api_base}{path}",
                json=payload,
                headers=self._headers,
            )
        except httpx.HTTPError as e:
            raise RailError(f"Primer API unreachable: {e}", provider="primer") from e

        data = response_json(response)
        if response.is_error:
            message = data.get("message") or "Unknown error"
            raise RailError(
                f"Primer API error: {message}",
                provider="primer",
                status_code=response.status_code,
            )
        return data

