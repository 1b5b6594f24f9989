"""Coinbase Commerce crypto rail adapter."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from payrail.exceptions import RailError
from payrail.models import DEFAULT_PLAN, Provider, RailResult
from payrail.rails.base import CryptoRailAdapter, response_json

logger = logging.getLogger(__name__)


class CoinbaseCommerceAdapter(CryptoRailAdapter):
    """
    Coinbase Commerce charges connector.

    Creates fixed-price hosted charges; the payer completes payment on the
    hosted page and settlement arrives later via the charge:confirmed
    webhook.
    """

    API_BASE = "https://api.commerce.coinbase.com"
    API_VERSION = "2018-03-22"

    def __init__(
        self,
        api_key: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self._client = client or httpx.AsyncClient(
            base_url=self.API_BASE,
            timeout=timeout,
        )
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "X-CC-Version": self.API_VERSION,
        }

    @property
    def provider(self) -> Provider:
        return Provider.COINBASE

    async def create_charge(
        self,
        amount_minor: int,
        currency: str,
        payer_id: str,
        plan: Optional[str] = None,
    ) -> RailResult:
        """Create a Coinbase Commerce charge."""
        plan = plan or DEFAULT_PLAN
        payload: Dict[str, Any] = {
            "name": f"{plan} Subscription",
            "description": f"Payment for {plan} subscription",
            "pricing_type": "fixed_price",
            "local_price": {
                # Commerce prices in major units
                "amount": f"{amount_minor / 100:.2f}",
                "currency": currency,
            },
            "metadata": {
                "user_id": payer_id,
                "plan": plan,
            },
        }

        try:
            response = await self._client.post(
                f"{self.API_BASE}/charges",
                json=payload,
                headers=self._headers,
            )
        except httpx.HTTPError as e:
            raise RailError(
                f"Coinbase Commerce API unreachable: {e}", provider="coinbase"
            ) from e

        body = response_json(response)
        if response.is_error:
            error = body.get("error") or {}
            message = error.get("message") if isinstance(error, dict) else None
            raise RailError(
                f"Coinbase Commerce API error: {message or 'Unknown error'}",
                provider="coinbase",
                status_code=response.status_code,
            )

        data = body.get("data") or {}
        logger.info("Coinbase charge %s created for user %s", data.get("code"), payer_id)

        return RailResult(
            provider=Provider.COINBASE,
            provider_ref=str(data.get("id", "")),
            status="PENDING",
            hosted_url=data.get("hosted_url"),
            code=data.get("code"),
            raw={**data, "provider": "coinbase"},
        )

    async def close(self) -> None:
        """Close HTTP client."""
        await self._client.aclose()
