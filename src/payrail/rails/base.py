"""Base rail adapter interfaces."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx

from payrail.models import ClientSession, Provider, RailResult


class CardRailAdapter(ABC):
    """Abstract interface for card-network processors."""

    @property
    @abstractmethod
    def provider(self) -> Provider:
        """Return the provider behind this rail."""
        pass

    @abstractmethod
    async def authorize(
        self,
        amount_minor: int,
        currency: str,
        payer_id: str,
        token: Optional[str] = None,
    ) -> RailResult:
        """
        Authorize a card payment.

        Args:
            amount_minor: Amount in minor units
            currency: ISO-4217 currency code
            payer_id: Payer identifier, passed as the provider's customer ID
            token: Tokenized payment method, if the client collected one

        Returns:
            RailResult with the provider payment ID and status

        Raises:
            RailError: If the provider rejects or cannot be reached
        """
        pass

    @abstractmethod
    async def create_client_session(
        self,
        amount_minor: int,
        currency: str,
        payer_id: str,
    ) -> ClientSession:
        """
        Create a client session for tokenizing a card in the browser.

        Raises:
            RailError: If the provider rejects or cannot be reached
        """
        pass

    async def close(self) -> None:
        """Release any held resources."""
        return None


class CryptoRailAdapter(ABC):
    """Abstract interface for cryptocurrency settlement processors."""

    @property
    @abstractmethod
    def provider(self) -> Provider:
        """Return the provider behind this rail."""
        pass

    @abstractmethod
    async def create_charge(
        self,
        amount_minor: int,
        currency: str,
        payer_id: str,
        plan: Optional[str] = None,
    ) -> RailResult:
        """
        Create a hosted crypto charge.

        Args:
            amount_minor: Amount in minor units of the local price currency
            currency: ISO-4217 currency of the local price
            payer_id: Payer identifier, stored in charge metadata
            plan: Plan name used for the charge name and metadata

        Returns:
            RailResult with charge ID, hosted URL and charge code

        Raises:
            RailError: If the provider rejects or cannot be reached
        """
        pass

    async def close(self) -> None:
        """Release any held resources."""
        return None


def response_json(response: httpx.Response) -> Dict[str, Any]:
    """Decode a JSON object body, or return an empty dict."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
