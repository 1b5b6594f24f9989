"""Simulated rails used when live credentials are not configured."""
from __future__ import annotations

import logging
import secrets
import string
import time
from typing import Optional

from payrail.exceptions import RailError
from payrail.models import ClientSession, Provider, RailResult
from payrail.rails.base import CardRailAdapter, CryptoRailAdapter

logger = logging.getLogger(__name__)

_ALPHABET = string.ascii_lowercase + string.digits


def _suffix(length: int) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


class SimulatedCardAdapter(CardRailAdapter):
    """Card rail that authorizes everything without calling Primer.

    Pass ``fail_with`` to simulate a provider error.
    """

    def __init__(self, fail_with: Optional[str] = None):
        self.fail_with = fail_with
        self.calls = 0

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
        self.calls += 1
        if self.fail_with:
            raise RailError(self.fail_with, provider="primer")

        payment_id = f"mock_payment_{int(time.time() * 1000)}_{_suffix(9)}"
        logger.debug("Simulated Primer authorization %s for %s", payment_id, payer_id)

        return RailResult(
            provider=Provider.PRIMER,
            provider_ref=payment_id,
            status="AUTHORIZED",
            simulated=True,
            raw={
                "id": payment_id,
                "status": "AUTHORIZED",
                "amount": amount_minor,
                "currency": currency,
                "mock": True,
                "provider": "primer",
            },
        )

    async def create_client_session(
        self,
        amount_minor: int,
        currency: str,
        payer_id: str,
    ) -> ClientSession:
        token = f"mock_client_token_{int(time.time() * 1000)}_{_suffix(9)}"
        logger.debug("Simulated Primer client session for %s", payer_id)
        return ClientSession(client_token=token, simulated=True)


class SimulatedCryptoAdapter(CryptoRailAdapter):
    """Crypto rail that returns mock Coinbase Commerce charges."""

    def __init__(self, fail_with: Optional[str] = None):
        self.fail_with = fail_with
        self.calls = 0

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
        self.calls += 1
        if self.fail_with:
            raise RailError(self.fail_with, provider="coinbase")

        charge_id = f"mock_charge_{int(time.time() * 1000)}_{_suffix(9)}"
        code = f"MOCK{_suffix(6).upper()}"
        hosted_url = f"https://commerce.coinbase.com/charges/{code}"
        logger.debug("Simulated Coinbase charge %s for %s", code, payer_id)

        return RailResult(
            provider=Provider.COINBASE,
            provider_ref=charge_id,
            status="PENDING",
            hosted_url=hosted_url,
            code=code,
            simulated=True,
            raw={
                "chargeId": charge_id,
                "hostedUrl": hosted_url,
                "code": code,
                "mock": True,
                "provider": "coinbase",
            },
        )
