"""
Payment gateway: the caller side of the orchestrator.

Runs payments through the PaymentOrchestrator, persists successful
outcomes to the ledger, and applies verified provider webhooks: a settled
payment completes its transaction and activates the payer's pending
subscription. Ledger writes are best-effort: a failed write is logged and
the payment result still returned.
"""
from __future__ import annotations

import logging
from typing import Optional, Union

from payrail.config import GatewaySettings
from payrail.entropy import EntropySource
from payrail.exceptions import WebhookSignatureInvalid
from payrail.ledger import InMemoryLedgerStore, LedgerStore
from payrail.logging_config import LogContext, generate_request_id
from payrail.models import (
    DEFAULT_PLAN,
    ClientSession,
    PaymentOutcome,
    PaymentRequest,
    Provider,
    Subscription,
    TransactionRecord,
    TransactionStatus,
)
from payrail.orchestrator import PaymentOrchestrator
from payrail.webhooks import WebhookEvent, WebhookVerifier, parse_event

logger = logging.getLogger(__name__)


class PaymentGateway:
    """Orchestrator plus ledger and webhook handling."""

    def __init__(
        self,
        orchestrator: PaymentOrchestrator,
        ledger: Optional[LedgerStore] = None,
        verifier: Optional[WebhookVerifier] = None,
    ):
        self.orchestrator = orchestrator
        self.ledger = ledger if ledger is not None else InMemoryLedgerStore()
        self.verifier = verifier if verifier is not None else WebhookVerifier()

    @classmethod
    def from_settings(
        cls,
        settings: GatewaySettings,
        ledger: Optional[LedgerStore] = None,
        entropy: Optional[EntropySource] = None,
    ) -> "PaymentGateway":
        """Wire a gateway from environment settings."""
        orchestrator = PaymentOrchestrator(
            config=settings.to_runtime_config(),
            entropy=entropy,
        )
        verifier = WebhookVerifier(
            primer_secret=settings.primer_webhook_secret or None,
            coinbase_secret=settings.coinbase_commerce_webhook_secret or None,
        )
        return cls(orchestrator, ledger=ledger, verifier=verifier)

    async def pay(
        self,
        request: PaymentRequest,
        entropy: Optional[EntropySource] = None,
    ) -> PaymentOutcome:
        """Process a payment and record it in the ledger on success."""
        with LogContext(request_id=generate_request_id(), payer_id=request.payer_id):
            outcome = await self.orchestrator.process(request, entropy)
            if outcome.success:
                await self._persist(request, outcome)
            return outcome

    async def handle_webhook(
        self,
        provider: Union[Provider, str],
        payload: bytes,
        signature: Optional[str],
    ) -> WebhookEvent:
        """
        Verify and apply a provider webhook.

        Raises:
            WebhookSignatureInvalid: If the signature does not verify
        """
        provider = Provider(provider)
        if not self.verifier.verify(provider, payload, signature):
            raise WebhookSignatureInvalid(
                f"Invalid {provider.value} webhook signature",
                details={"provider": provider.value},
            )

        event = parse_event(provider, payload)
        logger.info(
            "Webhook received from %s: event=%s ref=%s",
            provider.value,
            event.event_type,
            event.provider_ref,
        )

        if event.settled:
            await self._settle(event)
        return event

    async def create_client_session(
        self,
        payer_id: str,
        amount_minor: int,
        currency: str = "USD",
    ) -> ClientSession:
        """
        Create a card-rail client session for the checkout UI.

        Raises:
            RailError: If the card provider rejects or cannot be reached
        """
        return await self.orchestrator.card_rail.create_client_session(
            amount_minor,
            currency,
            payer_id,
        )

    async def start_subscription(self, payer_id: str, plan: str = DEFAULT_PLAN) -> Subscription:
        """Record a pending subscription, activated once its payment settles."""
        return await self.ledger.upsert_subscription(
            Subscription(payer_id=payer_id, plan=plan)
        )

    async def activate_subscription(self, payer_id: str, plan: str = DEFAULT_PLAN) -> Subscription:
        """Create or replace an active subscription without a payment."""
        subscription = Subscription(payer_id=payer_id, plan=plan)
        subscription.activate()
        subscription = await self.ledger.upsert_subscription(subscription)
        logger.info(
            "Subscription %s activated for payer %s until %s",
            plan,
            payer_id,
            subscription.current_period_end.isoformat(),
        )
        return subscription

    async def close(self) -> None:
        await self.orchestrator.close()

    async def _persist(self, request: PaymentRequest, outcome: PaymentOutcome) -> None:
        record = TransactionRecord.from_outcome(request, outcome)
        try:
            await self.ledger.append(record)
        except Exception as e:
            logger.error(
                "Ledger write failed for %s transaction %s: %s",
                record.provider.value,
                record.provider_ref,
                e,
            )

    async def _settle(self, event: WebhookEvent) -> None:
        record = None
        if event.provider_ref:
            record = await self.ledger.update_status(
                event.provider,
                event.provider_ref,
                TransactionStatus.COMPLETED,
                raw=event.raw,
            )
            if record is None:
                logger.warning(
                    "Settlement webhook for unknown %s transaction %s",
                    event.provider.value,
                    event.provider_ref,
                )

        payer_id = record.payer_id if record is not None else event.payer_id
        if not payer_id:
            return
        try:
            subscription = await self.ledger.activate_pending_subscription(payer_id)
        except Exception as e:
            logger.error("Subscription update failed for payer %s: %s", payer_id, e)
            return
        if subscription is not None:
            logger.info(
                "Subscription %s activated for payer %s until %s",
                subscription.plan,
                payer_id,
                subscription.current_period_end.isoformat(),
            )

