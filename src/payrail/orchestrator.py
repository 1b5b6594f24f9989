"""
Payment orchestration.

Sequences one payment request through:
- Risk evaluation and aggregation
- Audit recording (best-effort)
- Compliance gating
- Rail routing
- Rail execution and outcome assembly
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional, Set

from payrail.aggregator import RiskEvaluator
from payrail.audit import AuditSink, LoggingAuditSink
from payrail.checks import RiskCheck, RiskIntelligence
from payrail.config import RuntimeConfig, build_card_rail, build_crypto_rail
from payrail.entropy import EntropySource
from payrail.models import (
    AuditEvent,
    ComplianceVerdict,
    ErrorKind,
    PaymentOutcome,
    PaymentRequest,
    Rail,
    RailResult,
    RoutingDecision,
)
from payrail.rails import CardRailAdapter, CryptoRailAdapter
from payrail.routing import select_rail

logger = logging.getLogger(__name__)


class PaymentOrchestrator:
    """
    Orchestrates one payment: evaluate -> gate -> route -> execute.

    Holds no per-request state, so one instance can serve concurrent
    requests. Audit records are written by tracked background tasks and
    never delay a payment. Rails are chosen by the RuntimeConfig unless
    explicit adapters are injected.
    """

    def __init__(
        self,
        config: Optional[RuntimeConfig] = None,
        card_rail: Optional[CardRailAdapter] = None,
        crypto_rail: Optional[CryptoRailAdapter] = None,
        audit_sink: Optional[AuditSink] = None,
        entropy: Optional[EntropySource] = None,
        checks: Optional[List[RiskCheck]] = None,
        intelligence: Optional[RiskIntelligence] = None,
        crypto_plan: Optional[str] = None,
    ):
        self.config = config if config is not None else RuntimeConfig()
        self.card_rail = card_rail if card_rail is not None else build_card_rail(self.config)
        self.crypto_rail = (
            crypto_rail if crypto_rail is not None else build_crypto_rail(self.config)
        )
        self.audit_sink = audit_sink if audit_sink is not None else LoggingAuditSink()
        self.evaluator = RiskEvaluator(
            checks=checks,
            entropy=entropy,
            intelligence=intelligence,
        )
        self.crypto_plan = crypto_plan
        self._background_tasks: Set[asyncio.Task] = set()

    async def evaluate(
        self,
        request: PaymentRequest,
        entropy: Optional[EntropySource] = None,
    ) -> ComplianceVerdict:
        """Run the risk checks only. No audit entry, no rail contact."""
        return await self.evaluator.evaluate(request, entropy)

    async def process(
        self,
        request: PaymentRequest,
        entropy: Optional[EntropySource] = None,
    ) -> PaymentOutcome:
        """
        Process a payment request.

        Flow:
        1. Evaluate risk checks and aggregate the verdict
        2. Schedule the audit record (not awaited)
        3. Reject if the verdict failed (no rail contacted)
        4. Route to the card or crypto rail
        5. Execute and assemble the outcome

        Rail failures are returned as RAIL_ERROR outcomes, never raised,
        and are not retried here.

        Args:
            request: Payment request
            entropy: Request-scoped draw source for simulated checks

        Returns:
            PaymentOutcome
        """
        # Step 1: Evaluate
        verdict = await self.evaluator.evaluate(request, entropy)

        # Step 2: Audit
        self._schedule_background(self._record_audit(request, verdict))

        # Step 3: Gate
        if not verdict.passed:
            failed = [c.name for c in verdict.failed_checks()]
            logger.warning(
                "Payment rejected by compliance for payer %s: risk_score=%d failed_checks=%s",
                request.payer_id,
                verdict.risk_score,
                failed,
            )
            return PaymentOutcome(
                success=False,
                verdict=verdict,
                error_kind=ErrorKind.COMPLIANCE_REJECTED,
                detail="Payment rejected due to compliance check failure",
            )

        # Step 4: Route
        routing = select_rail(verdict, request.payment_type)
        if routing.enforced:
            logger.info(
                "Routing constraint applied for payer %s: %s",
                request.payer_id,
                routing.reason,
            )

        # Step 5: Execute
        try:
            rail_result = await self._execute(request, routing)
        except Exception as e:
            logger.error(
                "Rail %s failed for payer %s: %s",
                routing.rail.value,
                request.payer_id,
                e,
                exc_info=True,
            )
            return PaymentOutcome(
                success=False,
                verdict=verdict,
                routing=routing,
                error_kind=ErrorKind.RAIL_ERROR,
                detail=getattr(e, "message", None) or str(e),
            )

        logger.info(
            "Payment executed for payer %s via %s: ref=%s status=%s",
            request.payer_id,
            rail_result.provider.value,
            rail_result.provider_ref,
            rail_result.status,
        )

        return PaymentOutcome(
            success=True,
            verdict=verdict,
            routing=routing,
            rail_result=rail_result,
        )

    async def wait_for_background_tasks(self, timeout: Optional[float] = None) -> None:
        """Wait for all currently tracked audit tasks to complete."""
        if not self._background_tasks:
            return
        pending = list(self._background_tasks)
        await asyncio.wait_for(asyncio.gather(*pending, return_exceptions=True), timeout=timeout)

    async def close(self, timeout: float = 5.0) -> None:
        """Drain pending audit records, then close rail adapters."""
        try:
            await self.wait_for_background_tasks(timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "Audit sink did not finish within %.1fs; %d record(s) abandoned",
                timeout,
                len(self._background_tasks),
            )
            for task in list(self._background_tasks):
                task.cancel()
        await self.card_rail.close()
        await self.crypto_rail.close()

    async def _execute(
        self,
        request: PaymentRequest,
        routing: RoutingDecision,
    ) -> RailResult:
        if routing.rail == Rail.CRYPTO:
            return await self.crypto_rail.create_charge(
                request.amount_minor,
                request.currency,
                request.payer_id,
                self.crypto_plan,
            )
        return await self.card_rail.authorize(
            request.amount_minor,
            request.currency,
            request.payer_id,
            request.payment_token,
        )

    async def _record_audit(
        self,
        request: PaymentRequest,
        verdict: ComplianceVerdict,
    ) -> None:
        event = AuditEvent(
            payer_id=request.payer_id,
            verdict=verdict,
            request_summary=request.summary(),
        )
        try:
            await self.audit_sink.record(event)
        except Exception as e:
            logger.warning(
                "Failed to log compliance check for payer %s: %s",
                request.payer_id,
                e,
            )

    def _schedule_background(self, coro: Any) -> None:
        """Schedule a background coroutine while tracking task lifecycle."""
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._on_background_task_done)

    def _on_background_task_done(self, task: asyncio.Task) -> None:
        """Remove completed task and surface errors in logs."""
        self._background_tasks.discard(task)
        if task.cancelled():
            return
        try:
            task.result()
        except Exception:
            logger.exception("Audit background task failed")
