"""
Risk aggregation.

Combines the ordered check results into a ComplianceVerdict: total score,
pass/fail gate and the recommended provider.
"""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from payrail.checks import RiskCheck, RiskIntelligence, default_checks
from payrail.entropy import EntropySource, RandomEntropySource
from payrail.models import (
    CONSERVATIVE_ROUTING_THRESHOLD,
    FAIL_THRESHOLD,
    CheckStatus,
    ComplianceVerdict,
    PaymentRequest,
    PaymentType,
    Provider,
    RiskCheckResult,
)

logger = logging.getLogger(__name__)


def recommend_provider(payment_type: PaymentType, risk_score: int) -> Provider:
    """
    Recommend a provider from payment type and score.

    Rules, in order, later rules overriding earlier ones:
    1. Crypto payments go to coinbase.
    2. Scores above the conservative threshold go to coinbase for crypto,
       stripe otherwise.
    """
    provider = Provider.PRIMER

    if payment_type == PaymentType.CRYPTO:
        provider = Provider.COINBASE

    if risk_score > CONSERVATIVE_ROUTING_THRESHOLD:
        # Crypto branch repeats rule 1 and leaves coinbase in place
        provider = Provider.COINBASE if payment_type == PaymentType.CRYPTO else Provider.STRIPE

    return provider


def aggregate(
    checks: Sequence[RiskCheckResult],
    payment_type: PaymentType,
) -> ComplianceVerdict:
    """Fold check results into a verdict. Pure; never raises."""
    risk_score = sum(c.score_contribution for c in checks)
    has_failure = any(c.status == CheckStatus.FAILED for c in checks)
    passed = not has_failure and risk_score < FAIL_THRESHOLD

    return ComplianceVerdict(
        passed=passed,
        risk_score=risk_score,
        checks=tuple(checks),
        recommended_provider=recommend_provider(payment_type, risk_score),
    )


class RiskEvaluator:
    """
    Runs the configured checks in order and aggregates them.

    Holds no per-request state; a single instance serves concurrent
    requests.
    """

    def __init__(
        self,
        checks: Optional[List[RiskCheck]] = None,
        entropy: Optional[EntropySource] = None,
        intelligence: Optional[RiskIntelligence] = None,
    ):
        self.checks = checks if checks is not None else default_checks(intelligence)
        self.entropy = entropy if entropy is not None else RandomEntropySource()

    async def evaluate(
        self,
        request: PaymentRequest,
        entropy: Optional[EntropySource] = None,
    ) -> ComplianceVerdict:
        """
        Evaluate a request.

        Args:
            request: Payment request
            entropy: Request-scoped draw source; defaults to the evaluator's

        Returns:
            ComplianceVerdict with checks in evaluation order
        """
        source = entropy if entropy is not None else self.entropy
        # Sequential: simulated checks draw in order
        results = [await check.evaluate(request, source) for check in self.checks]
        verdict = aggregate(results, request.payment_type)

        logger.info(
            "Compliance check for payer %s: passed=%s risk_score=%d provider=%s",
            request.payer_id,
            verdict.passed,
            verdict.risk_score,
            verdict.recommended_provider.value,
        )
        return verdict
