"""
Risk signal evaluators for payment requests.

Each check inspects one dimension of a PaymentRequest and returns a
RiskCheckResult. The default set runs in a fixed order so audit trails are
reproducible:

- Merchant verification
- Transaction amount
- Payment method risk
- Geographic risk (simulated draw or injected risk intelligence)
- AML/KYC screening (simulated draw or injected risk intelligence)
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from payrail.entropy import EntropySource
from payrail.models import (
    HIGH_VALUE_THRESHOLD_MINOR,
    CheckStatus,
    PaymentRequest,
    PaymentType,
    RiskCheckResult,
)

logger = logging.getLogger(__name__)


GEO_FLAG_PROBABILITY = 0.2
AML_FLAG_PROBABILITY = 0.05

HIGH_VALUE_SCORE = 30
CRYPTO_METHOD_SCORE = 20
GEO_RISK_SCORE = 25
AML_FLAG_SCORE = 50


class RiskIntelligence(ABC):
    """External risk-intelligence service (geolocation/IP and AML screening)."""

    @abstractmethod
    async def is_high_risk_region(self, request: PaymentRequest) -> bool:
        """Return True if the request originates from a high-risk region."""
        pass

    @abstractmethod
    async def is_aml_flagged(self, request: PaymentRequest) -> bool:
        """Return True if the payer is flagged for AML review."""
        pass


class RiskCheck(ABC):
    """A single risk check."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Check name as shown in the audit trail."""
        pass

    @abstractmethod
    async def evaluate(
        self,
        request: PaymentRequest,
        entropy: EntropySource,
    ) -> RiskCheckResult:
        """
        Evaluate the request.

        Args:
            request: Payment request under evaluation
            entropy: Draw source for simulated checks; deterministic
                checks ignore it

        Returns:
            RiskCheckResult for this check
        """
        pass


class MerchantVerificationCheck(RiskCheck):
    """Merchant identity verification. Always passes until a KYB provider is wired in."""

    @property
    def name(self) -> str:
        return "Merchant Verification"

    async def evaluate(self, request: PaymentRequest, entropy: EntropySource) -> RiskCheckResult:
        return RiskCheckResult(
            name=self.name,
            status=CheckStatus.PASSED,
            detail="Merchant identity verified and documents approved",
        )


class TransactionAmountCheck(RiskCheck):
    """Flags amounts strictly above the high-value threshold."""

    def __init__(self, threshold_minor: int = HIGH_VALUE_THRESHOLD_MINOR):
        self.threshold_minor = threshold_minor

    @property
    def name(self) -> str:
        return "Transaction Amount"

    async def evaluate(self, request: PaymentRequest, entropy: EntropySource) -> RiskCheckResult:
        if request.amount_minor > self.threshold_minor:
            return RiskCheckResult(
                name="High Value Transaction",
                status=CheckStatus.WARNING,
                detail=(
                    f"Transaction amount ${request.amount_major} "
                    "requires additional monitoring"
                ),
                score_contribution=HIGH_VALUE_SCORE,
            )
        return RiskCheckResult(
            name=self.name,
            status=CheckStatus.PASSED,
            detail=f"Transaction amount ${request.amount_major} within normal limits",
        )


class PaymentMethodCheck(RiskCheck):
    """Crypto payments get enhanced monitoring."""

    @property
    def name(self) -> str:
        return "Payment Method Risk"

    async def evaluate(self, request: PaymentRequest, entropy: EntropySource) -> RiskCheckResult:
        if request.payment_type == PaymentType.CRYPTO:
            return RiskCheckResult(
                name=self.name,
                status=CheckStatus.WARNING,
                detail="Cryptocurrency payments require enhanced monitoring",
                score_contribution=CRYPTO_METHOD_SCORE,
            )
        return RiskCheckResult(
            name=self.name,
            status=CheckStatus.PASSED,
            detail="Standard payment method with low risk profile",
        )


class _SimulatedSignalCheck(RiskCheck):
    """
    Base for checks backed by an external risk service.

    With a RiskIntelligence collaborator the check asks it; otherwise it
    consumes exactly one entropy draw and flags when the draw exceeds
    ``1 - probability``. A collaborator error fails closed (flagged).
    """

    def __init__(
        self,
        probability: float,
        intelligence: Optional[RiskIntelligence] = None,
    ):
        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"probability must be within [0, 1], got {probability}")
        self.probability = probability
        self.intelligence = intelligence

    async def _query(self, request: PaymentRequest) -> bool:
        raise NotImplementedError

    async def _is_flagged(self, request: PaymentRequest, entropy: EntropySource) -> bool:
        if self.intelligence is None:
            return entropy.next() > 1.0 - self.probability
        try:
            return bool(await self._query(request))
        except Exception as e:
            logger.error(
                "Risk intelligence lookup failed for %s, treating as flagged: %s",
                self.name,
                e,
            )
            return True


class GeographicRiskCheck(_SimulatedSignalCheck):
    """Geolocation/IP risk."""

    def __init__(
        self,
        probability: float = GEO_FLAG_PROBABILITY,
        intelligence: Optional[RiskIntelligence] = None,
    ):
        super().__init__(probability, intelligence)

    @property
    def name(self) -> str:
        return "Geographic Risk"

    async def _query(self, request: PaymentRequest) -> bool:
        return await self.intelligence.is_high_risk_region(request)

    async def evaluate(self, request: PaymentRequest, entropy: EntropySource) -> RiskCheckResult:
        if await self._is_flagged(request, entropy):
            return RiskCheckResult(
                name=self.name,
                status=CheckStatus.WARNING,
                detail="Transaction from high-risk geographic region",
                score_contribution=GEO_RISK_SCORE,
            )
        return RiskCheckResult(
            name=self.name,
            status=CheckStatus.PASSED,
            detail="Transaction from low-risk geographic region",
        )


class AmlKycCheck(_SimulatedSignalCheck):
    """AML/KYC screening. A flag is a hard failure."""

    def __init__(
        self,
        probability: float = AML_FLAG_PROBABILITY,
        intelligence: Optional[RiskIntelligence] = None,
    ):
        super().__init__(probability, intelligence)

    @property
    def name(self) -> str:
        return "AML/KYC Check"

    async def _query(self, request: PaymentRequest) -> bool:
        return await self.intelligence.is_aml_flagged(request)

    async def evaluate(self, request: PaymentRequest, entropy: EntropySource) -> RiskCheckResult:
        if await self._is_flagged(request, entropy):
            return RiskCheckResult(
                name=self.name,
                status=CheckStatus.FAILED,
                detail="Transaction flagged for manual AML review",
                score_contribution=AML_FLAG_SCORE,
            )
        return RiskCheckResult(
            name=self.name,
            status=CheckStatus.PASSED,
            detail="No AML/KYC concerns identified",
        )


def default_checks(intelligence: Optional[RiskIntelligence] = None) -> List[RiskCheck]:
    """The standard check set in evaluation order."""
    return [
        MerchantVerificationCheck(),
        TransactionAmountCheck(),
        PaymentMethodCheck(),
        GeographicRiskCheck(intelligence=intelligence),
        AmlKycCheck(intelligence=intelligence),
    ]
