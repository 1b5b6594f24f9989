"""Payment gateway data models."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import re
import uuid

from payrail.exceptions import ComplianceRejected, PaymentValidationError, RailError


# Amounts strictly above this (in minor units) are high value: $100.00
HIGH_VALUE_THRESHOLD_MINOR = 10000
# Scores at or above this fail the compliance gate
FAIL_THRESHOLD = 80
# Scores above this move card payments to the conservative provider
CONSERVATIVE_ROUTING_THRESHOLD = 60

# Length of one paid subscription period
SUBSCRIPTION_PERIOD = timedelta(days=30)
DEFAULT_PLAN = "premium"

_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


class PaymentType(str, Enum):
    """Payment instrument family requested by the payer."""
    CARD = "card"
    CRYPTO = "crypto"
    OTHER = "other"


class CheckStatus(str, Enum):
    """Outcome of a single risk check."""
    PASSED = "passed"
    WARNING = "warning"
    FAILED = "failed"


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle status."""
    PENDING = "pending"
    ACTIVE = "active"
    CANCELED = "canceled"


class Provider(str, Enum):
    """Downstream payment providers."""
    PRIMER = "primer"
    COINBASE = "coinbase"
    STRIPE = "stripe"


class Rail(str, Enum):
    """Execution rail selected by the router."""
    CARD = "card"
    CRYPTO = "crypto"


class ErrorKind(str, Enum):
    """Why a payment did not succeed."""
    COMPLIANCE_REJECTED = "compliance_rejected"
    RAIL_ERROR = "rail_error"


class TransactionStatus(str, Enum):
    """Ledger transaction status."""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class PaymentRequest:
    """Request to charge a payer. Immutable once constructed."""
    payer_id: str
    amount_minor: int
    currency: str = "USD"
    payment_type: PaymentType = PaymentType.CARD
    payment_token: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.payer_id:
            raise PaymentValidationError("payer_id is required", field="payer_id")
        if isinstance(self.amount_minor, bool) or not isinstance(self.amount_minor, int):
            raise PaymentValidationError(
                "amount_minor must be an integer number of minor units",
                field="amount_minor",
            )
        if self.amount_minor < 0:
            raise PaymentValidationError(
                "amount_minor must be non-negative", field="amount_minor"
            )
        currency = (self.currency or "").upper()
        if not _CURRENCY_RE.match(currency):
            raise PaymentValidationError(
                f"Invalid ISO-4217 currency code: {self.currency!r}", field="currency"
            )
        # Frozen dataclass: normalize through object.__setattr__
        object.__setattr__(self, "currency", currency)
        try:
            object.__setattr__(self, "payment_type", PaymentType(self.payment_type))
        except ValueError:
            raise PaymentValidationError(
                f"Unsupported payment type: {self.payment_type!r}", field="payment_type"
            ) from None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaymentRequest":
        """Build a request from the JSON wire shape."""
        payer_id = data.get("payer_id") or data.get("userId") or ""
        amount = data.get("amount_minor", data.get("amount"))
        return cls(
            payer_id=str(payer_id),
            amount_minor=amount,
            currency=data.get("currency") or "USD",
            payment_type=data.get("payment_type") or data.get("paymentType") or PaymentType.CARD,
            payment_token=data.get("payment_token") or data.get("paymentMethodToken"),
        )

    @property
    def amount_major(self) -> str:
        """Amount formatted in major units, e.g. ``29.99``."""
        return f"{self.amount_minor / 100:.2f}"

    def summary(self) -> Dict[str, Any]:
        """Audit-safe summary; the payment token is never included."""
        return {
            "amount": self.amount_minor,
            "currency": self.currency,
            "type": self.payment_type.value,
        }


@dataclass(frozen=True)
class RiskCheckResult:
    """Result of one risk check invocation."""
    name: str
    status: CheckStatus
    detail: str
    score_contribution: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "details": self.detail,
            "score": self.score_contribution,
        }


@dataclass(frozen=True)
class ComplianceVerdict:
    """Aggregated compliance decision for a payment request."""
    passed: bool
    risk_score: int
    checks: Tuple[RiskCheckResult, ...]
    recommended_provider: Provider = Provider.PRIMER

    def failed_checks(self) -> List[RiskCheckResult]:
        return [c for c in self.checks if c.status == CheckStatus.FAILED]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "riskScore": self.risk_score,
            "checks": [c.to_dict() for c in self.checks],
            "recommendedProvider": self.recommended_provider.value,
        }


@dataclass(frozen=True)
class RoutingDecision:
    """Rail chosen for execution."""
    rail: Rail
    provider: Provider
    enforced: bool = False  # payment-type constraint overrode the recommendation
    reason: str = ""


@dataclass
class RailResult:
    """Normalized response from a rail adapter."""
    provider: Provider
    provider_ref: str
    status: str
    hosted_url: Optional[str] = None
    code: Optional[str] = None
    simulated: bool = False
    raw: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "provider": self.provider.value,
            "providerRef": self.provider_ref,
            "status": self.status,
        }
        if self.hosted_url:
            data["hostedUrl"] = self.hosted_url
        if self.code:
            data["code"] = self.code
        if self.simulated:
            data["mock"] = True
        return data


@dataclass
class PaymentOutcome:
    """Terminal result of processing one payment request."""
    success: bool
    verdict: ComplianceVerdict
    routing: Optional[RoutingDecision] = None
    rail_result: Optional[RailResult] = None
    error_kind: Optional[ErrorKind] = None
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "success": self.success,
            "complianceResult": self.verdict.to_dict(),
        }
        if self.rail_result is not None:
            data["paymentResult"] = self.rail_result.to_dict()
        if self.error_kind is not None:
            data["errorKind"] = self.error_kind.value
        if self.detail:
            data["error"] = self.detail
        return data

    def raise_for_error(self) -> None:
        """
        Raise if the payment did not succeed.

        Raises:
            ComplianceRejected: If the compliance gate blocked the payment
            RailError: If the rail adapter failed
        """
        if self.success:
            return
        details = {"risk_score": self.verdict.risk_score}
        if self.error_kind == ErrorKind.COMPLIANCE_REJECTED:
            details["failed_checks"] = [c.name for c in self.verdict.failed_checks()]
            raise ComplianceRejected(self.detail or "Payment rejected", details=details)
        provider = self.routing.provider.value if self.routing else None
        raise RailError(self.detail or "Rail error", provider=provider, details=details)


@dataclass
class AuditEvent:
    """Compliance audit entry handed to the audit sink."""
    payer_id: str
    verdict: ComplianceVerdict
    request_summary: Dict[str, Any]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    entity_type: str = "compliance_check"
    action: str = "compliance_check_performed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "entity_type": self.entity_type,
            "entity_id": self.payer_id,
            "action": self.action,
            "actor": self.payer_id,
            "timestamp": self.timestamp.isoformat(),
            "payload": {
                "riskScore": self.verdict.risk_score,
                "passed": self.verdict.passed,
                "checks": [c.to_dict() for c in self.verdict.checks],
                "paymentData": self.request_summary,
            },
        }


@dataclass
class TransactionRecord:
    """Ledger row for an executed payment."""
    payer_id: str
    provider: Provider
    provider_ref: str
    amount_minor: int
    currency: str
    status: TransactionStatus = TransactionStatus.PENDING
    raw: Dict[str, Any] = field(default_factory=dict)
    transaction_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None

    @classmethod
    def from_outcome(
        cls,
        request: PaymentRequest,
        outcome: PaymentOutcome,
    ) -> "TransactionRecord":
        """Build the ledger row for a successful outcome."""
        result = outcome.rail_result
        if not outcome.success or result is None:
            raise ValueError("Only successful outcomes with a rail result can be recorded")

        if result.provider == Provider.COINBASE:
            # Coinbase charges are tracked by their short code
            provider_ref = result.code or result.provider_ref
            status = TransactionStatus.PENDING
        else:
            provider_ref = result.provider_ref
            status = (
                TransactionStatus.COMPLETED
                if result.status.upper() == "AUTHORIZED"
                else TransactionStatus.PENDING
            )

        return cls(
            payer_id=request.payer_id,
            provider=result.provider,
            provider_ref=provider_ref,
            amount_minor=request.amount_minor,
            currency=request.currency,
            status=status,
            raw={**result.raw, "complianceResult": outcome.verdict.to_dict()},
        )


@dataclass
class Subscription:
    """A payer's plan subscription. One per payer."""
    payer_id: str
    plan: str = DEFAULT_PLAN
    status: SubscriptionStatus = SubscriptionStatus.PENDING
    current_period_end: Optional[datetime] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_active(self) -> bool:
        if self.status != SubscriptionStatus.ACTIVE or self.current_period_end is None:
            return False
        return self.current_period_end > datetime.now(timezone.utc)

    def activate(self, now: Optional[datetime] = None) -> None:
        """Mark active for one period starting now."""
        now = now or datetime.now(timezone.utc)
        self.status = SubscriptionStatus.ACTIVE
        self.current_period_end = now + SUBSCRIPTION_PERIOD
        self.updated_at = now

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.payer_id,
            "plan": self.plan,
            "status": self.status.value,
            "current_period_end": (
                self.current_period_end.isoformat() if self.current_period_end else None
            ),
        }


@dataclass(frozen=True)
class ClientSession:
    """Card-rail client session used by the checkout UI to tokenize a card."""
    client_token: str
    simulated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"clientToken": self.client_token}
        if self.simulated:
            data["mock"] = True
        return data
