"""Tests for payrail.models."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from payrail.exceptions import PaymentValidationError
from payrail.models import (
    CheckStatus,
    ClientSession,
    ComplianceVerdict,
    PaymentOutcome,
    PaymentRequest,
    PaymentType,
    Provider,
    RailResult,
    RiskCheckResult,
    Subscription,
    SubscriptionStatus,
    TransactionRecord,
    TransactionStatus,
)


class TestPaymentRequest:
    """Tests for PaymentRequest validation."""

    def test_create_request(self):
        """Should normalize currency and default to a card payment."""
        request = PaymentRequest(payer_id="u1", amount_minor=2999, currency="usd")

        assert request.currency == "USD"
        assert request.payment_type == PaymentType.CARD
        assert request.amount_major == "29.99"

    def test_request_is_immutable(self):
        """Should reject attribute assignment."""
        request = PaymentRequest(payer_id="u1", amount_minor=100)

        with pytest.raises(AttributeError):
            request.amount_minor = 5

    def test_negative_amount_rejected(self):
        """Should reject a negative amount and name the field."""
        with pytest.raises(PaymentValidationError) as exc:
            PaymentRequest(payer_id="u1", amount_minor=-1)

        assert exc.value.details["field"] == "amount_minor"

    def test_fractional_amount_rejected(self):
        """Should reject a non-integer amount."""
        with pytest.raises(PaymentValidationError):
            PaymentRequest(payer_id="u1", amount_minor=29.99)

    def test_invalid_currency_rejected(self):
        """Should reject a currency that is not a 3-letter code."""
        with pytest.raises(PaymentValidationError):
            PaymentRequest(payer_id="u1", amount_minor=100, currency="dollars")

    def test_unknown_payment_type_rejected(self):
        """Should reject an unknown payment type."""
        with pytest.raises(PaymentValidationError):
            PaymentRequest(payer_id="u1", amount_minor=100, payment_type="cheque")

    def test_missing_payer_rejected(self):
        """Should reject an empty payer id."""
        with pytest.raises(PaymentValidationError):
            PaymentRequest(payer_id="", amount_minor=100)

    def test_from_dict_wire_shape(self):
        """Should read the camelCase wire fields."""
        request = PaymentRequest.from_dict({
            "userId": "user_9",
            "amount": 15000,
            "paymentType": "crypto",
            "paymentMethodToken": "tok_1",
        })

        assert request.payer_id == "user_9"
        assert request.amount_minor == 15000
        assert request.currency == "USD"
        assert request.payment_type == PaymentType.CRYPTO
        assert request.payment_token == "tok_1"

    def test_from_dict_defaults_match_constructor(self):
        """Should default to a card payment, same as the constructor."""
        request = PaymentRequest.from_dict({"userId": "user_9", "amount": 100})

        assert request.payment_type == PaymentType.CARD
        assert request.payment_type == PaymentRequest(payer_id="u", amount_minor=1).payment_type

    def test_summary_excludes_token(self):
        """Should never put the payment token in the audit summary."""
        request = PaymentRequest(payer_id="u1", amount_minor=100, payment_token="secret")

        assert request.summary() == {"amount": 100, "currency": "USD", "type": "card"}


class TestComplianceVerdict:
    """Tests for ComplianceVerdict helpers."""

    def test_failed_checks_and_dict(self):
        """Should list failed checks and serialize to the wire shape."""
        checks = (
            RiskCheckResult("A", CheckStatus.PASSED, "ok"),
            RiskCheckResult("B", CheckStatus.FAILED, "bad", 50),
        )
        verdict = ComplianceVerdict(passed=False, risk_score=50, checks=checks)

        assert [c.name for c in verdict.failed_checks()] == ["B"]
        data = verdict.to_dict()
        assert data["riskScore"] == 50
        assert data["recommendedProvider"] == "primer"
        assert data["checks"][1] == {"name": "B", "status": "failed", "details": "bad", "score": 50}


class TestTransactionRecord:
    """Tests for building ledger rows from outcomes."""

    def _verdict(self):
        return ComplianceVerdict(passed=True, risk_score=0, checks=())

    def test_card_authorized_is_completed(self):
        """Should record an authorized card payment as completed."""
        request = PaymentRequest(payer_id="u1", amount_minor=2999)
        outcome = PaymentOutcome(
            success=True,
            verdict=self._verdict(),
            rail_result=RailResult(Provider.PRIMER, "pay_1", "AUTHORIZED", raw={"id": "pay_1"}),
        )

        record = TransactionRecord.from_outcome(request, outcome)

        assert record.provider == Provider.PRIMER
        assert record.provider_ref == "pay_1"
        assert record.status == TransactionStatus.COMPLETED
        assert record.amount_minor == 2999
        assert record.raw["complianceResult"]["passed"] is True

    def test_card_not_authorized_is_pending(self):
        """Should record any other card status as pending."""
        request = PaymentRequest(payer_id="u1", amount_minor=2999)
        outcome = PaymentOutcome(
            success=True,
            verdict=self._verdict(),
            rail_result=RailResult(Provider.PRIMER, "pay_2", "PENDING"),
        )

        assert TransactionRecord.from_outcome(request, outcome).status == TransactionStatus.PENDING

    def test_crypto_uses_charge_code(self):
        """Should key crypto rows by the charge code."""
        request = PaymentRequest(payer_id="u1", amount_minor=2999, payment_type="crypto")
        outcome = PaymentOutcome(
            success=True,
            verdict=self._verdict(),
            rail_result=RailResult(Provider.COINBASE, "charge_1", "PENDING", code="ABC123"),
        )

        record = TransactionRecord.from_outcome(request, outcome)

        assert record.provider_ref == "ABC123"
        assert record.status == TransactionStatus.PENDING

    def test_failed_outcome_cannot_be_recorded(self):
        """Should refuse to build a row from a failed outcome."""
        request = PaymentRequest(payer_id="u1", amount_minor=2999)
        outcome = PaymentOutcome(success=False, verdict=self._verdict())

        with pytest.raises(ValueError):
            TransactionRecord.from_outcome(request, outcome)


class TestSubscription:
    """Tests for subscription lifecycle."""

    def test_new_subscription_is_pending(self):
        """Should start pending on the premium plan."""
        subscription = Subscription(payer_id="u1")

        assert subscription.status == SubscriptionStatus.PENDING
        assert subscription.plan == "premium"
        assert subscription.is_active is False

    def test_activate_sets_thirty_day_period(self):
        """Should activate for 30 days from the given time."""
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)
        subscription = Subscription(payer_id="u1")

        subscription.activate(now)

        assert subscription.status == SubscriptionStatus.ACTIVE
        assert subscription.current_period_end == now + timedelta(days=30)
        assert subscription.to_dict()["current_period_end"] == "2026-01-31T00:00:00+00:00"

    def test_expired_period_is_not_active(self):
        """Should not count as active once the period has ended."""
        subscription = Subscription(payer_id="u1")
        subscription.activate(datetime.now(timezone.utc) - timedelta(days=31))

        assert subscription.status == SubscriptionStatus.ACTIVE
        assert subscription.is_active is False


class TestClientSession:
    """Tests for ClientSession serialization."""

    def test_live_session_has_no_mock_flag(self):
        """Should serialize only the client token for live sessions."""
        assert ClientSession("ct_1").to_dict() == {"clientToken": "ct_1"}

    def test_simulated_session_is_flagged(self):
        """Should mark simulated sessions as mock."""
        assert ClientSession("ct_1", simulated=True).to_dict() == {"clientToken": "ct_1", "mock": True}
