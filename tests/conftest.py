"""
Pytest configuration for payrail tests.
"""
from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Add package source to path
package_src = Path(__file__).parent.parent / "src"
if str(package_src) not in sys.path:
    sys.path.insert(0, str(package_src))

from payrail.audit import InMemoryAuditSink
from payrail.entropy import SequenceEntropySource
from payrail.models import PaymentRequest, PaymentType
from payrail.orchestrator import PaymentOrchestrator
from payrail.rails import SimulatedCardAdapter, SimulatedCryptoAdapter

# Draw pairs consumed as (geographic, aml)
NO_FLAGS = (0.0, 0.0)
GEO_FLAG = (0.9, 0.0)
AML_FLAG = (0.0, 0.99)
ALL_FLAGS = (0.9, 0.99)


def draws(*values: float) -> SequenceEntropySource:
    return SequenceEntropySource(values)


@pytest.fixture
def make_request():
    """Factory for payment requests."""
    def _make(
        amount_minor: int = 2999,
        payment_type: PaymentType = PaymentType.CARD,
        currency: str = "USD",
        payer_id: str = "user_123",
        payment_token: str | None = None,
    ) -> PaymentRequest:
        return PaymentRequest(
            payer_id=payer_id,
            amount_minor=amount_minor,
            currency=currency,
            payment_type=payment_type,
            payment_token=payment_token,
        )
    return _make


@pytest.fixture
def card_rail():
    return SimulatedCardAdapter()


@pytest.fixture
def crypto_rail():
    return SimulatedCryptoAdapter()


@pytest.fixture
def audit_sink():
    return InMemoryAuditSink()


@pytest.fixture
def orchestrator(card_rail, crypto_rail, audit_sink):
    """Orchestrator on simulated rails that never flags by default."""
    return PaymentOrchestrator(
        card_rail=card_rail,
        crypto_rail=crypto_rail,
        audit_sink=audit_sink,
        entropy=draws(*NO_FLAGS),
    )
