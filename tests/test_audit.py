"""Tests for audit sinks."""
from __future__ import annotations

import logging

import pytest

from payrail.audit import CompositeAuditSink, InMemoryAuditSink, LoggingAuditSink
from payrail.exceptions import AuditSinkError
from payrail.models import AuditEvent, CheckStatus, ComplianceVerdict, RiskCheckResult


def _event(payer_id: str = "user_1", passed: bool = True) -> AuditEvent:
    verdict = ComplianceVerdict(
        passed=passed,
        risk_score=0 if passed else 50,
        checks=(RiskCheckResult("AML/KYC Check", CheckStatus.PASSED if passed else CheckStatus.FAILED, ""),),
    )
    return AuditEvent(
        payer_id=payer_id,
        verdict=verdict,
        request_summary={"amount": 100, "currency": "USD", "type": "card"},
    )


class BrokenSink(InMemoryAuditSink):
    async def record(self, event):
        raise AuditSinkError("down")


class TestInMemoryAuditSink:
    """Tests for InMemoryAuditSink."""

    @pytest.mark.asyncio
    async def test_query_filters(self):
        """Should filter by payer and verdict and honor the limit."""
        sink = InMemoryAuditSink()
        await sink.record(_event("a", True))
        await sink.record(_event("b", False))
        await sink.record(_event("a", False))

        assert len(await sink.query(payer_id="a")) == 2
        assert len(await sink.query(passed=False)) == 2
        assert len(await sink.query(limit=1)) == 1

    @pytest.mark.asyncio
    async def test_trims_old_events(self):
        """Should drop the oldest events beyond max_events."""
        sink = InMemoryAuditSink(max_events=2)
        for payer in ("a", "b", "c"):
            await sink.record(_event(payer))

        assert len(sink) == 2
        assert [e.payer_id for e in await sink.query()] == ["c", "b"]


class TestAuditEvent:
    """Tests for the audit record shape."""

    def test_to_dict(self):
        """Should serialize to the compliance audit log shape."""
        data = _event("user_7", False).to_dict()

        assert data["entity_type"] == "compliance_check"
        assert data["action"] == "compliance_check_performed"
        assert data["entity_id"] == "user_7"
        assert data["payload"]["passed"] is False
        assert data["payload"]["riskScore"] == 50
        assert data["payload"]["paymentData"]["amount"] == 100


class TestLoggingAuditSink:
    """Tests for LoggingAuditSink."""

    @pytest.mark.asyncio
    async def test_logs_event(self, caplog):
        """Should log the event with its structured payload."""
        with caplog.at_level(logging.INFO, logger="payrail.audit"):
            await LoggingAuditSink().record(_event("user_3"))

        record = caplog.records[-1]
        assert "payer=user_3" in record.getMessage()
        assert record.audit_event["entity_id"] == "user_3"


class TestCompositeAuditSink:
    """Tests for CompositeAuditSink."""

    @pytest.mark.asyncio
    async def test_partial_failure_tolerated(self):
        """Should succeed while at least one sink records."""
        memory = InMemoryAuditSink()
        sink = CompositeAuditSink([BrokenSink(), memory])

        await sink.record(_event())

        assert len(memory) == 1

    @pytest.mark.asyncio
    async def test_total_failure_raises(self):
        """Should raise AuditSinkError when every sink fails."""
        sink = CompositeAuditSink([BrokenSink(), BrokenSink()])

        with pytest.raises(AuditSinkError):
            await sink.record(_event())
