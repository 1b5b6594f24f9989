"""
Compliance audit sinks.

The orchestrator hands every verdict to an AuditSink. Recording is
best-effort: sinks may raise AuditSinkError, and the orchestrator reports
and swallows it.
"""
from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from payrail.exceptions import AuditSinkError
from payrail.models import AuditEvent

logger = logging.getLogger(__name__)


class AuditSink(ABC):
    """Abstract interface for audit storage/publishing backends."""

    @abstractmethod
    async def record(self, event: AuditEvent) -> None:
        """Record an audit event."""
        pass


class InMemoryAuditSink(AuditSink):
    """
    In-memory audit sink for development and testing.

    Note: This sink is not suitable for production use.
    """

    def __init__(self, max_events: int = 10000):
        self._events: List[AuditEvent] = []
        self._max_events = max_events
        self._lock = asyncio.Lock()

    async def record(self, event: AuditEvent) -> None:
        async with self._lock:
            self._events.append(event)
            # Trim old events if needed
            if len(self._events) > self._max_events:
                self._events = self._events[-self._max_events:]

    async def query(
        self,
        payer_id: Optional[str] = None,
        passed: Optional[bool] = None,
        limit: int = 100,
    ) -> List[AuditEvent]:
        """Most recent events first."""
        async with self._lock:
            results = []
            for event in reversed(self._events):
                if payer_id and event.payer_id != payer_id:
                    continue
                if passed is not None and event.verdict.passed != passed:
                    continue
                results.append(event)
                if len(results) >= limit:
                    break
            return results

    def __len__(self) -> int:
        return len(self._events)


class LoggingAuditSink(AuditSink):
    """Audit sink that writes events to the log."""

    def __init__(self, log_level: int = logging.INFO):
        self._log_level = log_level

    async def record(self, event: AuditEvent) -> None:
        logger.log(
            self._log_level,
            "Compliance check log: payer=%s passed=%s risk_score=%d checks=%s",
            event.payer_id,
            event.verdict.passed,
            event.verdict.risk_score,
            [c.name for c in event.verdict.checks],
            extra={"audit_event": event.to_dict()},
        )


class CompositeAuditSink(AuditSink):
    """Fans out to several sinks; raises only if every sink failed."""

    def __init__(self, sinks: List[AuditSink]):
        self._sinks = sinks

    async def record(self, event: AuditEvent) -> None:
        results = await asyncio.gather(
            *[sink.record(event) for sink in self._sinks],
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        for failure in failures:
            logger.warning("Audit sink failed: %s", failure)
        if self._sinks and len(failures) == len(self._sinks):
            raise AuditSinkError(
                "All audit sinks failed",
                details={"errors": [str(f) for f in failures]},
            )
