"""Transaction and subscription ledger storage."""
from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from payrail.models import (
    Provider,
    Subscription,
    SubscriptionStatus,
    TransactionRecord,
    TransactionStatus,
)


class LedgerStore(ABC):
    """Abstract interface for transaction persistence."""

    @abstractmethod
    async def append(self, record: TransactionRecord) -> TransactionRecord:
        """Append a transaction record."""
        pass

    @abstractmethod
    async def get(self, provider: Provider, provider_ref: str) -> Optional[TransactionRecord]:
        """Look up a transaction by provider reference."""
        pass

    @abstractmethod
    async def update_status(
        self,
        provider: Provider,
        provider_ref: str,
        status: TransactionStatus,
        raw: Optional[Dict[str, Any]] = None,
    ) -> Optional[TransactionRecord]:
        """Update a transaction's status. Returns None if it is unknown."""
        pass

    @abstractmethod
    async def upsert_subscription(self, subscription: Subscription) -> Subscription:
        """Create or replace the payer's subscription."""
        pass

    @abstractmethod
    async def get_subscription(self, payer_id: str) -> Optional[Subscription]:
        """Look up the payer's subscription."""
        pass

    @abstractmethod
    async def activate_pending_subscription(self, payer_id: str) -> Optional[Subscription]:
        """
        Activate the payer's pending subscription for one period.

        Returns None if the payer has no pending subscription.
        """
        pass


class InMemoryLedgerStore(LedgerStore):
    """
    In-memory ledger for development and testing.

    Note: Use a database-backed store in production.
    """

    def __init__(self):
        self._records: Dict[tuple, TransactionRecord] = {}
        self._subscriptions: Dict[str, Subscription] = {}
        self._lock = asyncio.Lock()

    async def append(self, record: TransactionRecord) -> TransactionRecord:
        async with self._lock:
            self._records[(record.provider, record.provider_ref)] = record
            return record

    async def get(self, provider: Provider, provider_ref: str) -> Optional[TransactionRecord]:
        async with self._lock:
            return self._records.get((provider, provider_ref))

    async def update_status(
        self,
        provider: Provider,
        provider_ref: str,
        status: TransactionStatus,
        raw: Optional[Dict[str, Any]] = None,
    ) -> Optional[TransactionRecord]:
        async with self._lock:
            record = self._records.get((provider, provider_ref))
            if record is None:
                return None
            record.status = status
            if raw is not None:
                record.raw = {**record.raw, "webhook": raw}
            record.updated_at = datetime.now(timezone.utc)
            return record

    async def list_for_payer(self, payer_id: str) -> List[TransactionRecord]:
        async with self._lock:
            return [r for r in self._records.values() if r.payer_id == payer_id]

    async def upsert_subscription(self, subscription: Subscription) -> Subscription:
        async with self._lock:
            existing = self._subscriptions.get(subscription.payer_id)
            if existing is not None:
                subscription.created_at = existing.created_at
            subscription.updated_at = datetime.now(timezone.utc)
            self._subscriptions[subscription.payer_id] = subscription
            return subscription

    async def get_subscription(self, payer_id: str) -> Optional[Subscription]:
        async with self._lock:
            return self._subscriptions.get(payer_id)

    async def activate_pending_subscription(self, payer_id: str) -> Optional[Subscription]:
        async with self._lock:
            subscription = self._subscriptions.get(payer_id)
            if subscription is None or subscription.status != SubscriptionStatus.PENDING:
                return None
            subscription.activate()
            return subscription
