"""
Provider webhook verification and normalization.

Primer and Coinbase Commerce both sign the raw request body with
HMAC-SHA256 and send the hex digest in a header:

- Primer: ``X-Primer-Signature: v1=<hex>``
- Coinbase Commerce: ``X-CC-Webhook-Signature: <hex>``
"""
from __future__ import annotations

import hashlib
import hmac
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from payrail.models import Provider

logger = logging.getLogger(__name__)

SIGNATURE_HEADERS = {
    Provider.PRIMER: "X-Primer-Signature",
    Provider.COINBASE: "X-CC-Webhook-Signature",
}

PRIMER_SETTLED_EVENT = "PAYMENT_CAPTURED"
COINBASE_SETTLED_EVENT = "charge:confirmed"


@dataclass
class WebhookEvent:
    """Provider callback normalized to a common shape."""
    provider: Provider
    event_type: str
    provider_ref: Optional[str] = None
    settled: bool = False
    payer_id: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)


class WebhookVerifier:
    """Verifies provider webhook signatures."""

    def __init__(
        self,
        primer_secret: Optional[str] = None,
        coinbase_secret: Optional[str] = None,
    ):
        self._secrets = {
            Provider.PRIMER: primer_secret,
            Provider.COINBASE: coinbase_secret,
        }

    @staticmethod
    def sign(payload: bytes, secret: str) -> str:
        """Hex HMAC-SHA256 of the payload."""
        return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()

    def verify(
        self,
        provider: Provider,
        payload: bytes,
        signature: Optional[str],
    ) -> bool:
        """
        Verify a webhook signature.

        Returns True if valid, False otherwise (including when no secret
        is configured for the provider).
        """
        secret = self._secrets.get(provider)
        if not secret or not signature:
            return False

        candidate = signature.strip()
        if provider == Provider.PRIMER and candidate.startswith("v1="):
            candidate = candidate[len("v1="):]

        try:
            bytes.fromhex(candidate)
        except ValueError:
            logger.warning("Malformed %s webhook signature", provider.value)
            return False

        expected = self.sign(payload, secret)
        # Constant-time comparison
        return hmac.compare_digest(expected, candidate.lower())


def parse_event(
    provider: Provider,
    payload: Union[bytes, str, Dict[str, Any]],
) -> WebhookEvent:
    """Normalize a verified webhook body."""
    if isinstance(payload, (bytes, str)):
        body = json.loads(payload)
    else:
        body = payload

    if provider == Provider.PRIMER:
        event_type = body.get("eventType", "")
        payment = body.get("data") or {}
        return WebhookEvent(
            provider=provider,
            event_type=event_type,
            provider_ref=payment.get("id"),
            settled=event_type == PRIMER_SETTLED_EVENT,
            payer_id=payment.get("customerId"),
            raw=payment,
        )

    event = body.get("event") or {}
    charge = event.get("data") or {}
    event_type = event.get("type", "")
    return WebhookEvent(
        provider=provider,
        event_type=event_type,
        provider_ref=charge.get("code"),
        settled=event_type == COINBASE_SETTLED_EVENT,
        payer_id=(charge.get("metadata") or {}).get("user_id"),
        raw=charge,
    )
