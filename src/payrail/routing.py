"""Provider routing: turn a verdict into a concrete rail."""
from __future__ import annotations

from payrail.models import (
    ComplianceVerdict,
    PaymentType,
    Provider,
    Rail,
    RoutingDecision,
)


def select_rail(verdict: ComplianceVerdict, payment_type: PaymentType) -> RoutingDecision:
    """
    Select the execution rail.

    Second stage after the aggregator's recommendation. The payment-type
    test overlaps with aggregator rule 1: crypto-typed payments never
    reach the card rail, whatever the recommendation says.
    """
    recommended = verdict.recommended_provider

    if recommended == Provider.COINBASE or payment_type == PaymentType.CRYPTO:
        enforced = recommended != Provider.COINBASE
        return RoutingDecision(
            rail=Rail.CRYPTO,
            provider=Provider.COINBASE,
            enforced=enforced,
            reason=(
                "crypto payment type forces crypto rail"
                if enforced
                else "recommended provider is coinbase"
            ),
        )

    return RoutingDecision(
        rail=Rail.CARD,
        provider=recommended,
        reason=f"card rail via {recommended.value}",
    )
