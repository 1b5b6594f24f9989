"""
payrail - risk-gated payment routing.

This package evaluates payment risk, gates payments on a compliance
verdict, and routes approved payments to a card rail (Primer) or a crypto
rail (Coinbase Commerce).

Features:
- Ordered, auditable risk checks with injectable entropy / risk intelligence
- Score aggregation with pass/fail compliance gating
- Two-stage provider selection (recommend, then enforce)
- Live and simulated rail adapters selected by explicit runtime config
- Best-effort audit logging and ledger persistence
- Provider webhook verification
"""

__version__ = "0.1.0"

from payrail.models import (
    # Core models
    PaymentRequest,
    PaymentOutcome,
    RiskCheckResult,
    ComplianceVerdict,
    RoutingDecision,
    RailResult,
    AuditEvent,
    TransactionRecord,
    Subscription,
    ClientSession,
    # Enums
    PaymentType,
    CheckStatus,
    Provider,
    Rail,
    ErrorKind,
    TransactionStatus,
    SubscriptionStatus,
    # Constants
    HIGH_VALUE_THRESHOLD_MINOR,
    FAIL_THRESHOLD,
    CONSERVATIVE_ROUTING_THRESHOLD,
)

# Errors
from payrail.exceptions import (
    PayrailError,
    PaymentValidationError,
    ComplianceRejected,
    RailError,
    AuditSinkError,
    WebhookSignatureInvalid,
    ConfigurationError,
)

# Risk evaluation
from payrail.entropy import (
    EntropySource,
    RandomEntropySource,
    SequenceEntropySource,
)
from payrail.checks import (
    RiskCheck,
    RiskIntelligence,
    MerchantVerificationCheck,
    TransactionAmountCheck,
    PaymentMethodCheck,
    GeographicRiskCheck,
    AmlKycCheck,
    default_checks,
)
from payrail.aggregator import RiskEvaluator, aggregate, recommend_provider
from payrail.routing import select_rail

# Rails
from payrail.rails import (
    CardRailAdapter,
    CryptoRailAdapter,
    PrimerCardAdapter,
    CoinbaseCommerceAdapter,
    SimulatedCardAdapter,
    SimulatedCryptoAdapter,
)

# Configuration
from payrail.config import (
    GatewaySettings,
    RuntimeConfig,
    get_settings,
    build_card_rail,
    build_crypto_rail,
)

# Audit and ledger
from payrail.audit import (
    AuditSink,
    InMemoryAuditSink,
    LoggingAuditSink,
    CompositeAuditSink,
)
from payrail.ledger import LedgerStore, InMemoryLedgerStore

# Webhooks
from payrail.webhooks import WebhookEvent, WebhookVerifier, parse_event

# Orchestration
from payrail.orchestrator import PaymentOrchestrator
from payrail.gateway import PaymentGateway

__all__ = [
    # Core models
    "PaymentRequest",
    "PaymentOutcome",
    "RiskCheckResult",
    "ComplianceVerdict",
    "RoutingDecision",
    "RailResult",
    "AuditEvent",
    "TransactionRecord",
    "Subscription",
    "ClientSession",
    "PaymentType",
    "CheckStatus",
    "Provider",
    "Rail",
    "ErrorKind",
    "TransactionStatus",
    "SubscriptionStatus",
    "HIGH_VALUE_THRESHOLD_MINOR",
    "FAIL_THRESHOLD",
    "CONSERVATIVE_ROUTING_THRESHOLD",
    # Errors
    "PayrailError",
    "PaymentValidationError",
    "ComplianceRejected",
    "RailError",
    "AuditSinkError",
    "WebhookSignatureInvalid",
    "ConfigurationError",
    # Risk evaluation
    "EntropySource",
    "RandomEntropySource",
    "SequenceEntropySource",
    "RiskCheck",
    "RiskIntelligence",
    "MerchantVerificationCheck",
    "TransactionAmountCheck",
    "PaymentMethodCheck",
    "GeographicRiskCheck",
    "AmlKycCheck",
    "default_checks",
    "RiskEvaluator",
    "aggregate",
    "recommend_provider",
    "select_rail",
    # Rails
    "CardRailAdapter",
    "CryptoRailAdapter",
    "PrimerCardAdapter",
    "CoinbaseCommerceAdapter",
    "SimulatedCardAdapter",
    "SimulatedCryptoAdapter",
    # Configuration
    "GatewaySettings",
    "RuntimeConfig",
    "get_settings",
    "build_card_rail",
    "build_crypto_rail",
    # Audit and ledger
    "AuditSink",
    "InMemoryAuditSink",
    "LoggingAuditSink",
    "CompositeAuditSink",
    "LedgerStore",
    "InMemoryLedgerStore",
    # Webhooks
    "WebhookEvent",
    "WebhookVerifier",
    "parse_event",
    # Orchestration
    "PaymentOrchestrator",
    "PaymentGateway",
]
