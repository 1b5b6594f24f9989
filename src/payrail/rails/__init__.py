"""Payment rail adapter implementations."""
from payrail.rails.base import CardRailAdapter, CryptoRailAdapter
from payrail.rails.coinbase import CoinbaseCommerceAdapter
from payrail.rails.primer import PrimerCardAdapter
from payrail.rails.simulated import SimulatedCardAdapter, SimulatedCryptoAdapter

__all__ = [
    "CardRailAdapter",
    "CryptoRailAdapter",
    "CoinbaseCommerceAdapter",
    "PrimerCardAdapter",
    "SimulatedCardAdapter",
    "SimulatedCryptoAdapter",
]
