"""
Domain models and value objects.

Contains market parameters and state snapshots, positions, quotes,
receipts, event records and the error taxonomy.
"""

from ls_lmsr.core.domain.errors import (
    AuthorizationError,
    ConstructionError,
    InsufficientPayment,
    InsufficientShares,
    InvalidDelta,
    InvalidInitialFunding,
    InvalidNumOutcomes,
    InvalidOutcome,
    LifecycleError,
    MarketAlreadyResolved,
    MarketError,
    NotResolved,
    OnlyOwner,
    RequestValidationError,
    SnapshotIntegrityError,
)
from ls_lmsr.core.domain.events import (
    MARKET_EVENT_ADAPTER,
    MarketEvent,
    MarketFunded,
    MarketResolved,
    SharesTransferred,
)
from ls_lmsr.core.domain.market_state import (
    MAX_OUTCOMES,
    MIN_OUTCOMES,
    MarketInfo,
    MarketParams,
    MarketPhase,
    MarketState,
)
from ls_lmsr.core.domain.position import Position
from ls_lmsr.core.domain.trade import ClaimReceipt, TradeQuote, TradeReceipt

__all__ = [
    # Errors
    "MarketError",
    "ConstructionError",
    "RequestValidationError",
    "AuthorizationError",
    "LifecycleError",
    "InvalidNumOutcomes",
    "InvalidInitialFunding",
    "InvalidOutcome",
    "InvalidDelta",
    "InsufficientShares",
    "InsufficientPayment",
    "OnlyOwner",
    "MarketAlreadyResolved",
    "NotResolved",
    "SnapshotIntegrityError",
    # Events
    "MARKET_EVENT_ADAPTER",
    "MarketEvent",
    "MarketFunded",
    "MarketResolved",
    "SharesTransferred",
    # Market state
    "MIN_OUTCOMES",
    "MAX_OUTCOMES",
    "MarketInfo",
    "MarketParams",
    "MarketPhase",
    "MarketState",
    # Position
    "Position",
    # Trade
    "ClaimReceipt",
    "TradeQuote",
    "TradeReceipt",
]
