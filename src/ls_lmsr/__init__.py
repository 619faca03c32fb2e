"""LS-LMSR — автоматический маркет-мейкер для рынков с несколькими исходами.

Liquidity-Sensitive LMSR: параметр ликвидности b растёт с объёмом торгов,
ценовое воздействие сделок уменьшается по мере созревания рынка. Вся
арифметика — целые с фиксированной точкой (UNIT = 10**18), без float.
"""

from ls_lmsr.core.domain import (
    ClaimReceipt,
    MarketError,
    MarketInfo,
    MarketPhase,
    TradeQuote,
    TradeReceipt,
)
from ls_lmsr.core.math import UNIT, from_fixed, required_funding, to_fixed
from ls_lmsr.engine import LSLMSRMarket, MarketConfig

__version__ = "0.1.0"

__all__ = [
    "UNIT",
    "to_fixed",
    "from_fixed",
    "required_funding",
    "LSLMSRMarket",
    "MarketConfig",
    "MarketError",
    "MarketInfo",
    "MarketPhase",
    "TradeQuote",
    "TradeReceipt",
    "ClaimReceipt",
]
