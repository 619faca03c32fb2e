"""Engine — рынок LS-LMSR поверх core: сделки, реестр, разрешение.

- Ledger: балансы долей по аккаунтам (новая версия на каждое изменение)
- TradeEngine: котировки и исполнение сделок
- ResolutionManager: одноразовое разрешение и выплаты
- LSLMSRMarket: фасад рынка с writer lock и снапшотами
- analytics: price impact и оценка позиций (только чтение)
"""

from .analytics import (
    DEFAULT_IMPACT_SIZES,
    PriceImpactPoint,
    position_value,
    price_impact_profile,
)
from .ledger import Ledger
from .market import CommittedMarket, InvariantReport, LSLMSRMarket, MarketConfig
from .resolution import (
    ResolutionManager,
    ResolutionStateMachine,
    ResolutionTransitionResult,
)
from .trade_engine import TradeEngine, TradeExecution

__all__ = [
    "Ledger",
    "TradeEngine",
    "TradeExecution",
    "ResolutionManager",
    "ResolutionStateMachine",
    "ResolutionTransitionResult",
    "LSLMSRMarket",
    "MarketConfig",
    "CommittedMarket",
    "InvariantReport",
    "DEFAULT_IMPACT_SIZES",
    "PriceImpactPoint",
    "position_value",
    "price_impact_profile",
]
