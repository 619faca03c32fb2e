"""Analytics — анализ ценового воздействия и оценка позиций.

Только чтение: функции работают через quote и getters рынка и никогда
не изменяют его состояние.

Price impact для размера s покупки исхода i:
    average_price = cost * UNIT // s
    impact_bps    = (average_price - price_i) * BPS // price_i
"""

from typing import Iterable, List, NamedTuple

from ls_lmsr.core.math.fixed_point import UNIT, fixed_mul
from ls_lmsr.core.math.numerical_safeguards import BPS, safe_div, validate_positive
from ls_lmsr.engine.market import LSLMSRMarket

# Размеры по умолчанию (в долях), как в таблице price impact
DEFAULT_IMPACT_SIZES = tuple(size * UNIT for size in (1, 5, 10, 20, 50, 100))


class PriceImpactPoint(NamedTuple):
    """Одна строка таблицы price impact."""

    size: int
    cost: int
    average_price: int
    impact_bps: int


def price_impact_profile(
    market: LSLMSRMarket,
    outcome: int,
    sizes: Iterable[int] = DEFAULT_IMPACT_SIZES,
) -> List[PriceImpactPoint]:
    """
    Таблица ценового воздействия покупок исхода разного размера.

    Args:
        market: рынок (не изменяется)
        outcome: индекс исхода
        sizes: размеры покупок (scaled by UNIT), каждый > 0

    Returns:
        Список PriceImpactPoint в порядке sizes

    Raises:
        InvalidOutcome: индекс вне [0, n)
        ValueError: неположительный размер
    """
    market.get_quantity(outcome)  # InvalidOutcome для индекса вне [0, n)
    current_price = market.get_prices()[outcome]

    profile = []
    for size in sizes:
        validate_positive(size, "size")
        quote = market.quote(outcome, size)
        average_price = quote.average_price()
        profile.append(
            PriceImpactPoint(
                size=size,
                cost=quote.cost,
                average_price=average_price,
                impact_bps=safe_div((average_price - current_price) * BPS, current_price),
            )
        )
    return profile


def position_value(market: LSLMSRMarket, account: str) -> int:
    """
    Оценка позиции аккаунта по текущим ценам: Σ balance_i * price_i // UNIT.

    После разрешения рынка позиция стоит ровно баланс победившего исхода.
    """
    balances = market.get_all_balances(account)

    info = market.get_market_info()
    if info.resolved:
        return balances[info.winning_outcome]

    prices = market.get_prices()
    return sum(fixed_mul(balance, price) for balance, price in zip(balances, prices))
