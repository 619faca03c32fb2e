"""
Price Oracle — нормированные цены исходов (градиент C)

    price_i = rel_exp_i * UNIT // sum_rel

Это softmax сдвинутых экспонент; использует ровно те же rel_exp, что и
compute_cost. Сумма цен равна UNIT с точностью до усечения (недобор не
больше числа исходов в минимальных единицах).

Вырожденный случай (num_outcomes == 0, b == 0 или sum_rel == 0): равномерное
распределение UNIT // n вместо деления на ноль.
"""

from typing import Sequence

from ls_lmsr.core.math.cost_function import log_sum_exp_terms
from ls_lmsr.core.math.fixed_point import UNIT
from ls_lmsr.core.math.numerical_safeguards import safe_div


def uniform_prices(num_outcomes: int) -> list[int]:
    """
    Равномерные цены UNIT // n (пустой список при n == 0).
    """
    if num_outcomes <= 0:
        return []
    return [UNIT // num_outcomes] * num_outcomes


def compute_prices(quantities: Sequence[int], b: int) -> list[int]:
    """
    Цены всех исходов для вектора количеств.

    Args:
        quantities: Вектор количеств (scaled by UNIT)
        b: Параметр ликвидности (scaled by UNIT)

    Returns:
        Список цен (scaled by UNIT), по одной на исход

    Examples:
        >>> compute_prices([0, 0, 0, 0], 100 * UNIT) == [UNIT // 4] * 4
        True
    """
    num_outcomes = len(quantities)

    if num_outcomes == 0 or b == 0:
        return uniform_prices(num_outcomes)

    terms = log_sum_exp_terms(quantities, b)

    if terms.sum_rel == 0:
        return uniform_prices(num_outcomes)

    return [safe_div(rel * UNIT, terms.sum_rel) for rel in terms.rel_exp]


def price_sum_deviation(prices: Sequence[int]) -> int:
    """
    Отклонение суммы цен от UNIT (в минимальных единицах).
    """
    return abs(sum(prices) - UNIT)
