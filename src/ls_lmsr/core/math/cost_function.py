"""
Cost Function — численно устойчивый потенциал LMSR

    C(q) = b * ln(Σ exp(q_i / b))

вычисляется через log-sum-exp сдвиг на максимум:

    C(q) = max_q + b * ln(Σ exp((q_i - max_q) / b))

Алгебраически это та же функция, но все показатели экспонент <= 0, поэтому
промежуточные значения ограничены независимо от величины q. Отрицательный
показатель реализован обращением: exp(-d/b) = UNIT^2 / exp(d/b).

Алгоритм:
    1. max_q = max(q)
    2. delta_i = max_q - q_i (>= 0)
       rel_exp_i = UNIT, если delta_i == 0
       rel_exp_i = UNIT * UNIT // fixed_exp(delta_i * UNIT // b) иначе
    3. sum_rel = Σ rel_exp_i
    4. C = max_q + b * fixed_ln(sum_rel) // UNIT

Вырожденный случай: b == 0 или sum_rel == 0 (экстремальное исчезновение
порядка) → C = max_q (предел LMSR при b → 0).
"""

from typing import NamedTuple, Sequence

from ls_lmsr.core.math.fixed_point import UNIT, fixed_div, fixed_exp, fixed_ln, fixed_mul
from ls_lmsr.core.math.numerical_safeguards import (
    validate_non_negative,
    validate_positive,
)


class LogSumExpTerms(NamedTuple):
    """
    Промежуточные значения log-sum-exp, общие для стоимости и цен.
    """

    max_q: int  # max(q)
    rel_exp: tuple[int, ...]  # exp((q_i - max_q) / b) * UNIT
    sum_rel: int  # Σ rel_exp_i


def log_sum_exp_terms(quantities: Sequence[int], b: int) -> LogSumExpTerms:
    """
    Вычисление сдвинутых экспонент для вектора количеств.

    Args:
        quantities: Вектор количеств (scaled by UNIT), все >= 0
        b: Параметр ликвидности (scaled by UNIT), >= 0

    Returns:
        LogSumExpTerms; при b == 0 все rel_exp нулевые и sum_rel == 0

    Raises:
        ValueError: Если вектор пуст или содержит отрицательные значения
    """
    if not quantities:
        raise ValueError("quantities cannot be empty")

    for i, q in enumerate(quantities):
        validate_non_negative(q, f"quantities[{i}]")
    validate_non_negative(b, "b")

    max_q = max(quantities)

    if b == 0:
        return LogSumExpTerms(max_q, tuple(0 for _ in quantities), 0)

    rel_exp = []
    for q in quantities:
        delta = max_q - q
        if delta == 0:
            rel_exp.append(UNIT)
        else:
            rel_exp.append(fixed_div(UNIT, fixed_exp(fixed_div(delta, b))))

    return LogSumExpTerms(max_q, tuple(rel_exp), sum(rel_exp))


def compute_cost(quantities: Sequence[int], b: int) -> int:
    """
    Значение потенциала C(q) при параметре ликвидности b.

    Args:
        quantities: Вектор количеств (scaled by UNIT)
        b: Параметр ликвидности (scaled by UNIT)

    Returns:
        C(q) (scaled by UNIT)

    Examples:
        >>> from ls_lmsr.core.math.fixed_point import LN2
        >>> compute_cost([0, 0], 100 * UNIT) == 100 * LN2
        True
    """
    terms = log_sum_exp_terms(quantities, b)

    if terms.sum_rel == 0:
        return terms.max_q

    return terms.max_q + fixed_mul(b, fixed_ln(terms.sum_rel))


def required_funding(num_outcomes: int, b0: int) -> int:
    """
    Начальное обеспечение рынка: b0 * ln(n).

    Совпадает с C(0, ..., 0) при b == b0, поэтому после создания рынка
    collateral == C(q) выполняется сразу.

    Args:
        num_outcomes: Число исходов n
        b0: Базовая ликвидность (scaled by UNIT)

    Returns:
        b0 * fixed_ln(n * UNIT) // UNIT
    """
    validate_positive(num_outcomes, "num_outcomes")
    validate_positive(b0, "b0")

    return fixed_mul(b0, fixed_ln(num_outcomes * UNIT))
