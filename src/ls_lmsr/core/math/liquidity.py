"""
Liquidity Model — параметр ликвидности b как функция объёма

    b(Q) = b0 * exp(alpha * Q)

В fixed-point: b = b0 * fixed_exp(alpha * Q // UNIT) // UNIT.

Ликвидность на старте узкая (ранние сделки сильно двигают цену и
вознаграждают раннюю информацию) и расширяется по мере накопления объёма
(меньше проскальзывание на зрелом рынке). Объём Q растёт на |delta| и при
покупке, и при продаже: он отражает активность, а не направление.

ИНВАРИАНТЫ:
1. b(Q) монотонно не убывает по Q (alpha >= 0)
2. alpha == 0 → b(Q) == b0 для любого Q
3. b(0) == b0 (fixed_exp(0) == UNIT)
"""

from ls_lmsr.core.math.fixed_point import UNIT, fixed_exp, fixed_mul
from ls_lmsr.core.math.numerical_safeguards import (
    validate_non_negative,
    validate_positive,
)


def liquidity_exponent(alpha: int, total_volume: int) -> int:
    """
    Показатель экспоненты alpha * Q в fixed-point.

    Args:
        alpha: Чувствительность (scaled by UNIT)
        total_volume: Накопленный объём Q (scaled by UNIT)
    """
    return fixed_mul(alpha, total_volume)


def compute_b(b0: int, alpha: int, total_volume: int) -> int:
    """
    Текущий параметр ликвидности.

    Args:
        b0: Базовая ликвидность (scaled by UNIT), > 0
        alpha: Чувствительность (scaled by UNIT), >= 0
        total_volume: Накопленный объём (scaled by UNIT), >= 0

    Returns:
        b (scaled by UNIT). При насыщении exp — "практически бесконечность".

    Raises:
        ValueError: Если параметры вне области определения

    Examples:
        >>> compute_b(100 * UNIT, 0, 10**30) == 100 * UNIT
        True
    """
    validate_positive(b0, "b0")
    validate_non_negative(alpha, "alpha")
    validate_non_negative(total_volume, "total_volume")

    return fixed_mul(b0, fixed_exp(liquidity_exponent(alpha, total_volume)))
