"""
Fixed-Point Math — детерминированные ln/exp над масштабированными целыми

Все величины движка — неотрицательные целые, масштабированные единицей UNIT
(одна "целая" единица = UNIT = 10**18). Нативный float не используется нигде:
результат ln/exp зависит только от целочисленных входов и фиксированного
числа членов рядов, поэтому любая реализация даёт бит-в-бит одинаковый
результат. Это требование расчётов (settlement), а не точности.

Алгоритмы:
    ln(x):  x приводится в [UNIT, 2*UNIT) делением/умножением на 2 (сдвиг k),
            затем знакопеременный ряд Тейлора ln(1+z) из LN_TERMS членов,
            плюс k * LN2.
    exp(x): x = i + f (целая и дробная части), e^i — i умножений на EULER,
            e^f — ряд Тейлора из EXP_TERMS членов с ранней остановкой,
            когда очередной член усекается до нуля.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Все деления — усекающие (floor для неотрицательных операндов)
2. ln(x) для x <= 0 → FixedPointDomainError (ошибка логики выше по стеку)
3. exp(x) для x >= EXP_INPUT_MAX насыщается до EXP_SATURATION
4. Точность ограничена числом членов рядов (порядка 1%), это осознанный
   компромисс ради детерминизма
"""

import logging
from decimal import ROUND_DOWN, Decimal
from typing import Final

logger = logging.getLogger(__name__)

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Масштаб fixed-point: 1.0 == UNIT
UNIT: Final[int] = 10**18

# Знаков после запятой в UNIT (для конверсии в Decimal)
UNIT_DECIMALS: Final[int] = 18

# ln(2) * UNIT (усечено)
LN2: Final[int] = 693_147_180_559_945_309

# e * UNIT (усечено)
EULER: Final[int] = 2_718_281_828_459_045_235

# Число членов ряда ln(1+z)
LN_TERMS: Final[int] = 10

# Максимальное число членов ряда e^f
EXP_TERMS: Final[int] = 20

# Аргумент exp, начиная с которого результат считается "бесконечным"
EXP_INPUT_MAX: Final[int] = 50 * UNIT

# Значение насыщения exp (максимум uint256)
EXP_SATURATION: Final[int] = 2**256 - 1


# =============================================================================
# EXCEPTIONS
# =============================================================================


class FixedPointDomainError(ValueError):
    """
    Аргумент вне области определения ln/exp.

    Для валидированных векторов количеств недостижимо: возникновение
    означает логическую ошибку в вызывающем коде.
    """

    pass


# =============================================================================
# АРИФМЕТИКА
# =============================================================================


def fixed_mul(a: int, b: int) -> int:
    """
    Умножение двух fixed-point значений с усечением.

    Examples:
        >>> fixed_mul(2 * UNIT, 3 * UNIT) == 6 * UNIT
        True
    """
    return a * b // UNIT


def fixed_div(a: int, b: int) -> int:
    """
    Деление двух fixed-point значений с усечением.

    Raises:
        FixedPointDomainError: Если b == 0
    """
    if b == 0:
        raise FixedPointDomainError(f"division by zero: {a} / 0")
    return a * UNIT // b


# =============================================================================
# ТРАНСЦЕНДЕНТНЫЕ ФУНКЦИИ
# =============================================================================


def fixed_ln(x: int) -> int:
    """
    Натуральный логарифм fixed-point значения.

    Args:
        x: Аргумент (scaled by UNIT), строго положительный

    Returns:
        ln(x) * UNIT (может быть отрицательным для x < UNIT)

    Raises:
        FixedPointDomainError: Если x <= 0

    Examples:
        >>> fixed_ln(UNIT)
        0
        >>> fixed_ln(2 * UNIT) == LN2
        True
    """
    if x <= 0:
        raise FixedPointDomainError(f"ln undefined for non-positive argument: {x}")

    # Приведение в [UNIT, 2*UNIT)
    shift = 0
    while x >= 2 * UNIT:
        x //= 2
        shift += 1
    while x < UNIT:
        x *= 2
        shift -= 1

    # ln(1+z) = z - z^2/2 + z^3/3 - ...
    z = x - UNIT
    result = 0
    power = z
    for n in range(1, LN_TERMS + 1):
        term = power // n
        if n % 2 == 1:
            result += term
        else:
            result -= term
        power = power * z // UNIT

    return result + shift * LN2


def fixed_exp(x: int) -> int:
    """
    Экспонента fixed-point значения.

    Args:
        x: Аргумент (scaled by UNIT), неотрицательный

    Returns:
        e^x * UNIT, либо EXP_SATURATION при x >= EXP_INPUT_MAX

    Raises:
        FixedPointDomainError: Если x < 0

    Examples:
        >>> fixed_exp(0) == UNIT
        True
        >>> fixed_exp(EXP_INPUT_MAX) == EXP_SATURATION
        True
    """
    if x < 0:
        raise FixedPointDomainError(f"exp is only defined for x >= 0 here, got {x}")

    if x >= EXP_INPUT_MAX:
        logger.debug("fixed_exp saturated at x=%d", x)
        return EXP_SATURATION

    whole, frac = divmod(x, UNIT)

    # e^i повторным умножением
    int_part = UNIT
    for _ in range(whole):
        int_part = fixed_mul(int_part, EULER)

    # e^f = 1 + f + f^2/2! + ...
    frac_part = UNIT
    term = UNIT
    for n in range(1, EXP_TERMS + 1):
        term = term * frac // (n * UNIT)
        if term == 0:
            break
        frac_part += term

    return fixed_mul(int_part, frac_part)


# =============================================================================
# КОНВЕРСИЯ
# =============================================================================


def to_fixed(value: int | str | Decimal) -> int:
    """
    Конверсия десятичного значения в fixed-point (с усечением к нулю).

    float не принимается: двоичное представление нарушает воспроизводимость.

    Args:
        value: int (целые единицы), str ("0.01") или Decimal

    Returns:
        value * UNIT как int

    Raises:
        TypeError: Если передан float или bool
        ValueError: Если строка не является числом

    Examples:
        >>> to_fixed("0.01")
        10000000000000000
        >>> to_fixed(100) == 100 * UNIT
        True
    """
    if isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"to_fixed accepts int, str or Decimal, got {type(value).__name__}")

    if isinstance(value, int):
        return value * UNIT

    try:
        dec = Decimal(value)
    except ArithmeticError as e:
        raise ValueError(f"not a decimal number: {value!r}") from e

    if not dec.is_finite():
        raise ValueError(f"not a finite number: {value!r}")

    return int(dec.scaleb(UNIT_DECIMALS).to_integral_value(rounding=ROUND_DOWN))


def from_fixed(value: int) -> Decimal:
    """
    Конверсия fixed-point в Decimal без потери точности.

    Examples:
        >>> from_fixed(UNIT // 2)
        Decimal('0.500000000000000000')
    """
    return Decimal(value).scaleb(-UNIT_DECIMALS)
