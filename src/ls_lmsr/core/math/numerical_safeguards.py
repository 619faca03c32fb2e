"""
Numerical Safeguards — Safe Integer Primitives

Модуль обеспечивает численную устойчивость целочисленных fixed-point операций:
- Безопасное деление с защитой от деления на ноль (fallback вместо исключения)
- Валидация параметров (тип и знак)
- Знаменатели относительных величин (ppm, bps)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Деление на ноль никогда не происходит (возвращается fallback)
2. float и bool никогда не попадают в расчёты (TypeError)
3. Относительные толерантности задаются в ppm (целые), не в долях float
"""

from typing import Final

# =============================================================================
# ЗНАМЕНАТЕЛИ
# =============================================================================

# Parts per million: допуск суммы цен в MarketConfig
PPM: Final[int] = 1_000_000

# Базисные пункты: price impact в analytics
BPS: Final[int] = 10_000


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


def validate_int(value: int, name: str) -> None:
    """
    Валидация, что значение — целое (bool и float отвергаются).

    Raises:
        TypeError: Если value не int или является bool
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")


def validate_positive(value: int, name: str) -> None:
    """
    Валидация, что значение положительное.

    Raises:
        TypeError: Если value не int
        ValueError: Если value <= 0
    """
    validate_int(value, name)
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")


def validate_non_negative(value: int, name: str) -> None:
    """
    Валидация, что значение неотрицательное.

    Raises:
        TypeError: Если value не int
        ValueError: Если value < 0
    """
    validate_int(value, name)
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")


# =============================================================================
# БЕЗОПАСНОЕ ДЕЛЕНИЕ
# =============================================================================


def safe_div(numerator: int, denominator: int, fallback: int = 0) -> int:
    """
    Усекающее деление с fallback при нулевом знаменателе.

    Усечение — floor (как у оператора //), для отрицательных числителей
    результат округляется вниз.

    Examples:
        >>> safe_div(10, 3)
        3
        >>> safe_div(10, 0, fallback=7)
        7
    """
    if denominator == 0:
        return fallback
    return numerator // denominator
