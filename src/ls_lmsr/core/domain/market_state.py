"""
MarketState — Модели параметров и состояния рынка

Immutable Pydantic модели:
- MarketParams: параметры, фиксированные при создании (n, b0, alpha, owner)
- MarketState: изменяемая часть рынка как снапшот (quantities, объём,
  collateral, фаза, победивший исход). Каждый коммит создаёт новый экземпляр.
- MarketInfo: сводка для внешних клиентов (getMarketInfo)

Все денежные и количественные поля — целые, масштабированные UNIT.
"""

from enum import Enum
from typing import Final, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Допустимое число исходов (включительно)
MIN_OUTCOMES: Final[int] = 2
MAX_OUTCOMES: Final[int] = 5


# =============================================================================
# ENUMS
# =============================================================================


class MarketPhase(str, Enum):
    """
    Фаза жизненного цикла рынка.

    OPEN → RESOLVED ровно один раз, переход необратим.
    В RESOLVED торговля запрещена, выплаты разрешены.
    """

    OPEN = "OPEN"
    RESOLVED = "RESOLVED"


# =============================================================================
# PARAMS
# =============================================================================


class MarketParams(BaseModel):
    """
    Параметры рынка, фиксированные при создании.
    """

    num_outcomes: int = Field(
        ..., ge=MIN_OUTCOMES, le=MAX_OUTCOMES, description="Число исходов n"
    )
    b0: int = Field(..., gt=0, description="Базовая ликвидность (scaled by UNIT)")
    alpha: int = Field(..., ge=0, description="Чувствительность к объёму (scaled by UNIT)")
    owner: str = Field(..., min_length=1, description="Идентификатор владельца (resolve)")

    model_config = {"frozen": True}


# =============================================================================
# STATE
# =============================================================================


class MarketState(BaseModel):
    """
    Снапшот изменяемого состояния рынка.

    Инварианты:
    - quantities[i] >= 0
    - total_volume не убывает (контролируется TradeEngine)
    - collateral == C(quantities, b), b при объёме до последней сделки
      (контролируется TradeEngine)
    - winning_outcome задан тогда и только тогда, когда phase == RESOLVED
    """

    quantities: tuple[int, ...] = Field(..., min_length=MIN_OUTCOMES, max_length=MAX_OUTCOMES)
    total_volume: int = Field(0, ge=0, description="Σ|delta| по всем сделкам")
    collateral: int = Field(..., ge=0, description="Пул обеспечения (scaled by UNIT)")
    phase: MarketPhase = Field(MarketPhase.OPEN, description="Фаза рынка")
    winning_outcome: Optional[int] = Field(None, ge=0, description="Победивший исход")

    model_config = {"frozen": True}

    @field_validator("quantities")
    @classmethod
    def validate_quantities_non_negative(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        """Количества никогда не бывают отрицательными"""
        for i, q in enumerate(v):
            if q < 0:
                raise ValueError(f"quantities[{i}] must be non-negative, got {q}")
        return v

    @model_validator(mode="after")
    def validate_winning_outcome_matches_phase(self) -> "MarketState":
        """Победивший исход задан только в RESOLVED и в пределах n"""
        if self.phase == MarketPhase.RESOLVED:
            if self.winning_outcome is None:
                raise ValueError("resolved market must have winning_outcome")
            if self.winning_outcome >= len(self.quantities):
                raise ValueError(
                    f"winning_outcome {self.winning_outcome} out of range "
                    f"for {len(self.quantities)} outcomes"
                )
        elif self.winning_outcome is not None:
            raise ValueError("open market cannot have winning_outcome")
        return self

    @property
    def resolved(self) -> bool:
        return self.phase == MarketPhase.RESOLVED

    @classmethod
    def initial(cls, num_outcomes: int, funding_amount: int) -> "MarketState":
        """
        Начальное состояние: нулевые количества, collateral = funding.
        """
        return cls(
            quantities=tuple(0 for _ in range(num_outcomes)),
            total_volume=0,
            collateral=funding_amount,
        )


# =============================================================================
# INFO
# =============================================================================


class MarketInfo(BaseModel):
    """
    Сводка рынка для внешних клиентов.

    Порядок полей совпадает с getMarketInfo:
    (num_outcomes, b0, alpha, current_b, total_volume, collateral,
     resolved, winning_outcome)
    """

    num_outcomes: int
    b0: int
    alpha: int
    current_b: int
    total_volume: int
    collateral: int
    resolved: bool
    winning_outcome: Optional[int] = None

    model_config = {"frozen": True}

    def as_tuple(self) -> tuple:
        """Позиционное представление в порядке getMarketInfo"""
        return (
            self.num_outcomes,
            self.b0,
            self.alpha,
            self.current_b,
            self.total_volume,
            self.collateral,
            self.resolved,
            self.winning_outcome,
        )
