"""
Trade — Модели котировок и квитанций расчётов

Immutable Pydantic модели:
- TradeQuote: результат quote (без изменения состояния)
- TradeReceipt: результат исполненной сделки (что принято/возвращено/выплачено)
- ClaimReceipt: результат выплаты выигрыша

Движение расчётной валюты — внешняя забота: движок только сообщает суммы.
"""

from pydantic import BaseModel, Field

from ls_lmsr.core.math.fixed_point import fixed_div


class TradeQuote(BaseModel):
    """
    Котировка сделки.

    cost > 0: сумма к оплате покупателем
    cost < 0: сумма к выплате продавцу
    """

    outcome: int = Field(..., ge=0, description="Индекс исхода")
    delta: int = Field(..., description="Изменение количества (знаковое)")
    cost: int = Field(..., description="new_cost - collateral (знаковое)")
    new_cost: int = Field(..., ge=0, description="C(q') после сделки")
    new_prices: tuple[int, ...] = Field(..., description="Цены после сделки")
    b: int = Field(..., ge=0, description="Параметр ликвидности, использованный в расчёте")

    model_config = {"frozen": True}

    def average_price(self) -> int:
        """
        Средняя цена за долю (scaled by UNIT), знак как у cost * delta.
        """
        return fixed_div(self.cost, self.delta)


class TradeReceipt(BaseModel):
    """
    Квитанция исполненной сделки.
    """

    account: str = Field(..., min_length=1)
    outcome: int = Field(..., ge=0)
    delta: int = Field(..., description="Изменение количества (знаковое)")
    cost: int = Field(..., description="Знаковая стоимость сделки")
    accepted: int = Field(..., ge=0, description="Сумма, принятая от вызывающего")
    refund: int = Field(..., ge=0, description="Возврат излишка оплаты")
    payout: int = Field(..., ge=0, description="Выплата вызывающему (продажа)")
    collateral_after: int = Field(..., ge=0, description="collateral после коммита")
    new_prices: tuple[int, ...] = Field(..., description="Цены после сделки")

    model_config = {"frozen": True}


class ClaimReceipt(BaseModel):
    """
    Квитанция выплаты выигрыша: 1 единица выплаты за 1 выигравшую долю.
    """

    account: str = Field(..., min_length=1)
    outcome: int = Field(..., ge=0, description="Победивший исход")
    shares: int = Field(..., gt=0, description="Погашенные доли")
    payout: int = Field(..., gt=0, description="Выплата (== shares)")

    model_config = {"frozen": True}
