"""
Position — Балансы долей одного аккаунта

Immutable Pydantic модель: n неотрицательных балансов, по одному на исход.
Создаётся лениво при первой сделке аккаунта, никогда не удаляется
(после выплаты остаётся нулевой). Все изменения создают новый экземпляр.
"""

from pydantic import BaseModel, Field, field_validator


class Position(BaseModel):
    """
    Позиция аккаунта по всем исходам рынка.
    """

    account: str = Field(..., min_length=1, description="Идентификатор аккаунта")
    balances: tuple[int, ...] = Field(..., min_length=1, description="Доли по исходам (scaled by UNIT)")

    model_config = {"frozen": True}  # Immutable

    @field_validator("balances")
    @classmethod
    def validate_balances_non_negative(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        """Балансы никогда не бывают отрицательными"""
        for i, balance in enumerate(v):
            if balance < 0:
                raise ValueError(f"balances[{i}] must be non-negative, got {balance}")
        return v

    @classmethod
    def empty(cls, account: str, num_outcomes: int) -> "Position":
        return cls(account=account, balances=tuple(0 for _ in range(num_outcomes)))

    def balance(self, outcome: int) -> int:
        return self.balances[outcome]

    def with_delta(self, outcome: int, delta: int) -> "Position":
        """
        Новая позиция с изменённым балансом исхода.

        Raises:
            pydantic.ValidationError: Если баланс стал бы отрицательным
        """
        balances = list(self.balances)
        balances[outcome] += delta
        return Position(account=self.account, balances=tuple(balances))

    def zeroed(self, outcome: int) -> "Position":
        """Новая позиция с обнулённым балансом исхода"""
        balances = list(self.balances)
        balances[outcome] = 0
        return Position(account=self.account, balances=tuple(balances))
