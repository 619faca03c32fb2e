"""Ledger — балансы долей по аккаунтам.

- Позиция создаётся лениво при первой сделке аккаунта
- Балансы никогда не становятся отрицательными
- Позиции не удаляются: после выплаты остаются нулевыми
- Реестр не меняется после создания: with_delta/with_zeroed возвращают
  новый реестр, исходный остаётся прежним до коммита рынка
"""

import logging
from typing import Dict, Iterator, List, Mapping, Optional, Sequence

from ls_lmsr.core.domain.errors import InsufficientShares, InvalidOutcome
from ls_lmsr.core.domain.position import Position

logger = logging.getLogger(__name__)


class Ledger:
    """Реестр позиций рынка с фиксированным числом исходов."""

    def __init__(self, num_outcomes: int, positions: Optional[Mapping[str, Position]] = None):
        """
        Args:
            num_outcomes: число исходов рынка (длина каждой позиции)
            positions: начальные позиции {account: Position}
        """
        self.num_outcomes = num_outcomes
        self._positions: Dict[str, Position] = dict(positions or {})

    def __iter__(self) -> Iterator[Position]:
        return iter(self._positions.values())

    def __len__(self) -> int:
        return len(self._positions)

    # -------------------------------------------------------------------------
    # Чтение
    # -------------------------------------------------------------------------

    def position(self, account: str) -> Position:
        """Позиция аккаунта; для неизвестного аккаунта — нулевая (не создаётся)."""
        existing = self._positions.get(account)
        if existing is not None:
            return existing
        return Position.empty(account, self.num_outcomes)

    def balance(self, account: str, outcome: int) -> int:
        self._check_outcome(outcome)
        return self.position(account).balance(outcome)

    def all_balances(self, account: str) -> List[int]:
        return list(self.position(account).balances)

    def ensure_can_apply(self, account: str, outcome: int, delta: int) -> None:
        """Проверка, что баланс после изменения останется неотрицательным.

        Raises:
            InvalidOutcome: индекс вне [0, n)
            InsufficientShares: продажа больше, чем баланс аккаунта
        """
        self._check_outcome(outcome)
        current = self.position(account).balance(outcome)
        if current + delta < 0:
            raise InsufficientShares(
                f"account {account!r} holds {current} of outcome {outcome}, "
                f"cannot apply delta {delta}"
            )

    # -------------------------------------------------------------------------
    # Новые версии реестра
    # -------------------------------------------------------------------------

    def with_delta(self, account: str, outcome: int, delta: int) -> "Ledger":
        """Реестр, в котором баланс аккаунта изменён на delta."""
        self.ensure_can_apply(account, outcome, delta)
        return self._replaced(self.position(account).with_delta(outcome, delta))

    def with_zeroed(self, account: str, outcome: int) -> "Ledger":
        """Реестр с обнулённым балансом исхода (неизвестный аккаунт не создаётся)."""
        self._check_outcome(outcome)
        current = self._positions.get(account)
        if current is None:
            return self
        return self._replaced(current.zeroed(outcome))

    def _replaced(self, position: Position) -> "Ledger":
        positions = dict(self._positions)
        positions[position.account] = position
        return Ledger(self.num_outcomes, positions)

    # -------------------------------------------------------------------------
    # Сериализация
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, List[int]]:
        return {account: list(p.balances) for account, p in self._positions.items()}

    @classmethod
    def from_dict(cls, num_outcomes: int, data: Mapping[str, Sequence[int]]) -> "Ledger":
        """Восстановление реестра из {account: balances}.

        Raises:
            ValueError: длина балансов не равна num_outcomes
            pydantic.ValidationError: отрицательные балансы
        """
        positions = {}
        for account, balances in data.items():
            if len(balances) != num_outcomes:
                raise ValueError(
                    f"position of {account!r} has {len(balances)} balances, "
                    f"expected {num_outcomes}"
                )
            positions[account] = Position(account=account, balances=tuple(balances))
        logger.debug("Ledger restored with %d positions", len(positions))
        return cls(num_outcomes, positions)

    def _check_outcome(self, outcome: int) -> None:
        if isinstance(outcome, bool) or not isinstance(outcome, int):
            raise InvalidOutcome(f"outcome must be an int, got {type(outcome).__name__}")
        if not 0 <= outcome < self.num_outcomes:
            raise InvalidOutcome(
                f"outcome {outcome} out of range [0, {self.num_outcomes})"
            )
