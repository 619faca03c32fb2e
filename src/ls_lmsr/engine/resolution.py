"""Resolution — одноразовое разрешение рынка и выплата выигрышей.

Переходы фазы:
- OPEN → RESOLVED: resolve_market владельцем с валидным исходом
- RESOLVED → *: невозможен (терминальная фаза для торговли)

Выплаты (claim):
- только в RESOLVED, иначе NotResolved
- баланс в победившем исходе обнуляется и выплачивается 1:1
- нулевой баланс (включая повторный claim) → InsufficientShares
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ls_lmsr.core.domain.errors import (
    InsufficientShares,
    InvalidOutcome,
    MarketAlreadyResolved,
    NotResolved,
    OnlyOwner,
)
from ls_lmsr.core.domain.events import MarketResolved
from ls_lmsr.core.domain.market_state import MarketParams, MarketPhase, MarketState
from ls_lmsr.core.domain.trade import ClaimReceipt
from ls_lmsr.engine.ledger import Ledger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionTransitionResult:
    """Результат оценки перехода фазы рынка."""

    new_phase: MarketPhase
    previous_phase: MarketPhase
    winning_outcome: Optional[int]

    # Диагностика
    transition_occurred: bool
    transition_reason: str


class ResolutionStateMachine:
    """Двухфазная state machine рынка (OPEN/RESOLVED).

    Порядок проверок фиксирован: авторизация, фаза, диапазон исхода.
    Любая проверка, которая не прошла, поднимает исключение и перехода нет.
    """

    def evaluate_resolution(
        self,
        current_phase: MarketPhase,
        caller: str,
        owner: str,
        winning_outcome: int,
        num_outcomes: int,
    ) -> ResolutionTransitionResult:
        """Оценка перехода OPEN → RESOLVED.

        Args:
            current_phase: текущая фаза
            caller: идентификатор вызывающего
            owner: владелец рынка
            winning_outcome: заявленный победивший исход
            num_outcomes: число исходов рынка

        Returns:
            ResolutionTransitionResult с новой фазой

        Raises:
            OnlyOwner: вызывающий не владелец
            MarketAlreadyResolved: фаза уже RESOLVED
            InvalidOutcome: исход вне [0, n)
        """
        if caller != owner:
            raise OnlyOwner(f"only the owner can resolve the market, got {caller!r}")

        if current_phase == MarketPhase.RESOLVED:
            raise MarketAlreadyResolved("market is already resolved")

        if isinstance(winning_outcome, bool) or not isinstance(winning_outcome, int):
            raise InvalidOutcome(
                f"winning_outcome must be an int, got {type(winning_outcome).__name__}"
            )
        if not 0 <= winning_outcome < num_outcomes:
            raise InvalidOutcome(
                f"winning_outcome {winning_outcome} out of range [0, {num_outcomes})"
            )

        return ResolutionTransitionResult(
            new_phase=MarketPhase.RESOLVED,
            previous_phase=current_phase,
            winning_outcome=winning_outcome,
            transition_occurred=True,
            transition_reason=f"resolved_{current_phase.value}_to_RESOLVED",
        )


class ResolutionManager:
    """Разрешение рынка и выплаты по реестру.

    Как и TradeEngine, менеджер не хранит состояние: новые версии
    снапшота и реестра возвращаются рынку для коммита.
    """

    def __init__(
        self,
        params: MarketParams,
        state_machine: Optional[ResolutionStateMachine] = None,
    ):
        self.params = params
        self.state_machine = state_machine or ResolutionStateMachine()

    def resolve(
        self,
        state: MarketState,
        caller: str,
        winning_outcome: int,
        sequence: int,
    ) -> tuple[MarketState, MarketResolved]:
        """Разрешение рынка.

        Returns:
            (новый снапшот в фазе RESOLVED, запись MarketResolved)
        """
        result = self.state_machine.evaluate_resolution(
            current_phase=state.phase,
            caller=caller,
            owner=self.params.owner,
            winning_outcome=winning_outcome,
            num_outcomes=self.params.num_outcomes,
        )

        new_state = MarketState(
            quantities=state.quantities,
            total_volume=state.total_volume,
            collateral=state.collateral,
            phase=result.new_phase,
            winning_outcome=result.winning_outcome,
        )

        logger.info(
            "Market resolved: winning_outcome=%d (%s)",
            winning_outcome, result.transition_reason,
        )
        return new_state, MarketResolved(sequence=sequence, winning_outcome=winning_outcome)

    def claim(
        self, state: MarketState, ledger: Ledger, account: str
    ) -> tuple[Ledger, ClaimReceipt]:
        """Выплата выигрыша аккаунту.

        Returns:
            (реестр с обнулённым балансом победившего исхода, квитанция)

        Raises:
            NotResolved: рынок ещё открыт
            InsufficientShares: нет долей в победившем исходе
        """
        if not state.resolved:
            raise NotResolved("cannot claim before the market is resolved")

        winning = state.winning_outcome
        shares = ledger.balance(account, winning)
        if shares == 0:
            raise InsufficientShares(
                f"account {account!r} holds no shares of winning outcome {winning}"
            )

        new_ledger = ledger.with_zeroed(account, winning)

        logger.info("Claim account=%s outcome=%d payout=%d", account, winning, shares)
        receipt = ClaimReceipt(account=account, outcome=winning, shares=shares, payout=shares)
        return new_ledger, receipt
