"""Trade Engine — валидация и применение сделок покупки/продажи.

Состояния рынка: OPEN (торговля разрешена), RESOLVED (торговля запрещена).

quote (без побочных эффектов):
    - 0 <= outcome < n, иначе InvalidOutcome
    - delta != 0, иначе InvalidDelta
    - продажа не больше выпущенного количества исхода, иначе InsufficientShares
    - new_cost = C(q', b_current), cost = new_cost - collateral

execute (только в OPEN, иначе MarketAlreadyResolved):
    1. та же валидация и расчёт, плюс продажа не больше баланса вызывающего
    2. cost > 0: payment >= cost (иначе InsufficientPayment), излишек возвращается
    3. cost < 0: выплата -cost, приложенная оплата недопустима (InvalidDelta)
    4. quantities[outcome] += delta, total_volume += |delta|, collateral = new_cost
    5. позиция вызывающего += delta (в новой версии реестра)
    6. запись SharesTransferred(account, outcome, delta)

execute ничего не меняет на месте: новый снапшот и новый реестр возвращаются
вместе и становятся видимыми только при коммите рынка.
"""

import logging
from dataclasses import dataclass

from ls_lmsr.core.domain.errors import (
    InsufficientPayment,
    InsufficientShares,
    InvalidDelta,
    InvalidOutcome,
    MarketAlreadyResolved,
)
from ls_lmsr.core.domain.events import SharesTransferred
from ls_lmsr.core.domain.market_state import MarketParams, MarketState
from ls_lmsr.core.domain.trade import TradeQuote, TradeReceipt
from ls_lmsr.core.math.cost_function import compute_cost
from ls_lmsr.core.math.liquidity import compute_b
from ls_lmsr.core.math.numerical_safeguards import validate_non_negative
from ls_lmsr.core.math.price_oracle import compute_prices
from ls_lmsr.engine.ledger import Ledger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TradeExecution:
    """Результат исполнения сделки (ещё не закоммиченный в рынок)."""

    new_state: MarketState
    new_ledger: Ledger
    receipt: TradeReceipt
    event: SharesTransferred


class TradeEngine:
    """Расчёт и применение сделок над явным состоянием рынка.

    Движок не хранит состояние рынка: MarketState и Ledger передаются в каждый
    вызов, новые версии возвращаются вызывающему для коммита.
    """

    def __init__(self, params: MarketParams):
        self.params = params

    def current_b(self, state: MarketState) -> int:
        """Параметр ликвидности при текущем объёме."""
        return compute_b(self.params.b0, self.params.alpha, state.total_volume)

    def prices(self, state: MarketState) -> list[int]:
        return compute_prices(state.quantities, self.current_b(state))

    def validate_request(self, state: MarketState, outcome: int, delta: int) -> None:
        """Проверка запроса без обращения к реестру.

        Raises:
            InvalidOutcome, InvalidDelta, InsufficientShares
        """
        if isinstance(outcome, bool) or not isinstance(outcome, int):
            raise InvalidOutcome(f"outcome must be an int, got {type(outcome).__name__}")
        if not 0 <= outcome < self.params.num_outcomes:
            raise InvalidOutcome(
                f"outcome {outcome} out of range [0, {self.params.num_outcomes})"
            )

        if isinstance(delta, bool) or not isinstance(delta, int):
            raise InvalidDelta(f"delta must be an int, got {type(delta).__name__}")
        if delta == 0:
            raise InvalidDelta("delta must be non-zero")

        # Продажа больше выпущенного количества исхода (агрегат, не только вызывающего)
        if delta < 0 and -delta > state.quantities[outcome]:
            raise InsufficientShares(
                f"cannot sell {-delta} of outcome {outcome}: "
                f"only {state.quantities[outcome]} outstanding"
            )

    def quote(self, state: MarketState, outcome: int, delta: int) -> TradeQuote:
        """Котировка сделки против текущего состояния, без изменений."""
        self.validate_request(state, outcome, delta)

        b = self.current_b(state)
        new_quantities = list(state.quantities)
        new_quantities[outcome] += delta

        new_cost = compute_cost(new_quantities, b)
        cost = new_cost - state.collateral

        quote = TradeQuote(
            outcome=outcome,
            delta=delta,
            cost=cost,
            new_cost=new_cost,
            new_prices=tuple(compute_prices(new_quantities, b)),
            b=b,
        )
        logger.debug(
            "Quote outcome=%d delta=%d cost=%d new_cost=%d b=%d",
            outcome, delta, cost, new_cost, b,
        )
        return quote

    def execute(
        self,
        state: MarketState,
        ledger: Ledger,
        account: str,
        outcome: int,
        delta: int,
        payment: int,
        sequence: int,
    ) -> TradeExecution:
        """Исполнение сделки.

        Args:
            state: текущий снапшот рынка
            ledger: текущий реестр позиций
            account: идентификатор вызывающего
            outcome: индекс исхода
            delta: изменение количества (> 0 покупка, < 0 продажа)
            payment: приложенная оплата (scaled by UNIT), >= 0
            sequence: порядковый номер записи события

        Returns:
            TradeExecution с новым снапшотом, новым реестром, квитанцией и записью события

        Raises:
            MarketAlreadyResolved, InvalidOutcome, InvalidDelta,
            InsufficientShares, InsufficientPayment
        """
        if state.resolved:
            raise MarketAlreadyResolved("trading is closed: market is resolved")

        validate_non_negative(payment, "payment")

        # 1. Валидация и расчёт (как в quote)
        quote = self.quote(state, outcome, delta)
        if delta < 0:
            ledger.ensure_can_apply(account, outcome, delta)

        # 2-3. Расчёт платежей
        cost = quote.cost
        if cost > 0:
            if payment < cost:
                raise InsufficientPayment(f"payment {payment} is below cost {cost}")
            accepted, refund, payout = cost, payment - cost, 0
        elif cost < 0:
            if payment != 0:
                raise InvalidDelta(
                    f"payment {payment} attached to a trade that pays out {-cost}"
                )
            accepted, refund, payout = 0, 0, -cost
        else:
            accepted, refund, payout = 0, payment, 0

        # 4. Новый снапшот рынка
        new_quantities = list(state.quantities)
        new_quantities[outcome] += delta
        new_state = MarketState(
            quantities=tuple(new_quantities),
            total_volume=state.total_volume + abs(delta),
            collateral=quote.new_cost,
            phase=state.phase,
            winning_outcome=state.winning_outcome,
        )

        # 5. Позиция вызывающего
        new_ledger = ledger.with_delta(account, outcome, delta)

        # 6. Запись события
        event = SharesTransferred(
            sequence=sequence, account=account, outcome=outcome, delta=delta
        )

        receipt = TradeReceipt(
            account=account,
            outcome=outcome,
            delta=delta,
            cost=cost,
            accepted=accepted,
            refund=refund,
            payout=payout,
            collateral_after=new_state.collateral,
            new_prices=quote.new_prices,
        )

        logger.info(
            "Trade account=%s outcome=%d delta=%d cost=%d collateral=%d volume=%d",
            account, outcome, delta, cost, new_state.collateral, new_state.total_volume,
        )
        return TradeExecution(
            new_state=new_state, new_ledger=new_ledger, receipt=receipt, event=event
        )
