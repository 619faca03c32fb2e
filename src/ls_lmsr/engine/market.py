"""LS-LMSR Market — фасад рынка для внешних клиентов.

Рынок — явный объект (никаких глобальных переменных модуля), которым
владеет ровно один писатель:

- Изменяющие операции (trade, resolve_market, claim_winnings) выполняются
  целиком под writer lock. Новые MarketState, Ledger и журнал событий
  собираются в одну immutable запись CommittedMarket, которая заменяет
  предыдущую одним присваиванием; промежуточного состояния не видно.
- Чтения (quote, get_*, check_invariants, snapshot) не берут блокировку:
  каждое берёт текущую запись один раз и работает только с ней.
- Отмены, таймаутов и внутренних повторов нет: операция либо коммитится,
  либо сразу падает без побочных эффектов.

Котировка может устареть, если чужая сделка закоммичена раньше: перед
trade нужно перезапросить quote.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from ls_lmsr.core.contracts import validate_market_event, validate_market_snapshot
from ls_lmsr.core.domain.errors import (
    InvalidInitialFunding,
    InvalidNumOutcomes,
    InvalidOutcome,
    SnapshotIntegrityError,
)
from ls_lmsr.core.domain.events import (
    MARKET_EVENT_ADAPTER,
    MarketEvent,
    MarketFunded,
    MarketResolved,
    SharesTransferred,
)
from ls_lmsr.core.domain.market_state import (
    MAX_OUTCOMES,
    MIN_OUTCOMES,
    MarketInfo,
    MarketParams,
    MarketPhase,
    MarketState,
)
from ls_lmsr.core.domain.trade import ClaimReceipt, TradeQuote, TradeReceipt
from ls_lmsr.core.math.cost_function import compute_cost, required_funding
from ls_lmsr.core.math.fixed_point import UNIT
from ls_lmsr.core.math.liquidity import compute_b
from ls_lmsr.core.math.numerical_safeguards import (
    PPM,
    validate_non_negative,
    validate_positive,
)
from ls_lmsr.core.math.price_oracle import price_sum_deviation
from ls_lmsr.engine.ledger import Ledger
from ls_lmsr.engine.resolution import ResolutionManager
from ls_lmsr.engine.trade_engine import TradeEngine

logger = logging.getLogger(__name__)

SNAPSHOT_SCHEMA_VERSION = "1"


@dataclass(frozen=True)
class MarketConfig:
    """Конфигурация рынка.

    Границы числа исходов можно только сузить внутри [2, 5].
    price_sum_tolerance_ppm — допуск суммы цен для check_invariants
    (1000 ppm = 0.1%).
    """

    min_outcomes: int = MIN_OUTCOMES
    max_outcomes: int = MAX_OUTCOMES
    price_sum_tolerance_ppm: int = 1_000

    def __post_init__(self):
        if not MIN_OUTCOMES <= self.min_outcomes <= self.max_outcomes <= MAX_OUTCOMES:
            raise ValueError(
                f"outcome bounds must satisfy {MIN_OUTCOMES} <= min <= max <= {MAX_OUTCOMES}, "
                f"got [{self.min_outcomes}, {self.max_outcomes}]"
            )
        if self.price_sum_tolerance_ppm < 0:
            raise ValueError(
                f"price_sum_tolerance_ppm must be non-negative, got {self.price_sum_tolerance_ppm}"
            )

    def allows(self, num_outcomes: int) -> bool:
        if isinstance(num_outcomes, bool) or not isinstance(num_outcomes, int):
            return False
        return self.min_outcomes <= num_outcomes <= self.max_outcomes


@dataclass(frozen=True)
class InvariantReport:
    """Результат аудита инвариантов рынка."""

    ok: bool
    violations: tuple[str, ...]


@dataclass(frozen=True)
class CommittedMarket:
    """Закоммиченное состояние рынка: снапшот, реестр и журнал событий."""

    state: MarketState
    ledger: Ledger
    events: tuple[MarketEvent, ...]

    def pricing_volume(self) -> int:
        """Объём, при котором была оценена последняя сделка.

        collateral = C(q, b) с b до прироста объёма последней сделкой.
        """
        for event in reversed(self.events):
            if isinstance(event, SharesTransferred):
                return self.state.total_volume - abs(event.delta)
        return self.state.total_volume


class LSLMSRMarket:
    """Рынок LS-LMSR: котировки, сделки, разрешение, выплаты, запросы."""

    def __init__(
        self,
        params: MarketParams,
        state: MarketState,
        ledger: Ledger,
        events: Iterable[MarketEvent] = (),
        config: Optional[MarketConfig] = None,
    ):
        """Прямой конструктор не проверяет обеспечение: используйте create/restore."""
        self.params = params
        self.config = config or MarketConfig()

        self._committed = CommittedMarket(state=state, ledger=ledger, events=tuple(events))
        self._trade_engine = TradeEngine(params)
        self._resolution = ResolutionManager(params)
        self._write_lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Создание
    # -------------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        num_outcomes: int,
        b0: int,
        alpha: int,
        funding_amount: int,
        owner: str,
        config: Optional[MarketConfig] = None,
    ) -> "LSLMSRMarket":
        """Создание и обеспечение рынка.

        Args:
            num_outcomes: число исходов (2..5)
            b0: базовая ликвидность (scaled by UNIT), > 0
            alpha: чувствительность (scaled by UNIT), >= 0
            funding_amount: начальное обеспечение, ровно b0 * ln(n)
            owner: идентификатор, которому разрешено разрешить рынок

        Raises:
            InvalidNumOutcomes: n вне допустимых границ (независимо от funding)
            InvalidInitialFunding: funding != required_funding(n, b0)
            ValueError/TypeError: b0 <= 0, alpha < 0
        """
        config = config or MarketConfig()

        if not config.allows(num_outcomes):
            raise InvalidNumOutcomes(
                f"num_outcomes must be in [{config.min_outcomes}, {config.max_outcomes}], "
                f"got {num_outcomes!r}"
            )

        validate_positive(b0, "b0")
        validate_non_negative(alpha, "alpha")

        expected = required_funding(num_outcomes, b0)
        if (
            isinstance(funding_amount, bool)
            or not isinstance(funding_amount, int)
            or funding_amount != expected
        ):
            raise InvalidInitialFunding(
                f"funding must equal b0 * ln(n) = {expected}, got {funding_amount!r}"
            )

        params = MarketParams(num_outcomes=num_outcomes, b0=b0, alpha=alpha, owner=owner)
        market = cls(
            params=params,
            state=MarketState.initial(num_outcomes, funding_amount),
            ledger=Ledger(num_outcomes),
            events=(MarketFunded(sequence=0, initial_collateral=funding_amount),),
            config=config,
        )

        logger.info(
            "Market funded: n=%d b0=%d alpha=%d collateral=%d owner=%s",
            num_outcomes, b0, alpha, funding_amount, owner,
        )
        return market

    # -------------------------------------------------------------------------
    # Операции
    # -------------------------------------------------------------------------

    def quote(self, outcome: int, delta: int) -> TradeQuote:
        """Котировка (getTradeCost) против последнего закоммиченного состояния."""
        return self._trade_engine.quote(self._committed.state, outcome, delta)

    def trade(self, account: str, outcome: int, delta: int, payment: int = 0) -> TradeReceipt:
        """Покупка (delta > 0) или продажа (delta < 0) долей исхода."""
        with self._write_lock:
            committed = self._committed
            execution = self._trade_engine.execute(
                committed.state,
                committed.ledger,
                account=account,
                outcome=outcome,
                delta=delta,
                payment=payment,
                sequence=len(committed.events),
            )
            self._committed = CommittedMarket(
                state=execution.new_state,
                ledger=execution.new_ledger,
                events=committed.events + (execution.event,),
            )
        return execution.receipt

    def resolve_market(self, caller: str, winning_outcome: int) -> MarketResolved:
        """Одноразовое разрешение рынка владельцем."""
        with self._write_lock:
            committed = self._committed
            new_state, event = self._resolution.resolve(
                committed.state,
                caller=caller,
                winning_outcome=winning_outcome,
                sequence=len(committed.events),
            )
            self._committed = CommittedMarket(
                state=new_state,
                ledger=committed.ledger,
                events=committed.events + (event,),
            )
        return event

    def claim_winnings(self, account: str) -> ClaimReceipt:
        """Выплата выигрыша после разрешения."""
        with self._write_lock:
            committed = self._committed
            new_ledger, receipt = self._resolution.claim(
                committed.state, committed.ledger, account
            )
            self._committed = CommittedMarket(
                state=committed.state, ledger=new_ledger, events=committed.events
            )
        return receipt

    # -------------------------------------------------------------------------
    # Запросы
    # -------------------------------------------------------------------------

    @property
    def state(self) -> MarketState:
        return self._committed.state

    @property
    def ledger(self) -> Ledger:
        return self._committed.ledger

    @property
    def phase(self) -> MarketPhase:
        return self._committed.state.phase

    @property
    def events(self) -> tuple[MarketEvent, ...]:
        return self._committed.events

    def get_prices(self) -> List[int]:
        return self._trade_engine.prices(self._committed.state)

    def get_b(self) -> int:
        return self._trade_engine.current_b(self._committed.state)

    def get_quantity(self, outcome: int) -> int:
        quantities = self._committed.state.quantities
        if isinstance(outcome, bool) or not isinstance(outcome, int) or not 0 <= outcome < len(quantities):
            raise InvalidOutcome(f"outcome {outcome!r} out of range [0, {len(quantities)})")
        return quantities[outcome]

    def get_all_quantities(self) -> List[int]:
        return list(self._committed.state.quantities)

    def get_balance(self, account: str, outcome: int) -> int:
        return self._committed.ledger.balance(account, outcome)

    def get_all_balances(self, account: str) -> List[int]:
        return self._committed.ledger.all_balances(account)

    def get_market_info(self) -> MarketInfo:
        state = self._committed.state
        return MarketInfo(
            num_outcomes=self.params.num_outcomes,
            b0=self.params.b0,
            alpha=self.params.alpha,
            current_b=self._trade_engine.current_b(state),
            total_volume=state.total_volume,
            collateral=state.collateral,
            resolved=state.resolved,
            winning_outcome=state.winning_outcome,
        )

    # -------------------------------------------------------------------------
    # Аудит инвариантов
    # -------------------------------------------------------------------------

    def check_invariants(self) -> InvariantReport:
        """Проверка collateral == C(q), суммы цен и согласованности реестра."""
        committed = self._committed
        state = committed.state
        violations = []

        b = compute_b(self.params.b0, self.params.alpha, committed.pricing_volume())
        expected_collateral = compute_cost(state.quantities, b)
        if state.collateral != expected_collateral:
            violations.append(
                f"collateral {state.collateral} != C(q) {expected_collateral}"
            )

        deviation = price_sum_deviation(self._trade_engine.prices(state))
        max_deviation = UNIT * self.config.price_sum_tolerance_ppm // PPM
        if deviation > max_deviation:
            violations.append(f"price sum deviates from UNIT by {deviation} > {max_deviation}")

        # Сумма позиций по исходу: == quantity пока рынок открыт, <= после выплат
        for outcome, quantity in enumerate(state.quantities):
            held = sum(position.balance(outcome) for position in committed.ledger)
            if held > quantity or (not state.resolved and held != quantity):
                violations.append(
                    f"outcome {outcome}: positions hold {held}, quantity is {quantity}"
                )

        if violations:
            logger.warning("Invariant violations: %s", "; ".join(violations))

        return InvariantReport(ok=not violations, violations=tuple(violations))

    # -------------------------------------------------------------------------
    # Снапшоты
    # -------------------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        """JSON-совместимый снапшот (схема market_snapshot.json)."""
        committed = self._committed
        state = committed.state
        data = {
            "schema_version": SNAPSHOT_SCHEMA_VERSION,
            "num_outcomes": self.params.num_outcomes,
            "b0": self.params.b0,
            "alpha": self.params.alpha,
            "owner": self.params.owner,
            "quantities": list(state.quantities),
            "total_volume": state.total_volume,
            "collateral": state.collateral,
            "phase": state.phase.value,
            "winning_outcome": state.winning_outcome,
            "positions": committed.ledger.to_dict(),
            "events": [event.model_dump(mode="json") for event in committed.events],
        }
        validate_market_snapshot(data)
        return data

    @classmethod
    def restore(
        cls, data: Dict[str, Any], config: Optional[MarketConfig] = None
    ) -> "LSLMSRMarket":
        """Восстановление рынка из снапшота.

        Raises:
            jsonschema.ValidationError: снапшот не соответствует схеме
            SnapshotIntegrityError: снапшот нарушает инварианты движка
                или границы config
        """
        config = config or MarketConfig()

        validate_market_snapshot(data)
        for record in data["events"]:
            validate_market_event(record)

        num_outcomes = data["num_outcomes"]
        if not config.allows(num_outcomes):
            raise SnapshotIntegrityError(
                f"num_outcomes {num_outcomes} outside configured bounds "
                f"[{config.min_outcomes}, {config.max_outcomes}]"
            )
        if len(data["quantities"]) != num_outcomes:
            raise SnapshotIntegrityError(
                f"quantities has {len(data['quantities'])} entries, expected {num_outcomes}"
            )

        try:
            params = MarketParams(
                num_outcomes=num_outcomes,
                b0=data["b0"],
                alpha=data["alpha"],
                owner=data["owner"],
            )
            state = MarketState(
                quantities=tuple(data["quantities"]),
                total_volume=data["total_volume"],
                collateral=data["collateral"],
                phase=MarketPhase(data["phase"]),
                winning_outcome=data["winning_outcome"],
            )
            ledger = Ledger.from_dict(num_outcomes, data["positions"])
            events = [MARKET_EVENT_ADAPTER.validate_python(record) for record in data["events"]]
        except ValueError as e:
            raise SnapshotIntegrityError(str(e)) from e

        for index, event in enumerate(events):
            if event.sequence != index:
                raise SnapshotIntegrityError(
                    f"event #{index} has sequence {event.sequence}"
                )

        traded = sum(abs(event.delta) for event in events if isinstance(event, SharesTransferred))
        if state.total_volume != traded:
            raise SnapshotIntegrityError(
                f"total_volume {state.total_volume} != traded volume {traded} in events"
            )

        market = cls(params=params, state=state, ledger=ledger, events=events, config=config)

        report = market.check_invariants()
        if not report.ok:
            raise SnapshotIntegrityError("; ".join(report.violations))

        logger.info(
            "Market restored: n=%d phase=%s events=%d",
            num_outcomes, state.phase.value, len(events),
        )
        return market
