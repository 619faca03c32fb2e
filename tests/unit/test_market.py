"""
Тесты LSLMSRMarket

Покрывает:
- Создание: границы числа исходов, точное обеспечение
- Сценарий бинарного рынка (n=2, b0=100, alpha=0.01)
- Объём, симметричный round-trip, выплаты
- Жизненный цикл: разрешение, торговля после разрешения
- Журнал событий и аудит инвариантов
- Сериализацию записей writer lock и атомарность коммита для читателей
"""

import threading

import pytest

from ls_lmsr.core.domain import (
    InsufficientPayment,
    InsufficientShares,
    InvalidDelta,
    InvalidInitialFunding,
    InvalidNumOutcomes,
    InvalidOutcome,
    MarketAlreadyResolved,
    MarketFunded,
    MarketResolved,
    NotResolved,
    OnlyOwner,
    SharesTransferred,
)
from ls_lmsr.core.math.cost_function import required_funding
from ls_lmsr.core.math.fixed_point import UNIT, to_fixed
from ls_lmsr.engine.market import LSLMSRMarket, MarketConfig

B0 = 100 * UNIT
ALPHA = to_fixed("0.01")


def buy(market, account, outcome, delta):
    """Покупка по свежей котировке с точной оплатой."""
    quote = market.quote(outcome, delta)
    return market.trade(account, outcome, delta, payment=max(quote.cost, 0))


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def market():
    """Бинарный рынок сценария: n=2, b0=100, alpha=0.01."""
    return LSLMSRMarket.create(2, B0, ALPHA, required_funding(2, B0), owner="owner")


@pytest.fixture
def flat_market():
    """Бинарный рынок без роста ликвидности (alpha=0)."""
    return LSLMSRMarket.create(2, B0, 0, required_funding(2, B0), owner="owner")


# =============================================================================
# СОЗДАНИЕ
# =============================================================================


class TestCreate:
    """Тесты создания рынка"""

    @pytest.mark.parametrize("n", [2, 3, 4, 5])
    def test_valid_outcome_counts(self, n):
        """n в [2, 5] с точным обеспечением"""
        funding = required_funding(n, B0)
        market = LSLMSRMarket.create(n, B0, ALPHA, funding, owner="owner")
        assert market.state.collateral == funding
        assert market.get_all_quantities() == [0] * n

    @pytest.mark.parametrize("n", [-1, 0, 1, 6, 10])
    def test_invalid_outcome_counts(self, n):
        """n вне [2, 5] отвергается независимо от обеспечения"""
        with pytest.raises(InvalidNumOutcomes):
            LSLMSRMarket.create(n, B0, ALPHA, 0, owner="owner")
        with pytest.raises(InvalidNumOutcomes):
            LSLMSRMarket.create(n, B0, ALPHA, required_funding(2, B0), owner="owner")

    @pytest.mark.parametrize("offset", [-1, 1, -UNIT])
    def test_funding_must_be_exact(self, offset):
        """Обеспечение должно совпадать точно"""
        with pytest.raises(InvalidInitialFunding, match="b0 \\* ln\\(n\\)"):
            LSLMSRMarket.create(2, B0, ALPHA, required_funding(2, B0) + offset, owner="owner")

    def test_invalid_liquidity_parameters(self):
        """b0 > 0 и alpha >= 0"""
        with pytest.raises(ValueError, match="b0 must be positive"):
            LSLMSRMarket.create(2, 0, ALPHA, 0, owner="owner")
        with pytest.raises(ValueError, match="alpha must be non-negative"):
            LSLMSRMarket.create(2, B0, -1, required_funding(2, B0), owner="owner")

    def test_narrowed_config(self):
        """Конфигурация может сузить допустимое число исходов"""
        config = MarketConfig(min_outcomes=2, max_outcomes=3)
        with pytest.raises(InvalidNumOutcomes, match="\\[2, 3\\]"):
            LSLMSRMarket.create(4, B0, 0, required_funding(4, B0), owner="owner", config=config)

    def test_config_bounds_validated(self):
        """Границы конфигурации внутри [2, 5]"""
        with pytest.raises(ValueError, match="outcome bounds"):
            MarketConfig(min_outcomes=1)
        with pytest.raises(ValueError, match="outcome bounds"):
            MarketConfig(min_outcomes=4, max_outcomes=3)

    def test_funded_event(self, market):
        """Создание эмитирует MarketFunded"""
        assert market.events == (
            MarketFunded(sequence=0, initial_collateral=required_funding(2, B0)),
        )

    @pytest.mark.parametrize("n", [2, 3, 4, 5])
    def test_initial_symmetry(self, n):
        """На старте все цены равны UNIT // n"""
        market = LSLMSRMarket.create(n, B0, ALPHA, required_funding(n, B0), owner="owner")
        assert market.get_prices() == [UNIT // n] * n


# =============================================================================
# СЦЕНАРИЙ
# =============================================================================


class TestBinaryScenario:
    """Сценарий: n=2, b0=100, alpha=0.01"""

    def test_funding_close_to_69_31(self, market):
        """Обеспечение ≈ 69.31"""
        assert to_fixed("69.31") < market.state.collateral < to_fixed("69.32")

    def test_buy_ten_shares(self, market):
        """Покупка 10 долей исхода 0"""
        quote = market.quote(0, 10 * UNIT)
        assert 0 < quote.cost < 10 * UNIT

        receipt = market.trade("alice", 0, 10 * UNIT, payment=quote.cost)
        assert receipt.cost == quote.cost

        prices = market.get_prices()
        assert prices[0] > UNIT // 2
        assert abs(sum(prices) - UNIT) <= UNIT // 1_000

    def test_volume_counts_buys_and_sells(self, market):
        """Покупка 10, продажа 5 → объём 15"""
        buy(market, "alice", 0, 10 * UNIT)
        buy(market, "alice", 0, -5 * UNIT)
        assert market.get_market_info().total_volume == 15 * UNIT
        assert market.get_quantity(0) == 5 * UNIT
        assert market.get_balance("alice", 0) == 5 * UNIT

    def test_b_grows_with_volume(self, market):
        """b растёт после сделок"""
        assert market.get_b() == B0
        buy(market, "alice", 1, 10 * UNIT)
        assert market.get_b() > B0

    def test_stale_quote_fails_or_overpays(self, market):
        """Котировка устаревает после чужой сделки"""
        stale = market.quote(0, 10 * UNIT)
        buy(market, "bob", 0, 10 * UNIT)
        with pytest.raises(InsufficientPayment):
            market.trade("alice", 0, 10 * UNIT, payment=stale.cost)


# =============================================================================
# СВОЙСТВА
# =============================================================================


class TestProperties:
    """Свойства рынка"""

    def test_round_trip_restores_state(self, flat_market):
        """alpha == 0: покупка d и продажа d восстанавливают состояние"""
        before = flat_market.state

        bought = buy(flat_market, "alice", 1, 25 * UNIT)
        sold = flat_market.trade("alice", 1, -25 * UNIT, payment=0)

        after = flat_market.state
        assert after.quantities == before.quantities
        assert after.collateral == before.collateral
        assert sold.payout == bought.accepted

    def test_small_buy_in_fresh_market_pays_buyer(self, flat_market):
        """Покупка одной доли на сбалансированном рынке котируется с отрицательной стоимостью"""
        quote = flat_market.quote(0, UNIT)
        assert quote.cost < 0

        with pytest.raises(InvalidDelta, match="pays out"):
            flat_market.trade("alice", 0, UNIT, payment=1)

        receipt = flat_market.trade("alice", 0, UNIT, payment=0)
        assert receipt.cost == quote.cost
        assert receipt.payout == -quote.cost
        assert receipt.accepted == 0
        assert flat_market.state.collateral == required_funding(2, B0) + quote.cost
        assert flat_market.get_balance("alice", 0) == UNIT
        assert flat_market.check_invariants().ok

    def test_prices_sum_after_trades(self, market):
        """Сумма цен ≈ UNIT после серии сделок"""
        buy(market, "alice", 0, 30 * UNIT)
        buy(market, "bob", 1, 12 * UNIT)
        buy(market, "alice", 0, -7 * UNIT)
        assert abs(sum(market.get_prices()) - UNIT) <= UNIT // 1_000

    def test_invariants_hold_after_trades(self, market):
        """Аудит инвариантов после серии сделок"""
        buy(market, "alice", 0, 10 * UNIT)
        buy(market, "bob", 1, 4 * UNIT)
        buy(market, "alice", 0, -5 * UNIT)
        report = market.check_invariants()
        assert report.ok, report.violations

    def test_invariant_audit_detects_corruption(self, market):
        """Порча реестра обнаруживается аудитом"""
        buy(market, "alice", 0, 10 * UNIT)
        tampered = LSLMSRMarket(
            market.params,
            market.state,
            market.ledger.with_delta("mallory", 0, UNIT),
            market.events,
        )
        report = tampered.check_invariants()
        assert market.check_invariants().ok
        assert not report.ok
        assert any("positions hold" in v for v in report.violations)


# =============================================================================
# ЖИЗНЕННЫЙ ЦИКЛ
# =============================================================================


class TestLifecycle:
    """Разрешение и выплаты"""

    def test_redemption(self, market):
        """s выигравших долей дают выплату s, повтор отвергается"""
        buy(market, "alice", 0, 10 * UNIT)
        buy(market, "bob", 1, 6 * UNIT)
        market.resolve_market("owner", 0)

        collateral = market.state.collateral
        receipt = market.claim_winnings("alice")
        assert receipt.payout == 10 * UNIT
        assert market.get_balance("alice", 0) == 0
        assert market.state.collateral == collateral

        with pytest.raises(InsufficientShares):
            market.claim_winnings("alice")
        with pytest.raises(InsufficientShares):
            market.claim_winnings("bob")

    def test_claim_before_resolution(self, market):
        """Выплата до разрешения"""
        buy(market, "alice", 0, 10 * UNIT)
        with pytest.raises(NotResolved):
            market.claim_winnings("alice")

    def test_only_owner_resolves(self, market):
        """Разрешение только владельцем"""
        with pytest.raises(OnlyOwner):
            market.resolve_market("alice", 0)
        assert not market.get_market_info().resolved

    def test_invalid_winning_outcome(self, market):
        """Исход вне [0, n)"""
        with pytest.raises(InvalidOutcome):
            market.resolve_market("owner", 2)

    def test_no_trading_or_second_resolution(self, market):
        """После разрешения торговля и повторное разрешение запрещены"""
        event = market.resolve_market("owner", 1)
        assert event == MarketResolved(sequence=1, winning_outcome=1)

        with pytest.raises(MarketAlreadyResolved):
            market.trade("alice", 0, 10 * UNIT, payment=10 * UNIT)
        with pytest.raises(MarketAlreadyResolved):
            market.resolve_market("owner", 0)

        info = market.get_market_info()
        assert info.resolved
        assert info.winning_outcome == 1

    def test_market_info(self, market):
        """getMarketInfo в исходном порядке полей"""
        assert market.get_market_info().as_tuple() == (
            2, B0, ALPHA, B0, 0, required_funding(2, B0), False, None,
        )


# =============================================================================
# СОБЫТИЯ И ЗАПРОСЫ
# =============================================================================


class TestEventsAndQueries:
    """Журнал событий и getters"""

    def test_event_sequence(self, market):
        """Записи упорядочены и пронумерованы без пропусков"""
        buy(market, "alice", 0, 10 * UNIT)
        buy(market, "alice", 0, -4 * UNIT)
        market.resolve_market("owner", 0)

        events = market.events
        assert [e.sequence for e in events] == [0, 1, 2, 3]
        assert events[1] == SharesTransferred(sequence=1, account="alice", outcome=0, delta=10 * UNIT)
        assert events[2].delta == -4 * UNIT
        assert isinstance(events[3], MarketResolved)

    def test_failed_operation_emits_nothing(self, market):
        """Ошибка не оставляет записей"""
        with pytest.raises(InsufficientShares):
            market.trade("alice", 0, -UNIT)
        assert len(market.events) == 1

    def test_get_quantity_invalid_outcome(self, market):
        """getQuantity вне диапазона"""
        with pytest.raises(InvalidOutcome):
            market.get_quantity(2)

    def test_balances(self, market):
        """getBalance / getAllBalances"""
        buy(market, "alice", 1, 3 * UNIT)
        assert market.get_balance("alice", 1) == 3 * UNIT
        assert market.get_all_balances("alice") == [0, 3 * UNIT]
        assert market.get_all_balances("nobody") == [0, 0]


# =============================================================================
# КОНКУРЕНТНОСТЬ
# =============================================================================


class TestConcurrency:
    """Записи сериализуются writer lock"""

    def test_concurrent_buys_are_serialized(self, market):
        """Параллельные покупки: итог как при последовательном исполнении"""
        errors = []

        def worker(account):
            for _ in range(5):
                try:
                    market.trade(account, 0, 10 * UNIT, payment=1_000 * UNIT)
                except Exception as e:
                    errors.append(e)

        threads = [threading.Thread(target=worker, args=(f"t{i}",)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert errors == []
        assert market.get_quantity(0) == 200 * UNIT
        assert market.get_market_info().total_volume == 200 * UNIT
        assert [e.sequence for e in market.events] == list(range(21))
        assert market.check_invariants().ok

    def test_readers_do_not_see_trade_before_commit(self, market, monkeypatch):
        """Пока сделка не закоммичена, чтения видят прежние баланс и количество"""
        execute = market._trade_engine.execute
        seen = {}

        def execute_then_read(*args, **kwargs):
            execution = execute(*args, **kwargs)
            seen["balance"] = market.get_balance("alice", 0)
            seen["quantity"] = market.get_quantity(0)
            seen["invariants_ok"] = market.check_invariants().ok
            seen["positions"] = market.snapshot()["positions"]
            return execution

        monkeypatch.setattr(market._trade_engine, "execute", execute_then_read)
        buy(market, "alice", 0, 10 * UNIT)

        assert seen == {"balance": 0, "quantity": 0, "invariants_ok": True, "positions": {}}
        assert market.get_balance("alice", 0) == 10 * UNIT
        assert market.get_quantity(0) == 10 * UNIT

    def test_readers_see_consistent_commits(self, market):
        """Аудит из читающего потока не видит рассогласования во время записей"""
        done = threading.Event()
        violations = []

        def reader():
            while not done.is_set():
                report = market.check_invariants()
                if not report.ok:
                    violations.extend(report.violations)

        def writer(account):
            for _ in range(10):
                market.trade(account, 1, 10 * UNIT, payment=1_000 * UNIT)

        reader_thread = threading.Thread(target=reader)
        reader_thread.start()
        writers = [threading.Thread(target=writer, args=(f"w{i}",)) for i in range(3)]
        for thread in writers:
            thread.start()
        for thread in writers:
            thread.join()
        done.set()
        reader_thread.join()

        assert violations == []
        assert market.get_quantity(1) == 300 * UNIT
