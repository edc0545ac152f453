"""
Unit tests for drawdown, daily-loss and lot-cap evaluation.
"""

import pytest
from datetime import date, datetime, timezone

from ladder_dca.config.models import DailyLossReset, TradingConfig
from ladder_dca.ledger import Lot, PositionLedger
from ladder_dca.models import BotState
from ladder_dca.risk import (
    LiquidationReason,
    RiskAction,
    RiskGovernor,
    apply_daily_loss_reset,
    at_or_above,
    at_or_below,
    effective_max_levels,
)


def make_ledger(balance: float, peak: float, lots=()) -> PositionLedger:
    state = BotState(symbol="BTCUSDT", balance=balance, peak_equity=peak, positions=list(lots))
    return PositionLedger(state)


def lot(quantity: float, entry_price: float) -> Lot:
    return Lot(
        lot_id=f"lot-{entry_price}",
        symbol="BTCUSDT",
        exchange="SIMULATED",
        entry_time=datetime(2026, 1, 1, tzinfo=timezone.utc),
        entry_price=entry_price,
        quantity=quantity,
        invested=quantity * entry_price,
        tp_price=entry_price * 1.02,
    )


class TestBoundaryComparisons:
    """Inclusive comparisons tolerate floating point noise."""

    def test_exact_values(self):
        assert at_or_below(98.0, 98.0)
        assert at_or_above(102.0, 102.0)
        assert not at_or_below(98.01, 98.0)
        assert not at_or_above(101.99, 102.0)

    def test_rounding_noise_absorbed(self):
        threshold = 100 * (1 - 2.0 / 100)
        assert at_or_below(98.0, threshold)
        assert at_or_below(96.04, 98.0 * (1 - 2.0 / 100))
        assert at_or_above(0.2, (1000 - 800) / 1000)


class TestRiskGovernor:
    """Test RiskGovernor.evaluate."""

    @pytest.fixture
    def governor(self):
        return RiskGovernor()

    def test_drawdown_at_limit_liquidates(self, governor):
        ledger = make_ledger(balance=800.0, peak=1000.0)
        verdict = governor.evaluate(ledger, TradingConfig(max_drawdown_percent=20.0), 100.0)

        assert verdict.action == RiskAction.LIQUIDATE_AND_PAUSE
        assert verdict.reason == LiquidationReason.GLOBAL_DRAWDOWN_TRIGGERED
        assert verdict.should_liquidate
        assert verdict.drawdown == pytest.approx(0.2)

    def test_drawdown_below_limit_continues(self, governor):
        ledger = make_ledger(balance=800.01, peak=1000.0)
        verdict = governor.evaluate(ledger, TradingConfig(max_drawdown_percent=20.0), 100.0)

        assert verdict.action == RiskAction.CONTINUE
        assert verdict.reason is None
        assert not verdict.should_liquidate

    def test_drawdown_disabled(self, governor):
        ledger = make_ledger(balance=100.0, peak=1000.0)
        config = TradingConfig(enable_global_drawdown=False)

        assert not governor.evaluate(ledger, config, 100.0).should_liquidate

    def test_peak_equity_raised(self, governor):
        ledger = make_ledger(balance=50.0, peak=100.0, lots=[lot(1.0, 60.0)])
        verdict = governor.evaluate(ledger, TradingConfig(), 70.0)

        assert verdict.equity == pytest.approx(120.0)
        assert ledger.state.peak_equity == pytest.approx(120.0)
        assert verdict.drawdown == 0.0

    def test_open_lots_count_toward_equity(self, governor):
        # 500 cash + 5 units; a drop to 60 leaves 800 of a 1000 peak
        ledger = make_ledger(balance=500.0, peak=1000.0, lots=[lot(5.0, 100.0)])
        config = TradingConfig(max_drawdown_percent=20.0)

        assert not governor.evaluate(ledger, config, 60.002).should_liquidate
        assert governor.evaluate(ledger, config, 60.0).should_liquidate

    def test_daily_loss_limit(self, governor):
        ledger = make_ledger(balance=100.0, peak=100.0)
        ledger.state.daily_loss = 10.0
        config = TradingConfig(max_daily_loss_limit=10.0)

        verdict = governor.evaluate(ledger, config, 100.0)
        assert verdict.reason == LiquidationReason.DAILY_LOSS_LIMIT_REACHED

    def test_daily_loss_under_limit(self, governor):
        ledger = make_ledger(balance=100.0, peak=100.0)
        ledger.state.daily_loss = 9.99
        config = TradingConfig(max_daily_loss_limit=10.0)

        assert not governor.evaluate(ledger, config, 100.0).should_liquidate

    def test_drawdown_checked_before_daily_loss(self, governor):
        ledger = make_ledger(balance=70.0, peak=100.0)
        ledger.state.daily_loss = 30.0
        config = TradingConfig(max_daily_loss_limit=5.0)

        verdict = governor.evaluate(ledger, config, 100.0)
        assert verdict.reason == LiquidationReason.GLOBAL_DRAWDOWN_TRIGGERED


class TestEffectiveMaxLevels:
    """Test the open-lot cap."""

    def test_fixed_cap(self):
        config = TradingConfig(max_dca_levels=7)
        assert effective_max_levels(1_000_000.0, config) == 7
        assert effective_max_levels(0.0, config) == 7

    def test_dynamic_cap(self):
        config = TradingConfig(use_dynamic_dca_levels=True, dca_levels_equity_percent=20.0)
        assert effective_max_levels(1000.0, config) == 200
        assert effective_max_levels(99.0, config) == 19

    def test_dynamic_cap_never_below_one(self):
        config = TradingConfig(use_dynamic_dca_levels=True, dca_levels_equity_percent=20.0)
        assert effective_max_levels(3.0, config) == 1
        assert effective_max_levels(0.0, config) == 1
        assert effective_max_levels(float("nan"), config) == 1


class TestDailyLossReset:
    """Test apply_daily_loss_reset."""

    def test_never_policy(self):
        state = BotState(symbol="BTCUSDT", balance=10.0, daily_loss=5.0)
        now = datetime(2026, 1, 2, tzinfo=timezone.utc)

        assert not apply_daily_loss_reset(state, now, DailyLossReset.NEVER)
        assert state.daily_loss == 5.0

    def test_first_call_records_day(self):
        state = BotState(symbol="BTCUSDT", balance=10.0, daily_loss=5.0)
        now = datetime(2026, 1, 2, 8, tzinfo=timezone.utc)

        assert not apply_daily_loss_reset(state, now, DailyLossReset.UTC_DAY)
        assert state.daily_loss_day == date(2026, 1, 2)
        assert state.daily_loss == 5.0

    def test_new_day_clears_counter(self):
        state = BotState(symbol="BTCUSDT", balance=10.0, daily_loss=5.0,
                         daily_loss_day=date(2026, 1, 1))
        now = datetime(2026, 1, 2, 0, 0, 1, tzinfo=timezone.utc)

        assert apply_daily_loss_reset(state, now, DailyLossReset.UTC_DAY)
        assert state.daily_loss == 0.0
        assert state.daily_loss_day == date(2026, 1, 2)

    def test_same_day_keeps_counter(self):
        state = BotState(symbol="BTCUSDT", balance=10.0, daily_loss=5.0,
                         daily_loss_day=date(2026, 1, 2))
        now = datetime(2026, 1, 2, 23, 59, tzinfo=timezone.utc)

        assert not apply_daily_loss_reset(state, now, DailyLossReset.UTC_DAY)
        assert state.daily_loss == 5.0
