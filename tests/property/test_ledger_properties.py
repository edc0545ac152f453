"""
Property-based tests for ledger accounting under random price paths.
"""

import math
from datetime import datetime, timedelta, timezone

from hypothesis import given, settings, strategies as st

from ladder_dca.config.models import TradingConfig
from ladder_dca.engine import DecisionEngine


price_paths = st.lists(
    st.floats(min_value=50.0, max_value=150.0, allow_nan=False, allow_infinity=False),
    min_size=1,
    max_size=40,
)


def make_clock():
    current = [datetime(2026, 1, 1, tzinfo=timezone.utc)]

    def clock():
        current[0] = current[0] + timedelta(seconds=1)
        return current[0]

    return clock


def run_engine(config: TradingConfig, prices):
    engine = DecisionEngine(config, clock=make_clock())
    engine.resume()
    states = [engine.tick(price) for price in prices]
    return engine, states


class TestLedgerProperties:
    """Property-based tests for balance and lot accounting."""

    @given(
        prices=price_paths,
        allocation_rate=st.floats(min_value=0.01, max_value=1.0),
        stop_loss=st.booleans(),
    )
    @settings(max_examples=60, deadline=None)
    def test_balance_conservation(self, prices, allocation_rate, stop_loss):
        """
        Free balance always equals initial capital minus capital in open lots
        plus realized P&L, and never goes negative.
        """
        config = TradingConfig(initial_capital=1000.0, allocation_rate=allocation_rate,
                               enable_stop_loss=stop_loss, enable_global_drawdown=False)
        _, states = run_engine(config, prices)

        for state in states:
            deployed = sum(lot.invested for lot in state.positions)
            assert state.balance >= 0
            assert math.isclose(state.balance, 1000.0 - deployed + state.realized_pnl,
                                rel_tol=1e-9, abs_tol=1e-6)
            assert math.isclose(state.realized_pnl, sum(lot.pnl for lot in state.history),
                                rel_tol=1e-9, abs_tol=1e-6)

    @given(prices=price_paths)
    @settings(max_examples=60, deadline=None)
    def test_open_lots_within_cap(self, prices):
        """The number of open lots never exceeds the configured cap."""
        config = TradingConfig(max_dca_levels=3, enable_stop_loss=False, enable_global_drawdown=False)
        _, states = run_engine(config, prices)

        for state in states:
            assert len(state.positions) <= 3

    @given(prices=price_paths)
    @settings(max_examples=60, deadline=None)
    def test_new_lots_only_on_dips(self, prices):
        """Each new lot opens at least the dip percentage below the previous latest lot."""
        config = TradingConfig(dip_trigger_percent=2.0, take_profit_percent=500.0,
                               enable_stop_loss=False, enable_global_drawdown=False)
        _, states = run_engine(config, prices)

        entries = [lot.entry_price for lot in states[-1].positions]
        for previous, current in zip(entries, entries[1:]):
            assert current <= previous * 0.98 * (1 + 1e-9)

    @given(prices=price_paths)
    @settings(max_examples=60, deadline=None)
    def test_closed_lots_hit_their_targets(self, prices):
        """Every closed lot exited at or beyond its take-profit or stop-loss."""
        config = TradingConfig(enable_global_drawdown=False)
        _, states = run_engine(config, prices)

        for lot in states[-1].history:
            hit_tp = lot.exit_price >= lot.tp_price * (1 - 1e-9)
            hit_sl = lot.sl_price is not None and lot.exit_price <= lot.sl_price * (1 + 1e-9)
            assert hit_tp or hit_sl

    @given(prices=price_paths)
    @settings(max_examples=40, deadline=None)
    def test_paused_engine_ignores_ticks(self, prices):
        """Ticks against a paused engine leave the state untouched."""
        engine = DecisionEngine(TradingConfig(), clock=make_clock())
        before = engine.get_state()

        for price in prices:
            assert engine.tick(price) == before

    @given(prices=price_paths)
    @settings(max_examples=40, deadline=None)
    def test_peak_equity_never_decreases(self, prices):
        config = TradingConfig(enable_global_drawdown=False)
        _, states = run_engine(config, prices)

        peaks = [state.peak_equity for state in states]
        assert all(a <= b for a, b in zip(peaks, peaks[1:]))
