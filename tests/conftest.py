"""
Shared fixtures for the ladder DCA test suite.
"""

import shutil
import tempfile
from datetime import datetime, timedelta, timezone

import pytest

from ladder_dca.config.models import ExchangeProvider, TradingConfig
from ladder_dca.exchange import ExchangeAuthenticationError, ExchangeError, SimulatedExchange


class StepClock:
    """Deterministic clock that advances one second per reading."""

    def __init__(self, start: datetime = datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc),
                 step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + self.step
        return now

    def advance(self, delta: timedelta) -> None:
        self.current = self.current + delta


class FlakyExchange(SimulatedExchange):
    """Simulated exchange whose orders can be made to fail on demand."""

    def __init__(self, provider: ExchangeProvider = ExchangeProvider.SIMULATED,
                 authenticates: bool = True, **kwargs):
        super().__init__(**kwargs)
        self.provider = provider
        self.authenticates = authenticates
        self.fail_buys = False
        self.fail_sells = False
        self.revoke_keys = False
        self.buy_calls = 0
        self.sell_calls = 0

    def authenticate(self, credentials) -> bool:
        return self.authenticates

    def market_buy(self, symbol, quote_amount, reference_price):
        self.buy_calls += 1
        if self.revoke_keys:
            raise ExchangeAuthenticationError("API key revoked")
        if self.fail_buys:
            raise ExchangeError("insufficient liquidity")
        return super().market_buy(symbol, quote_amount, reference_price)

    def market_sell(self, symbol, quantity, reference_price):
        self.sell_calls += 1
        if self.revoke_keys:
            raise ExchangeAuthenticationError("API key revoked")
        if self.fail_sells:
            raise ExchangeError("venue unavailable")
        return super().market_sell(symbol, quantity, reference_price)


@pytest.fixture
def clock():
    """Clock that advances one second per reading."""
    return StepClock()


@pytest.fixture
def temp_state_dir():
    """Create a temporary state directory for testing."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir)


@pytest.fixture
def ladder_config():
    """Configuration of the reference ladder: 100 capital, 5% per buy, 2% dip, 2% TP."""
    return TradingConfig(
        symbol="BTCUSDT",
        initial_capital=100.0,
        allocation_rate=0.05,
        dip_trigger_percent=2.0,
        take_profit_percent=2.0,
        enable_stop_loss=False,
        max_dca_levels=20,
        min_notional=1.0,
    )


@pytest.fixture
def flaky_exchange():
    """Simulated exchange with switchable failures."""
    return FlakyExchange()
