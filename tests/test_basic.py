"""
Basic test to verify the testing framework is working.
"""

import pytest
from pydantic import ValidationError

from ladder_dca.config.models import DailyLossReset, ExchangeProvider, TradingConfig


def test_trading_config_creation():
    """Test that TradingConfig can be created with defaults."""
    config = TradingConfig()

    assert config.symbol == "BTCUSDT"
    assert config.initial_capital == 100.0
    assert config.allocation_rate == 0.05
    assert config.dip_trigger_percent == 2.0
    assert config.take_profit_percent == 2.0
    assert config.enable_stop_loss is True
    assert config.stop_loss_percent == 10.0
    assert config.max_dca_levels == 20
    assert config.use_dynamic_dca_levels is False
    assert config.max_drawdown_percent == 20.0
    assert config.max_daily_loss_limit is None
    assert config.daily_loss_reset == DailyLossReset.NEVER
    assert config.polling_interval_ms == 1000
    assert config.exchange == ExchangeProvider.SIMULATED
    assert config.is_live_mode is False


def test_trading_config_validation():
    """Test that TradingConfig validates input parameters."""
    config = TradingConfig(
        symbol="ETHUSDT",
        initial_capital=2500.0,
        allocation_rate=0.1,
        dip_trigger_percent=3.5,
        take_profit_percent=4.0,
    )

    assert config.symbol == "ETHUSDT"
    assert config.initial_capital == 2500.0
    assert config.allocation_rate == 0.1
    assert config.dip_trigger_percent == 3.5
    assert config.take_profit_percent == 4.0

    with pytest.raises(ValidationError):
        TradingConfig(allocation_rate=1.5)

    with pytest.raises(ValidationError):
        TradingConfig(is_live_mode=True, exchange=ExchangeProvider.SIMULATED)
