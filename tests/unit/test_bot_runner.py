"""
Unit tests for the polling runner.
"""

import pytest

from ladder_dca.bot_runner import BotRunner
from ladder_dca.config.models import TradingConfig
from ladder_dca.engine import DecisionEngine
from ladder_dca.exchange import ExchangeError
from ladder_dca.price_feed import PriceFeed, PriceTick


class ScriptedFeed(PriceFeed):
    """Feed that replays prices; exceptions in the script are raised."""

    def __init__(self, script):
        self._script = list(script)

    def next_tick(self) -> PriceTick:
        item = self._script.pop(0)
        if isinstance(item, Exception):
            raise item
        return PriceTick(price=item)


class TestBotRunner:
    """Test BotRunner class."""

    @pytest.fixture
    def engine(self, ladder_config, clock):
        engine = DecisionEngine(ladder_config.model_copy(update={"polling_interval_ms": 250}), clock=clock)
        engine.resume()
        return engine

    def test_paused_engine_not_run(self, ladder_config, clock):
        engine = DecisionEngine(ladder_config, clock=clock)
        sleeps = []
        result = BotRunner(engine, ScriptedFeed([100.0]), sleep=sleeps.append).run(5)

        assert result.ticks_processed == 0
        assert result.stopped_by_pause
        assert sleeps == []

    def test_counts_buys_and_sells(self, engine):
        sleeps = []
        feed = ScriptedFeed([100.0, 98.0, 102.0])

        result = BotRunner(engine, feed, sleep=sleeps.append).run(3)

        assert result.ticks_processed == 3
        # 100 and 98 buy; 102 closes both and re-enters
        assert result.buys == 3
        assert result.sells == 2
        assert result.errors == 0
        assert not result.stopped_by_pause
        assert sleeps == [0.25, 0.25]
        assert len(result.final_state.positions) == 1

    def test_feed_errors_counted(self, engine):
        sleeps = []
        feed = ScriptedFeed([ExchangeError("timeout"), 100.0, ValueError("no data")])

        result = BotRunner(engine, feed, sleep=sleeps.append).run(3)

        assert result.feed_errors == 2
        assert result.ticks_processed == 1
        assert result.buys == 1

    def test_stops_when_engine_pauses(self, clock):
        config = TradingConfig(initial_capital=1000.0, allocation_rate=0.5, dip_trigger_percent=50.0,
                               take_profit_percent=50.0, enable_stop_loss=False)
        engine = DecisionEngine(config, clock=clock)
        engine.resume()
        feed = ScriptedFeed([100.0, 60.0, 100.0, 100.0])

        result = BotRunner(engine, feed, sleep=lambda s: None).run(4)

        assert result.stopped_by_pause
        assert result.ticks_processed == 2
        assert result.sells == 1
        assert result.final_state.is_paused
