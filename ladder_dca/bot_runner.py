"""
Polling loop that feeds prices to the decision engine.
"""

import logging
import time
from typing import Callable, Optional, List

from .audit import AuditAction, AuditEvent
from .engine import DecisionEngine
from .exchange import ExchangeError
from .models import BotState
from .price_feed import PriceFeed

logger = logging.getLogger(__name__)


class RunResult:
    """Result of a bot run."""

    def __init__(
        self,
        ticks_processed: int,
        feed_errors: int,
        buys: int,
        sells: int,
        errors: int,
        stopped_by_pause: bool,
        final_state: BotState
    ):
        self.ticks_processed = ticks_processed
        self.feed_errors = feed_errors
        self.buys = buys
        self.sells = sells
        self.errors = errors
        self.stopped_by_pause = stopped_by_pause
        self.final_state = final_state


class BotRunner:
    """Pulls one price per polling interval and ticks the engine with it."""

    def __init__(self, engine: DecisionEngine, feed: PriceFeed,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the runner.

        Args:
            engine: Engine to drive
            feed: Source of prices
            sleep: Sleep function, replaceable in tests
        """
        self.engine = engine
        self.feed = feed
        self._sleep = sleep

    def run(self, max_ticks: Optional[int] = None) -> RunResult:
        """
        Run until ``max_ticks`` ticks were processed or the engine pauses.

        Ticks run strictly one after another; the next price is fetched
        only once the previous tick has finished.

        Args:
            max_ticks: Stop after this many iterations (None runs forever)

        Returns:
            Counts of what happened during the run
        """
        ticks = feed_errors = buys = sells = errors = 0
        stopped_by_pause = False

        state = self.engine.get_state()
        if state.is_paused:
            logger.warning(f"Engine for {state.symbol} is paused; nothing to run")
            return RunResult(0, 0, 0, 0, 0, True, state)

        logger.info(f"Starting bot for {state.symbol}")
        iterations = 0
        while max_ticks is None or iterations < max_ticks:
            iterations += 1
            last_seen = state.logs[0].event_id if state.logs else None

            try:
                tick = self.feed.next_tick()
            except (ExchangeError, ValueError, OSError) as e:
                feed_errors += 1
                logger.warning(f"Price feed failed: {e}")
                self._pause_between_ticks()
                continue

            state = self.engine.tick(tick.price)
            ticks += 1

            for event in self._new_events(state.logs, last_seen):
                if event.action == AuditAction.BUY:
                    buys += 1
                elif event.action == AuditAction.SELL:
                    sells += 1
                elif event.action == AuditAction.ERROR:
                    errors += 1

            if state.is_paused:
                stopped_by_pause = True
                logger.warning(f"Engine paused itself after tick at {tick.price}")
                break

            if max_ticks is None or iterations < max_ticks:
                self._pause_between_ticks()

        logger.info(f"Run finished: {ticks} ticks, {buys} buys, {sells} sells, {errors} errors")
        return RunResult(ticks, feed_errors, buys, sells, errors, stopped_by_pause, state)

    def _pause_between_ticks(self) -> None:
        self._sleep(self.engine.config.polling_interval_ms / 1000)

    @staticmethod
    def _new_events(events: List[AuditEvent], last_seen: Optional[str]) -> List[AuditEvent]:
        new = []
        for event in events:
            if event.event_id == last_seen:
                break
            new.append(event)
        return new
