"""
Decision engine implementation for the ladder DCA strategy.
"""

import logging
import math
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Union

from ..audit import AuditAction, AuditLog
from ..config import ConfigurationError, ConfigurationManager, TradingConfig
from ..exchange import (
    ExchangeAuthenticationError,
    ExchangeError,
    ExchangePort,
    create_exchange,
    needs_new_exchange,
)
from ..ledger import Lot, PositionLedger
from ..models import BotState
from ..persistence import StateManager
from ..risk import (
    LiquidationReason,
    RiskGovernor,
    apply_daily_loss_reset,
    at_or_above,
    at_or_below,
    effective_max_levels,
)


logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class DecisionEngine:
    """
    Runs the ladder DCA strategy for one trading symbol.

    The engine exclusively owns the ledger. Each ``tick`` evaluates risk,
    closes lots that hit take-profit or stop-loss (oldest first), then
    considers opening a new lot. Ticks and control operations are
    serialized behind a lock; ``get_state`` reads the last published
    snapshot without waiting for an in-flight tick.
    """

    def __init__(
        self,
        config: TradingConfig,
        exchange: Optional[ExchangePort] = None,
        state_store: Optional[StateManager] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Strategy configuration
            exchange: Exchange port (optional, built from config if None)
            state_store: Persistence collaborator; when given, saved state
                for the symbol is loaded and every change is saved back
            clock: Source of timestamps (defaults to UTC now)
        """
        self._config_manager = ConfigurationManager()
        self._config = self._config_manager.validate_config(config)
        self._owns_exchange = exchange is None
        self._exchange = exchange if exchange is not None else create_exchange(self._config)
        self._state_store = state_store
        self._clock = clock or _utc_now
        self._risk_governor = RiskGovernor()
        self._lock = threading.RLock()

        state = state_store.load_state(self._config.symbol) if state_store is not None else None
        if state is None:
            state = self._fresh_state()
        else:
            logger.info(f"Resumed saved state for {self._config.symbol}: "
                        f"balance {state.balance:.2f}, {len(state.positions)} open lots")
        self._bind(state)
        self._publish()

        logger.info(f"Decision engine initialized for {self._config.symbol} "
                    f"on {self._exchange.provider.value}")

    @property
    def config(self) -> TradingConfig:
        return self._config.model_copy(deep=True)

    @property
    def exchange(self) -> ExchangePort:
        return self._exchange

    @property
    def is_paused(self) -> bool:
        return self._snapshot.is_paused

    def get_state(self) -> BotState:
        """Get a deep copy of the last published state."""
        return self._snapshot.model_copy(deep=True)

    def tick(self, price: float) -> BotState:
        """
        Process one price update.

        Args:
            price: Current market price, finite and positive

        Returns:
            Snapshot of the state after the tick
        """
        with self._lock:
            state = self._state
            config = self._config

            if state.is_paused or config.emergency_stop:
                return self.get_state()

            if config.is_live_mode and not state.is_connected:
                state.is_paused = True
                self._audit.record(AuditAction.ERROR, "Live mode connection lost. Bot paused.")
                return self._commit()

            if not self._is_valid_price(price):
                self._audit.record(AuditAction.ERROR, f"Rejected invalid price {price!r}")
                return self._commit()

            if apply_daily_loss_reset(state, self._clock(), config.daily_loss_reset):
                self._audit.record(AuditAction.SYSTEM, "Daily loss counter reset")

            state.current_price = price
            state.effective_max_levels = effective_max_levels(self._ledger.equity(price), config)

            verdict = self._risk_governor.evaluate(self._ledger, config, price)
            if verdict.should_liquidate:
                self._close_all(verdict.reason.value, price)
                state.is_paused = True
                return self._commit()

            self._process_exits(price)
            if not state.is_paused:
                self._process_entries(price)

            return self._commit()

    def pause(self) -> BotState:
        """Stop processing ticks until resumed."""
        with self._lock:
            self._state.is_paused = True
            self._audit.record(AuditAction.SYSTEM, "Bot paused")
            return self._commit()

    def resume(self) -> BotState:
        """Resume processing ticks."""
        with self._lock:
            self._state.is_paused = False
            self._audit.record(AuditAction.SYSTEM, "Bot resumed")
            return self._commit()

    def update_config(self, config: Union[TradingConfig, Dict[str, Any]]) -> BotState:
        """
        Validate and apply a new configuration; it takes effect on the next tick.

        Raises:
            ConfigurationError: If the configuration is invalid; the prior
                configuration stays active.
        """
        validated = self._config_manager.validate_config(config)
        if validated.symbol != self._config.symbol:
            raise ConfigurationError(
                f"Engine trades {self._config.symbol}; create a new engine for {validated.symbol}"
            )

        with self._lock:
            self._config = validated
            if self._owns_exchange and (self._exchange.is_simulated
                                        or needs_new_exchange(self._exchange, validated)):
                self._exchange = create_exchange(validated)
            self._audit.record(AuditAction.SYSTEM, "Configuration updated")
            self._connect()
            return self._commit()

    def connect(self) -> bool:
        """
        Authenticate with the exchange and record connectivity.

        Returns:
            True if the exchange is connected
        """
        with self._lock:
            self._connect()
            self._commit()
            return self._state.is_connected

    def liquidate_all(self, reason: Union[str, LiquidationReason] = LiquidationReason.MANUAL_EMERGENCY_STOP,
                      price: Optional[float] = None) -> BotState:
        """
        Close every open lot at market and pause.

        Lots whose sell fails stay open and are reported as errors. When no
        price is known at all the lots are left open and an error is
        recorded.

        Args:
            reason: Recorded with the closure
            price: Reference price for the sells; defaults to the last
                tick's price, then the last traded price in the audit
                log, then the exchange quote
        """
        if isinstance(reason, LiquidationReason):
            reason = reason.value

        with self._lock:
            if not self._state.positions:
                self._audit.record(AuditAction.SYSTEM, f"Emergency closure: {reason}")
            else:
                if price is None or not self._is_valid_price(price):
                    price = self._liquidation_price()
                if price is not None:
                    self._close_all(reason, price)

            self._state.is_paused = True
            return self._commit()

    def reset(self) -> BotState:
        """Discard the ledger and start again from the configured capital."""
        with self._lock:
            logger.warning(f"Resetting state for {self._config.symbol}")
            self._bind(self._fresh_state())
            return self._commit()

    def _process_exits(self, price: float) -> None:
        """Close lots at take-profit or stop-loss, oldest entry first."""
        config = self._config
        for lot in self._ledger.fifo_positions():
            if self._state.is_paused:
                break
            if at_or_above(price, lot.tp_price):
                self._execute_sell(lot, price, "take profit")
            elif config.enable_stop_loss and lot.sl_price is not None and at_or_below(price, lot.sl_price):
                self._execute_sell(lot, price, "stop loss")

    def _process_entries(self, price: float) -> None:
        """Open a new lot on the first tick or after a dip below the latest entry."""
        config = self._config
        state = self._state

        if not config.enable_dca:
            return
        if len(state.positions) >= state.effective_max_levels:
            return

        # The dip is measured from the most recently opened lot, not the lowest entry
        latest = self._ledger.latest_position()
        if latest is not None:
            dip_threshold = latest.entry_price * (1 - config.dip_trigger_percent / 100)
            if not at_or_below(price, dip_threshold):
                return

        order_amount = state.balance * config.allocation_rate
        try:
            min_notional = max(config.min_notional, self._exchange.min_notional(config.symbol))
        except ExchangeError as e:
            self._audit.record(AuditAction.ERROR, f"Could not read min notional: {e}", price=price)
            return

        if order_amount < min_notional:
            self._audit.record(
                AuditAction.SKIP,
                f"Order below min notional ({min_notional:g})",
                price=price,
                amount=order_amount,
            )
            return
        if state.balance < order_amount:
            return

        self._execute_buy(price, order_amount)

    def _execute_buy(self, price: float, amount: float) -> Optional[Lot]:
        try:
            fill = self._exchange.market_buy(self._config.symbol, amount, price)
        except (ExchangeError, ValueError) as e:
            self._audit.record(AuditAction.ERROR, f"Buy failed: {e}", price=price, amount=amount)
            if isinstance(e, ExchangeAuthenticationError):
                self._lose_connection()
            return None

        lot = self._ledger.open_lot(fill, amount, self._config, self._clock())
        self._audit.record(
            AuditAction.BUY,
            "DCA buy executed",
            price=lot.entry_price,
            quantity=lot.quantity,
            amount=amount,
        )
        return lot

    def _execute_sell(self, lot: Lot, price: float, reason: str) -> Optional[Lot]:
        try:
            fill = self._exchange.market_sell(self._config.symbol, lot.quantity, price)
        except (ExchangeError, ValueError) as e:
            self._audit.record(AuditAction.ERROR, f"Sell failed: {e}", price=price, quantity=lot.quantity)
            if isinstance(e, ExchangeAuthenticationError):
                self._lose_connection()
            return None

        closed = self._ledger.close_lot(lot, fill, self._clock())
        self._audit.record(
            AuditAction.SELL,
            f"Position closed by {reason} (PnL: ${closed.pnl:.2f})",
            price=closed.exit_price,
            quantity=closed.quantity,
            amount=fill.proceeds,
        )
        return closed

    def _liquidation_price(self) -> Optional[float]:
        if self._state.current_price > 0:
            return self._state.current_price

        traded = self._audit.last_traded_price()
        if traded is not None:
            return traded

        try:
            return self._exchange.fetch_price(self._config.symbol)
        except ExchangeError as e:
            self._audit.record(
                AuditAction.ERROR,
                f"Cannot price liquidation, {len(self._state.positions)} lots left open: {e}",
            )
            return None

    def _lose_connection(self) -> None:
        """Mark the venue unreachable; live trading pauses at once."""
        if not self._state.is_connected:
            return
        self._state.is_connected = False
        if self._config.is_live_mode:
            self._state.is_paused = True
            self._audit.record(AuditAction.ERROR, "Live mode connection lost. Bot paused.")

    def _close_all(self, reason: str, price: float) -> None:
        self._audit.record(AuditAction.SYSTEM, f"Emergency closure: {reason}")
        for lot in self._ledger.fifo_positions():
            self._execute_sell(lot, price, reason)

    def _connect(self) -> None:
        if self._exchange.is_simulated:
            self._state.is_connected = True
            return

        try:
            connected = self._exchange.authenticate(self._config.credentials)
            error = None
        except ExchangeError as e:
            connected = False
            error = e

        self._state.is_connected = connected
        if not connected:
            detail = f": {error}" if error else ""
            self._audit.record(
                AuditAction.ERROR,
                f"Could not connect to {self._exchange.provider.value}{detail}",
            )

    def _fresh_state(self) -> BotState:
        config = self._config
        return BotState(
            symbol=config.symbol,
            balance=config.initial_capital,
            peak_equity=config.initial_capital,
            effective_max_levels=effective_max_levels(config.initial_capital, config),
            is_paused=True,
            is_connected=self._exchange.is_simulated,
        )

    def _bind(self, state: BotState) -> None:
        self._state = state
        self._ledger = PositionLedger(state)
        self._audit = AuditLog(state.logs, state.symbol, clock=self._clock)

    def _commit(self) -> BotState:
        """Persist the state, publish a fresh snapshot and return a copy of it."""
        if self._state_store is not None and not self._state_store.save_state(self._state):
            logger.error(f"State for {self._config.symbol} was not persisted")
        self._publish()
        return self.get_state()

    def _publish(self) -> None:
        self._snapshot = self._state.model_copy(deep=True)

    @staticmethod
    def _is_valid_price(price: Any) -> bool:
        if isinstance(price, bool) or not isinstance(price, (int, float)):
            return False
        return math.isfinite(price) and price > 0
