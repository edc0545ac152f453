"""
Position ledger: the only code that changes balances and lot sets.
"""

import logging
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from ..config.models import TradingConfig
from ..exchange.models import BuyFill, SellFill
from .models import Lot, LotStatus, StopLossArmed, StopLossDisabled

if TYPE_CHECKING:
    from ..models import BotState


logger = logging.getLogger(__name__)


class PositionLedger:
    """Keeps open lots, closed-lot history and realized P&L for a BotState."""

    def __init__(self, state: "BotState"):
        self.state = state

    @property
    def balance(self) -> float:
        return self.state.balance

    @property
    def positions(self) -> List[Lot]:
        return self.state.positions

    def open_lot(self, fill: BuyFill, invested: float, config: TradingConfig,
                 opened_at: datetime) -> Lot:
        """
        Record a filled buy as a new open lot.

        Take-profit and stop-loss prices are derived from the fill price,
        not the price the order was placed at.

        Args:
            fill: Fill returned by the exchange
            invested: Quote currency spent on the order
            config: Configuration active when the lot is opened
            opened_at: Entry timestamp

        Returns:
            The new open lot
        """
        if invested <= 0:
            raise ValueError(f"Invested amount must be positive, got {invested}")
        if invested > self.state.balance:
            raise ValueError(
                f"Cannot invest {invested:.8f} with a balance of {self.state.balance:.8f}"
            )

        entry_price = fill.fill_price
        if config.enable_stop_loss:
            stop_loss = StopLossArmed(price=entry_price * (1 - config.stop_loss_percent / 100))
        else:
            stop_loss = StopLossDisabled()

        lot = Lot(
            lot_id=fill.order_id,
            symbol=config.symbol,
            exchange=config.exchange.value,
            entry_time=opened_at,
            entry_price=entry_price,
            quantity=fill.filled_quantity,
            invested=invested,
            tp_price=entry_price * (1 + config.take_profit_percent / 100),
            stop_loss=stop_loss,
        )

        self.state.balance = self.state.balance - invested
        self.state.positions.append(lot)

        logger.debug(f"Opened lot {lot.lot_id}: {lot.quantity:.8f} @ {lot.entry_price:.8f}")
        return lot

    def close_lot(self, lot: Lot, fill: SellFill, closed_at: datetime) -> Lot:
        """
        Close an open lot with the proceeds of a filled sell.

        Returns:
            The closed lot, now at the head of the history
        """
        index = self._index_of(lot)
        closed = self.state.positions[index].closed(closed_at, fill.fill_price, fill.proceeds)

        del self.state.positions[index]
        self.state.balance = self.state.balance + fill.proceeds
        self.state.realized_pnl += closed.pnl
        if closed.pnl < 0:
            self.state.daily_loss += abs(closed.pnl)
        self.state.history.insert(0, closed)

        logger.debug(f"Closed lot {closed.lot_id}: pnl {closed.pnl:.8f}")
        return closed

    def fifo_positions(self) -> List[Lot]:
        """Open lots, oldest entry first."""
        return sorted(self.state.positions, key=lambda lot: lot.entry_time)

    def latest_position(self) -> Optional[Lot]:
        """The most recently opened lot, or None if nothing is open."""
        if not self.state.positions:
            return None
        return self.fifo_positions()[-1]

    def market_value(self, price: float) -> float:
        return sum(lot.market_value(price) for lot in self.state.positions)

    def equity(self, price: float) -> float:
        """Free balance plus open lots marked to ``price``."""
        return self.state.balance + self.market_value(price)

    def unrealized_pnl(self, price: float) -> float:
        return sum(lot.market_value(price) - lot.invested for lot in self.state.positions)

    def invested_in_open_lots(self) -> float:
        return sum(lot.invested for lot in self.state.positions)

    def _index_of(self, lot: Lot) -> int:
        for i, candidate in enumerate(self.state.positions):
            if candidate.lot_id == lot.lot_id and candidate.status == LotStatus.OPEN:
                return i
        raise ValueError(f"Lot {lot.lot_id} is not open")
