"""
Performance summary of a bot state.
"""

import logging
from typing import Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from ..ledger import PositionLedger
from ..models import BotState


logger = logging.getLogger(__name__)


class PerformanceReport(BaseModel):
    """Model for a point-in-time performance summary."""

    model_config = ConfigDict(validate_assignment=True)

    symbol: str
    current_price: float = Field(ge=0.0)
    balance: float = Field(ge=0.0)
    equity: float
    peak_equity: float = Field(ge=0.0)
    drawdown: float = Field(ge=0.0)
    open_lots: int = Field(ge=0)
    capital_deployed: float = Field(ge=0.0)
    unrealized_pnl: float
    realized_pnl: float
    closed_lots: int = Field(ge=0)
    winning_lots: int = Field(ge=0)
    win_rate: Optional[float] = None
    average_pnl: Optional[float] = None
    best_pnl: Optional[float] = None
    worst_pnl: Optional[float] = None
    average_holding_seconds: Optional[float] = None


class PerformanceAnalyzer:
    """Builds performance reports from the ledger."""

    def history_frame(self, state: BotState) -> pd.DataFrame:
        """
        Closed lots as a DataFrame, oldest exit first.

        Returns:
            DataFrame with one row per closed lot
        """
        columns = ['lot_id', 'entry_time', 'exit_time', 'entry_price', 'exit_price',
                   'quantity', 'invested', 'pnl']
        if not state.history:
            return pd.DataFrame(columns=columns)

        df = pd.DataFrame([lot.model_dump(include=set(columns)) for lot in state.history])
        df = df[columns]
        df['entry_time'] = pd.to_datetime(df['entry_time'], utc=True)
        df['exit_time'] = pd.to_datetime(df['exit_time'], utc=True)
        return df.sort_values('exit_time').reset_index(drop=True)

    def summarize(self, state: BotState, current_price: Optional[float] = None) -> PerformanceReport:
        """
        Summarize equity, open exposure and closed-lot statistics.

        Args:
            state: Bot state snapshot
            current_price: Mark price for open lots (defaults to the state's)

        Returns:
            PerformanceReport
        """
        price = state.current_price if current_price is None else current_price

        ledger = PositionLedger(state)
        equity = ledger.equity(price)
        peak = max(state.peak_equity, equity)
        drawdown = (peak - equity) / peak if peak > 0 else 0.0

        report = PerformanceReport(
            symbol=state.symbol,
            current_price=price,
            balance=state.balance,
            equity=equity,
            peak_equity=peak,
            drawdown=drawdown,
            open_lots=len(state.positions),
            capital_deployed=ledger.invested_in_open_lots(),
            unrealized_pnl=ledger.unrealized_pnl(price),
            realized_pnl=state.realized_pnl,
            closed_lots=len(state.history),
            winning_lots=0,
        )

        history = self.history_frame(state)
        if history.empty:
            return report

        pnl = history['pnl'].astype(float)
        holding = (history['exit_time'] - history['entry_time']).dt.total_seconds()

        report.winning_lots = int((pnl > 0).sum())
        report.win_rate = float((pnl > 0).mean())
        report.average_pnl = float(pnl.mean())
        report.best_pnl = float(pnl.max())
        report.worst_pnl = float(pnl.min())
        report.average_holding_seconds = float(holding.mean())

        logger.debug(f"Summarized {len(history)} closed lots for {state.symbol}")
        return report
