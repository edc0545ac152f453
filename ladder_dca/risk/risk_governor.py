"""
Risk governor: drawdown, daily-loss and lot-cap evaluation.
"""

import logging
import math
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, ConfigDict

from ..config.models import DailyLossReset, TradingConfig
from ..ledger.position_ledger import PositionLedger

if TYPE_CHECKING:
    from ..models import BotState


logger = logging.getLogger(__name__)

# Relative tolerance for price and ratio boundaries
BOUNDARY_REL_TOL = 1e-9


def at_or_above(value: float, threshold: float) -> bool:
    """Inclusive ``value >= threshold`` that absorbs binary rounding error."""
    return value >= threshold or math.isclose(value, threshold, rel_tol=BOUNDARY_REL_TOL)


def at_or_below(value: float, threshold: float) -> bool:
    """Inclusive ``value <= threshold`` that absorbs binary rounding error."""
    return value <= threshold or math.isclose(value, threshold, rel_tol=BOUNDARY_REL_TOL)


class LiquidationReason(str, Enum):
    """Why every open lot was closed at market."""

    GLOBAL_DRAWDOWN_TRIGGERED = "GLOBAL_DRAWDOWN_TRIGGERED"
    DAILY_LOSS_LIMIT_REACHED = "DAILY_LOSS_LIMIT_REACHED"
    MANUAL_EMERGENCY_STOP = "MANUAL_EMERGENCY_STOP"


class RiskAction(str, Enum):
    CONTINUE = "CONTINUE"
    LIQUIDATE_AND_PAUSE = "LIQUIDATE_AND_PAUSE"


class RiskVerdict(BaseModel):
    """Outcome of a risk evaluation for one tick."""

    model_config = ConfigDict(frozen=True)

    action: RiskAction
    reason: Optional[LiquidationReason] = None
    equity: float
    peak_equity: float
    drawdown: float

    @property
    def should_liquidate(self) -> bool:
        return self.action == RiskAction.LIQUIDATE_AND_PAUSE


def effective_max_levels(equity: float, config: TradingConfig) -> int:
    """
    Cap on simultaneously open lots.

    Either the fixed ``max_dca_levels`` or, with dynamic sizing,
    ``floor(equity * dca_levels_equity_percent / 100)`` clamped to at least 1.
    """
    if not config.use_dynamic_dca_levels:
        return config.max_dca_levels
    if not math.isfinite(equity) or equity <= 0:
        return 1
    return max(1, math.floor(equity * (config.dca_levels_equity_percent / 100)))


def apply_daily_loss_reset(state: "BotState", now: datetime, policy: DailyLossReset) -> bool:
    """
    Clear the daily loss counter when the reset policy says a new day began.

    Returns:
        True if the counter was reset
    """
    if policy == DailyLossReset.NEVER:
        return False

    today = now.date()
    if state.daily_loss_day is None:
        state.daily_loss_day = today
        return False
    if state.daily_loss_day == today:
        return False

    logger.info(f"New trading day {today}: clearing daily loss of {state.daily_loss:.2f}")
    state.daily_loss = 0.0
    state.daily_loss_day = today
    return True


class RiskGovernor:
    """Decides, once per tick, whether trading may continue."""

    def evaluate(self, ledger: PositionLedger, config: TradingConfig, price: float) -> RiskVerdict:
        """
        Evaluate global drawdown and the daily loss cap at ``price``.

        Peak equity is raised to the current equity even when no breach
        is found.

        Args:
            ledger: Ledger of the traded symbol
            config: Active configuration
            price: Current market price

        Returns:
            RiskVerdict telling the engine to continue or liquidate
        """
        state = ledger.state
        equity = ledger.equity(price)
        if equity > state.peak_equity:
            state.peak_equity = equity

        peak = state.peak_equity
        drawdown = (peak - equity) / peak if peak > 0 else 0.0

        reason: Optional[LiquidationReason] = None
        if config.enable_global_drawdown and at_or_above(drawdown, config.max_drawdown_percent / 100):
            reason = LiquidationReason.GLOBAL_DRAWDOWN_TRIGGERED
            logger.warning(
                f"Drawdown {drawdown:.2%} reached limit {config.max_drawdown_percent:.2f}% "
                f"(equity {equity:.2f}, peak {peak:.2f})"
            )
        elif (config.max_daily_loss_limit is not None
              and at_or_above(state.daily_loss, config.max_daily_loss_limit)):
            reason = LiquidationReason.DAILY_LOSS_LIMIT_REACHED
            logger.warning(
                f"Daily loss {state.daily_loss:.2f} reached limit {config.max_daily_loss_limit:.2f}"
            )

        return RiskVerdict(
            action=RiskAction.CONTINUE if reason is None else RiskAction.LIQUIDATE_AND_PAUSE,
            reason=reason,
            equity=equity,
            peak_equity=peak,
            drawdown=drawdown,
        )
