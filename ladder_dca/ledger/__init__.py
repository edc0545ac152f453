"""
Position ledger module.

This module holds the open lots and closed-lot history of the bot and is
the single place where balance and realized P&L change.
"""

from .models import Lot, LotStatus, StopLossArmed, StopLossDisabled
from .position_ledger import PositionLedger

__all__ = ["Lot", "LotStatus", "StopLossArmed", "StopLossDisabled", "PositionLedger"]
