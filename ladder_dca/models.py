"""
Shared data models for the ladder DCA bot.
"""

from datetime import date, datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .audit.models import AuditEvent
from .ledger.models import Lot


class BotState(BaseModel):
    """Model for the ledger and control flags of one traded symbol."""

    model_config = ConfigDict(validate_assignment=True)

    symbol: str
    balance: float = Field(ge=0.0)
    positions: List[Lot] = Field(default_factory=list)
    history: List[Lot] = Field(default_factory=list)
    logs: List[AuditEvent] = Field(default_factory=list)
    current_price: float = Field(default=0.0, ge=0.0)
    peak_equity: float = Field(default=0.0, ge=0.0)
    realized_pnl: float = 0.0
    daily_loss: float = Field(default=0.0, ge=0.0)
    daily_loss_day: Optional[date] = None
    effective_max_levels: int = Field(default=1, ge=1)
    is_paused: bool = True
    is_connected: bool = False
    last_update: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def equity(self) -> float:
        """Balance plus open lots marked at the last recorded price."""
        return self.balance + sum(lot.quantity * self.current_price for lot in self.positions)
