"""
Data models for lots held in the position ledger.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class LotStatus(str, Enum):
    """Lifecycle of a single DCA lot."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"


class StopLossDisabled(BaseModel):
    """Stop-loss was not enabled when the lot was opened."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["disabled"] = "disabled"


class StopLossArmed(BaseModel):
    """Stop-loss armed at a fixed price."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["armed"] = "armed"
    price: float = Field(gt=0.0)


StopLoss = Annotated[Union[StopLossArmed, StopLossDisabled], Field(discriminator="kind")]


class Lot(BaseModel):
    """One DCA entry and, once closed, its matching exit."""

    model_config = ConfigDict(frozen=True)

    lot_id: str
    symbol: str
    exchange: str
    entry_time: datetime
    entry_price: float = Field(gt=0.0)
    quantity: float = Field(gt=0.0)
    invested: float = Field(gt=0.0)
    tp_price: float = Field(gt=0.0)
    stop_loss: StopLoss = Field(default_factory=StopLossDisabled)
    status: LotStatus = LotStatus.OPEN
    exit_time: Optional[datetime] = None
    exit_price: Optional[float] = None
    pnl: Optional[float] = None

    @property
    def sl_price(self) -> Optional[float]:
        """Stop-loss price, or None if this lot has no stop-loss."""
        if isinstance(self.stop_loss, StopLossArmed):
            return self.stop_loss.price
        return None

    @property
    def is_open(self) -> bool:
        return self.status == LotStatus.OPEN

    def market_value(self, price: float) -> float:
        return self.quantity * price

    def closed(self, exit_time: datetime, exit_price: float, proceeds: float) -> "Lot":
        """Return the closed copy of this lot."""
        if not self.is_open:
            raise ValueError(f"Lot {self.lot_id} is already closed")
        return self.model_copy(update={
            "status": LotStatus.CLOSED,
            "exit_time": exit_time,
            "exit_price": exit_price,
            "pnl": proceeds - self.invested,
        })
