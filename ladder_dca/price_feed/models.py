"""
Data models for price feeds.
"""

from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field


class PriceTick(BaseModel):
    """Model for one observed market price."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    price: float = Field(gt=0.0)
