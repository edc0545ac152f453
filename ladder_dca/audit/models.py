"""
Data models for audit events.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AuditAction(str, Enum):
    """Kinds of entries written to the audit log."""

    BUY = "BUY"
    SELL = "SELL"
    SKIP = "SKIP"
    ERROR = "ERROR"
    SYSTEM = "SYSTEM"


class AuditEvent(BaseModel):
    """Model for a single audit log entry."""

    model_config = ConfigDict(frozen=True)

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    symbol: str
    action: AuditAction
    price: float = 0.0
    quantity: float = 0.0
    amount: float = 0.0
    message: str
