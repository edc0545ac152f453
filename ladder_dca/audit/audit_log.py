"""
Capped, append-only audit log of engine decisions.
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional

from .models import AuditAction, AuditEvent


logger = logging.getLogger(__name__)

TRADE_ACTIONS = (AuditAction.BUY, AuditAction.SELL)


def last_traded_price(events: List[AuditEvent]) -> Optional[float]:
    """Price of the newest BUY or SELL in a newest-first event list."""
    for event in events:
        if event.action in TRADE_ACTIONS and event.price > 0:
            return event.price
    return None


class AuditLog:
    """
    Append-only view over a list of audit events, newest first.

    The list itself belongs to the bot state so that it is persisted with
    the ledger; this class only ever prepends to it and evicts the oldest
    entries once ``capacity`` is exceeded.
    """

    DEFAULT_CAPACITY = 200

    def __init__(
        self,
        events: List[AuditEvent],
        symbol: str,
        capacity: int = DEFAULT_CAPACITY,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._events = events
        self._symbol = symbol
        self._capacity = capacity
        self._clock = clock
        self._trim()

    @property
    def capacity(self) -> int:
        return self._capacity

    def record(
        self,
        action: AuditAction,
        message: str,
        price: float = 0.0,
        quantity: float = 0.0,
        amount: float = 0.0,
    ) -> AuditEvent:
        """
        Append a new event and mirror it to the module logger.

        Returns:
            The event that was recorded
        """
        fields = dict(
            symbol=self._symbol,
            action=action,
            price=price,
            quantity=quantity,
            amount=amount,
            message=message,
        )
        if self._clock is not None:
            fields["timestamp"] = self._clock()
        event = AuditEvent(**fields)

        self._events.insert(0, event)
        self._trim()

        level = logging.ERROR if action == AuditAction.ERROR else logging.INFO
        logger.log(level, f"[{self._symbol}] {action.value}: {message}")
        return event

    def recent(self, count: Optional[int] = None) -> List[AuditEvent]:
        """Get the most recent events, newest first."""
        if count is None:
            return list(self._events)
        return self._events[:count]

    def last_traded_price(self) -> Optional[float]:
        """Price of the newest executed buy or sell, if any is still logged."""
        return last_traded_price(self._events)

    def _trim(self) -> None:
        del self._events[self._capacity:]

    def __len__(self) -> int:
        return len(self._events)
