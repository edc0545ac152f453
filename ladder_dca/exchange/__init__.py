"""
Exchange connectivity module.

This module defines the narrow port the decision engine uses to place
market orders, a simulated venue for paper trading, and a CCXT-backed
implementation for live venues.
"""

from .port import ExchangePort, ExchangeError, ExchangeAuthenticationError
from .models import BuyFill, SellFill
from .simulated import SimulatedExchange
from .factory import create_exchange, needs_new_exchange

__all__ = [
    "ExchangePort",
    "ExchangeError",
    "ExchangeAuthenticationError",
    "BuyFill",
    "SellFill",
    "SimulatedExchange",
    "create_exchange",
    "needs_new_exchange",
]
