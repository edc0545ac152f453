"""
Price feed module.

This module supplies price ticks to the decision engine from a simulated
random walk, the configured exchange, or Yahoo Finance.
"""

from .price_feed import PriceFeed, RandomWalkFeed, ExchangeQuoteFeed, YahooQuoteFeed, yahoo_ticker_for
from .models import PriceTick

__all__ = [
    "PriceFeed",
    "RandomWalkFeed",
    "ExchangeQuoteFeed",
    "YahooQuoteFeed",
    "yahoo_ticker_for",
    "PriceTick",
]
