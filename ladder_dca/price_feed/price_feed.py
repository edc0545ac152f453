"""
Price feeds that supply ticks to the decision engine.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import Optional

from ..exchange import ExchangePort
from ..exchange.symbols import split_symbol
from .models import PriceTick


logger = logging.getLogger(__name__)


class PriceFeed(ABC):
    """Source of market prices for one symbol."""

    @abstractmethod
    def next_tick(self) -> PriceTick:
        """Get the next price; raises on failure."""
        ...


class RandomWalkFeed(PriceFeed):
    """Simulated market: each tick moves the price by a random fraction."""

    def __init__(self, start_price: float = 50000.0, volatility: float = 0.002,
                 seed: Optional[int] = None, floor: float = 0.01):
        """
        Initialize the random walk.

        Args:
            start_price: First price emitted
            volatility: Largest relative move is half of this per tick
            seed: Seed for reproducible walks
            floor: Prices never fall below this value
        """
        if start_price <= 0:
            raise ValueError("start_price must be positive")
        if volatility < 0:
            raise ValueError("volatility must not be negative")
        self._price = start_price
        self._volatility = volatility
        self._floor = floor
        self._rng = random.Random(seed)
        self._started = False

    def next_tick(self) -> PriceTick:
        if self._started:
            change = self._price * (self._volatility * (self._rng.random() - 0.5))
            self._price = max(self._floor, self._price + change)
        self._started = True
        return PriceTick(price=self._price)


class ExchangeQuoteFeed(PriceFeed):
    """Last traded price as reported by the exchange."""

    def __init__(self, exchange: ExchangePort, symbol: str):
        self._exchange = exchange
        self._symbol = symbol

    def next_tick(self) -> PriceTick:
        price = self._exchange.fetch_price(self._symbol)
        logger.debug(f"Exchange quote for {self._symbol}: {price}")
        return PriceTick(price=price)


class YahooQuoteFeed(PriceFeed):
    """Latest close from Yahoo Finance, e.g. ``BTC-USD``."""

    def __init__(self, ticker: str):
        self._ticker = ticker.upper()
        self._yf = None

    def _get_yfinance(self):
        """Lazy import of yfinance to avoid SSL issues during package setup."""
        if self._yf is None:
            import yfinance as yf
            self._yf = yf
        return self._yf

    def next_tick(self) -> PriceTick:
        yf = self._get_yfinance()
        data = yf.Ticker(self._ticker).history(period="1d", interval="1m")
        if data.empty:
            raise ValueError(f"No current price data available for {self._ticker}")
        price = float(data['Close'].iloc[-1])
        logger.debug(f"Yahoo quote for {self._ticker}: {price}")
        return PriceTick(price=price)


def yahoo_ticker_for(symbol: str) -> str:
    """Map an exchange pair such as BTCUSDT to the Yahoo ticker BTC-USD."""
    base, quote = split_symbol(symbol)
    if quote in ("USDT", "USDC", "FDUSD", "BUSD"):
        quote = "USD"
    return f"{base}-{quote}"
