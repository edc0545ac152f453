from __future__ import annotations

from abc import ABC, abstractmethod

from ..config.models import ApiCredentials, ExchangeProvider
from .models import BuyFill, SellFill


class ExchangeError(RuntimeError):
    """An exchange call failed; the engine treats this as recoverable."""


class ExchangeAuthenticationError(ExchangeError):
    """Credentials were rejected or could not be verified."""


class ExchangePort(ABC):
    """
    Narrow contract the decision engine uses to reach a venue.

    Implementations never see the ledger. Every call may raise
    ExchangeError; fill prices may differ from the reference price.
    """

    provider: ExchangeProvider

    @property
    def is_simulated(self) -> bool:
        return self.provider == ExchangeProvider.SIMULATED

    @abstractmethod
    def authenticate(self, credentials: ApiCredentials) -> bool:
        ...

    @abstractmethod
    def market_buy(self, symbol: str, quote_amount: float, reference_price: float) -> BuyFill:
        """Spend ``quote_amount`` of quote currency at market."""
        ...

    @abstractmethod
    def market_sell(self, symbol: str, quantity: float, reference_price: float) -> SellFill:
        """Sell ``quantity`` of base currency at market."""
        ...

    @abstractmethod
    def min_notional(self, symbol: str) -> float:
        ...

    @abstractmethod
    def fetch_price(self, symbol: str) -> float:
        ...

    @abstractmethod
    def fetch_balance(self, asset: str) -> float:
        ...
