"""
Paper-trading exchange that fills every market order instantly.
"""

import logging
import uuid
from typing import Dict, Optional

from ..config.models import ApiCredentials, ExchangeProvider
from .models import BuyFill, SellFill
from .port import ExchangePort, ExchangeError
from .symbols import split_symbol


logger = logging.getLogger(__name__)

FUNDED_ASSETS = frozenset({"USDT", "USDC", "FDUSD", "BUSD", "USD", "EUR"})


class SimulatedExchange(ExchangePort):
    """Fills market orders at the reference price, less optional slippage."""

    provider = ExchangeProvider.SIMULATED

    def __init__(
        self,
        min_notional: float = 1.0,
        slippage_percent: float = 0.0,
        quote_balance: float = 1000.0,
        base_price: Optional[float] = None,
    ):
        """
        Initialize the simulated venue.

        Args:
            min_notional: Minimum order size reported for every symbol
            slippage_percent: Adverse slippage applied to every fill
            quote_balance: Starting balance of each quote asset
            base_price: Quote returned by fetch_price before any fill; without
                one, fetch_price fails until a price has been observed
        """
        self._min_notional = min_notional
        self._slippage = slippage_percent / 100
        self._default_quote_balance = quote_balance
        self._balances: Dict[str, float] = {}
        self._last_prices: Dict[str, float] = {}
        self._base_price = base_price

    def authenticate(self, credentials: ApiCredentials) -> bool:
        return True

    def market_buy(self, symbol: str, quote_amount: float, reference_price: float) -> BuyFill:
        if quote_amount <= 0 or reference_price <= 0:
            raise ExchangeError(f"Invalid buy order: amount={quote_amount}, price={reference_price}")

        fill_price = reference_price * (1 + self._slippage)
        quantity = quote_amount / fill_price

        base, quote = split_symbol(symbol)
        self._credit(quote, -quote_amount)
        self._credit(base, quantity)
        self._last_prices[symbol] = reference_price

        logger.debug(f"Simulated buy {symbol}: {quantity:.8f} @ {fill_price:.8f}")
        return BuyFill(
            order_id=str(uuid.uuid4()),
            filled_quantity=quantity,
            fill_price=fill_price,
            cost=quote_amount,
        )

    def market_sell(self, symbol: str, quantity: float, reference_price: float) -> SellFill:
        if quantity <= 0 or reference_price <= 0:
            raise ExchangeError(f"Invalid sell order: quantity={quantity}, price={reference_price}")

        fill_price = reference_price * (1 - self._slippage)
        proceeds = quantity * fill_price

        base, quote = split_symbol(symbol)
        self._credit(base, -quantity)
        self._credit(quote, proceeds)
        self._last_prices[symbol] = reference_price

        logger.debug(f"Simulated sell {symbol}: {quantity:.8f} @ {fill_price:.8f}")
        return SellFill(order_id=str(uuid.uuid4()), proceeds=proceeds, fill_price=fill_price)

    def min_notional(self, symbol: str) -> float:
        return self._min_notional

    def fetch_price(self, symbol: str) -> float:
        price = self._last_prices.get(symbol, self._base_price)
        if price is None:
            raise ExchangeError(f"No simulated quote for {symbol} yet")
        return price

    def fetch_balance(self, asset: str) -> float:
        return self._balances.get(asset.upper(), self._opening_balance(asset.upper()))

    def _opening_balance(self, asset: str) -> float:
        # Only fiat and stablecoins start funded
        return self._default_quote_balance if asset in FUNDED_ASSETS else 0.0

    def _credit(self, asset: str, amount: float) -> None:
        current = self._balances.get(asset, self._opening_balance(asset))
        self._balances[asset] = current + amount
