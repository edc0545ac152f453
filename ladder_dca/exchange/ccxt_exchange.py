from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import ccxt

from ..config.models import ApiCredentials, ExchangeProvider
from .models import BuyFill, SellFill
from .port import ExchangePort, ExchangeError, ExchangeAuthenticationError
from .symbols import to_ccxt_symbol


logger = logging.getLogger(__name__)

CCXT_EXCHANGE_IDS = {
    ExchangeProvider.BINANCE: "binance",
    ExchangeProvider.BYBIT: "bybit",
    ExchangeProvider.KUCOIN: "kucoin",
    ExchangeProvider.OKX: "okx",
    ExchangeProvider.COINBASE: "coinbase",
    ExchangeProvider.KRAKEN: "kraken",
}


class CCXTExchange(ExchangePort):
    """
    Spot market orders on a real venue through CCXT.
    """

    def __init__(self, provider: ExchangeProvider, client: Optional[Any] = None):
        if provider not in CCXT_EXCHANGE_IDS:
            raise ValueError(f"No CCXT venue for {provider.value}")
        self.provider = provider
        self.exchange_id = CCXT_EXCHANGE_IDS[provider]
        self.ex = client
        self._markets_loaded = False

    def authenticate(self, credentials: ApiCredentials) -> bool:
        if credentials.is_empty:
            logger.warning(f"No API credentials configured for {self.exchange_id}")
            return False

        ex_cls = getattr(ccxt, self.exchange_id)
        options: Dict[str, Any] = {
            "apiKey": credentials.api_key,
            "secret": credentials.api_secret,
            "enableRateLimit": True,
            "options": {"defaultType": "spot"},
        }
        if credentials.passphrase:
            options["password"] = credentials.passphrase
        self.ex = ex_cls(options)
        self._markets_loaded = False

        try:
            self._load_markets()
            # Private endpoint; rejects bad keys
            self.ex.fetch_balance()
        except ccxt.AuthenticationError as e:
            logger.error(f"Authentication with {self.exchange_id} failed: {e}")
            return False
        except ccxt.BaseError as e:
            logger.error(f"Could not reach {self.exchange_id}: {e}")
            return False

        logger.info(f"Authenticated with {self.exchange_id}")
        return True

    def market_buy(self, symbol: str, quote_amount: float, reference_price: float) -> BuyFill:
        market_symbol = to_ccxt_symbol(symbol)
        client = self._client()
        try:
            self._load_markets()
            if client.has.get("createMarketBuyOrderWithCost"):
                order = client.create_market_buy_order_with_cost(market_symbol, quote_amount)
            else:
                amount = float(client.amount_to_precision(market_symbol, quote_amount / reference_price))
                order = client.create_order(market_symbol, "market", "buy", amount)
        except ccxt.AuthenticationError as e:
            raise ExchangeAuthenticationError(str(e)) from e
        except ccxt.BaseError as e:
            raise ExchangeError(f"Market buy on {self.exchange_id} failed: {e}") from e

        filled = float(order.get("filled") or 0.0)
        price = float(order.get("average") or order.get("price") or reference_price)
        if filled <= 0:
            filled = quote_amount / price
        cost = float(order.get("cost") or filled * price)
        return BuyFill(order_id=str(order.get("id")), filled_quantity=filled, fill_price=price, cost=cost)

    def market_sell(self, symbol: str, quantity: float, reference_price: float) -> SellFill:
        market_symbol = to_ccxt_symbol(symbol)
        client = self._client()
        try:
            self._load_markets()
            amount = float(client.amount_to_precision(market_symbol, quantity))
            order = client.create_order(market_symbol, "market", "sell", amount)
        except ccxt.AuthenticationError as e:
            raise ExchangeAuthenticationError(str(e)) from e
        except ccxt.BaseError as e:
            raise ExchangeError(f"Market sell on {self.exchange_id} failed: {e}") from e

        price = float(order.get("average") or order.get("price") or reference_price)
        filled = float(order.get("filled") or amount)
        proceeds = float(order.get("cost") or filled * price)
        return SellFill(order_id=str(order.get("id")), proceeds=proceeds, fill_price=price)

    def min_notional(self, symbol: str) -> float:
        client = self._client()
        try:
            self._load_markets()
            market = client.market(to_ccxt_symbol(symbol))
        except ccxt.BaseError as e:
            raise ExchangeError(f"Could not load market {symbol}: {e}") from e
        limits = market.get("limits") or {}
        cost = limits.get("cost") or {}
        return float(cost.get("min") or 0.0)

    def fetch_price(self, symbol: str) -> float:
        client = self._client()
        try:
            ticker = client.fetch_ticker(to_ccxt_symbol(symbol))
        except ccxt.BaseError as e:
            raise ExchangeError(f"Could not fetch ticker {symbol}: {e}") from e
        price = ticker.get("last") or ticker.get("close")
        if not price:
            raise ExchangeError(f"No last price in ticker for {symbol}")
        return float(price)

    def fetch_balance(self, asset: str) -> float:
        client = self._client()
        try:
            balance = client.fetch_balance()
        except ccxt.BaseError as e:
            raise ExchangeError(f"Could not fetch balance: {e}") from e
        free = balance.get("free") or {}
        return float(free.get(asset.upper()) or 0.0)

    def _client(self) -> Any:
        if self.ex is None:
            # Keyless client for public endpoints
            self.ex = getattr(ccxt, self.exchange_id)({"enableRateLimit": True})
        return self.ex

    def _load_markets(self) -> None:
        if not self._markets_loaded:
            self._client().load_markets()
            self._markets_loaded = True
