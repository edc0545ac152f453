"""
Helpers for converting between compact (BTCUSDT) and ccxt (BTC/USDT) symbols.
"""

from typing import Tuple

QUOTE_ASSETS = ("USDT", "USDC", "FDUSD", "BUSD", "USD", "EUR", "BTC", "ETH")


def split_symbol(symbol: str) -> Tuple[str, str]:
    """Split a trading pair into (base, quote)."""
    symbol = symbol.upper()
    for sep in ("/", "-", "_"):
        if sep in symbol:
            base, quote = symbol.split(sep, 1)
            return base, quote.split(":", 1)[0]

    for quote in QUOTE_ASSETS:
        if symbol.endswith(quote) and len(symbol) > len(quote):
            return symbol[:-len(quote)], quote

    raise ValueError(f"Cannot determine quote asset of symbol {symbol!r}")


def to_ccxt_symbol(symbol: str) -> str:
    base, quote = split_symbol(symbol)
    return f"{base}/{quote}"
