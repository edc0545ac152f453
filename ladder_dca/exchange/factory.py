"""
Selects the exchange implementation for a configuration.
"""

import logging

from ..config.models import ExchangeProvider, TradingConfig
from .port import ExchangePort
from .simulated import SimulatedExchange


logger = logging.getLogger(__name__)


def create_exchange(config: TradingConfig) -> ExchangePort:
    """
    Build the exchange port for a configuration.

    Paper mode always trades against the simulated venue, whichever
    exchange is selected; only live mode reaches a real venue.
    """
    if config.exchange == ExchangeProvider.SIMULATED or not config.is_live_mode:
        return SimulatedExchange(
            min_notional=config.min_notional,
            slippage_percent=config.simulated_slippage_percent,
        )

    # ccxt is only imported for live venues
    from .ccxt_exchange import CCXTExchange

    logger.info(f"Using live exchange {config.exchange.value}")
    return CCXTExchange(config.exchange)


def needs_new_exchange(current: ExchangePort, config: TradingConfig) -> bool:
    """True when the configured venue or mode no longer matches ``current``."""
    wants_live = config.is_live_mode and config.exchange != ExchangeProvider.SIMULATED
    if current.is_simulated:
        return wants_live
    return not wants_live or current.provider != config.exchange
