"""
Configuration management module for the ladder DCA bot.

This module handles loading, validating, and managing YAML configuration files
using Pydantic for robust validation and type safety.
"""

from .config_manager import ConfigurationManager, ConfigurationError
from .models import TradingConfig, ApiCredentials, ExchangeProvider, DailyLossReset

__all__ = [
    "ConfigurationManager",
    "ConfigurationError",
    "TradingConfig",
    "ApiCredentials",
    "ExchangeProvider",
    "DailyLossReset",
]
