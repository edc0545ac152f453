"""
Ladder DCA - a dollar-cost averaging trading bot with FIFO exits.

This package implements a ladder strategy that opens a new lot each time the
price dips a configurable percentage below the most recent entry, closes lots
at take-profit or stop-loss oldest first, and halts trading when drawdown or
daily loss limits are breached.
"""

__version__ = "0.1.0"
__author__ = "Ladder DCA Team"

# Lazy imports to avoid dependency issues during package setup
__all__ = [
    "ConfigurationManager",
    "TradingConfig",
    "DecisionEngine",
    "PositionLedger",
    "RiskGovernor",
    "StateManager",
    "BotState",
    "Lot",
    "AuditEvent",
    "SimulatedExchange",
]


def __getattr__(name):
    """Lazy import for package components."""
    if name == "ConfigurationManager":
        from .config import ConfigurationManager
        return ConfigurationManager
    elif name == "TradingConfig":
        from .config import TradingConfig
        return TradingConfig
    elif name == "DecisionEngine":
        from .engine import DecisionEngine
        return DecisionEngine
    elif name == "PositionLedger":
        from .ledger import PositionLedger
        return PositionLedger
    elif name == "RiskGovernor":
        from .risk import RiskGovernor
        return RiskGovernor
    elif name == "StateManager":
        from .persistence import StateManager
        return StateManager
    elif name == "BotState":
        from .models import BotState
        return BotState
    elif name == "Lot":
        from .ledger import Lot
        return Lot
    elif name == "AuditEvent":
        from .audit import AuditEvent
        return AuditEvent
    elif name == "SimulatedExchange":
        from .exchange import SimulatedExchange
        return SimulatedExchange
    else:
        raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
