"""
Risk governor module.

This module evaluates global drawdown and the daily loss cap once per tick,
derives the effective cap on open lots, and applies the daily loss reset
policy.
"""

from .risk_governor import (
    RiskGovernor,
    RiskVerdict,
    RiskAction,
    LiquidationReason,
    effective_max_levels,
    apply_daily_loss_reset,
    at_or_above,
    at_or_below,
)

__all__ = [
    "RiskGovernor",
    "RiskVerdict",
    "RiskAction",
    "LiquidationReason",
    "effective_max_levels",
    "apply_daily_loss_reset",
    "at_or_above",
    "at_or_below",
]
