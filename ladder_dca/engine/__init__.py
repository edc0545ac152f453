"""
Decision engine module for the ladder DCA strategy.

This module runs one tick at a time: it consults the risk governor, closes
lots in FIFO order, opens new lots on dips, and publishes state snapshots.
"""

from .decision_engine import DecisionEngine

__all__ = ["DecisionEngine"]
