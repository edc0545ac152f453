"""
Analysis components for the ladder DCA bot.
"""

from .performance import PerformanceAnalyzer, PerformanceReport

__all__ = ["PerformanceAnalyzer", "PerformanceReport"]
