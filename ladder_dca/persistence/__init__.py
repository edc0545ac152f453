"""
Data persistence module for the ladder DCA bot.

This module handles saving and loading bot state to/from persistent storage,
keyed by trading symbol, including error handling for corrupted files and
recovery mechanisms.
"""

from .state_manager import StateManager

__all__ = ['StateManager']
