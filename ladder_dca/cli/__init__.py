"""
Command-line interface module for the ladder DCA bot.

This module provides the CLI interface for running the bot with different
configuration files and command-line options.
"""

from .cli import main

__all__ = ["main"]
