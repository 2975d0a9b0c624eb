"""
Startup helpers for running Robespierre bots.
"""

from .bot import bot, build_framework

__all__ = ['bot', 'build_framework']
