"""
Telegram Relay Package
======================

Chat adapter that forwards commands to the agent through the guard.
"""

from .interface import TelegramRelay

__all__ = [
    'TelegramRelay',
]
