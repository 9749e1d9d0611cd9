"""Telegram interface."""
from jester.interfaces.telegram.channel import TelegramChannel

__all__ = ["TelegramChannel"]
