"""Jester: a Telegram bot that routes chat messages to jokes, weather, horoscopes, a roulette game and an AI assistant."""

__version__ = "2.0.0"
