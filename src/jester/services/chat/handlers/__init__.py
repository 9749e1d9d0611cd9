"""Chat intent handlers."""
from jester.services.chat.handlers.base import IntentHandler, ChatResponse, ChatContext

# Menu and info handlers
from jester.services.chat.handlers.command import (
    StartHandler,
    BackToMainHandler,
    HelpHandler,
    AboutHandler,
    ModelsHandler,
    CreatorInfoHandler,
    StatusHandler,
    UnknownCommandHandler,
    UnknownActionHandler,
)

# Content handlers
from jester.services.chat.handlers.content import (
    JokeHandler,
    WeatherHandler,
    HoroscopeHandler,
    GameHandler,
    StatsHandler,
)

# General handlers
from jester.services.chat.handlers.general import SpecialKeywordHandler, AIHandler

__all__ = [
    # Base classes
    'IntentHandler',
    'ChatResponse',
    'ChatContext',
    # Menu and info handlers
    'StartHandler',
    'BackToMainHandler',
    'HelpHandler',
    'AboutHandler',
    'ModelsHandler',
    'CreatorInfoHandler',
    'StatusHandler',
    'UnknownCommandHandler',
    'UnknownActionHandler',
    # Content handlers
    'JokeHandler',
    'WeatherHandler',
    'HoroscopeHandler',
    'GameHandler',
    'StatsHandler',
    # General handlers
    'SpecialKeywordHandler',
    'AIHandler',
]
