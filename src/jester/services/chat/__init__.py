"""Chat dispatch package.

The DispatchOrchestrator coordinates:
1. Intent classification (via IntentClassifier)
2. Handler dispatch (via HandlerRegistry)
3. Pagination and control attachment
4. Message logging
"""
from jester.services.chat.orchestrator import DispatchOrchestrator, HandlerRegistry
from jester.services.chat.handlers.base import IntentHandler, ChatContext, ChatResponse

__all__ = [
    'DispatchOrchestrator',
    'HandlerRegistry',
    'IntentHandler',
    'ChatContext',
    'ChatResponse',
]
