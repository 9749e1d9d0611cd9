"""Base classes for chat intent handlers."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from jester.models.schemas import (
    CallbackAction,
    ClassificationResult,
    Controls,
    IncomingEvent,
    Tag,
)
from jester.services.intent.router import CALLBACK_ROUTES, KNOWN_COMMANDS, UNKNOWN_ROUTE

if TYPE_CHECKING:
    from jester.services.container import ServiceContainer

UNKNOWN_COMMAND_ACTION = "unknown_command"
HOROSCOPE_SIGN_ACTION = "horoscope_sign"


@dataclass
class ChatContext:
    """Context passed to intent handlers."""
    event: IncomingEvent
    classification: ClassificationResult

    @property
    def tag(self) -> Tag:
        return self.classification.tag

    @property
    def argument(self) -> Optional[str]:
        return self.classification.argument

    @property
    def text(self) -> str:
        if isinstance(self.event, CallbackAction):
            return self.event.data
        return self.event.text

    @property
    def action(self) -> str:
        """Registry key: command name, callback route or tag value."""
        if self.tag is Tag.COMMAND:
            return self.argument if self.argument in KNOWN_COMMANDS else UNKNOWN_COMMAND_ACTION
        if self.tag is Tag.CALLBACK_ROUTE:
            if self.argument in CALLBACK_ROUTES or self.argument == UNKNOWN_ROUTE:
                return self.argument
            return HOROSCOPE_SIGN_ACTION
        return self.tag.value


@dataclass
class ChatResponse:
    """Standard response from intent handlers."""
    answer: str

    # Interactive controls for the last chunk of the answer
    controls: Optional[Controls] = None

    # Suspenseful delivery (roulette)
    animate: bool = False


class IntentHandler(ABC):
    """Abstract base class for intent handlers.

    Each handler is responsible for processing a specific set of actions
    and returning a ChatResponse.
    """

    # List of action names this handler can process
    actions: List[str] = []

    def __init__(self, services: "ServiceContainer"):
        self.services = services

    @abstractmethod
    def handle(self, context: ChatContext) -> ChatResponse:
        """
        Handle the intent and return a response.

        Args:
            context: ChatContext with the event and its classification

        Returns:
            ChatResponse with the result
        """
        pass

    def can_handle(self, action: str) -> bool:
        """Check if this handler can process the given action."""
        return action in self.actions

    def _success_response(self, answer: str, **kwargs) -> ChatResponse:
        """Create a standard success response."""
        return ChatResponse(answer=answer, **kwargs)
