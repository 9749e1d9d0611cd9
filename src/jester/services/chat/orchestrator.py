"""Dispatch Orchestrator - classifies an event, runs its handler, packages the answer.

For every incoming event it:
1. Classifies the event (via IntentClassifier)
2. Dispatches to the registered IntentHandler
3. Paginates the answer and attaches controls to the last chunk only
4. Appends an audit record (failures there never reach the user)

Any exception along the way turns into a single apology message.
"""
import time
from typing import Dict, Optional, Type

from jester.core.logging import logger
from jester.models.schemas import (
    AuditRecord,
    ClassificationResult,
    DispatchResult,
    IncomingEvent,
    OutgoingMessage,
    Tag,
    event_text,
)
from jester.services import templates
from jester.services.chat.handlers.base import ChatContext, IntentHandler
from jester.services.container import ServiceContainer
from jester.services.paginator import paginate


class HandlerRegistry:
    """Registry for intent handlers.

    Handlers register themselves with the actions they can handle.
    The orchestrator looks up handlers by action name.
    """

    def __init__(self, services: ServiceContainer):
        self.services = services
        self._handlers: Dict[str, IntentHandler] = {}
        self._handler_instances: Dict[Type[IntentHandler], IntentHandler] = {}

    def register(self, handler_class: Type[IntentHandler]) -> None:
        """Register a handler class for its declared actions."""
        # Create single instance per handler class
        if handler_class not in self._handler_instances:
            self._handler_instances[handler_class] = handler_class(self.services)

        handler = self._handler_instances[handler_class]

        for action in handler.actions:
            if action in self._handlers:
                logger.warning(
                    f"Action '{action}' already registered to {self._handlers[action].__class__.__name__}, "
                    f"overwriting with {handler_class.__name__}"
                )
            self._handlers[action] = handler
            logger.debug(f"Registered handler {handler_class.__name__} for action '{action}'")

    def get_handler(self, action: str) -> Optional[IntentHandler]:
        """Get the handler for a given action."""
        return self._handlers.get(action)

    def list_handlers(self) -> Dict[str, str]:
        """List all registered handlers and their actions."""
        return {action: handler.__class__.__name__ for action, handler in self._handlers.items()}


class DispatchOrchestrator:
    """Turns one incoming event into the ordered list of outgoing messages."""

    def __init__(self, services: ServiceContainer, registry: Optional[HandlerRegistry] = None):
        """Initialize the orchestrator."""
        self.services = services
        self.registry = registry or HandlerRegistry(services)
        if registry is None:
            self._register_handlers()

    def _register_handlers(self) -> None:
        """Register all available intent handlers."""
        from jester.services.chat.handlers import (
            AboutHandler,
            AIHandler,
            BackToMainHandler,
            CreatorInfoHandler,
            GameHandler,
            HelpHandler,
            HoroscopeHandler,
            JokeHandler,
            ModelsHandler,
            SpecialKeywordHandler,
            StartHandler,
            StatsHandler,
            StatusHandler,
            UnknownActionHandler,
            UnknownCommandHandler,
            WeatherHandler,
        )
        for handler_class in (
            StartHandler, BackToMainHandler, HelpHandler, AboutHandler, ModelsHandler,
            CreatorInfoHandler, StatusHandler, UnknownCommandHandler, UnknownActionHandler,
            JokeHandler, WeatherHandler, HoroscopeHandler, GameHandler, StatsHandler,
            SpecialKeywordHandler, AIHandler,
        ):
            self.registry.register(handler_class)

        logger.info(f"Registered {len(self.registry.list_handlers())} handlers")

    def dispatch(self, event: IncomingEvent) -> DispatchResult:
        """Handle one event. Never raises."""
        started = time.perf_counter()
        classification: Optional[ClassificationResult] = None

        try:
            classification = self.services.classifier.classify(event)
            if classification.is_ignored:
                return DispatchResult(tag=Tag.IGNORE)

            context = ChatContext(event=event, classification=classification)
            handler = self.registry.get_handler(context.action)
            if handler is None:
                raise LookupError(f"No handler for action '{context.action}'")

            logger.info(f"[Orchestrator] Dispatching {context.action} to {handler.__class__.__name__}")
            response = handler.handle(context)

            messaging = self.services.settings.messaging
            chunks = paginate(response.answer, messaging.max_message_length, messaging.part_margin)
            result = DispatchResult(
                messages=[
                    OutgoingMessage(chunk.text, response.controls if chunk.is_last else None)
                    for chunk in chunks
                ],
                tag=classification.tag,
                animate=response.animate,
            )
        except Exception as e:
            logger.error(f"Dispatch failed for chat {event.chat_id}: {e}", exc_info=True)
            result = DispatchResult(
                messages=[OutgoingMessage(templates.APOLOGY)],
                tag=classification.tag if classification else Tag.IGNORE,
                error=str(e) or e.__class__.__name__,
            )

        result.latency_ms = int((time.perf_counter() - started) * 1000)
        self._audit(event, result)
        return result

    def _audit(self, event: IncomingEvent, result: DispatchResult) -> None:
        """Append the audit record. Failures are logged and dropped."""
        audit_log = self.services.audit_log
        if audit_log is None:
            return

        record = AuditRecord(
            chat_id=event.chat_id,
            user_id=event.user_id,
            user_name=event.user_name,
            input_text=event_text(event),
            output_text="\n\n".join(m.text for m in result.messages) or None,
            tag=result.tag.value,
            is_group=event.is_group,
            latency_ms=result.latency_ms,
            error=result.error,
        )
        try:
            audit_log.record(record)
        except Exception as e:
            logger.warning(f"Could not write message log record: {e}")
