"""Menu, info and status handlers."""
from jester.models.schemas import Controls
from jester.services import templates
from jester.services.chat.handlers.base import (
    UNKNOWN_COMMAND_ACTION,
    ChatContext,
    ChatResponse,
    IntentHandler,
)
from jester.services.intent.router import UNKNOWN_ROUTE


class StartHandler(IntentHandler):
    """Main menu."""

    actions = ["/start", "cmd_start"]

    def handle(self, context: ChatContext) -> ChatResponse:
        return self._success_response(templates.MAIN_MENU, controls=Controls.MAIN_MENU)


class BackToMainHandler(IntentHandler):
    actions = ["back_main"]

    def handle(self, context: ChatContext) -> ChatResponse:
        return self._success_response(templates.BACK_TO_MAIN, controls=Controls.MAIN_MENU)


class HelpHandler(IntentHandler):
    actions = ["/help", "cmd_help"]

    def handle(self, context: ChatContext) -> ChatResponse:
        return self._success_response(templates.HELP)


class AboutHandler(IntentHandler):
    actions = ["/about", "cmd_about"]

    def handle(self, context: ChatContext) -> ChatResponse:
        return self._success_response(templates.ABOUT)


class ModelsHandler(IntentHandler):
    actions = ["/models", "cmd_models"]

    def handle(self, context: ChatContext) -> ChatResponse:
        return self._success_response(templates.MODELS)


class CreatorInfoHandler(IntentHandler):
    actions = ["info_creator"]

    def handle(self, context: ChatContext) -> ChatResponse:
        return self._success_response(templates.CREATOR_INFO, controls=Controls.CREATOR_INFO)


class StatusHandler(IntentHandler):
    """AI availability plus the cache state of every content service."""

    actions = ["/status", "cmd_status"]

    def handle(self, context: ChatContext) -> ChatResponse:
        services = self.services
        statuses = [s.status() for s in (services.jokes, services.weather, services.horoscopes)]
        return self._success_response(templates.status_report(services.llm.is_available(), statuses))


class UnknownCommandHandler(IntentHandler):
    """Unrecognized command in a direct chat."""

    actions = [UNKNOWN_COMMAND_ACTION]

    def handle(self, context: ChatContext) -> ChatResponse:
        return self._success_response(templates.UNKNOWN_COMMAND)


class UnknownActionHandler(IntentHandler):
    """Callback token we never issued."""

    actions = [UNKNOWN_ROUTE]

    def handle(self, context: ChatContext) -> ChatResponse:
        return self._success_response(templates.UNKNOWN_ACTION)
