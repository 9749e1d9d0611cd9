"""General handlers: canned keyword reactions and the AI fallback."""
from jester.core.errors import AIGatewayError
from jester.core.logging import logger
from jester.services import templates
from jester.services.chat.handlers.base import ChatContext, ChatResponse, IntentHandler


class SpecialKeywordHandler(IntentHandler):
    """Canned reaction for a special keyword (bot, popi, jabi, java, go)."""

    actions = ["special_keyword"]

    def handle(self, context: ChatContext) -> ChatResponse:
        for reaction in self.services.content.reactions:
            if reaction.key == context.argument:
                return self._success_response(reaction.response)
        raise KeyError(f"No reaction for keyword '{context.argument}'")


class AIHandler(IntentHandler):
    """Everything else goes to the AI, prefixed with a conversational template."""

    actions = ["ai_fallback"]

    def handle(self, context: ChatContext) -> ChatResponse:
        llm = self.services.llm
        if not llm.is_available():
            return self._success_response(templates.AI_UNAVAILABLE)

        prompt = self.services.enhancer.enhance(context.argument or context.text)
        try:
            answer = llm.complete(prompt)
        except AIGatewayError as e:
            logger.error(f"AI request failed: {e}")
            return self._success_response(templates.AI_UNAVAILABLE)

        logger.debug(f"AI answer: {answer[:100]}...")
        return self._success_response(answer)
