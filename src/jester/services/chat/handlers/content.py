"""Content handlers: jokes, weather, horoscopes and the roulette game."""
from jester.core.logging import logger
from jester.models.schemas import Controls
from jester.services.chat.handlers.base import (
    HOROSCOPE_SIGN_ACTION,
    ChatContext,
    ChatResponse,
    IntentHandler,
)


class JokeHandler(IntentHandler):
    """Random joke."""

    actions = ["joke_request", "/joke", "/анекдот"]

    def handle(self, context: ChatContext) -> ChatResponse:
        result = self.services.jokes.get()
        if result.fallback_used:
            logger.info(f"Joke served from fallback ({result.failure.value if result.failure else 'empty cache'})")
        return self._success_response(result.content)


class WeatherHandler(IntentHandler):
    """Current weather for the configured city."""

    actions = ["weather_request", "/weather", "/погода"]

    def handle(self, context: ChatContext) -> ChatResponse:
        return self._success_response(self.services.weather.get().content)


class HoroscopeHandler(IntentHandler):
    """Horoscope for a sign, a random sign, or the sign-selection prompt.

    A message naming a sign gets that sign's horoscope. A general
    horoscope request (and /horoscope, /zodiac) gets the sign list with
    the zodiac keyboard.
    """

    actions = [
        "horoscope_request",
        "/horoscope",
        "/гороскоп",
        "/zodiac",
        "horoscope_random",
        HOROSCOPE_SIGN_ACTION,
    ]

    def handle(self, context: ChatContext) -> ChatResponse:
        horoscopes = self.services.horoscopes

        if context.action == "horoscope_random":
            return self._success_response(horoscopes.random_horoscope().content)

        sign = context.argument if context.action in ("horoscope_request", HOROSCOPE_SIGN_ACTION) else None
        if sign:
            return self._success_response(horoscopes.get(sign).content)

        return self._success_response(horoscopes.zodiac_guide(), controls=Controls.ZODIAC_MENU)


class GameHandler(IntentHandler):
    """Roulette spin, delivered with the suspense animation."""

    actions = ["game_request", "/lucky", "/рулетка"]

    def handle(self, context: ChatContext) -> ChatResponse:
        roulette = self.services.roulette
        result = roulette.spin()
        return self._success_response(roulette.format_result(result), animate=True)


class StatsHandler(IntentHandler):
    """Roulette statistics and the latest draws."""

    actions = ["/stats"]

    def handle(self, context: ChatContext) -> ChatResponse:
        roulette = self.services.roulette
        answer = roulette.get_statistics()
        if roulette.history():
            answer += "\n\n" + roulette.recent_results(10)
        return self._success_response(answer)
