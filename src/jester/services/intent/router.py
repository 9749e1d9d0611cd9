"""Intent Router - decides which handler answers an incoming event.

Text messages run through an ordered rule table; the first rule whose
predicate holds decides the tag. The order encodes priority:

    commands > game > joke > weather > zodiac sign > horoscope
    > special keywords > group-not-addressed > AI fallback

Callback presses map onto a fixed set of routes.
"""
from dataclasses import dataclass
from typing import Callable, FrozenSet, Iterable, List, Optional

from jester.core.constants import COMMAND_PREFIX
from jester.core.content import ContentTable
from jester.core.logging import logger
from jester.core.text import normalize
from jester.models.schemas import (
    CallbackAction,
    ClassificationResult,
    IncomingEvent,
    Tag,
    TextMessage,
)

KNOWN_COMMANDS = frozenset({
    "/start", "/help", "/about", "/status", "/models",
    "/joke", "/анекдот",
    "/weather", "/погода",
    "/horoscope", "/гороскоп", "/zodiac",
    "/lucky", "/рулетка",
    "/stats",
})

CALLBACK_ROUTES = frozenset({
    "cmd_start", "cmd_about", "cmd_help", "cmd_status", "cmd_models",
    "info_creator", "back_main", "horoscope_random",
})

HOROSCOPE_CALLBACK_PREFIX = "horoscope_"
UNKNOWN_ROUTE = "unknown"


def command_name(text: str) -> str:
    """'/Start@MyBot extra' -> '/start'."""
    first = text.strip().split(maxsplit=1)[0].lower()
    return first.split("@", 1)[0]


def first_match(tokens: Iterable[str], words: FrozenSet[str]) -> Optional[str]:
    """First token (in message order) that is one of ``words``."""
    for token in tokens:
        if token in words:
            return token
    return None


@dataclass(frozen=True)
class Rule:
    """One row of the classification table."""
    name: str
    predicate: Callable[[TextMessage, List[str]], bool]
    tag: Tag
    extractor: Callable[[TextMessage, List[str]], Optional[str]] = lambda event, tokens: None


def _is_command(event: TextMessage, tokens: List[str]) -> bool:
    return event.text.lstrip().startswith(COMMAND_PREFIX)


def _is_unknown_group_command(event: TextMessage, tokens: List[str]) -> bool:
    return _is_command(event, tokens) and event.is_group and command_name(event.text) not in KNOWN_COMMANDS


def _word_rule(name: str, words: FrozenSet[str], tag: Tag, keep_argument: bool = True) -> Rule:
    return Rule(
        name=name,
        predicate=lambda event, tokens: first_match(tokens, words) is not None,
        tag=tag,
        extractor=(lambda event, tokens: first_match(tokens, words)) if keep_argument else (lambda event, tokens: None),
    )


def build_rules(content: ContentTable) -> List[Rule]:
    """The ordered rule table for text messages."""
    rules = [
        Rule("unknown_group_command", _is_unknown_group_command, Tag.IGNORE),
        Rule("command", _is_command, Tag.COMMAND, lambda event, tokens: command_name(event.text)),
        _word_rule("game", content.trigger_words("game"), Tag.GAME_REQUEST),
        _word_rule("joke", content.trigger_words("joke"), Tag.JOKE_REQUEST),
        _word_rule("weather", content.trigger_words("weather"), Tag.WEATHER_REQUEST),
        _word_rule("zodiac_sign", frozenset(content.zodiac_signs), Tag.HOROSCOPE_REQUEST),
        _word_rule("horoscope", content.trigger_words("horoscope"), Tag.HOROSCOPE_REQUEST, keep_argument=False),
    ]
    for reaction in content.reactions:
        words = reaction.words
        rules.append(Rule(
            name=f"reaction:{reaction.key}",
            predicate=lambda event, tokens, words=words: first_match(tokens, words) is not None,
            tag=Tag.SPECIAL_KEYWORD,
            extractor=lambda event, tokens, key=reaction.key: key,
        ))
    rules.append(Rule(
        "group_not_addressed",
        lambda event, tokens: event.is_group and not event.addresses_bot,
        Tag.IGNORE,
    ))
    rules.append(Rule("ai_fallback", lambda event, tokens: True, Tag.AI_FALLBACK, lambda event, tokens: event.text))
    return rules


class IntentClassifier:
    """Classifies incoming events into exactly one tag."""

    def __init__(self, content: ContentTable):
        self.content = content
        self.rules = build_rules(content)
        self._signs = frozenset(content.zodiac_signs)

    def classify(self, event: IncomingEvent) -> ClassificationResult:
        if isinstance(event, CallbackAction):
            return self.classify_callback(event.data)
        return self.classify_text(event)

    def classify_text(self, event: TextMessage) -> ClassificationResult:
        if not event.text or not event.text.strip():
            return ClassificationResult(Tag.IGNORE)

        tokens = normalize(event.text)
        for rule in self.rules:
            if rule.predicate(event, tokens):
                result = ClassificationResult(rule.tag, rule.extractor(event, tokens))
                logger.info(f"Intent routing: {event.text[:50]!r} => {rule.tag.value} ({rule.name})")
                return result

        return ClassificationResult(Tag.IGNORE)

    def classify_callback(self, data: str) -> ClassificationResult:
        if data in CALLBACK_ROUTES:
            return ClassificationResult(Tag.CALLBACK_ROUTE, data)

        if data.startswith(HOROSCOPE_CALLBACK_PREFIX):
            sign = data[len(HOROSCOPE_CALLBACK_PREFIX):]
            if sign in self._signs:
                return ClassificationResult(Tag.CALLBACK_ROUTE, sign)

        logger.info(f"Unknown callback action: {data!r}")
        return ClassificationResult(Tag.CALLBACK_ROUTE, UNKNOWN_ROUTE)
