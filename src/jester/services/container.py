"""Service wiring: every stateful service is built once here and shared."""
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from jester.core.config import Settings
from jester.core.content import ContentTable, load_content
from jester.core.logging import logger
from jester.services.audit_log import AuditLog, SQLiteAuditLog
from jester.services.enhancer import PromptEnhancer
from jester.services.horoscope import HoroscopeService
from jester.services.intent.router import IntentClassifier
from jester.services.joke import JokeService
from jester.services.llm import LLMService
from jester.services.roulette import RouletteService
from jester.services.weather import WeatherService


@dataclass
class ServiceContainer:
    settings: Settings
    content: ContentTable
    classifier: IntentClassifier
    jokes: JokeService
    weather: WeatherService
    horoscopes: HoroscopeService
    roulette: RouletteService
    llm: LLMService
    enhancer: PromptEnhancer
    audit_log: Optional[AuditLog] = None


def build_services(settings: Settings, content: Optional[ContentTable] = None) -> ServiceContainer:
    """Build all services from settings."""
    if content is None:
        content = load_content(Path(settings.content.path) if settings.content.path else None)

    audit_log = None
    if settings.audit.enabled:
        audit_log = SQLiteAuditLog(settings.audit_db_path)
        logger.info(f"Message log: {settings.audit_db_path}")

    if not settings.weather_configured:
        logger.warning("WEATHER_API_KEY is not set, weather answers are disabled")

    return ServiceContainer(
        settings=settings,
        content=content,
        classifier=IntentClassifier(content),
        jokes=JokeService(settings.joke, list(content.fallback_jokes)),
        weather=WeatherService(settings.weather),
        horoscopes=HoroscopeService(settings.horoscope, list(content.zodiac)),
        roulette=RouletteService(history_size=settings.game.history_size),
        llm=LLMService(settings.ai),
        enhancer=PromptEnhancer(content.ai_templates),
        audit_log=audit_log,
    )
