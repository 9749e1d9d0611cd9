"""
Jester Test Configuration

Shared fixtures and configuration for pytest.
"""
import random
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, List
from unittest.mock import MagicMock

import httpx
import pytest

from jester.core.config import Settings
from jester.core.content import ContentTable, load_content
from jester.models.schemas import ContentResult, TextMessage, CallbackAction


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# =============================================================================
# Helpers
# =============================================================================

class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: datetime = datetime(2024, 3, 15, 12, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


class CountingTransport(httpx.MockTransport):
    """MockTransport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def recording_handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(recording_handler)

    @property
    def calls(self) -> int:
        return len(self.requests)


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def content() -> ContentTable:
    """The bundled content table."""
    return load_content()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_client():
    """Factory: (handler) -> (httpx.Client, CountingTransport)."""
    def _make(handler: Callable[[httpx.Request], httpx.Response]):
        transport = CountingTransport(handler)
        return httpx.Client(transport=transport), transport
    return _make


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    """Create a temporary data directory for tests."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return data_dir


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def make_text():
    """Factory for text message events."""
    def _make(text: str, is_group: bool = False, addresses_bot: bool = False, chat_id: int = 100) -> TextMessage:
        return TextMessage(
            text=text,
            chat_id=chat_id,
            user_id=42,
            user_name="Test User",
            is_group=is_group,
            addresses_bot=addresses_bot,
        )
    return _make


@pytest.fixture
def make_callback():
    """Factory for callback events."""
    def _make(data: str, chat_id: int = 100) -> CallbackAction:
        return CallbackAction(data=data, chat_id=chat_id, user_id=42, user_name="Test User")
    return _make


@pytest.fixture
def services(settings, content, rng):
    """Service container with real game/classifier and mocked remote services."""
    from jester.services.container import ServiceContainer
    from jester.services.enhancer import PromptEnhancer
    from jester.services.intent.router import IntentClassifier
    from jester.services.roulette import RouletteService

    jokes = MagicMock()
    jokes.get.return_value = ContentResult(content="😄 joke")
    weather = MagicMock()
    weather.get.return_value = ContentResult(content="🌤️ weather")
    horoscopes = MagicMock()
    horoscopes.get.side_effect = lambda sign: ContentResult(content=f"🔮 {sign}")
    horoscopes.random_horoscope.return_value = ContentResult(content="🔮 random")
    horoscopes.zodiac_guide.return_value = "🔮 guide"
    llm = MagicMock()
    llm.is_available.return_value = True
    llm.complete.return_value = "AI answer"

    return ServiceContainer(
        settings=settings,
        content=content,
        classifier=IntentClassifier(content),
        jokes=jokes,
        weather=weather,
        horoscopes=horoscopes,
        roulette=RouletteService(history_size=100, rng=rng),
        llm=llm,
        enhancer=PromptEnhancer(content.ai_templates),
        audit_log=MagicMock(),
    )
