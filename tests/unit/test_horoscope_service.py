"""
Tests for the horoscope service.
"""
import random
from datetime import date
from unittest.mock import MagicMock

import httpx
import pytest

from jester.core.config import HoroscopeConfig
from jester.models.schemas import ContentSource, FailureReason
from jester.services.horoscope import HoroscopeService, format_horoscope

ARIES_FALLBACK = (
    "Сегодня звёзды советуют вам быть активнее! "
    "Удача благоволит смелым. Хороший день для новых начинаний."
)


def _ok(request: httpx.Request) -> httpx.Response:
    sign = request.url.params["sign"]
    return httpx.Response(200, json={"data": {"date": "Mar 15, 2024", "horoscope_data": f"Text for {sign}."}})


@pytest.fixture
def sleep():
    return MagicMock()


@pytest.fixture
def make_service(make_client, content, clock, sleep):
    def _make(handler):
        client, transport = make_client(handler)
        config = HoroscopeConfig(api_url="https://horoscope.example/daily", ttl_hours=24, request_delay=0.5)
        service = HoroscopeService(
            config, list(content.zodiac), http_client=client, clock=clock,
            sleep=sleep, rng=random.Random(3),
        )
        return service, transport
    return _make


class TestFormatHoroscope:
    def test_format(self, content):
        text = format_horoscope(content.zodiac_sign("овен"), "Всё будет хорошо.", date(2024, 3, 15))
        assert text == "🔮 **Гороскоп для ♈ Овен**\n\nВсё будет хорошо.\n\n📅 *15.03.2024*"


class TestHoroscopeService:
    """Tests for HoroscopeService."""

    def test_fetches_every_sign_once(self, make_service, sleep):
        service, transport = make_service(_ok)

        result = service.get("овен")
        assert result.source is ContentSource.CACHE
        assert "Text for aries." in result.content
        assert "📅 *15.03.2024*" in result.content

        assert transport.calls == 12
        assert {r.url.params["day"] for r in transport.requests} == {"TODAY"}
        # Pause between requests, not before the first one
        assert sleep.call_count == 11
        sleep.assert_called_with(0.5)

        service.get("лев")
        assert transport.calls == 12

    def test_sign_lookup_is_case_insensitive(self, make_service):
        service, _ = make_service(_ok)
        assert "Text for leo." in service.get("  ЛЕВ ").content

    @pytest.mark.parametrize("key", ["дракон", "", None])
    def test_invalid_sign_gives_hint(self, make_service, key):
        service, transport = make_service(_ok)

        result = service.get(key)
        assert result.source is ContentSource.HINT
        assert result.failure is FailureReason.INVALID_KEY
        assert result.content.startswith("❓ Неизвестный знак зодиака. Доступные знаки: овен, телец")
        assert transport.calls == 0

    def test_fallback_when_api_down(self, make_service):
        service, _ = make_service(lambda request: httpx.Response(500))

        result = service.get("овен")
        assert result.source is ContentSource.FALLBACK
        assert result.failure is FailureReason.REMOTE_FETCH
        assert ARIES_FALLBACK in result.content
        assert result.content.startswith("🔮 **Гороскоп для ♈ Овен**")

    def test_partial_success(self, make_service):
        def handler(request):
            if request.url.params["sign"] == "leo":
                return httpx.Response(200, json={"data": {}})
            return _ok(request)

        service, _ = make_service(handler)
        assert "Text for aries." in service.get("овен").content

        leo = service.get("лев")
        assert leo.source is ContentSource.FALLBACK
        assert "Ваша харизма сегодня на высоте!" in leo.content

    def test_new_day_refreshes(self, make_service, clock):
        clock.current = clock.current.replace(hour=23, minute=50)
        service, transport = make_service(_ok)

        service.get("овен")
        clock.advance(minutes=5)
        service.get("овен")
        assert transport.calls == 12

        clock.advance(minutes=10)
        result = service.get("овен")
        assert transport.calls == 24
        assert "📅 *16.03.2024*" in result.content

    def test_ttl_expiry(self, make_service, clock):
        clock.current = clock.current.replace(hour=0, minute=0)
        service, transport = make_service(_ok)

        service.get("овен")
        clock.advance(hours=23, minutes=59)
        service.get("овен")
        assert transport.calls == 12

    def test_random_horoscope(self, make_service):
        service, _ = make_service(_ok)
        result = service.random_horoscope()
        assert result.content.startswith("🔮 **Гороскоп для ")
        assert result.source is ContentSource.CACHE

    def test_zodiac_guide(self, make_service, content):
        service, _ = make_service(_ok)
        guide = service.zodiac_guide()
        assert guide.startswith("🔮 **Знаки зодиака:**")
        for sign in content.zodiac:
            assert f"{sign.emoji} **{sign.title}**" in guide

    def test_status(self, make_service):
        service, _ = make_service(_ok)
        service.refresh()
        status = service.status()
        assert status.cache_fresh
        assert status.entries == 12
