"""
Tests for the weather service.
"""
from datetime import datetime

import httpx
import pytest

from jester.core.config import WeatherConfig
from jester.core.errors import ParseError
from jester.models.schemas import ContentSource, FailureReason
from jester.services import templates
from jester.services.weather import WeatherService, format_weather

PAYLOAD = {
    "name": "Москва",
    "weather": [{"description": "небольшой дождь", "icon": "10d"}],
    "main": {"temp": 12.34, "feels_like": 10.0, "humidity": 81, "pressure": 1013},
    "wind": {"speed": 3.56},
}


@pytest.fixture
def make_service(make_client, clock):
    def _make(handler, api_key="secret"):
        client, transport = make_client(handler)
        config = WeatherConfig(api_key=api_key, city="Moscow", ttl_minutes=30)
        return WeatherService(config, http_client=client, clock=clock), transport
    return _make


class TestFormatWeather:
    """Tests for format_weather()."""

    def test_full_report(self):
        text = format_weather(PAYLOAD, "Moscow", datetime(2024, 3, 15, 9, 5))
        lines = text.splitlines()

        assert lines[0] == "🌤️ **Погода в Москва**"
        assert "🌦️ **Небольшой дождь**" in lines
        assert "🌡️ **Температура:** 12.3°C" in lines
        assert "🤔 **Ощущается как:** 10.0°C" in lines
        assert "💧 **Влажность:** 81%" in lines
        assert "📊 **Давление:** 759 мм рт.ст." in lines
        assert "💨 **Ветер:** 3.6 м/с" in lines
        assert lines[-1] == "📅 *Обновлено: 15.03.2024 09:05*"

    def test_no_wind_line_when_calm(self):
        payload = dict(PAYLOAD, wind={"speed": 0})
        assert "Ветер" not in format_weather(payload, "Moscow", datetime(2024, 3, 15))

    def test_falls_back_to_configured_city(self):
        payload = {k: v for k, v in PAYLOAD.items() if k != "name"}
        assert format_weather(payload, "Moscow", datetime(2024, 3, 15)).startswith("🌤️ **Погода в Moscow**")

    def test_unknown_icon(self):
        payload = dict(PAYLOAD, weather=[{"description": "ясно", "icon": "99x"}])
        assert "🌤️ **Ясно**" in format_weather(payload, "Moscow", datetime(2024, 3, 15))

    def test_missing_fields(self):
        with pytest.raises(ParseError):
            format_weather({"weather": []}, "Moscow", datetime(2024, 3, 15))


class TestWeatherService:
    """Tests for WeatherService."""

    def test_fetch_and_cache(self, make_service, clock):
        service, transport = make_service(lambda request: httpx.Response(200, json=PAYLOAD))

        first = service.get()
        assert first.source is ContentSource.CACHE
        assert "Москва" in first.content

        clock.advance(minutes=29)
        service.get()
        assert transport.calls == 1

        clock.advance(minutes=2)
        service.get()
        assert transport.calls == 2

    def test_request_params(self, make_service, clock):
        service, transport = make_service(lambda request: httpx.Response(200, json=PAYLOAD))
        service.get()

        params = transport.requests[0].url.params
        assert params["q"] == "Moscow"
        assert params["appid"] == "secret"
        assert params["units"] == "metric"
        assert params["lang"] == "ru"

    def test_not_configured_never_fetches(self, make_service, clock):
        service, transport = make_service(lambda request: httpx.Response(200, json=PAYLOAD), api_key="")

        result = service.get()
        assert result.content == templates.WEATHER_NOT_CONFIGURED
        assert result.failure is FailureReason.NOT_CONFIGURED
        assert transport.calls == 0
        assert service.refresh().failure is FailureReason.NOT_CONFIGURED

    @pytest.mark.parametrize("status,message", [
        (404, "City not found"),
        (401, "API key rejected"),
        (500, "HTTP 500"),
    ])
    def test_http_errors(self, make_service, status, message):
        service, _ = make_service(lambda request: httpx.Response(status))

        outcome = service.refresh()
        assert outcome.failure is FailureReason.REMOTE_FETCH
        assert message in outcome.message

        result = service.get()
        assert result.content == templates.WEATHER_ERROR
        assert result.fallback_used

    def test_invalid_json(self, make_service, clock):
        service, _ = make_service(lambda request: httpx.Response(200, content=b"<html>"))
        assert service.refresh().failure is FailureReason.PARSE

    def test_network_error(self, make_service, clock):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        service, _ = make_service(handler)
        assert service.refresh().failure is FailureReason.REMOTE_FETCH

    def test_stale_value_served_on_failure(self, make_service, clock):
        responses = iter([httpx.Response(200, json=PAYLOAD), httpx.Response(503)])
        service, _ = make_service(lambda request: next(responses))

        fresh = service.get().content
        clock.advance(minutes=31)
        assert service.get().content == fresh
