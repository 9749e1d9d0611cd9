"""
Weather Service

Current weather for the configured city from the OpenWeatherMap API.
The formatted report is cached; without an API key the service never
touches the network and answers with a not-configured notice.
"""
from contextlib import nullcontext
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import httpx

from jester.core.config import WeatherConfig
from jester.core.constants import USER_AGENT
from jester.core.errors import ParseError, RemoteFetchError
from jester.core.logging import logger
from jester.models.schemas import ContentResult, ContentSource, FailureReason
from jester.services import templates
from jester.services.cache import CachedContentService, Clock

HPA_TO_MMHG = 0.75


def _get_weather_emoji(icon: str) -> str:
    """Get emoji for an OpenWeatherMap icon code (e.g. '10d')."""
    emojis = {
        "01": "☀️",
        "02": "⛅",
        "03": "☁️",
        "04": "☁️",
        "09": "🌧️",
        "10": "🌦️",
        "11": "⛈️",
        "13": "❄️",
        "50": "🌫️",
    }
    return emojis.get(icon[:2], "🌤️")


def _format_temp(temp: float) -> str:
    """Format temperature."""
    return f"{temp:.1f}°C"


def format_weather(data: Dict[str, Any], city: str, updated_at: datetime) -> str:
    """Render an OpenWeatherMap current-weather payload."""
    try:
        weather = data["weather"][0]
        main = data["main"]
        wind = data.get("wind") or {}

        description = str(weather["description"])
        icon = str(weather.get("icon", ""))
        temp = float(main["temp"])
        feels_like = float(main["feels_like"])
        humidity = int(main["humidity"])
        pressure = float(main["pressure"])
        wind_speed = float(wind.get("speed", 0))
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise ParseError(f"Unexpected weather payload: {e}") from e

    name = data.get("name") or city
    lines = [
        f"🌤️ **Погода в {name}**",
        "",
        f"{_get_weather_emoji(icon)} **{description[:1].upper() + description[1:]}**",
        f"🌡️ **Температура:** {_format_temp(temp)}",
        f"🤔 **Ощущается как:** {_format_temp(feels_like)}",
        f"💧 **Влажность:** {humidity}%",
        f"📊 **Давление:** {int(pressure * HPA_TO_MMHG)} мм рт.ст.",
    ]
    if wind_speed > 0:
        lines.append(f"💨 **Ветер:** {wind_speed:.1f} м/с")

    lines.append("")
    lines.append(f"📅 *Обновлено: {updated_at.strftime('%d.%m.%Y %H:%M')}*")
    return "\n".join(lines)


class WeatherService(CachedContentService[str]):
    """Cached current-weather report."""

    name = "Погода"

    def __init__(
        self,
        config: WeatherConfig,
        http_client: Optional[httpx.Client] = None,
        clock: Optional[Clock] = None,
    ):
        super().__init__(ttl=timedelta(minutes=config.ttl_minutes), clock=clock)
        self.config = config
        self._http_client = http_client

    @property
    def configured(self) -> bool:
        return bool(self.config.api_key.strip())

    def _client(self):
        if self._http_client is not None:
            return nullcontext(self._http_client)
        return httpx.Client(timeout=self.config.timeout)

    def _entry_size(self, value: str) -> int:
        return 1

    def _fetch(self) -> str:
        params = {
            "q": self.config.city,
            "appid": self.config.api_key,
            "units": "metric",
            "lang": "ru",
        }
        try:
            with self._client() as client:
                response = client.get(self.config.api_url, params=params,
                                      headers={"User-Agent": USER_AGENT})
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise RemoteFetchError(f"City not found: {self.config.city}") from e
            if e.response.status_code == 401:
                raise RemoteFetchError("Weather API key rejected") from e
            raise RemoteFetchError(f"Weather API error: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise RemoteFetchError(f"Weather API unreachable: {e}") from e
        except ValueError as e:
            raise ParseError(f"Weather API returned invalid JSON: {e}") from e

        report = format_weather(data, self.config.city, self.now())
        logger.info(f"Weather updated for {self.config.city}")
        return report

    def get(self, key: Optional[str] = None) -> ContentResult:
        if not self.configured:
            return ContentResult(
                content=templates.WEATHER_NOT_CONFIGURED,
                source=ContentSource.FALLBACK,
                failure=FailureReason.NOT_CONFIGURED,
            )

        outcome = self.refresh_if_stale()
        entry = self.entry
        if entry is not None:
            return ContentResult(content=entry.value)

        return ContentResult(
            content=templates.WEATHER_ERROR,
            source=ContentSource.FALLBACK,
            failure=self._failure_of(outcome),
        )
