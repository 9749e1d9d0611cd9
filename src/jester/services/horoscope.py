"""
Horoscope Service

Daily horoscopes for the twelve zodiac signs. All signs are fetched in
one refresh (one request per sign) and cached until the TTL runs out or
the calendar day changes in the configured timezone, whichever comes
first. A sign the remote API could not deliver is answered with its
static fallback text.
"""
import random
import time
from contextlib import nullcontext
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional

import httpx
import pytz

from jester.core.config import HoroscopeConfig
from jester.core.constants import USER_AGENT
from jester.core.content import ZodiacSign
from jester.core.errors import ParseError, RemoteFetchError
from jester.core.logging import logger
from jester.models.schemas import ContentResult, ContentSource, FailureReason
from jester.services.cache import CacheEntry, CachedContentService, Clock


def format_horoscope(sign: ZodiacSign, text: str, day: date) -> str:
    return (
        f"🔮 **Гороскоп для {sign.emoji} {sign.title}**\n\n"
        f"{text}\n\n"
        f"📅 *{day.strftime('%d.%m.%Y')}*"
    )


class HoroscopeService(CachedContentService[Dict[str, str]]):
    """Daily horoscopes keyed by Russian sign name."""

    name = "Гороскопы"

    def __init__(
        self,
        config: HoroscopeConfig,
        zodiac: List[ZodiacSign],
        http_client: Optional[httpx.Client] = None,
        clock: Optional[Clock] = None,
        sleep: Callable[[float], None] = time.sleep,
        rng: Optional[random.Random] = None,
    ):
        self.tz = pytz.timezone(config.timezone)
        super().__init__(
            ttl=timedelta(hours=config.ttl_hours),
            clock=clock or (lambda: datetime.now(self.tz)),
        )
        self.config = config
        self.zodiac = list(zodiac)
        self._by_sign = {z.sign: z for z in self.zodiac}
        self._http_client = http_client
        self._sleep = sleep
        self._rng = rng or random.Random()

    @property
    def signs(self) -> List[str]:
        return [z.sign for z in self.zodiac]

    def _client(self):
        if self._http_client is not None:
            return nullcontext(self._http_client)
        return httpx.Client(timeout=self.config.timeout)

    def _local_date(self, moment: datetime) -> date:
        if moment.tzinfo is None:
            return moment.date()
        return moment.astimezone(self.tz).date()

    def _is_stale(self, entry: Optional[CacheEntry[Dict[str, str]]], now: datetime) -> bool:
        if entry is None or entry.expired(now):
            return True
        return self._local_date(entry.last_refresh) != self._local_date(now)

    def _fetch_sign(self, client: httpx.Client, sign: ZodiacSign) -> str:
        params = {"sign": sign.api_name, "day": "TODAY"}
        try:
            response = client.get(self.config.api_url, params=params,
                                  headers={"User-Agent": USER_AGENT})
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise RemoteFetchError(f"Horoscope API HTTP {e.response.status_code} for {sign.api_name}") from e
        except httpx.HTTPError as e:
            raise RemoteFetchError(f"Horoscope API unreachable: {e}") from e
        except ValueError as e:
            raise ParseError(f"Horoscope API returned invalid JSON for {sign.api_name}") from e

        data = payload.get("data") if isinstance(payload, dict) else None
        text = data.get("horoscope_data") if isinstance(data, dict) else None
        if not isinstance(text, str) or not text.strip():
            raise ParseError(f"No horoscope text for {sign.api_name}")
        return text.strip()

    def _fetch(self) -> Dict[str, str]:
        texts: Dict[str, str] = {}
        errors: List[str] = []
        with self._client() as client:
            for i, sign in enumerate(self.zodiac):
                if i and self.config.request_delay > 0:
                    self._sleep(self.config.request_delay)
                try:
                    texts[sign.sign] = self._fetch_sign(client, sign)
                except RemoteFetchError as e:
                    errors.append(str(e))

        if not texts:
            raise RemoteFetchError(f"All horoscope requests failed ({errors[0] if errors else 'no signs'})")
        if errors:
            logger.warning(f"Horoscopes fetched for {len(texts)}/{len(self.zodiac)} signs")
        return texts

    def hint(self) -> str:
        return "❓ Неизвестный знак зодиака. Доступные знаки: " + ", ".join(self.signs)

    def get(self, key: Optional[str] = None) -> ContentResult:
        sign_key = (key or "").strip().lower()
        sign = self._by_sign.get(sign_key)
        if sign is None:
            logger.info(f"Horoscope requested for unknown sign: {key!r}")
            return ContentResult(
                content=self.hint(),
                source=ContentSource.HINT,
                failure=FailureReason.INVALID_KEY,
            )

        outcome = self.refresh_if_stale()
        entry = self.entry
        today = self._local_date(self.now())
        text = entry.value.get(sign.sign) if entry else None
        if text:
            return ContentResult(content=format_horoscope(sign, text, today))

        return ContentResult(
            content=format_horoscope(sign, sign.fallback, today),
            source=ContentSource.FALLBACK,
            failure=self._failure_of(outcome),
        )

    def random_horoscope(self) -> ContentResult:
        return self.get(self._rng.choice(self.signs))

    def zodiac_guide(self) -> str:
        """Sign-selection prompt listing every sign."""
        lines = ["🔮 **Знаки зодиака:**", ""]
        lines.extend(f"{z.emoji} **{z.title}**" for z in self.zodiac)
        lines.append("")
        lines.append("📝 *Напишите название знака для получения гороскопа*")
        lines.append("🎲 *Или нажмите «Случайный» для случайного гороскопа*")
        return "\n".join(lines)
