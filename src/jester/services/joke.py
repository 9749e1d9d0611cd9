"""
Joke Service - random jokes from the anekdot.ru RSS feeds.

Jokes are cached for a few hours. When both feeds are down (or yield
nothing usable) a joke from the static fallback list is returned.
"""
import random
import re
import xml.etree.ElementTree as ET
from contextlib import nullcontext
from datetime import timedelta
from typing import List, Optional

import httpx

from jester.core.config import JokeConfig
from jester.core.constants import USER_AGENT
from jester.core.errors import ParseError, RemoteFetchError
from jester.core.logging import logger
from jester.models.schemas import ContentResult, ContentSource
from jester.services import templates
from jester.services.cache import CachedContentService, Clock

MIN_JOKE_LENGTH = 10
MAX_JOKE_LENGTH = 4000

# Text that shows up when a feed serves an error page instead of jokes
BLOCKED_MARKERS = ("error", "ошибка", "404", "не найден")

# UTF-8 bytes of cp1251 text decoded as UTF-8 (or Latin-1 leftovers)
MOJIBAKE_MARKERS = ("Ð", "Ñ", "â€", "Â", "�")

_INVALID_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")
_WHITESPACE = re.compile(r"\s+")
_TAG = re.compile(r"<[^>]+>")
_BREAK = re.compile(r"<(p|div|br)[^>]*>", re.IGNORECASE)

HTML_ENTITIES = {
    "&nbsp;": " ",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": "\"",
    "&#39;": "'",
    "&amp;": "&",
}


def decode_feed(raw: bytes) -> str:
    """Decode feed bytes as UTF-8, switching to Windows-1251 on mojibake."""
    text = raw.decode("utf-8", errors="replace")
    if any(marker in text for marker in MOJIBAKE_MARKERS):
        logger.debug("Joke feed looks mis-decoded, retrying as windows-1251")
        text = raw.decode("cp1251", errors="replace")
    return text


def clean_joke(text: str) -> str:
    """Strip HTML and collapse whitespace."""
    text = _BREAK.sub(" ", text)
    text = _TAG.sub("", text)
    for entity, char in HTML_ENTITIES.items():
        text = text.replace(entity, char)
    return _WHITESPACE.sub(" ", text).strip()


def is_valid_joke(text: str) -> bool:
    if not text or not (MIN_JOKE_LENGTH <= len(text) <= MAX_JOKE_LENGTH):
        return False
    lowered = text.lower()
    return not any(marker in lowered for marker in BLOCKED_MARKERS)


def parse_feed(xml_text: str) -> List[str]:
    """Extract valid jokes from the <item><description> elements of a feed."""
    xml_text = _INVALID_XML_CHARS.sub("", xml_text).lstrip("\ufeff")
    # HTML entity that XML does not define
    xml_text = xml_text.replace("&nbsp;", " ")
    # The XML declaration may name a charset we already decoded from
    xml_text = re.sub(r"^\s*<\?xml[^>]*\?>", "", xml_text)
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise ParseError(f"Malformed joke feed: {e}") from e

    jokes = []
    for item in root.iter("item"):
        description = item.findtext("description")
        if not description:
            continue
        joke = clean_joke(description)
        if is_valid_joke(joke):
            jokes.append(joke)

    logger.debug(f"Parsed {len(jokes)} jokes from feed")
    return jokes


class JokeService(CachedContentService[List[str]]):
    """Random jokes with a static fallback."""

    name = "Анекдоты"

    def __init__(
        self,
        config: JokeConfig,
        fallback_jokes: List[str],
        http_client: Optional[httpx.Client] = None,
        clock: Optional[Clock] = None,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(ttl=timedelta(hours=config.ttl_hours), clock=clock)
        self.config = config
        self.fallback_jokes = list(fallback_jokes)
        self._http_client = http_client
        self._rng = rng or random.Random()
        self._timeout = httpx.Timeout(
            connect=config.connect_timeout,
            read=config.read_timeout,
            write=config.write_timeout,
            pool=config.connect_timeout,
        )

    def _client(self):
        if self._http_client is not None:
            return nullcontext(self._http_client)
        return httpx.Client(timeout=self._timeout, follow_redirects=True)

    def _fetch_feed(self, url: str) -> List[str]:
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/rss+xml, application/xml, text/xml",
            "Accept-Charset": "UTF-8",
        }
        try:
            with self._client() as client:
                response = client.get(url, headers=headers)
                response.raise_for_status()
                raw = response.content
        except httpx.HTTPStatusError as e:
            raise RemoteFetchError(f"Joke feed returned HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise RemoteFetchError(f"Joke feed unreachable: {e}") from e

        if not raw:
            raise RemoteFetchError("Joke feed returned an empty body")
        return parse_feed(decode_feed(raw))

    def _fetch(self) -> List[str]:
        try:
            jokes = self._fetch_feed(self.config.rss_url)
        except RemoteFetchError as e:
            logger.warning(f"Primary joke feed failed: {e}")
            jokes = []

        if not jokes:
            logger.warning("Primary joke feed gave nothing, trying the backup feed")
            jokes = self._fetch_feed(self.config.backup_rss_url)

        if not jokes:
            raise RemoteFetchError("No jokes in either feed")

        logger.info(f"Loaded {len(jokes)} jokes")
        return jokes

    def random_joke(self) -> ContentResult:
        """Pick a random joke, refreshing the cache first if it is stale."""
        outcome = self.refresh_if_stale()
        entry = self.entry
        if entry and entry.value:
            return ContentResult(content=self._rng.choice(entry.value))

        logger.warning("Joke cache is empty, using a fallback joke")
        return ContentResult(
            content=self._rng.choice(self.fallback_jokes),
            source=ContentSource.FALLBACK,
            failure=self._failure_of(outcome),
        )

    def get(self, key: Optional[str] = None) -> ContentResult:
        """Random joke with the intro line prepended."""
        result = self.random_joke()
        return ContentResult(
            content=templates.JOKE_INTRO + result.content,
            source=result.source,
            failure=result.failure,
        )
