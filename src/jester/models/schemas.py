"""Data models shared by the dispatch pipeline."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Union


# =============================================================================
# Incoming events
# =============================================================================

@dataclass(frozen=True)
class TextMessage:
    """A plain text message (commands included)."""
    text: str
    chat_id: int
    user_id: Optional[int] = None
    user_name: str = "Unknown"
    is_group: bool = False
    addresses_bot: bool = False


@dataclass(frozen=True)
class CallbackAction:
    """A press on an inline control, identified by its opaque action token."""
    data: str
    chat_id: int
    user_id: Optional[int] = None
    user_name: str = "Unknown"
    is_group: bool = False


IncomingEvent = Union[TextMessage, CallbackAction]


def event_text(event: IncomingEvent) -> str:
    """Human-readable input text of an event, as recorded in the message log."""
    if isinstance(event, CallbackAction):
        return f"Callback: {event.data}"
    return event.text


# =============================================================================
# Classification
# =============================================================================

class Tag(str, Enum):
    """Classification outcome. Exactly one per event."""
    COMMAND = "command"
    SPECIAL_KEYWORD = "special_keyword"
    JOKE_REQUEST = "joke_request"
    WEATHER_REQUEST = "weather_request"
    HOROSCOPE_REQUEST = "horoscope_request"
    GAME_REQUEST = "game_request"
    CALLBACK_ROUTE = "callback_route"
    AI_FALLBACK = "ai_fallback"
    IGNORE = "ignore"


@dataclass(frozen=True)
class ClassificationResult:
    tag: Tag
    argument: Optional[str] = None

    @property
    def is_ignored(self) -> bool:
        return self.tag is Tag.IGNORE


# =============================================================================
# Content services
# =============================================================================

class FailureReason(str, Enum):
    REMOTE_FETCH = "remote_fetch"
    PARSE = "parse"
    INVALID_KEY = "invalid_key"
    NOT_CONFIGURED = "not_configured"


class ContentSource(str, Enum):
    CACHE = "cache"
    FALLBACK = "fallback"
    HINT = "hint"


@dataclass(frozen=True)
class ContentResult:
    """What a content service handed back and where it came from."""
    content: str
    source: ContentSource = ContentSource.CACHE
    failure: Optional[FailureReason] = None

    @property
    def fallback_used(self) -> bool:
        return self.source is ContentSource.FALLBACK


@dataclass(frozen=True)
class RefreshOutcome:
    ok: bool
    failure: Optional[FailureReason] = None
    message: str = ""


@dataclass(frozen=True)
class ServiceStatus:
    """Snapshot of a cached service, for the status report."""
    name: str
    configured: bool
    cache_fresh: bool
    entries: int = 0
    last_refresh: Optional[datetime] = None


# =============================================================================
# Game
# =============================================================================

@dataclass(frozen=True)
class GameResult:
    number: int
    timestamp: float


# =============================================================================
# Outbound
# =============================================================================

class Controls(str, Enum):
    """Opaque interactive control sets; the gateway decides how they look."""
    MAIN_MENU = "main_menu"
    ZODIAC_MENU = "zodiac_menu"
    CREATOR_INFO = "creator_info"


@dataclass(frozen=True)
class ResponseChunk:
    """One size-bounded segment of a response."""
    content: str
    index: int
    total: int
    marker: str = ""

    @property
    def is_last(self) -> bool:
        return self.index == self.total

    @property
    def text(self) -> str:
        return self.content + self.marker


@dataclass(frozen=True)
class OutgoingMessage:
    text: str
    controls: Optional[Controls] = None


@dataclass
class DispatchResult:
    """Everything the messaging gateway needs to deliver one dispatch."""
    messages: List[OutgoingMessage] = field(default_factory=list)
    tag: Tag = Tag.IGNORE
    animate: bool = False
    error: Optional[str] = None
    latency_ms: int = 0

    @property
    def should_reply(self) -> bool:
        return bool(self.messages)


@dataclass
class AuditRecord:
    """One row of the message log."""
    chat_id: int
    user_id: Optional[int]
    user_name: str
    input_text: str
    output_text: Optional[str]
    tag: str
    is_group: bool
    latency_ms: Optional[int] = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=datetime.now)
