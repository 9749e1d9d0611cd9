"""
Cached remote content.

Base class for services that fetch content from a remote source, keep it
for a time-to-live and fall back to static content when the source is
down. Subclasses implement ``_fetch`` (raise RemoteFetchError/ParseError
on failure) and ``get``.

The cached entry is immutable and swapped by reference, so readers never
observe a half-updated cache. Refreshes are serialized by a lock with a
second staleness check inside it, so concurrent stale reads cause a
single fetch. Readers that waited on a failed attempt reuse its outcome
instead of fetching again; a failure never moves ``last_refresh``.
"""
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Generic, Optional, Sized, TypeVar

from jester.core.errors import ParseError, RemoteFetchError
from jester.core.logging import logger
from jester.models.schemas import (
    ContentResult,
    FailureReason,
    RefreshOutcome,
    ServiceStatus,
)

T = TypeVar("T")

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class CacheEntry(Generic[T]):
    value: T
    last_refresh: datetime
    ttl: timedelta

    def expired(self, now: datetime) -> bool:
        return now - self.last_refresh >= self.ttl


class CachedContentService(ABC, Generic[T]):
    """Fetch-with-fallback service holding one cache entry."""

    name: str = "content"

    def __init__(self, ttl: timedelta, clock: Optional[Clock] = None):
        self.ttl = ttl
        self._clock: Clock = clock or datetime.now
        self._entry: Optional[CacheEntry[T]] = None
        self._refresh_lock = threading.Lock()
        self._attempts = 0
        self._last_outcome: Optional[RefreshOutcome] = None

    @property
    def configured(self) -> bool:
        """Whether the remote source can be reached at all."""
        return True

    @property
    def entry(self) -> Optional[CacheEntry[T]]:
        return self._entry

    def now(self) -> datetime:
        return self._clock()

    @abstractmethod
    def _fetch(self) -> T:
        """Fetch fresh content from the remote source."""

    @abstractmethod
    def get(self, key: Optional[str] = None) -> ContentResult:
        """Return content, refreshing first if the cache is stale."""

    def _is_stale(self, entry: Optional[CacheEntry[T]], now: datetime) -> bool:
        return entry is None or entry.expired(now)

    def refresh(self) -> RefreshOutcome:
        """Re-fetch unconditionally. On failure the current entry stays."""
        with self._refresh_lock:
            return self._refresh_locked()

    def refresh_if_stale(self) -> Optional[RefreshOutcome]:
        """Refresh only when stale. Returns None when no refresh was needed."""
        if not self._is_stale(self._entry, self.now()):
            return None
        attempts_seen = self._attempts
        with self._refresh_lock:
            # Another reader may have refreshed while we waited
            if not self._is_stale(self._entry, self.now()):
                return None
            # ... or tried and failed
            if self._attempts != attempts_seen:
                return self._last_outcome
            return self._refresh_locked()

    def _refresh_locked(self) -> RefreshOutcome:
        outcome = self._attempt_refresh()
        self._last_outcome = outcome
        self._attempts += 1
        return outcome

    def _attempt_refresh(self) -> RefreshOutcome:
        if not self.configured:
            return RefreshOutcome(ok=False, failure=FailureReason.NOT_CONFIGURED,
                                  message=f"{self.name} is not configured")
        try:
            value = self._fetch()
        except ParseError as e:
            logger.warning(f"{self.name}: could not parse remote content: {e}")
            return RefreshOutcome(ok=False, failure=FailureReason.PARSE, message=str(e))
        except RemoteFetchError as e:
            logger.warning(f"{self.name}: remote fetch failed: {e}")
            return RefreshOutcome(ok=False, failure=FailureReason.REMOTE_FETCH, message=str(e))

        self._entry = CacheEntry(value=value, last_refresh=self.now(), ttl=self.ttl)
        logger.info(f"{self.name}: cache refreshed")
        return RefreshOutcome(ok=True)

    def _entry_size(self, value: T) -> int:
        return len(value) if isinstance(value, Sized) else 1

    def status(self) -> ServiceStatus:
        entry = self._entry
        return ServiceStatus(
            name=self.name,
            configured=self.configured,
            cache_fresh=not self._is_stale(entry, self.now()),
            entries=self._entry_size(entry.value) if entry else 0,
            last_refresh=entry.last_refresh if entry else None,
        )

    def _failure_of(self, outcome: Optional[RefreshOutcome]) -> Optional[FailureReason]:
        if outcome is None or outcome.ok:
            return None
        return outcome.failure
