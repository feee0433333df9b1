#!/usr/bin/env python3
"""
Article batch cache with provider-aware staleness.

Keeps the last successfully fetched batch and its fetch time in a
key/value store. The upstream news provider resets its daily quota at
midnight UTC, so a batch stays fresh for the rest of its UTC day.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, time as dt_time
from typing import Any, Dict, List, Optional

import pytz

from .models.article import Article
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

LAST_FETCH_KEY = 'lastFetchTime'
ARTICLES_KEY = 'cachedArticles'

# Provider quota reset (00:00 UTC) plus grace before we trust it happened
RESET_HOUR_UTC = 0
DEFAULT_GRACE_MINUTES = 5


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def utc_now() -> datetime:
    return datetime.now(pytz.utc)


def reset_instant(grace_minutes: int = DEFAULT_GRACE_MINUTES) -> dt_time:
    """Time of day (UTC) after which the provider is assumed to have reset."""
    return dt_time(RESET_HOUR_UTC, grace_minutes)


@dataclass
class CacheEntry:
    """The single persisted batch."""
    batch: List[Article]
    fetched_at_utc: datetime

    def age_seconds(self, now: Optional[datetime] = None) -> float:
        now = as_utc(now) if now else utc_now()
        return (now - self.fetched_at_utc).total_seconds()


class ArticleCache:
    """
    Persists the last fetched batch and decides when it is stale.

    Both keys are written together and cleared together. A half-present or
    undecodable pair is treated as no entry.
    """

    def __init__(self, store: KeyValueStore, grace_minutes: int = DEFAULT_GRACE_MINUTES):
        """
        Initialize article cache.

        Args:
            store: Backing key/value store
            grace_minutes: Minutes after 00:00 UTC before a new day's refresh is due
        """
        self._store = store
        self.grace_minutes = grace_minutes
        self._reset_time = reset_instant(grace_minutes)

    def _read_entry(self) -> Optional[CacheEntry]:
        raw_time = self._store.get(LAST_FETCH_KEY)
        raw_articles = self._store.get(ARTICLES_KEY)

        if raw_time is None and raw_articles is None:
            return None
        if raw_time is None or raw_articles is None:
            raise ValueError("cache keys are not paired")

        fetched_ms = int(raw_time)
        data = json.loads(raw_articles)
        if not isinstance(data, list):
            raise ValueError("cached articles are not a list")

        batch = [Article.from_dict(item) for item in data]
        fetched_at = datetime.fromtimestamp(fetched_ms / 1000.0, tz=pytz.utc)
        return CacheEntry(batch=batch, fetched_at_utc=fetched_at)

    def load(self) -> Optional[CacheEntry]:
        """
        Load the cached batch.

        Returns:
            CacheEntry, or None when nothing usable is stored
        """
        try:
            entry = self._read_entry()
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Discarding invalid article cache: {e}")
            self.clear()
            return None

        if entry is None:
            logger.debug("Article cache is empty")
        else:
            logger.debug(f"Loaded {len(entry.batch)} cached articles fetched at {entry.fetched_at_utc.isoformat()}")
        return entry

    def store(self, batch: List[Article], now: Optional[datetime] = None) -> CacheEntry:
        """
        Overwrite the cache with ``batch`` stamped at ``now`` (UTC).

        Args:
            batch: Filtered articles to persist
            now: Fetch time; defaults to the current UTC time

        Returns:
            The entry that was written
        """
        fetched_at = as_utc(now) if now else utc_now()
        fetched_ms = int(fetched_at.timestamp() * 1000)

        self._store.set_many({
            LAST_FETCH_KEY: str(fetched_ms),
            ARTICLES_KEY: json.dumps([article.to_dict() for article in batch], ensure_ascii=False)
        })
        logger.info(f"Cached {len(batch)} articles at {fetched_at.isoformat()}")
        return CacheEntry(batch=list(batch), fetched_at_utc=fetched_at)

    def is_stale(self, now_utc: Optional[datetime] = None) -> bool:
        """
        Decide whether the cached batch should be refetched.

        Stale when the fetch happened on an earlier UTC day and the current
        UTC time is past the reset instant. An empty cache is always stale.
        """
        now_utc = as_utc(now_utc) if now_utc else utc_now()
        try:
            entry = self._read_entry()
        except (ValueError, TypeError, AttributeError):
            return True
        if entry is None:
            return True

        fetched = entry.fetched_at_utc
        return fetched.date() < now_utc.date() and now_utc.time() >= self._reset_time

    def clear(self) -> None:
        """Remove the cached batch and its timestamp together."""
        self._store.delete_many([LAST_FETCH_KEY, ARTICLES_KEY])
        logger.info("Article cache cleared")

    def stats(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Get cache statistics for the ``cache stats`` command."""
        now = as_utc(now) if now else utc_now()
        entry = self.load()
        if entry is None:
            return {
                'articles': 0,
                'fetched_at': None,
                'age_seconds': None,
                'is_stale': True,
                'reset_time_utc': self._reset_time.strftime('%H:%M')
            }

        return {
            'articles': len(entry.batch),
            'fetched_at': entry.fetched_at_utc.isoformat(),
            'age_seconds': entry.age_seconds(now),
            'is_stale': self.is_stale(now),
            'reset_time_utc': self._reset_time.strftime('%H:%M')
        }
