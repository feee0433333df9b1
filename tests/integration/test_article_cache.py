import json
import logging
from datetime import datetime

import pytest
import pytz

from core.article_cache import ARTICLES_KEY, LAST_FETCH_KEY, ArticleCache
from core.storage import JsonFileStore, MemoryStore

from conftest import make_article


def utc(*args):
    return datetime(*args, tzinfo=pytz.utc)


def test_store_writes_both_keys_and_loads_back(article_cache, memory_store, sample_articles):
    """Test that a stored batch round-trips with its fetch time."""
    fetched_at = utc(2024, 3, 1, 9, 30)
    article_cache.store(sample_articles, fetched_at)

    assert memory_store.keys() == {LAST_FETCH_KEY, ARTICLES_KEY}
    assert memory_store.get(LAST_FETCH_KEY) == str(int(fetched_at.timestamp() * 1000))

    entry = article_cache.load()
    assert entry.fetched_at_utc == fetched_at
    assert entry.batch == sample_articles


def test_store_overwrites_previous_batch(article_cache, sample_articles):
    """Test that only the latest batch is kept."""
    article_cache.store(sample_articles, utc(2024, 3, 1, 9))
    article_cache.store(sample_articles[:2], utc(2024, 3, 1, 10))

    entry = article_cache.load()
    assert len(entry.batch) == 2
    assert entry.fetched_at_utc == utc(2024, 3, 1, 10)


def test_empty_cache_is_stale(article_cache):
    """Test that a missing entry is always stale."""
    assert article_cache.load() is None
    assert article_cache.is_stale(utc(2024, 3, 1, 12))


@pytest.mark.parametrize("fetched_at, now, expected", [
    (utc(2024, 3, 1, 9), utc(2024, 3, 1, 23, 59), False),    # same UTC day
    (utc(2024, 3, 1, 23), utc(2024, 3, 2, 0, 3), False),     # new day, before grace
    (utc(2024, 3, 1, 23), utc(2024, 3, 2, 0, 5), True),      # exactly at reset instant
    (utc(2024, 3, 1, 23), utc(2024, 3, 2, 0, 10), True),
    (utc(2024, 3, 1, 9), utc(2024, 3, 4, 0, 1), False),      # several days old, still before grace
    (utc(2024, 3, 1, 9), utc(2024, 3, 4, 8), True),
])
def test_staleness_follows_provider_reset(article_cache, sample_articles, fetched_at, now, expected):
    """Test staleness at the UTC day boundary with the five minute grace."""
    article_cache.store(sample_articles, fetched_at)

    assert article_cache.is_stale(now) is expected


def test_staleness_uses_utc_not_local_time(article_cache, sample_articles):
    """Test that an aware non-UTC clock is converted before comparing days."""
    article_cache.store(sample_articles, utc(2024, 3, 1, 22))
    new_york = pytz.timezone("America/New_York")
    # 2024-03-01 20:00 in New York is 2024-03-02 01:00 UTC
    now_local = new_york.localize(datetime(2024, 3, 1, 20, 0))

    assert article_cache.is_stale(now_local)


def test_unpaired_keys_are_discarded(memory_store, caplog):
    """Test that a half-written cache is treated as empty and cleared."""
    caplog.set_level(logging.WARNING, logger="core.article_cache")
    memory_store.set(ARTICLES_KEY, json.dumps([make_article(0).to_dict()]))
    cache = ArticleCache(memory_store)

    assert cache.load() is None
    assert memory_store.keys() == set()
    assert "Discarding invalid article cache" in caplog.text


@pytest.mark.parametrize("raw_time, raw_articles", [
    ("not-a-number", "[]"),
    ("1709280000000", "{not json"),
    ("1709280000000", json.dumps({"articles": []})),
])
def test_corrupt_cache_is_discarded(raw_time, raw_articles):
    """Test that undecodable values degrade to an empty, stale cache."""
    store = MemoryStore({LAST_FETCH_KEY: raw_time, ARTICLES_KEY: raw_articles})
    cache = ArticleCache(store)

    assert cache.is_stale(utc(2024, 3, 1, 12))
    assert cache.load() is None
    assert store.keys() == set()


def test_clear_removes_both_keys(article_cache, memory_store, sample_articles):
    """Test that clearing removes the batch and its timestamp together."""
    article_cache.store(sample_articles, utc(2024, 3, 1, 9))
    article_cache.clear()

    assert memory_store.keys() == set()


def test_stats_reports_age_and_reset_time(article_cache, sample_articles):
    """Test cache statistics."""
    article_cache.store(sample_articles, utc(2024, 3, 1, 9))
    stats = article_cache.stats(utc(2024, 3, 1, 12))

    assert stats["articles"] == 5
    assert stats["age_seconds"] == 3 * 3600
    assert stats["is_stale"] is False
    assert stats["reset_time_utc"] == "00:05"


def test_cache_survives_file_store_restart(tmp_path, sample_articles):
    """Test persistence across store instances."""
    path = tmp_path / "cache.json"
    ArticleCache(JsonFileStore(str(path))).store(sample_articles, utc(2024, 3, 1, 9))

    entry = ArticleCache(JsonFileStore(str(path))).load()

    assert [article.title for article in entry.batch] == [article.title for article in sample_articles]
    assert entry.batch[0].published_at == sample_articles[0].published_at
