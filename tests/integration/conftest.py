import asyncio
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
import pytz

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from core.article_cache import ArticleCache  # noqa: E402
from core.events import FeedEvent, FeedEventType  # noqa: E402
from core.feed_controller import ArticleFeedController  # noqa: E402
from core.image_resolver import ImageResolver  # noqa: E402
from core.models.article import Article  # noqa: E402
from core.storage import MemoryStore  # noqa: E402

POLL_TEXT = "Should cities ban cars downtown?\nYes, fully\nOnly on weekends\nNo"


def make_article(number: int, **overrides: Any) -> Article:
    fields = {
        "title": f"Headline number {number}",
        "url": f"https://news.example.com/{number}",
        "source_name": "Example Wire",
        "description": f"A sufficiently long description for story {number}.",
        "image_url": f"https://img.example.com/{number}.jpg",
        "published_at": datetime(2024, 3, 1, 8, 0, tzinfo=pytz.utc),
    }
    fields.update(overrides)
    return Article(**fields)


class FakeClock:
    """Callable clock; tests move it explicitly."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


class FakeNewsClient:
    def __init__(self, batches: Optional[Dict[str, Any]] = None, default: Optional[List[Article]] = None) -> None:
        self.batches = batches or {}
        self.default = default if default is not None else []
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: List[str] = []

    async def fetch_news(self, query: str = "top") -> List[Article]:
        self.calls.append(query)
        gate = self.gates.get(query)
        if gate is not None:
            await gate.wait()
        result = self.batches.get(query, self.default)
        if isinstance(result, Exception):
            raise result
        return list(result)


class FakePollGenerator:
    def __init__(self, text: str = POLL_TEXT) -> None:
        self.text = text
        self.responses: Dict[str, Any] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.calls: List[str] = []

    async def generate_content(self, article: Article) -> str:
        self.calls.append(article.title)
        gate = self.gates.get(article.title)
        if gate is not None:
            await gate.wait()
        result = self.responses.get(article.title, self.text)
        if isinstance(result, Exception):
            raise result
        return result


class EventRecorder:
    """Listener that keeps every event."""

    def __init__(self) -> None:
        self.events: List[FeedEvent] = []

    def __call__(self, event: FeedEvent) -> None:
        self.events.append(event)

    def of_type(self, event_type: FeedEventType) -> List[FeedEvent]:
        return [event for event in self.events if event.type == event_type]

    def last(self, event_type: Optional[FeedEventType] = None) -> Optional[FeedEvent]:
        events = self.of_type(event_type) if event_type else self.events
        return events[-1] if events else None


class GatedSleep:
    """Sleep replacement that blocks until released."""

    def __init__(self) -> None:
        self.release = asyncio.Event()
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await self.release.wait()


class ClockSleep:
    """Sleep replacement that advances a FakeClock, then parks after ``max_calls``."""

    def __init__(self, clock: FakeClock, max_calls: int) -> None:
        self.clock = clock
        self.max_calls = max_calls
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if len(self.delays) > self.max_calls:
            await asyncio.Event().wait()
        self.clock.advance(seconds=delay)


async def instant_sleep(_delay: float) -> None:
    await asyncio.sleep(0)


async def drain(rounds: int = 10) -> None:
    """Let pending tasks (poll generation, timers) run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 3, 1, 12, 0, tzinfo=pytz.utc))


@pytest.fixture
def sample_articles() -> List[Article]:
    return [make_article(number) for number in range(5)]


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def article_cache(memory_store) -> ArticleCache:
    return ArticleCache(memory_store)


@pytest.fixture
def news_client(sample_articles) -> FakeNewsClient:
    return FakeNewsClient(default=sample_articles)


@pytest.fixture
def poll_generator() -> FakePollGenerator:
    return FakePollGenerator()


@pytest.fixture
def controller_factory(news_client, poll_generator, article_cache, clock):
    def _factory(**overrides: Any) -> ArticleFeedController:
        options = {
            "news_client": news_client,
            "poll_generator": poll_generator,
            "cache": article_cache,
            "image_resolver": ImageResolver(proxy_endpoint="/api/proxy-image", fallback_image="fallback.svg"),
            "settle_delay": 0.3,
            "now_fn": clock,
            "sleep": instant_sleep,
        }
        options.update(overrides)
        return ArticleFeedController(**options)

    return _factory


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()
