#!/usr/bin/env python3
"""
Article Feed Controller

Orchestrates fetch-or-serve-from-cache, holds the navigable cursor over
the active batch and drives per-article poll generation. The controller
is presentation-agnostic: views subscribe to FeedEvents and call the
navigation coroutines.

State machine:
    IDLE --fetch--> LOADING --success--> READY(cursor=0)
                            --empty/failure--> ERROR(message)
    READY --next/prev/jump/vote--> READY
    any --fetch--> LOADING (cursor and in-flight poll content discarded)
"""

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from .article_cache import ArticleCache, utc_now
from .categories import HEADLINES_QUERY, query_for_category
from .events import EventDispatcher, FeedEventType, FeedListener
from .exceptions import EmptyResultError, ErrorRecovery, FeedFetchError
from .filtering import ArticleFilterPolicy
from .image_resolver import ImageResolver
from .models.article import Article
from .models.cursor import FeedCursor
from .models.poll import PollContent
from .models.view import ArticleView
from .poll_parser import PollContentParser
from .refresh_scheduler import RefreshScheduler

logger = logging.getLogger(__name__)

DEFAULT_SETTLE_DELAY = 0.3  # seconds


class FeedState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


class ArticleFeedController:
    """
    Feed state machine for one feed view.

    All mutable feed state lives on the instance. Collaborators:
        news_client: ``async fetch_news(query) -> List[Article]``
        poll_generator: ``async generate_content(article) -> str``
    """

    def __init__(self,
                 news_client,
                 poll_generator,
                 cache: ArticleCache,
                 scheduler: Optional[RefreshScheduler] = None,
                 image_resolver: Optional[ImageResolver] = None,
                 poll_parser: Optional[PollContentParser] = None,
                 filter_policy: Optional[ArticleFilterPolicy] = None,
                 settle_delay: float = DEFAULT_SETTLE_DELAY,
                 now_fn: Callable[[], datetime] = utc_now,
                 sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep):
        """
        Initialize controller.

        Args:
            news_client: News collaborator
            poll_generator: Content-generation collaborator
            cache: Persisted batch cache
            scheduler: Daily refresh scheduler (None disables refresh checks)
            image_resolver: Image URL resolver
            poll_parser: Poll text parser
            filter_policy: Article validity predicate
            settle_delay: Seconds a navigation blocks further navigation
            now_fn: Clock used for staleness decisions
            sleep: Coroutine function used for the settle delay
        """
        self._news = news_client
        self._generator = poll_generator
        self._cache = cache
        self._scheduler = scheduler
        self._resolver = image_resolver or ImageResolver()
        self._parser = poll_parser or PollContentParser()
        self._filter = filter_policy or ArticleFilterPolicy()
        self._settle_delay = settle_delay
        self._now = now_fn
        self._sleep = sleep

        self._events = EventDispatcher()
        self._state = FeedState.IDLE
        self._articles: List[Article] = []
        self._cursor: Optional[FeedCursor] = None
        self._view: Optional[ArticleView] = None
        self._error_message: Optional[str] = None
        self._query = HEADLINES_QUERY
        self._initialized = False

        self._is_transitioning = False
        self._transition_id = 0
        self._fetch_generation = 0
        self._poll_tasks: Dict[int, asyncio.Task] = {}
        self._votes: List[Dict[str, Any]] = []

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def cursor(self) -> Optional[FeedCursor]:
        return self._cursor

    @property
    def current_view(self) -> Optional[ArticleView]:
        return self._view

    @property
    def articles(self) -> List[Article]:
        return list(self._articles)

    @property
    def error_message(self) -> Optional[str]:
        return self._error_message

    @property
    def is_transitioning(self) -> bool:
        return self._is_transitioning

    @property
    def query(self) -> str:
        return self._query

    @property
    def votes(self) -> List[Dict[str, Any]]:
        return list(self._votes)

    def subscribe(self, listener: FeedListener) -> Callable[[], None]:
        """Subscribe a presentation listener; returns an unsubscribe callable."""
        return self._events.subscribe(listener)

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data summary of the controller, logged when a browse session ends."""
        return {
            'state': self._state.value,
            'query': self._query,
            'index': self._cursor.index if self._cursor else None,
            'total': self._cursor.total if self._cursor else 0,
            'is_transitioning': self._is_transitioning,
            'error': self._error_message,
            'pending_polls': sorted(self._poll_tasks),
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def initialize(self, query: str = HEADLINES_QUERY) -> bool:
        """
        Serve the cached batch if fresh, otherwise fetch; then arm the daily
        refresh check.

        Args:
            query: Starting query; only headlines are served from the cache

        Returns:
            True on the first call, False on repeated calls (no-op)
        """
        if self._initialized:
            logger.debug("Feed controller already initialized")
            return False
        self._initialized = True
        logger.info("Initializing feed controller")

        query = query or HEADLINES_QUERY
        entry = self._cache.load() if query == HEADLINES_QUERY else None
        batch = self._filter.apply(entry.batch) if entry else []
        if batch and not self._cache.is_stale(self._now()):
            logger.info(f"Serving {len(batch)} cached articles from {entry.fetched_at_utc.isoformat()}")
            self._query = HEADLINES_QUERY
            self._enter_ready(batch)
        else:
            await self.fetch(query)

        if self._scheduler is not None:
            self._scheduler.arm(self._refresh_check)
        return True

    async def close(self) -> None:
        """Stop the refresh timer and drop pending poll work."""
        if self._scheduler is not None:
            self._scheduler.cancel()
        self._cancel_poll_tasks()

    async def _refresh_check(self) -> None:
        if self._state == FeedState.LOADING:
            logger.debug("Refresh check skipped, fetch already in progress")
            return
        if self._cache.is_stale(self._now()):
            logger.info("Cached articles are stale after provider reset, refetching")
            await self.fetch(self._query)
        else:
            logger.debug("Cached articles still fresh")

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def fetch(self, query: str = HEADLINES_QUERY) -> bool:
        """
        Fetch, filter and cache a batch, then show its first article.

        Args:
            query: 'top' for headlines, otherwise a free-text query

        Returns:
            True if the feed ended up READY with the new batch
        """
        self._fetch_generation += 1
        generation = self._fetch_generation
        self._query = query or HEADLINES_QUERY
        self._discard_view()
        self._error_message = None
        self._set_state(FeedState.LOADING)
        logger.info(f"Fetching articles for query {self._query!r}")

        try:
            fetched = await self._news.fetch_news(self._query)
            batch = self._filter.apply(fetched)
            if not batch:
                raise EmptyResultError(self._query, len(fetched))
        except FeedFetchError as e:
            if generation != self._fetch_generation:
                logger.info(f"Ignoring failure of superseded fetch: {e.message}")
                return False
            logger.error(f"Error fetching news: {e.message}", extra={'error': e.to_dict()})
            self._enter_error(e.message)
            return False
        except Exception as e:
            if generation != self._fetch_generation:
                return False
            logger.error(f"Unexpected error fetching news: {e}", exc_info=True)
            self._enter_error(ErrorRecovery.user_message(e))
            return False

        if generation != self._fetch_generation:
            logger.info("Discarding results of superseded fetch")
            return False

        logger.info(f"Fetched {len(fetched)} articles, {len(batch)} usable")
        try:
            self._cache.store(batch, self._now())
        except OSError as e:
            logger.warning(f"Could not persist article cache: {e}")

        self._enter_ready(batch)
        return True

    async def select_category(self, category: str) -> bool:
        """Fetch the batch for a category key ('all' for headlines)."""
        return await self.fetch(query_for_category(category))

    async def search(self, term: str) -> bool:
        """Fetch articles matching a free-text search; blank terms are ignored."""
        term = (term or '').strip()
        if not term:
            logger.debug("Ignoring empty search")
            return False
        return await self.fetch(term)

    async def refresh(self) -> bool:
        """Manually refetch the active query."""
        return await self.fetch(self._query)

    async def retry(self) -> bool:
        """Retry affordance offered with the error state."""
        logger.info(f"Retrying fetch for query {self._query!r}")
        return await self.fetch(self._query)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def next_article(self) -> bool:
        """Advance one article; no-op at the end of the batch."""
        return await self._navigate('next', lambda cursor: cursor.advance())

    async def prev_article(self) -> bool:
        """Go back one article; no-op at the start of the batch."""
        return await self._navigate('prev', lambda cursor: cursor.retreat())

    async def jump_to(self, index: int) -> bool:
        """Show the article at ``index``; no-op when out of range."""
        return await self._navigate('jump', lambda cursor: cursor.jump(index))

    async def vote(self, option: Union[int, str]) -> bool:
        """
        Record a poll answer for the article in view, then advance.

        Args:
            option: Option position (0-2) or the option text

        Returns:
            True if the vote was recorded

        Raises:
            ValueError: If the option is not part of the current poll
        """
        view = self._view
        if self._state != FeedState.READY or view is None:
            logger.debug("Vote ignored, no article in view")
            return False
        if view.poll is None:
            logger.debug("Vote ignored, poll still loading")
            return False
        if self._is_transitioning:
            logger.debug(f"Vote ignored, transition in progress at index {view.index}")
            return False

        choice = self._resolve_option(view.poll, option)
        record = {
            'index': view.index,
            'article_title': view.article.title,
            'article_url': view.article.url,
            'question': view.poll.question,
            'option': choice,
            'voted_at': self._now().isoformat(),
        }
        self._votes.append(record)
        logger.info(f"Vote recorded for article {view.index}: {choice!r}")
        self._events.emit(FeedEventType.VOTE_RECORDED, vote=record)

        await self.next_article()
        return True

    def report_image_failure(self) -> bool:
        """
        Render-time image fallback: the view's image failed to load.

        Swaps the current view to the local fallback asset once.

        Returns:
            True if the view changed
        """
        view = self._view
        if view is None or view.image_degraded:
            return False

        self._view = view.with_fallback_image()
        logger.info(f"Image failed to load for article {view.index}, using fallback")
        self._events.emit(FeedEventType.IMAGE_FALLBACK, view=self._view)
        return True

    @staticmethod
    def _resolve_option(poll: PollContent, option: Union[int, str]) -> str:
        if isinstance(option, int) and not isinstance(option, bool):
            if 0 <= option < len(poll.options):
                return poll.options[option]
        elif isinstance(option, str) and option in poll.options:
            return option
        raise ValueError(f"Unknown poll option {option!r}; expected one of {list(poll.options)}")

    async def _navigate(self, label: str, move: Callable[[FeedCursor], Optional[FeedCursor]]) -> bool:
        if self._state != FeedState.READY or self._cursor is None:
            logger.debug(f"Cannot navigate ({label}) while {self._state.value}")
            return False
        if self._is_transitioning:
            logger.debug(f"Cannot navigate ({label}): transition in progress at index {self._cursor.index}")
            return False

        target = move(self._cursor)
        if target is None:
            logger.debug(f"Navigation ({label}) out of range at index {self._cursor.index}")
            return False

        self._transition_id += 1
        transition = self._transition_id
        self._is_transitioning = True
        try:
            self._cursor = target
            self._show(target)
            await self._sleep(self._settle_delay)
        finally:
            if transition == self._transition_id:
                self._is_transitioning = False
        logger.debug(f"Transition complete, index {target.index}")
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set_state(self, state: FeedState) -> None:
        previous = self._state
        self._state = state
        if previous != state:
            logger.debug(f"Feed state {previous.value} -> {state.value}")
        self._events.emit(FeedEventType.STATE_CHANGED, state=state, previous=previous)

    def _enter_ready(self, batch: List[Article]) -> None:
        self._articles = list(batch)
        self._cursor = FeedCursor(0, len(self._articles))
        self._set_state(FeedState.READY)
        self._show(self._cursor)

    def _enter_error(self, message: str) -> None:
        self._articles = []
        self._cursor = None
        self._view = None
        self._error_message = message
        self._set_state(FeedState.ERROR)
        self._events.emit(FeedEventType.ERROR, message=message, retry=self.retry)

    def _discard_view(self) -> None:
        self._articles = []
        self._cursor = None
        self._view = None
        self._cancel_poll_tasks()
        self._transition_id += 1
        self._is_transitioning = False

    def _cancel_poll_tasks(self) -> None:
        for task in list(self._poll_tasks.values()):
            if not task.done():
                task.cancel()
        self._poll_tasks.clear()

    def _show(self, cursor: FeedCursor) -> None:
        article = self._articles[cursor.index]
        self._view = ArticleView(
            index=cursor.index,
            total=cursor.total,
            article=article,
            image_url=self._resolver.resolve(article.image_url),
            fallback_image_url=self._resolver.fallback_image,
        )
        self._events.emit(FeedEventType.ARTICLE_SHOWN, view=self._view)
        self._request_poll(cursor.index, article)

    def _request_poll(self, index: int, article: Article) -> None:
        pending = self._poll_tasks.get(index)
        if pending is not None and not pending.done():
            logger.debug(f"Poll generation already in flight for article {index}")
            return
        self._poll_tasks[index] = asyncio.get_running_loop().create_task(self._generate_poll(index, article))

    async def _generate_poll(self, index: int, article: Article) -> None:
        try:
            raw_text = await self._generator.generate_content(article)
            poll = self._parser.parse(raw_text)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Error generating poll content for article {index}: {e}")
            poll = PollContent.default()
        finally:
            if self._poll_tasks.get(index) is asyncio.current_task():
                del self._poll_tasks[index]

        view = self._view
        if view is None or view.index != index or view.article is not article:
            logger.debug(f"Discarding stale poll for article {index}")
            return

        self._view = view.with_poll(poll)
        self._events.emit(FeedEventType.POLL_READY, view=self._view, poll=poll)
