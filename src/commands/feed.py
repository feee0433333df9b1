#!/usr/bin/env python3
"""
Feed command endpoints: interactive browsing, headline listing and categories.
"""

import asyncio
import logging
from argparse import Namespace
from typing import Optional

from .base import BaseCommand
from core.categories import ALL_CATEGORY, NEWS_CATEGORIES, query_for_category, HEADLINES_QUERY
from core.container import create_feed_controller
from core.events import FeedEvent, FeedEventType
from core.feed_controller import ArticleFeedController, FeedState
from core.formatters import (
    format_article, format_article_view, format_error, format_navigation_help, format_poll
)

logger = logging.getLogger(__name__)

QUIT_KEYS = ('q', 'quit', 'exit')


class TerminalFeedView:
    """Prints controller events to the terminal."""

    def __init__(self, output=print):
        self._output = output

    def __call__(self, event: FeedEvent) -> None:
        if event.type == FeedEventType.ARTICLE_SHOWN:
            self._output(format_article_view(event.get('view')))
        elif event.type == FeedEventType.POLL_READY:
            view = event.get('view')
            self._output(f"\n[Article {view.index + 1}] poll ready:")
            self._output(format_poll(event.get('poll')))
        elif event.type == FeedEventType.IMAGE_FALLBACK:
            self._output(f"🖼️  Image unavailable, showing {event.get('view').image_url}")
        elif event.type == FeedEventType.VOTE_RECORDED:
            self._output(f"✅ Vote recorded: {event.get('vote')['option']}")
        elif event.type == FeedEventType.ERROR:
            self._output(format_error(event.get('message')))
        elif event.type == FeedEventType.STATE_CHANGED and event.get('state') == FeedState.LOADING:
            self._output("⏳ Loading articles...")


def resolve_query(category: Optional[str] = None, search: Optional[str] = None) -> str:
    """Upstream query for the --category / --search options; headlines by default."""
    if search and search.strip():
        return search.strip()
    if category:
        return query_for_category(category)
    return HEADLINES_QUERY


async def handle_input(controller: ArticleFeedController, line: str, output=print) -> bool:
    """
    Apply one line of browse input to the controller.

    Args:
        controller: Feed controller
        line: Raw user input
        output: Printer for feedback messages

    Returns:
        False when the user asked to quit
    """
    text = line.strip()
    if not text:
        return True

    key, _, rest = text.partition(' ')
    key = key.lower()
    rest = rest.strip()

    if key in QUIT_KEYS:
        return False
    if key == 'n':
        if not await controller.next_article():
            output("ℹ️  No next article")
    elif key == 'p':
        if not await controller.prev_article():
            output("ℹ️  No previous article")
    elif key in ('1', '2', '3'):
        try:
            if not await controller.vote(int(key) - 1):
                output("⏳ Poll is still loading")
        except ValueError as e:
            output(f"❌ {e}")
    elif key == 'j':
        try:
            position = int(rest)
        except ValueError:
            output("❌ Usage: j N")
            return True
        if not await controller.jump_to(position - 1):
            output(f"ℹ️  No article {position}")
    elif key == 'r':
        if controller.state == FeedState.ERROR:
            await controller.retry()
        else:
            await controller.refresh()
    elif key == 'c':
        try:
            await controller.select_category(rest or ALL_CATEGORY)
        except ValueError as e:
            output(f"❌ {e}")
    elif key == 's':
        if not rest:
            output("❌ Usage: s TEXT")
        else:
            await controller.search(rest)
    elif key == 'x':
        controller.report_image_failure()
    else:
        output(f"❓ Unknown key {key!r}")
        output(format_navigation_help(controller.current_view))
    return True


class FeedCommand(BaseCommand):
    """Browse the news feed with polls."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute feed subcommand."""
        try:
            if subcommand == "browse":
                return self.browse(args)
            elif subcommand == "headlines":
                return self.headlines(args)
            elif subcommand == "categories":
                return self.categories(args)
            else:
                return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"feed {subcommand}")

    def browse(self, args: Namespace) -> int:
        """Interactive feed browser."""
        try:
            return asyncio.run(self._browse(
                category=getattr(args, 'category', None),
                search=getattr(args, 'search', None)
            ))
        except KeyboardInterrupt as e:
            return self.handle_error(e, "feed browse")

    async def _browse(self, category: Optional[str] = None, search: Optional[str] = None) -> int:
        async with self.container.get('relay_client') as relay:
            controller = create_feed_controller(relay, container=self.container)
            controller.subscribe(TerminalFeedView())

            try:
                await controller.initialize(resolve_query(category, search))

                loop = asyncio.get_running_loop()
                while True:
                    prompt = f"\n{format_navigation_help(controller.current_view)}\n> "
                    try:
                        line = await loop.run_in_executor(None, input, prompt)
                    except EOFError:
                        break
                    if not await handle_input(controller, line):
                        break
            finally:
                await controller.close()
                logger.debug(f"Browse session ended: {controller.snapshot()}")

            votes = controller.votes
            if votes:
                print(f"\n🗳️  {len(votes)} vote(s) this session")
            print("👋 Bye")
        return 0

    def headlines(self, args: Namespace) -> int:
        """Print one filtered batch without polls."""
        try:
            return asyncio.run(self._headlines(
                limit=getattr(args, 'limit', 10),
                category=getattr(args, 'category', None),
                search=getattr(args, 'search', None)
            ))
        except Exception as e:
            return self.handle_error(e, "feed headlines")

    async def _headlines(self, limit: int = 10, category: Optional[str] = None, search: Optional[str] = None) -> int:
        query = resolve_query(category, search)
        filter_policy = self.container.get('filter_policy')

        async with self.container.get('relay_client') as relay:
            fetched = await relay.fetch_news(query)

        articles = filter_policy.apply(fetched)
        if not articles:
            print("📭 No articles with images found")
            return 1

        print(f"\n=== {len(articles)} usable of {len(fetched)} fetched ===\n")
        for article in articles[:limit]:
            print(format_article(article))
        return 0

    def categories(self, args: Namespace) -> int:
        """List category keys usable with ``--category``."""
        print("\n=== Categories ===")
        print(f"  • {ALL_CATEGORY:<14} Top headlines")
        for key, category in NEWS_CATEGORIES.items():
            print(f"  • {key:<14} {category.description}")
        return 0
