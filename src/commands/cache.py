#!/usr/bin/env python3
"""
Cache command endpoints for inspecting and clearing the article cache.
"""

import logging
from argparse import Namespace

from .base import BaseCommand

logger = logging.getLogger(__name__)


class CacheCommand(BaseCommand):
    """Handle article cache operations."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute cache subcommand."""
        try:
            if subcommand == "stats":
                return self.stats(args)
            elif subcommand == "clear":
                return self.clear(args)
            else:
                return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"cache {subcommand}")

    def stats(self, args: Namespace) -> int:
        """Show cached batch statistics."""
        stats = self.article_cache.stats()

        print("\n=== Article Cache ===")
        print(f"📁 File: {self.config.app.cache_path}")
        print(f"📊 Cached articles: {stats['articles']}")
        if stats['fetched_at']:
            hours = stats['age_seconds'] / 3600
            print(f"🕐 Fetched at: {stats['fetched_at']} ({hours:.1f}h ago)")
        else:
            print("🕐 Fetched at: never")
        print(f"🔄 Daily reset: {stats['reset_time_utc']} UTC")
        print(f"{'⚠️  Stale' if stats['is_stale'] else '✅ Fresh'}")
        return 0

    def clear(self, args: Namespace) -> int:
        """Remove the cached batch."""
        if not getattr(args, 'force', False):
            confirm = input("Clear the cached articles? (yes/no): ").lower().strip()
            if confirm != 'yes':
                print("❌ Clear cancelled")
                return 0

        self.article_cache.clear()
        print("✅ Article cache cleared")
        return 0
