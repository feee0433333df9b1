#!/usr/bin/env python3
"""
CLI Router for the poll feed.

Modular command architecture: each top-level command maps to a command class.
"""

import argparse
import logging
import sys
from typing import Optional, List

from commands import get_command, COMMANDS
from core.categories import ALL_CATEGORY, NEWS_CATEGORIES
from core.config import get_config_manager
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class CLIRouter:
    """
    CLI router for feed commands.

    Command structure:
    - python run.py feed browse --category technology
    - python run.py feed headlines --limit 5
    - python run.py cache stats
    - python run.py poll parse --text "..."
    """

    def __init__(self):
        """Initialize CLI router."""
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description="News feed with AI-generated polls",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self._get_examples_text()
        )

        subparsers = parser.add_subparsers(
            dest='command',
            help='Available commands',
            metavar='{command}'
        )

        self._add_feed_parser(subparsers)
        self._add_cache_parser(subparsers)
        self._add_poll_parser(subparsers)

        return parser

    def _add_feed_parser(self, subparsers):
        """Add feed command parser."""
        feed_parser = subparsers.add_parser(
            'feed',
            help='Browse articles and answer polls'
        )

        feed_subparsers = feed_parser.add_subparsers(
            dest='subcommand',
            help='Feed operations',
            metavar='{browse,headlines,categories}'
        )

        category_choices = [ALL_CATEGORY] + list(NEWS_CATEGORIES)

        browse_parser = feed_subparsers.add_parser('browse', help='Interactive feed with one poll per article')
        start = browse_parser.add_mutually_exclusive_group()
        start.add_argument('--category', choices=category_choices, help='Start in a category (default: top headlines)')
        start.add_argument('--search', help='Start with a free-text search')

        headlines_parser = feed_subparsers.add_parser('headlines', help='Print one filtered batch without polls')
        headlines_parser.add_argument('--limit', type=int, default=10, help='Articles to print (default: 10)')
        source = headlines_parser.add_mutually_exclusive_group()
        source.add_argument('--category', choices=category_choices, help='Category to fetch')
        source.add_argument('--search', help='Free-text query to fetch')

        feed_subparsers.add_parser('categories', help='List available categories')

    def _add_cache_parser(self, subparsers):
        """Add cache command parser."""
        cache_parser = subparsers.add_parser(
            'cache',
            help='Article cache operations'
        )

        cache_subparsers = cache_parser.add_subparsers(
            dest='subcommand',
            help='Cache operations',
            metavar='{stats,clear}'
        )

        cache_subparsers.add_parser('stats', help='Show cached batch statistics')

        clear_parser = cache_subparsers.add_parser('clear', help='Remove the cached batch')
        clear_parser.add_argument('--force', action='store_true', help='Skip confirmation prompt')

    def _add_poll_parser(self, subparsers):
        """Add poll command parser."""
        poll_parser = subparsers.add_parser(
            'poll',
            help='Poll text utilities'
        )

        poll_subparsers = poll_parser.add_subparsers(
            dest='subcommand',
            help='Poll operations',
            metavar='{parse}'
        )

        parse_parser = poll_subparsers.add_parser('parse', help='Parse raw poll text (from --text or stdin)')
        parse_parser.add_argument('--text', help='Raw generated text')
        parse_parser.add_argument('--json', action='store_true', help='Print the poll as JSON')

    def _get_examples_text(self) -> str:
        """Get examples text for help."""
        return """
Examples:
  # Browse today's headlines (served from cache until the daily reset)
  python run.py feed browse
  python run.py feed browse --category technology
  python run.py feed browse --search "climate summit"

  # Browse keys: n/p navigate, 1-3 vote, j N jump, r refresh,
  #              c NAME category, s TEXT search, x image failed, q quit

  # Other commands
  python run.py feed headlines --limit 5
  python run.py cache stats
  python run.py cache clear --force
  echo "Q?\\nA\\nB\\nC" | python run.py poll parse

"""

    def route_command(self, args: Optional[List[str]] = None) -> int:
        """
        Route command to appropriate handler.

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            Exit code
        """
        try:
            if args is None:
                args = sys.argv[1:]

            parsed_args = self.parser.parse_args(args)

            if not parsed_args.command:
                self.parser.print_help()
                return 1

            return self._handle_command(parsed_args)

        except SystemExit as e:
            # argparse calls sys.exit() on error or help
            return e.code if e.code is not None else 0
        except Exception as e:
            logger.error(f"CLI routing error: {e}", exc_info=True)
            return 1

    def _handle_command(self, args: argparse.Namespace) -> int:
        """Handle command structure."""
        logger.debug(f"Handling command: {args.command}")

        if args.command not in COMMANDS:
            available = ', '.join(COMMANDS.keys())
            logger.error(f"Unknown command '{args.command}'. Available: {available}")
            return 1

        subcommand = getattr(args, 'subcommand', None)
        if not subcommand:
            logger.error(f"No subcommand specified for '{args.command}'")
            try:
                self.parser.parse_args([args.command, '--help'])  # Show help
            except SystemExit:
                pass
            return 1

        try:
            command = get_command(args.command)
            return command.execute(subcommand, args)
        except Exception as e:
            logger.error(f"Error executing {args.command} {subcommand}: {e}", exc_info=True)
            return 1


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        get_config_manager().update_logging()
    except ConfigurationError as e:
        logger.error(e.message)
        return 78

    router = CLIRouter()
    return router.route_command(args)


if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
