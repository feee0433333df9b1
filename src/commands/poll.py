#!/usr/bin/env python3
"""
Poll command endpoints for checking generated poll text offline.
"""

import json
import sys
from argparse import Namespace

from .base import BaseCommand


class PollCommand(BaseCommand):
    """Parse raw poll text the way the feed does."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute poll subcommand."""
        try:
            if subcommand == "parse":
                return self.parse(args)
            else:
                return self.unknown_subcommand(subcommand)

        except Exception as e:
            return self.handle_error(e, f"poll {subcommand}")

    def parse(self, args: Namespace) -> int:
        """Parse --text (or stdin) and print the resulting poll."""
        raw_text = getattr(args, 'text', None)
        if raw_text is None:
            raw_text = sys.stdin.read()

        poll = self.poll_parser.parse(raw_text)

        if getattr(args, 'json', False):
            print(json.dumps(poll.to_dict(), ensure_ascii=False, indent=2))
        else:
            print(f"Question: {poll.question}")
            for number, option in enumerate(poll.options, 1):
                print(f"  {number}. {option}")
        return 0
