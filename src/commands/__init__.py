#!/usr/bin/env python3
"""
Command endpoints for the poll feed.

Each major functionality is handled by a dedicated command class.
"""

from typing import Dict, Type
from .base import BaseCommand
from .feed import FeedCommand
from .cache import CacheCommand
from .poll import PollCommand

# Command registry for easy extension
COMMANDS: Dict[str, Type[BaseCommand]] = {
    'feed': FeedCommand,
    'cache': CacheCommand,
    'poll': PollCommand,
}

def get_command(command_name: str) -> BaseCommand:
    """Get a command instance by name."""
    if command_name not in COMMANDS:
        available = ', '.join(COMMANDS.keys())
        raise ValueError(f"Unknown command '{command_name}'. Available: {available}")

    command_class = COMMANDS[command_name]
    return command_class()
