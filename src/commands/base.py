#!/usr/bin/env python3
"""
Base command class for the modular command architecture.

Provides common functionality and interface that all commands inherit.
Uses dependency injection for better testability and maintainability.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional
from argparse import Namespace

from core.container import get_container
from core.exceptions import ConfigurationError, FeedFetchError

logger = logging.getLogger(__name__)


class BaseCommand(ABC):
    """
    Base class for all command endpoints.

    Provides common infrastructure like configuration, cache access and
    error handling that all commands can use. Uses dependency injection
    container for managing service instances.
    """

    def __init__(self, container=None):
        """
        Initialize base command with dependency injection container.

        Args:
            container: Optional container instance. If None, uses global container.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._container = container or get_container()

    @property
    def config(self):
        """Get configuration from container."""
        return self._container.get('config')

    @property
    def article_cache(self):
        """Get article cache from container."""
        return self._container.get('article_cache')

    @property
    def poll_parser(self):
        """Get poll parser from container."""
        return self._container.get('poll_parser')

    @property
    def container(self):
        return self._container

    @abstractmethod
    def execute(self, subcommand: str, args: Namespace) -> int:
        """
        Execute the command with given subcommand and arguments.

        Args:
            subcommand: The specific action to perform
            args: Parsed command line arguments

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        pass

    def get_available_subcommands(self) -> List[str]:
        """
        Get list of available subcommands for this command.

        Returns:
            List of subcommand names
        """
        methods = []
        for attr_name in dir(type(self)):
            if attr_name.startswith('_'):
                continue
            if isinstance(getattr(type(self), attr_name), property):
                continue
            if callable(getattr(self, attr_name)) and attr_name not in ['execute', 'get_available_subcommands', 'handle_error', 'unknown_subcommand']:
                methods.append(attr_name)
        return methods

    def handle_error(self, error: Exception, context: str = "") -> int:
        """
        Standard error handling for commands.

        Args:
            error: The exception that occurred
            context: Additional context about where the error occurred

        Returns:
            Appropriate exit code
        """
        error_msg = f"{context}: {error}" if context else str(error)

        # Expected failures are reported without a traceback
        if isinstance(error, (FeedFetchError, ConfigurationError)):
            self.logger.error(error_msg)
        else:
            self.logger.error(error_msg, exc_info=True)

        if isinstance(error, KeyboardInterrupt):
            self.logger.info("Command interrupted by user")
            return 130
        elif isinstance(error, ConfigurationError):
            return 78
        elif isinstance(error, FeedFetchError):
            return 69
        elif isinstance(error, FileNotFoundError):
            return 2
        elif isinstance(error, PermissionError):
            return 13
        elif isinstance(error, ValueError):
            return 22
        else:
            return 1

    def unknown_subcommand(self, subcommand: Optional[str]) -> int:
        available = ", ".join(self.get_available_subcommands())
        self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
        return 1
