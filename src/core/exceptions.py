#!/usr/bin/env python3
"""
Standardized exception hierarchy for the poll feed.

Fetch failures carry enough context for the controller to present an
error message with a retry affordance. Poll parsing never raises: it
degrades to default content and only logs.
"""

from typing import Optional, Dict, Any


class PollfeedError(Exception):
    """Base exception for all poll feed errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


# Fetch-related exceptions
class FeedFetchError(PollfeedError):
    """Base exception for failures that put the feed into the error state."""
    pass


class TransportError(FeedFetchError):
    """Network or HTTP failure while reaching a collaborator."""

    def __init__(self, endpoint: str, original_error: Exception, status: Optional[int] = None):
        if status is not None:
            message = f"Request to {endpoint} failed with HTTP {status}"
        else:
            message = f"Failed to reach {endpoint}: {original_error}"
        context = {
            'endpoint': endpoint,
            'status': status,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)


class UpstreamError(FeedFetchError):
    """Collaborator responded, but with a non-ok status or an error payload."""

    def __init__(self, endpoint: str, detail: str, payload_status: Optional[str] = None):
        message = f"Invalid response from {endpoint}: {detail}"
        context = {
            'endpoint': endpoint,
            'detail': detail,
            'payload_status': payload_status
        }
        super().__init__(message, context=context)


class EmptyResultError(FeedFetchError):
    """Well-formed response, but no usable articles after filtering."""

    def __init__(self, query: str, received: int):
        if query == 'top':
            message = "No articles with images found"
        else:
            message = f"No articles found for \"{query}\""
        context = {
            'query': query,
            'received': received
        }
        super().__init__(message, context=context)


# Configuration-related exceptions
class ConfigurationError(PollfeedError):
    """Configuration is invalid or missing."""

    def __init__(self, config_key: str, issue: str):
        message = f"Configuration error for {config_key}: {issue}"
        context = {
            'config_key': config_key,
            'issue': issue
        }
        super().__init__(message, context=context)


class MissingDependencyError(ConfigurationError):
    """Required integration credential or package is missing."""

    def __init__(self, dependency_name: str, hint: Optional[str] = None):
        super().__init__(dependency_name, hint or "not available")
        self.message = f"Missing required dependency: {dependency_name}"
        if hint:
            self.message += f" ({hint})"
        self.args = (self.message,)


class ErrorRecovery:
    """Helpers for presenting fetch failures to the user."""

    @staticmethod
    def user_message(error: Exception) -> str:
        """Message suitable for the error view."""
        if isinstance(error, PollfeedError):
            return error.message
        return str(error) or error.__class__.__name__
