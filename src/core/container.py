#!/usr/bin/env python3
"""
Dependency Injection Container

Provides a centralized way to manage dependencies and avoid scattered
instantiation throughout the codebase. Supports singleton and factory patterns.
"""

import logging
from typing import Any, Dict, Callable, TypeVar, Optional
from functools import wraps
import threading

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Container:
    """Simple dependency injection container with lifecycle management."""

    def __init__(self):
        """Initialize empty container."""
        self._factories: Dict[str, Callable] = {}
        self._singletons: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def register_singleton(self, service_name: str, factory: Callable[[], T]) -> None:
        """
        Register a service as singleton (created once, reused).

        Args:
            service_name: Unique name for the service
            factory: Function that creates the service instance
        """
        with self._lock:
            self._factories[service_name] = singleton(factory) if not getattr(factory, '_is_singleton', False) else factory
            # Remove any existing instance to force recreation
            if service_name in self._singletons:
                del self._singletons[service_name]

    def register_factory(self, service_name: str, factory: Callable[[], T]) -> None:
        """
        Register a service as factory (new instance each time).

        Args:
            service_name: Unique name for the service
            factory: Function that creates service instances
        """
        with self._lock:
            self._factories[service_name] = factory

    def get(self, service_name: str) -> Any:
        """
        Get service instance by name.

        Args:
            service_name: Name of the service to retrieve

        Returns:
            Service instance

        Raises:
            KeyError: If service is not registered
        """
        # Check for existing singleton first
        if service_name in self._singletons:
            return self._singletons[service_name]

        # Check if factory is registered
        if service_name not in self._factories:
            raise KeyError(f"Service '{service_name}' not registered")

        factory = self._factories[service_name]

        if getattr(factory, '_is_singleton', False):
            with self._lock:
                if service_name not in self._singletons:
                    instance = factory()
                    self._singletons[service_name] = instance
                    logger.debug(f"Created singleton instance for '{service_name}'")
                return self._singletons[service_name]

        # Factory - create new instance each time
        instance = factory()
        logger.debug(f"Created new instance for '{service_name}'")
        return instance

    def clear(self) -> None:
        """Clear all registered services and instances."""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()


def singleton(factory_func: Callable[[], T]) -> Callable[[], T]:
    """
    Decorator to mark a factory function as singleton.

    Usage:
        @singleton
        def create_store():
            return JsonFileStore(path)
    """
    @wraps(factory_func)
    def wrapper():
        return factory_func()

    wrapper._is_singleton = True
    return wrapper


# Global container instance
_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get global container instance (thread-safe singleton)."""
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = Container()
                _setup_default_services(_container)
    return _container


def reset_container() -> None:
    """Reset global container (useful for testing)."""
    global _container
    with _container_lock:
        if _container:
            _container.clear()
        _container = None


def _setup_default_services(container: Container) -> None:
    """Set up default service registrations with configuration injection."""

    @singleton
    def create_config():
        from core.config import get_config
        return get_config()

    @singleton
    def create_store():
        from core.storage import JsonFileStore
        config = container.get('config')
        return JsonFileStore(config.app.cache_path)

    @singleton
    def create_article_cache():
        from core.article_cache import ArticleCache
        config = container.get('config')
        return ArticleCache(container.get('store'), grace_minutes=config.app.reset_grace_minutes)

    @singleton
    def create_image_resolver():
        from core.image_resolver import ImageResolver
        config = container.get('config')
        return ImageResolver(
            proxy_endpoint=config.relay.proxy_image_endpoint,
            fallback_image=config.app.fallback_image
        )

    @singleton
    def create_filter_policy():
        from core.filtering import ArticleFilterPolicy
        config = container.get('config')
        return ArticleFilterPolicy(
            min_description_length=config.app.min_description_length,
            require_image=config.app.require_image
        )

    @singleton
    def create_poll_parser():
        from core.poll_parser import PollContentParser
        return PollContentParser()

    def create_refresh_scheduler():
        from core.refresh_scheduler import RefreshScheduler, CHECK_SLOT_UTC
        config = container.get('config')
        return RefreshScheduler(check_slot=CHECK_SLOT_UTC.replace(minute=config.app.reset_grace_minutes))

    def create_relay_client():
        from integrations.relay_client import RelayClient
        config = container.get('config')
        return RelayClient(
            base_url=config.relay.base_url,
            timeout=config.relay.timeout,
            user_agent=config.relay.user_agent
        )

    def create_openai_client():
        from integrations.openai_client import OpenAIPollClient
        config = container.get('config')
        return OpenAIPollClient(
            api_key=config.integrations.openai_api_key,
            model=config.integrations.openai_model,
            timeout=config.integrations.openai_timeout
        )

    # Register services
    container.register_singleton('config', create_config)
    container.register_singleton('store', create_store)
    container.register_singleton('article_cache', create_article_cache)
    container.register_singleton('image_resolver', create_image_resolver)
    container.register_singleton('filter_policy', create_filter_policy)
    container.register_singleton('poll_parser', create_poll_parser)

    # Non-singletons
    container.register_factory('refresh_scheduler', create_refresh_scheduler)
    container.register_factory('relay_client', create_relay_client)
    container.register_factory('openai_client', create_openai_client)

    logger.debug("Default services registered in container")


def create_feed_controller(news_client, poll_generator=None, container: Optional[Container] = None,
                           enable_refresh: bool = True):
    """
    Build a feed controller from container services.

    Args:
        news_client: Opened relay client (or any object with ``fetch_news``)
        poll_generator: Poll text generator; defaults to the configured one
        container: Container to use (global if None)
        enable_refresh: Arm the daily refresh scheduler on initialize

    Returns:
        ArticleFeedController
    """
    from core.feed_controller import ArticleFeedController

    container = container or get_container()
    config = container.get('config')

    if poll_generator is None:
        if config.uses_openai_generator():
            poll_generator = container.get('openai_client')
        else:
            poll_generator = news_client

    return ArticleFeedController(
        news_client=news_client,
        poll_generator=poll_generator,
        cache=container.get('article_cache'),
        scheduler=container.get('refresh_scheduler') if enable_refresh else None,
        image_resolver=container.get('image_resolver'),
        poll_parser=container.get('poll_parser'),
        filter_policy=container.get('filter_policy'),
        settle_delay=config.app.settle_delay_seconds
    )

