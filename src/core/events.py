#!/usr/bin/env python3
"""
Feed events dispatched from the controller to presentation layers.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class FeedEventType(Enum):
    """Things a presentation layer may want to render."""
    STATE_CHANGED = "state_changed"
    ARTICLE_SHOWN = "article_shown"
    POLL_READY = "poll_ready"
    IMAGE_FALLBACK = "image_fallback"
    VOTE_RECORDED = "vote_recorded"
    ERROR = "error"


@dataclass
class FeedEvent:
    type: FeedEventType
    payload: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.payload.get(key, default)


FeedListener = Callable[[FeedEvent], None]


class EventDispatcher:
    """Synchronous fan-out to subscribed listeners."""

    def __init__(self):
        self._listeners: List[FeedListener] = []

    def subscribe(self, listener: FeedListener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event_type: FeedEventType, **payload: Any) -> FeedEvent:
        event = FeedEvent(event_type, payload)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                # One broken view must not stall the feed
                logger.error(f"Listener failed on {event_type.value}: {e}", exc_info=True)
        return event

