#!/usr/bin/env python3
"""
Article view model handed to the presentation layer.
"""

from dataclasses import dataclass, replace
from typing import Optional

from .article import Article
from .poll import PollContent


@dataclass(frozen=True)
class ArticleView:
    """Everything needed to render the article currently in view."""
    index: int
    total: int
    article: Article
    image_url: str
    fallback_image_url: str
    poll: Optional[PollContent] = None
    image_degraded: bool = False

    @property
    def is_poll_loading(self) -> bool:
        return self.poll is None

    def with_poll(self, poll: PollContent) -> 'ArticleView':
        return replace(self, poll=poll)

    def with_fallback_image(self) -> 'ArticleView':
        return replace(self, image_url=self.fallback_image_url, image_degraded=True)

