#!/usr/bin/env python3
"""
Article validity filtering.

One declarative predicate decides which fetched articles enter a batch.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .image_resolver import has_recognized_scheme
from .models.article import Article

logger = logging.getLogger(__name__)

# NewsAPI replaces withdrawn articles with this placeholder title.
REMOVED_PLACEHOLDER = '[Removed]'


@dataclass(frozen=True)
class ArticleFilterPolicy:
    """Thresholds for the article validity predicate."""
    min_description_length: int = 20
    require_image: bool = True

    def rejection_reason(self, article: Article) -> Optional[str]:
        """Return why ``article`` is rejected, or None when it is accepted."""
        if not article.title or article.title == REMOVED_PLACEHOLDER:
            return "missing title"
        if len(article.description or '') < self.min_description_length:
            return f"description shorter than {self.min_description_length} chars"
        if self.require_image and not has_recognized_scheme(article.image_url):
            return "no usable image URL"
        return None

    def accepts(self, article: Article) -> bool:
        return self.rejection_reason(article) is None

    def apply(self, articles: Iterable[Article]) -> List[Article]:
        """
        Filter a fetched batch, preserving upstream order.

        Args:
            articles: Articles as received

        Returns:
            Articles satisfying the predicate
        """
        kept = []
        dropped = 0
        for article in articles:
            reason = self.rejection_reason(article)
            if reason is None:
                kept.append(article)
            else:
                dropped += 1
                logger.debug(f"Dropping article {article.title[:60]!r}: {reason}")

        if dropped:
            logger.info(f"Filtered out {dropped} articles, kept {len(kept)}")
        return kept
