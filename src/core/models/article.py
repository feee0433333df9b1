#!/usr/bin/env python3
"""
Article data model.

Represents a single news article as returned by the news relay
(NewsAPI shape) and as persisted in the article cache.
"""

from datetime import datetime
from typing import Dict, Any, Optional
from dataclasses import dataclass

from dateutil import parser as date_parser


def _parse_datetime_safe(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError):
        return None


def _clean(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


@dataclass(frozen=True)
class Article:
    """
    A news article as fetched from upstream.

    Immutable once fetched. Articles carry no stable external id; the
    feed identifies them by position in the current batch.
    """
    title: str
    url: str
    source_name: str = ""
    description: Optional[str] = None
    image_url: Optional[str] = None
    published_at: Optional[datetime] = None

    def __post_init__(self):
        """Normalize whitespace; empty optional strings become None."""
        object.__setattr__(self, 'title', _clean(self.title))
        object.__setattr__(self, 'url', _clean(self.url))
        object.__setattr__(self, 'source_name', _clean(self.source_name))
        object.__setattr__(self, 'description', _clean(self.description) or None)
        object.__setattr__(self, 'image_url', _clean(self.image_url) or None)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'Article':
        """Create Article from a relay/NewsAPI article payload."""
        source = data.get('source') or {}
        source_name = source.get('name', '') if isinstance(source, dict) else source

        return cls(
            title=data.get('title') or '',
            url=data.get('url') or '',
            source_name=source_name or '',
            description=data.get('description'),
            image_url=data.get('urlToImage'),
            published_at=_parse_datetime_safe(data.get('publishedAt'))
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize in the same shape the relay returns, for the article cache."""
        return {
            'title': self.title,
            'description': self.description,
            'url': self.url,
            'urlToImage': self.image_url,
            'source': {'name': self.source_name},
            'publishedAt': self.published_at.isoformat() if self.published_at else None
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Article':
        """Create Article from a cached dictionary."""
        return cls.from_api(data)

    def to_generation_payload(self) -> Dict[str, str]:
        """Fields sent to the content-generation collaborator."""
        return {
            'title': self.title,
            'description': self.description or ''
        }

    def __repr__(self):
        return f"Article(title='{self.title[:50]}...', source='{self.source_name}')"
