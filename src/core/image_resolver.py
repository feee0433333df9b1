#!/usr/bin/env python3
"""
Image URL resolution for article cards.

Routes remote images through the relay's image proxy and falls back to a
local asset when the article has no usable image URL. Resolution is pure;
fetching and proxy-side fallbacks belong to the relay.
"""

import logging
from typing import Optional
from urllib.parse import quote

logger = logging.getLogger(__name__)

RECOGNIZED_SCHEMES = ('http://', 'https://')
DEFAULT_FALLBACK_IMAGE = 'fallback.svg'
DEFAULT_PROXY_ENDPOINT = '/api/proxy-image'


def has_recognized_scheme(url: Optional[str]) -> bool:
    """Check whether ``url`` starts with http:// or https://."""
    if not isinstance(url, str):
        return False
    return url.strip().lower().startswith(RECOGNIZED_SCHEMES)


class ImageResolver:
    """Produces a single displayable image URL for an article."""

    def __init__(self,
                 proxy_endpoint: str = DEFAULT_PROXY_ENDPOINT,
                 fallback_image: str = DEFAULT_FALLBACK_IMAGE):
        """
        Initialize resolver.

        Args:
            proxy_endpoint: Image proxy URL (absolute or relative)
            fallback_image: Local asset shown when no image is usable
        """
        self.proxy_endpoint = proxy_endpoint
        self.fallback_image = fallback_image

    def resolve(self, raw_url: Optional[str]) -> str:
        """
        Resolve an article image URL.

        Args:
            raw_url: Original image URL from upstream, possibly missing

        Returns:
            Proxied URL carrying the encoded original, or the fallback asset
        """
        if not has_recognized_scheme(raw_url):
            logger.debug(f"Using fallback image for {raw_url!r}")
            return self.fallback_image

        return f"{self.proxy_endpoint}?url={quote(raw_url.strip(), safe='')}"
