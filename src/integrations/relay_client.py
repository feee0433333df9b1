#!/usr/bin/env python3
"""
Async client for the news/poll relay.

The relay forwards requests to the upstream news API and the language
model, injecting credentials. This client speaks its three endpoints:

    GET  /news?q=<query|top>       -> {status, articles[]}
    POST /generate-content         -> {choices: [{message: {content}}]}
    GET  /proxy-image?url=<url>    (referenced by the image resolver only)
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp

from core.exceptions import TransportError, UpstreamError
from core.models.article import Article

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = 'Mozilla/5.0 (compatible; Pollfeed/1.0)'


def extract_message_content(payload: Any) -> Optional[str]:
    """Pull ``choices[0].message.content`` out of a chat-completion payload."""
    if not isinstance(payload, dict):
        return None
    choices = payload.get('choices')
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get('message')
    if not isinstance(message, dict):
        return None
    content = message.get('content')
    return content if isinstance(content, str) else None


class RelayClient:
    """Relay client with a shared aiohttp session."""

    def __init__(self,
                 base_url: str,
                 timeout: int = 10,
                 user_agent: str = DEFAULT_USER_AGENT):
        """
        Initialize relay client.

        Args:
            base_url: Relay API root, e.g. http://localhost:3001/api
            timeout: Request timeout in seconds
            user_agent: User-Agent header value
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.user_agent = user_agent

        # Session will be created per async context
        self._session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        self._session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout),
            headers={
                'User-Agent': self.user_agent,
                'Accept': 'application/json'
            }
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._session:
            await self._session.close()
            self._session = None

    @property
    def news_endpoint(self) -> str:
        return f"{self.base_url}/news"

    @property
    def generate_endpoint(self) -> str:
        return f"{self.base_url}/generate-content"

    @property
    def proxy_image_endpoint(self) -> str:
        return f"{self.base_url}/proxy-image"

    def _require_session(self) -> aiohttp.ClientSession:
        if not self._session:
            raise RuntimeError("RelayClient must be used as async context manager")
        return self._session

    async def _read_json(self, response: aiohttp.ClientResponse, endpoint: str) -> Any:
        """Decode a JSON body, mapping HTTP errors and junk bodies to feed errors."""
        try:
            body = await response.text()
        except UnicodeDecodeError:
            raise UpstreamError(endpoint, "response is not valid text")

        try:
            payload = json.loads(body) if body else None
        except ValueError:
            payload = None
            if response.status < 400:
                raise UpstreamError(endpoint, "response is not valid JSON")

        if response.status >= 400:
            message = payload.get('message') if isinstance(payload, dict) else None
            if message:
                raise UpstreamError(endpoint, message, payload_status=payload.get('status'))
            logger.error(f"API error response from {endpoint}: {body[:500]}")
            raise TransportError(endpoint, RuntimeError(response.reason or 'HTTP error'), status=response.status)

        return payload

    async def fetch_news(self, query: str = 'top') -> List[Article]:
        """
        Fetch articles for a query ('top' for headlines).

        Args:
            query: Headline mode or free-text / boolean-OR query

        Returns:
            Articles in upstream relevance order (unfiltered)

        Raises:
            TransportError: Network failure or HTTP error without payload
            UpstreamError: Non-ok status, error payload or malformed body
        """
        session = self._require_session()
        endpoint = self.news_endpoint

        try:
            logger.info(f"Fetching news from {endpoint} (q={query!r})")
            async with session.get(endpoint, params={'q': query}) as response:
                logger.debug(f"News response status: {response.status}")
                payload = await self._read_json(response, endpoint)
        except asyncio.TimeoutError as e:
            logger.error(f"Timeout fetching news from {endpoint}")
            raise TransportError(endpoint, e) from e
        except aiohttp.ClientError as e:
            logger.error(f"HTTP error fetching news from {endpoint}: {e}")
            raise TransportError(endpoint, e) from e

        if not isinstance(payload, dict):
            raise UpstreamError(endpoint, "Invalid response from API")
        status = payload.get('status')
        if status != 'ok':
            raise UpstreamError(endpoint, payload.get('message') or f"status {status!r}", payload_status=status)

        raw_articles = payload.get('articles')
        if not isinstance(raw_articles, list):
            raise UpstreamError(endpoint, "response has no articles list", payload_status=status)

        articles = []
        for item in raw_articles:
            if not isinstance(item, dict):
                logger.debug(f"Skipping malformed article entry: {item!r}")
                continue
            articles.append(Article.from_api(item))

        logger.info(f"Total articles received: {len(articles)}")
        return articles

    async def generate_content(self, article: Article) -> str:
        """
        Ask the relay for poll text about ``article``.

        Returns:
            Raw model output for the poll parser

        Raises:
            TransportError: Network failure or HTTP error
            UpstreamError: Response without choices[0].message.content
        """
        session = self._require_session()
        endpoint = self.generate_endpoint
        body = {'article': article.to_generation_payload()}

        try:
            async with session.post(endpoint, json=body) as response:
                payload = await self._read_json(response, endpoint)
        except asyncio.TimeoutError as e:
            raise TransportError(endpoint, e) from e
        except aiohttp.ClientError as e:
            raise TransportError(endpoint, e) from e

        content = extract_message_content(payload)
        if content is None:
            raise UpstreamError(endpoint, "Invalid response format")
        return content
