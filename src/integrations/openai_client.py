#!/usr/bin/env python3
"""
OpenAI integration for poll generation.

Generates poll text straight from the OpenAI API instead of going through
the relay. Returns the same raw text the relay's /generate-content yields,
so the controller and parser do not care which generator is configured.
"""

import os
import logging
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI, APIConnectionError, APIStatusError, APITimeoutError

from core.exceptions import MissingDependencyError, TransportError, UpstreamError
from core.models.article import Article
from core.prompts import PollPrompts

logger = logging.getLogger(__name__)

ENDPOINT_NAME = "openai:chat.completions"


class OpenAIPollClient:
    """Poll text generator backed by the OpenAI chat completions API."""

    def __init__(self,
                 api_key: Optional[str] = None,
                 model: str = "gpt-4o-mini",
                 timeout: int = 20):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key. If None, tries to get from environment.
            model: Chat model name
            timeout: Request timeout in seconds
        """
        api_key = api_key or os.getenv('OPENAI_API_KEY')
        if not api_key:
            raise MissingDependencyError("OPENAI_API_KEY", "required when POLL_GENERATOR=openai")

        self.client = AsyncOpenAI(api_key=api_key, timeout=timeout)
        self.model = model
        self.max_tokens = 150
        self.temperature = 0.7

    async def _chat(self, messages: List[Dict[str, str]], max_tokens: int) -> Dict[str, Any]:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                temperature=self.temperature
            )
        except (APIConnectionError, APITimeoutError) as e:
            logger.error(f"OpenAI request failed: {e}")
            raise TransportError(ENDPOINT_NAME, e) from e
        except APIStatusError as e:
            logger.error(f"OpenAI returned HTTP {e.status_code}: {e}")
            raise TransportError(ENDPOINT_NAME, e, status=e.status_code) from e

        if not response.choices:
            raise UpstreamError(ENDPOINT_NAME, "response has no choices")

        # Same shape as the relay's /generate-content response
        result = {
            "choices": [{
                "message": {
                    "content": response.choices[0].message.content,
                    "role": response.choices[0].message.role
                }
            }],
            "usage": {
                "prompt_tokens": response.usage.prompt_tokens if response.usage else None,
                "completion_tokens": response.usage.completion_tokens if response.usage else None,
                "total_tokens": response.usage.total_tokens if response.usage else None
            }
        }

        usage = result["usage"]
        logger.info(
            f"OpenAI API call successful - tokens: {usage['prompt_tokens']} prompt + "
            f"{usage['completion_tokens']} completion = {usage['total_tokens']} total"
        )
        return result

    async def generate_content(self, article: Article) -> str:
        """
        Generate raw poll text for ``article``.

        Returns:
            Model output for the poll parser

        Raises:
            TransportError: Connection, timeout or HTTP status failure
            UpstreamError: Empty completion
        """
        payload = article.to_generation_payload()
        messages = PollPrompts.get_messages(payload['title'], payload['description'])
        logger.debug(f"Generating poll for {article.title[:60]!r} with {self.model}")

        result = await self._chat(messages, self.max_tokens)
        content = result["choices"][0]["message"]["content"]
        if not content:
            raise UpstreamError(ENDPOINT_NAME, "empty completion")
        return content
