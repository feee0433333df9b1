#!/usr/bin/env python3
"""
AI prompts for poll generation.

Centralizes the prompt used when poll text is generated directly through
the OpenAI API. The relay uses an equivalent prompt server-side; both
produce plain lines that the poll parser understands.
"""

from typing import Dict, List


class PollPrompts:
    """Prompt templates for per-article opinion polls."""

    SYSTEM_PROMPT = (
        "You write short, neutral opinion polls about news articles. "
        "Answer with exactly four lines and nothing else: "
        "the poll question on the first line, then three distinct answer options, "
        "one per line. No numbering, no labels, no extra commentary."
    )

    POLL_TEMPLATE = """Create an opinion poll for this news article.

Title: {title}
Description: {description}

Format:
<one question, under 100 characters>
<option 1>
<option 2>
<option 3>"""

    @classmethod
    def get_poll_prompt(cls, title: str, description: str = "") -> str:
        """Build the user prompt for one article."""
        return cls.POLL_TEMPLATE.format(
            title=title.strip(),
            description=(description or "No description available").strip()
        )

    @classmethod
    def get_messages(cls, title: str, description: str = "") -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": cls.SYSTEM_PROMPT},
            {"role": "user", "content": cls.get_poll_prompt(title, description)}
        ]
