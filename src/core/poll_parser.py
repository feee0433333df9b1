#!/usr/bin/env python3
"""
Poll content parsing for AI-generated poll text.

Turns a free-text model answer into a question with exactly three
options. Parsing is forgiving about labels, numbering and bullet dashes,
and degrades to a fixed default poll instead of raising.
"""

import re
import logging
from typing import List, Optional, Pattern, Tuple

from .models.poll import PollContent, OPTION_COUNT

logger = logging.getLogger(__name__)

# Applied in order to every trimmed, non-empty line.
STRIP_RULES: Tuple[Tuple[str, Pattern[str]], ...] = (
    ('label', re.compile(r'^(poll question|question|q|option|answer|choice|a|o)\b[:.]?\s*', re.IGNORECASE)),
    ('enumeration', re.compile(r'^\d+[.)]\s*')),
    ('dash', re.compile(r'^-\s*')),
)


def strip_line(line: str) -> str:
    """
    Remove a leading label, enumeration marker and dash from one line.

    Args:
        line: Trimmed input line

    Returns:
        Line content without its prefix markers
    """
    for _name, pattern in STRIP_RULES:
        line = pattern.sub('', line, count=1)
    return line.strip()


def usable_lines(raw_text: str) -> List[str]:
    """Split text into stripped lines, dropping lines that end up empty."""
    lines = []
    for line in raw_text.splitlines():
        line = line.strip()
        if not line:
            continue
        stripped = strip_line(line)
        if stripped:
            lines.append(stripped)
    return lines


def _degrade(reason: str, raw_text: Optional[str]) -> PollContent:
    logger.info(f"Poll content degraded to default: {reason}")
    if raw_text:
        logger.debug("Unusable poll text (%d chars): %r", len(raw_text), raw_text[:200])
    return PollContent.default()


def parse(raw_text) -> PollContent:
    """
    Parse AI response text into poll content.

    The first usable line is the question, the next three are the options;
    any further lines are ignored. Fewer than four usable lines, or an
    empty question, yields the default poll.

    Args:
        raw_text: Raw model output (any value is accepted)

    Returns:
        PollContent, never partially filled
    """
    if not isinstance(raw_text, str):
        return _degrade(f"expected text, got {type(raw_text).__name__}", None)

    lines = usable_lines(raw_text)
    if len(lines) < OPTION_COUNT + 1:
        return _degrade(f"only {len(lines)} usable lines", raw_text)

    question = lines[0]
    options = tuple(lines[1:OPTION_COUNT + 1])
    if len(lines) > OPTION_COUNT + 1:
        logger.debug(f"Ignoring {len(lines) - OPTION_COUNT - 1} extra poll lines")

    return PollContent(question=question, options=options)


class PollContentParser:
    """Object wrapper around :func:`parse` for injection into the controller."""

    def parse(self, raw_text) -> PollContent:
        return parse(raw_text)
