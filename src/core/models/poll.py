#!/usr/bin/env python3
"""
Poll content model.
"""

from dataclasses import dataclass
from typing import Tuple, Dict, Any

DEFAULT_QUESTION = "What's your take on this news?"
DEFAULT_OPTIONS = ("Agree", "Neutral", "Disagree")
OPTION_COUNT = 3


@dataclass(frozen=True)
class PollContent:
    """A poll question with exactly three answer options."""
    question: str
    options: Tuple[str, str, str]

    def __post_init__(self):
        if not self.question:
            raise ValueError("Poll question must not be empty")
        if len(self.options) != OPTION_COUNT:
            raise ValueError(f"Poll needs exactly {OPTION_COUNT} options, got {len(self.options)}")
        object.__setattr__(self, 'options', tuple(self.options))

    @classmethod
    def default(cls) -> 'PollContent':
        return cls(question=DEFAULT_QUESTION, options=DEFAULT_OPTIONS)

    def to_dict(self) -> Dict[str, Any]:
        return {'question': self.question, 'options': list(self.options)}
