#!/usr/bin/env python3
"""
Feed cursor model.

The cursor is the controller's position in the active batch. It is
clamped at both ends and never wraps.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FeedCursor:
    """Position within a batch; 0 <= index < total whenever total > 0."""
    index: int
    total: int

    def __post_init__(self):
        if self.total < 0:
            raise ValueError(f"Cursor total must be non-negative, got {self.total}")
        if self.total > 0 and not 0 <= self.index < self.total:
            raise ValueError(f"Cursor index {self.index} out of range for total {self.total}")

    @property
    def has_next(self) -> bool:
        return self.index + 1 < self.total

    @property
    def has_prev(self) -> bool:
        return self.index - 1 >= 0

    def advance(self) -> Optional['FeedCursor']:
        """Cursor one step forward, or None at the last article."""
        if not self.has_next:
            return None
        return FeedCursor(self.index + 1, self.total)

    def retreat(self) -> Optional['FeedCursor']:
        """Cursor one step back, or None at the first article."""
        if not self.has_prev:
            return None
        return FeedCursor(self.index - 1, self.total)

    def jump(self, index: int) -> Optional['FeedCursor']:
        """Cursor at ``index``, or None when out of range or unchanged."""
        if index == self.index or not 0 <= index < self.total:
            return None
        return FeedCursor(index, self.total)
