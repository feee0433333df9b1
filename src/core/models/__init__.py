#!/usr/bin/env python3
"""
Core data models for the poll feed.

Contains all data structures used throughout the application.
"""

from .article import Article
from .poll import PollContent
from .cursor import FeedCursor
from .view import ArticleView

__all__ = ['Article', 'PollContent', 'FeedCursor', 'ArticleView']
