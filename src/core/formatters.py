#!/usr/bin/env python3
"""
Formatting utilities for terminal display of the feed.
"""

from typing import Optional

from core.models.article import Article
from core.models.poll import PollContent
from core.models.view import ArticleView


def format_article(article: Article) -> str:
    """Format a single article as a one-entry listing."""
    timestamp = ""
    if article.published_at:
        timestamp = article.published_at.strftime("%Y-%m-%d %H:%M")

    return f"[{timestamp}] [{article.source_name.upper()}] {article.title}\n    {article.url}\n"


def format_poll(poll: Optional[PollContent]) -> str:
    """Format the poll block of a card."""
    if poll is None:
        return "  ⏳ Loading poll..."

    lines = [f"  🗳️  {poll.question}"]
    for number, option in enumerate(poll.options, 1):
        lines.append(f"     [{number}] {option}")
    return "\n".join(lines)


def format_article_view(view: ArticleView) -> str:
    """Format the article card currently in view."""
    article = view.article
    published = article.published_at.strftime("%Y-%m-%d") if article.published_at else "unknown date"

    lines = [
        "",
        "=" * 60,
        f"📰 Article {view.index + 1}/{view.total}",
        "=" * 60,
        f"{article.title}",
        "",
        f"{article.description or 'No description available'}",
        "",
        f"🖼️  {view.image_url}" + ("  (fallback)" if view.image_degraded else ""),
        f"📅 {published}  •  {article.source_name or 'Unknown source'}",
        f"🔗 {article.url}",
        "",
        format_poll(view.poll),
        "-" * 60,
    ]
    return "\n".join(lines)


def format_navigation_help(view: Optional[ArticleView]) -> str:
    """Prompt line listing the available keys."""
    keys = []
    if view is not None:
        if view.index > 0:
            keys.append("p=prev")
        if view.index < view.total - 1:
            keys.append("n=next")
        if view.poll is not None:
            keys.append("1-3=vote")
        keys.append("j N=jump")
    keys.extend(["r=refresh", "c NAME=category", "s TEXT=search", "q=quit"])
    return "  ".join(keys)


def format_error(message: str) -> str:
    """Error block with the retry hint."""
    return "\n".join([
        "",
        "❌ Error loading articles",
        f"   {message}",
        "   Press r to retry.",
    ])
