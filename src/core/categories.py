#!/usr/bin/env python3
"""
News categories and their upstream query strings.
"""

from dataclasses import dataclass
from typing import Dict

HEADLINES_QUERY = 'top'
ALL_CATEGORY = 'all'


@dataclass(frozen=True)
class Category:
    name: str
    query: str
    description: str


NEWS_CATEGORIES: Dict[str, Category] = {
    'politics': Category(
        name='Politics',
        query='politics OR government OR election OR congress OR senate OR white house OR president',
        description='Latest political news and government updates'
    ),
    'technology': Category(
        name='Technology',
        query='technology OR tech OR innovation OR AI OR artificial intelligence OR software OR hardware OR digital',
        description='Tech news, innovations, and digital trends'
    ),
    'business': Category(
        name='Business',
        query='business OR economy OR market OR finance OR stock market OR trade OR commerce',
        description='Business news, market updates, and economic trends'
    ),
    'science': Category(
        name='Science',
        query='science OR research OR discovery OR scientific OR study OR experiment OR laboratory',
        description='Scientific discoveries and research updates'
    ),
    'health': Category(
        name='Health',
        query='health OR medical OR healthcare OR medicine OR disease OR treatment OR wellness',
        description='Health news and medical updates'
    ),
    'entertainment': Category(
        name='Entertainment',
        query='entertainment OR movies OR music OR film OR television OR celebrity OR show business',
        description='Entertainment news and cultural updates'
    ),
    'sports': Category(
        name='Sports',
        query='sports OR athletics OR competition OR game OR tournament OR championship OR player',
        description='Sports news and athletic updates'
    ),
    'environment': Category(
        name='Environment',
        query='environment OR climate OR sustainability OR nature OR conservation OR pollution OR global warming',
        description='Environmental news and climate updates'
    ),
}


def query_for_category(category: str) -> str:
    """
    Map a category key to its upstream query.

    Args:
        category: Category key, or 'all' for headlines

    Returns:
        Query string for the news relay

    Raises:
        ValueError: If the category is unknown
    """
    key = category.strip().lower()
    if key == ALL_CATEGORY:
        return HEADLINES_QUERY
    if key not in NEWS_CATEGORIES:
        available = ', '.join([ALL_CATEGORY] + list(NEWS_CATEGORIES))
        raise ValueError(f"Invalid category '{category}'. Available: {available}")
    return NEWS_CATEGORIES[key].query
