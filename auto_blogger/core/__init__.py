"""Core package exports."""
from auto_blogger.core.types import (
    Article,
    ArticleSource,
    ArticleGroup,
    BlogDraft,
    Blog,
    CleanupResults,
    CleanupStats
)
from auto_blogger.core.constants import (
    BLOG_CATEGORIES,
    BLOG_STATUSES,
    BlogStatus,
    CATEGORY_TOPICS,
    TRENDING_KEYWORDS,
    STOP_WORDS
)

__all__ = [
    'Article',
    'ArticleSource',
    'ArticleGroup',
    'BlogDraft',
    'Blog',
    'CleanupResults',
    'CleanupStats',
    'BLOG_CATEGORIES',
    'BLOG_STATUSES',
    'BlogStatus',
    'CATEGORY_TOPICS',
    'TRENDING_KEYWORDS',
    'STOP_WORDS'
]
