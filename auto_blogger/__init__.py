"""Root package exports."""
from auto_blogger.core.types import Article, ArticleSource, Blog, BlogDraft
from auto_blogger.feeds import GNewsAPI, GNewsAPIError, group_articles_by_topic
from auto_blogger.llm import BlogGenerator, BlogGenerationError
from auto_blogger.storage import BlogRepository, SubscriberStore, DuplicateBlogError, BlogValidationError
from auto_blogger.cleanup import BlogCleanupManager
from auto_blogger.pipeline import BlogRunner
from auto_blogger.scheduler import BlogScheduler

__all__ = [
    'Article',
    'ArticleSource',
    'Blog',
    'BlogDraft',
    'GNewsAPI',
    'GNewsAPIError',
    'group_articles_by_topic',
    'BlogGenerator',
    'BlogGenerationError',
    'BlogRepository',
    'SubscriberStore',
    'DuplicateBlogError',
    'BlogValidationError',
    'BlogCleanupManager',
    'BlogRunner',
    'BlogScheduler'
]
