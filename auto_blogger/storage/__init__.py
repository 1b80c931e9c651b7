"""Storage package exports."""
from auto_blogger.storage.db import (
    connect,
    close,
    ensure_indexes,
    get_blog_collection,
    get_subscriber_collection,
    utcnow
)
from auto_blogger.storage.blogs import (
    BlogRepository,
    StorageError,
    DuplicateBlogError,
    BlogValidationError,
    build_blog_document,
    build_from_draft,
    serialize_blog,
    slugify
)
from auto_blogger.storage.subscribers import SubscriberStore

__all__ = [
    'connect',
    'close',
    'ensure_indexes',
    'get_blog_collection',
    'get_subscriber_collection',
    'utcnow',
    'BlogRepository',
    'StorageError',
    'DuplicateBlogError',
    'BlogValidationError',
    'build_blog_document',
    'build_from_draft',
    'serialize_blog',
    'slugify',
    'SubscriberStore'
]
