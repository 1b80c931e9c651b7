"""Blog documents and queries against the blogs collection."""
import math
import re
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple
from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError
from auto_blogger.core.constants import (
    BLOG_CATEGORIES,
    BLOG_STATUSES,
    BlogStatus,
    DEFAULT_CATEGORY,
    MAX_TITLE_LENGTH,
    SHORT_TITLE_LENGTH,
    MAX_SLUG_LENGTH,
    MAX_EXCERPT_LENGTH
)
from auto_blogger.core.text_utils import count_words, estimate_read_time
from auto_blogger.core.types import Article, Blog, BlogDraft, SourceArticle
from auto_blogger.feeds.gnews_api import parse_article_date
from auto_blogger.storage.db import utcnow
from auto_blogger.logging_cfg.logger import setup_logger

logger = setup_logger()

# Fields left out of list responses
LIST_PROJECTION = {'content': 0}

SORT_OPTIONS = {
    'newest': [('created_at', DESCENDING)],
    'oldest': [('created_at', ASCENDING)],
    'popular': [('view_count', DESCENDING), ('likes', DESCENDING)],
    'reading-time': [('estimated_read_time', ASCENDING)],
}
TRENDING_VIEW_WEIGHT = 0.7
TRENDING_LIKE_WEIGHT = 0.3
TOP_TAG_FACETS = 20


class StorageError(Exception):
    """Base error for blog storage operations."""
    pass


class DuplicateBlogError(StorageError):
    """Raised when a blog with the same slug already exists."""
    pass


class BlogValidationError(StorageError):
    """Raised when a blog document fails validation."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__('; '.join(errors))


def slugify(title: str) -> str:
    slug = re.sub(r'[^a-z0-9\s]', '', title.lower())
    slug = re.sub(r'\s+', '-', slug.strip())
    return slug[:MAX_SLUG_LENGTH]


def shorten_title(title: str) -> str:
    """Fit an overlong title into the stored limit using its first sentence."""
    if len(title) <= MAX_TITLE_LENGTH:
        return title

    first_sentence = title.split('.')[0].strip()
    if len(first_sentence) > SHORT_TITLE_LENGTH:
        shortened = first_sentence[:SHORT_TITLE_LENGTH] + '...'
    else:
        shortened = first_sentence + '.'
    logger.info(f"Title shortened to: {shortened}")
    return shortened


def to_source_articles(articles: List[Article]) -> List[SourceArticle]:
    return [
        {
            'title': article.get('title', ''),
            'url': article.get('url', ''),
            'source': (article.get('source') or {}).get('name') or 'Unknown',
            'published_at': parse_article_date(article.get('published_at')) or utcnow(),
            'image': article.get('image'),
            'image_alt': article.get('title')
        }
        for article in articles
    ]


def build_blog_document(
    title: str,
    excerpt: str,
    content: str,
    tags: Optional[List[str]] = None,
    category: Optional[str] = None,
    status: Optional[str] = None,
    featured_image: Optional[str] = None,
    image_metadata: Optional[Dict[str, str]] = None,
    source_articles: Optional[List[SourceArticle]] = None,
    meta_data: Optional[Dict[str, Any]] = None,
    generation_info: Optional[Dict[str, Any]] = None,
    now: Optional[datetime] = None
) -> Blog:
    """
    Validate blog fields and assemble a document ready for insertion.

    Raises:
        BlogValidationError: If required fields are missing or enums are invalid
    """
    title = (title or '').strip()
    excerpt = (excerpt or '').strip()
    content = (content or '').strip()
    category = (category or DEFAULT_CATEGORY).strip().lower()
    status = (status or BlogStatus.PUBLISHED.value).strip().lower()

    errors = []
    if not title:
        errors.append('title is required')
    if not excerpt:
        errors.append('excerpt is required')
    if not content:
        errors.append('content is required')
    if category not in BLOG_CATEGORIES:
        errors.append(f"category must be one of: {', '.join(BLOG_CATEGORIES)}")
    if status not in BLOG_STATUSES:
        errors.append(f"status must be one of: {', '.join(BLOG_STATUSES)}")
    if errors:
        raise BlogValidationError(errors)

    title = shorten_title(title)
    slug = slugify(title)
    if not slug:
        raise BlogValidationError(['title must contain letters or digits'])

    word_count = count_words(content)
    now = now or utcnow()

    return {
        'title': title,
        'slug': slug,
        'excerpt': excerpt[:MAX_EXCERPT_LENGTH],
        'content': content,
        'tags': [t.strip().lower() for t in (tags or []) if t and t.strip()],
        'category': category,
        'status': status,
        'featured_image': featured_image,
        'image_metadata': image_metadata,
        'word_count': word_count,
        'estimated_read_time': estimate_read_time(word_count),
        'view_count': 0,
        'likes': 0,
        'source_articles': source_articles or [],
        'meta_data': meta_data,
        'generation_info': generation_info,
        'created_at': now,
        'updated_at': now
    }


def build_from_draft(
    draft: BlogDraft,
    articles: List[Article],
    category: str,
    generation_info: Dict[str, Any],
    extra_tags: Optional[List[str]] = None
) -> Blog:
    tags = list(draft.get('tags', []))
    for tag in extra_tags or []:
        if tag.lower() not in tags:
            tags.append(tag.lower())

    return build_blog_document(
        title=draft.get('title', ''),
        excerpt=draft.get('excerpt', ''),
        content=draft.get('content', ''),
        tags=tags,
        category=category,
        featured_image=draft.get('featured_image'),
        image_metadata=draft.get('image_metadata'),
        source_articles=to_source_articles(articles),
        meta_data=draft.get('meta_data'),
        generation_info=generation_info
    )


def serialize_blog(document: Dict[str, Any]) -> Dict[str, Any]:
    """Convert a stored document into JSON-friendly values."""
    def convert(value):
        if isinstance(value, ObjectId):
            return str(value)
        if isinstance(value, datetime):
            return value.isoformat()
        if isinstance(value, dict):
            return {k: convert(v) for k, v in value.items()}
        if isinstance(value, list):
            return [convert(v) for v in value]
        return value

    result = convert(dict(document))
    if '_id' in result:
        result['id'] = result.pop('_id')
    return result


def to_object_id(blog_id: Any) -> ObjectId:
    """Raises bson.errors.InvalidId for malformed ids."""
    if isinstance(blog_id, ObjectId):
        return blog_id
    return ObjectId(blog_id)


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


class BlogRepository:
    """Queries and updates for stored blog posts."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def create(self, document: Blog) -> Blog:
        try:
            result = self.collection.insert_one(document)
        except DuplicateKeyError as e:
            logger.warning(f"Duplicate blog slug: {document.get('slug')}")
            raise DuplicateBlogError(f"Blog with this title already exists: {document.get('title')}") from e

        document['_id'] = result.inserted_id
        logger.info(f"Saved blog: {document['title']} ({result.inserted_id})")
        return document

    def get_by_id(self, blog_id: Any) -> Optional[Blog]:
        return self.collection.find_one({'_id': to_object_id(blog_id)})

    def find_by_slug(self, slug: str, published_only: bool = True) -> Optional[Blog]:
        query = {'slug': slug}
        if published_only:
            query['status'] = BlogStatus.PUBLISHED.value
        return self.collection.find_one(query)

    def build_list_query(
        self,
        category: Optional[str] = None,
        tag: Optional[str] = None,
        search: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None
    ) -> Dict[str, Any]:
        query: Dict[str, Any] = {'status': BlogStatus.PUBLISHED.value}

        if category:
            query['category'] = category.lower()
        if tag:
            query['tags'] = tag.lower()
        if date_from or date_to:
            query['created_at'] = {}
            if date_from:
                query['created_at']['$gte'] = date_from
            if date_to:
                query['created_at']['$lte'] = date_to
        if search:
            pattern = re.compile(re.escape(search), re.IGNORECASE)
            query['$or'] = [
                {'title': pattern},
                {'excerpt': pattern},
                {'content': pattern},
                {'tags': pattern}
            ]
        return query

    def list_blogs(
        self,
        page: int = 1,
        limit: int = 10,
        sort: str = 'newest',
        **filters
    ) -> Tuple[List[Blog], int]:
        """Return one page of published blogs without content, plus the match count."""
        query = self.build_list_query(**filters)
        skip = (max(page, 1) - 1) * limit
        total = self.collection.count_documents(query)

        if sort == 'trending':
            pipeline = [
                {'$match': query},
                {'$addFields': {'trending_score': {'$add': [
                    {'$multiply': ['$view_count', TRENDING_VIEW_WEIGHT]},
                    {'$multiply': ['$likes', TRENDING_LIKE_WEIGHT]}
                ]}}},
                {'$sort': {'trending_score': -1, 'created_at': -1}},
                {'$skip': skip},
                {'$limit': limit}
            ]
            blogs = list(self.collection.aggregate(pipeline))
            for blog in blogs:
                blog.pop('content', None)
                blog.pop('trending_score', None)
            return blogs, total

        cursor = (self.collection.find(query, LIST_PROJECTION)
                  .sort(SORT_OPTIONS.get(sort, SORT_OPTIONS['newest']))
                  .skip(skip)
                  .limit(limit))
        return list(cursor), total

    def get_filter_facets(self) -> Dict[str, List[Dict[str, Any]]]:
        published = {'$match': {'status': BlogStatus.PUBLISHED.value}}
        categories = self.collection.aggregate([
            published,
            {'$group': {'_id': '$category', 'count': {'$sum': 1}}},
            {'$sort': {'count': -1}}
        ])
        tags = self.collection.aggregate([
            published,
            {'$unwind': '$tags'},
            {'$group': {'_id': '$tags', 'count': {'$sum': 1}}},
            {'$sort': {'count': -1}},
            {'$limit': TOP_TAG_FACETS}
        ])
        return {
            'categories': [{'name': c['_id'], 'count': c['count']} for c in categories],
            'tags': [{'name': t['_id'], 'count': t['count']} for t in tags]
        }

    def find_by_category(self, category: str, page: int = 1, limit: int = 10) -> Tuple[List[Blog], int]:
        return self.list_blogs(page=page, limit=limit, category=category)

    def find_by_tag(self, tag: str, page: int = 1, limit: int = 10) -> Tuple[List[Blog], int]:
        return self.list_blogs(page=page, limit=limit, tag=tag)

    def get_popular(self, limit: int = 10) -> List[Blog]:
        cursor = (self.collection.find({'status': BlogStatus.PUBLISHED.value})
                  .sort(SORT_OPTIONS['popular'])
                  .limit(limit))
        return list(cursor)

    def get_recent(self, days: int = 7, limit: int = 10) -> List[Blog]:
        threshold = utcnow() - timedelta(days=days)
        cursor = (self.collection.find({
            'status': BlogStatus.PUBLISHED.value,
            'created_at': {'$gte': threshold}
        })
            .sort(SORT_OPTIONS['newest'])
            .limit(limit))
        return list(cursor)

    def increment_view(self, blog_id: Any) -> Optional[Blog]:
        return self.collection.find_one_and_update(
            {'_id': to_object_id(blog_id)},
            {'$inc': {'view_count': 1}},
            return_document=ReturnDocument.AFTER
        )

    def add_like(self, slug: str) -> Optional[int]:
        """Increment likes; returns the new total or None when the blog is missing."""
        updated = self.collection.find_one_and_update(
            {'slug': slug},
            {'$inc': {'likes': 1}},
            return_document=ReturnDocument.AFTER
        )
        return updated['likes'] if updated else None

    def get_related(self, blog: Blog, limit: int = 5) -> List[Blog]:
        cursor = (self.collection.find({
            '_id': {'$ne': blog['_id']},
            'status': BlogStatus.PUBLISHED.value,
            '$or': [
                {'tags': {'$in': blog.get('tags') or []}},
                {'category': blog.get('category')}
            ]
        }, LIST_PROJECTION)
            .sort(SORT_OPTIONS['newest'])
            .limit(limit))
        return list(cursor)

    def get_admin_stats(self) -> Dict[str, Any]:
        published = {'status': BlogStatus.PUBLISHED.value}
        totals = list(self.collection.aggregate([
            {'$match': published},
            {'$group': {
                '_id': None,
                'views': {'$sum': '$view_count'},
                'likes': {'$sum': '$likes'}
            }}
        ]))
        category_stats = list(self.collection.aggregate([
            {'$match': published},
            {'$group': {'_id': '$category', 'count': {'$sum': 1}}},
            {'$sort': {'count': -1}}
        ]))
        recent = (self.collection.find(
            published,
            {'title': 1, 'created_at': 1, 'view_count': 1, 'likes': 1}
        )
            .sort(SORT_OPTIONS['newest'])
            .limit(5))

        return {
            'total_blogs': self.collection.count_documents(published),
            'total_views': totals[0]['views'] if totals else 0,
            'total_likes': totals[0]['likes'] if totals else 0,
            'category_stats': [{'category': c['_id'], 'count': c['count']} for c in category_stats],
            'recent_activity': list(recent)
        }

    def distinct_categories(self) -> List[str]:
        return sorted(self.collection.distinct('category', {'status': BlogStatus.PUBLISHED.value}))

    def distinct_tags(self) -> List[str]:
        return sorted(self.collection.distinct('tags', {'status': BlogStatus.PUBLISHED.value}))

    def count(self, query: Optional[Dict[str, Any]] = None) -> int:
        return self.collection.count_documents(query or {})

    def find_similar_recent(self, title: str, days: int = 7) -> Optional[Blog]:
        """
        Find a blog created in the last `days` days whose title looks like `title`.

        Matches any of the first three words longer than three characters,
        case-insensitively. Titles without such words need an exact match.
        """
        words = [w for w in title.lower().split() if len(w) > 3][:3]
        if words:
            title_query = re.compile('|'.join(re.escape(w) for w in words), re.IGNORECASE)
        else:
            title_query = title

        return self.collection.find_one({
            'title': title_query,
            'created_at': {'$gte': utcnow() - timedelta(days=days)}
        })
