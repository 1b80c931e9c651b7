"""Type definitions for articles, blog drafts and stored blog documents."""
from typing import TypedDict, Optional, List
from datetime import datetime


class ArticleSource(TypedDict):
    name: str
    url: Optional[str]


class Article(TypedDict):
    title: str
    description: str
    content: Optional[str]
    url: str
    image: Optional[str]
    published_at: Optional[str]
    source: ArticleSource


class ArticleGroup(TypedDict):
    topic: str
    articles: List[Article]


class ImageMetadata(TypedDict):
    alt: str
    source: str
    caption: str


class MetaData(TypedDict, total=False):
    meta_description: str
    social_title: str
    keywords: List[str]


class BlogDraft(TypedDict, total=False):
    """Parsed LLM output, ready to be turned into a blog document."""
    title: str
    excerpt: str
    content: str
    tags: List[str]
    word_count: int
    estimated_read_time: int
    featured_image: Optional[str]
    image_metadata: ImageMetadata
    meta_data: Optional[MetaData]


class SourceArticle(TypedDict):
    title: str
    url: str
    source: str
    published_at: Optional[datetime]
    image: Optional[str]
    image_alt: Optional[str]


class GenerationInfo(TypedDict, total=False):
    model: str
    generated_at: datetime
    articles_used: int
    topic: Optional[str]
    category: str
    scheduled_generation: bool  # Created by a cron job
    trending_blog: bool
    manual_generation: bool


class Blog(TypedDict, total=False):
    title: str
    slug: str
    excerpt: str
    content: str
    tags: List[str]
    category: str
    status: str
    featured_image: Optional[str]
    image_metadata: Optional[ImageMetadata]
    word_count: int
    estimated_read_time: int
    view_count: int
    likes: int
    source_articles: List[SourceArticle]
    meta_data: Optional[MetaData]
    generation_info: Optional[GenerationInfo]
    created_at: datetime
    updated_at: datetime


class CleanupResults(TypedDict):
    old_blogs_deleted: int
    duplicates_deleted: int
    category_blogs_deleted: int
    total_deleted: int


class CleanupStats(TypedDict):
    total_blogs: int
    old_blogs: int
    duplicate_groups: int
    last_updated: str
