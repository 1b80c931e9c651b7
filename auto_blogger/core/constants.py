"""Constants and configuration values."""
from enum import Enum

# Categories a stored blog may belong to
BLOG_CATEGORIES = ['technology', 'business', 'science', 'general', 'innovation', 'startup']
DEFAULT_CATEGORY = 'general'


class BlogStatus(str, Enum):
    DRAFT = 'draft'
    PUBLISHED = 'published'
    ARCHIVED = 'archived'


BLOG_STATUSES = [status.value for status in BlogStatus]

# Field limits for stored blogs
MAX_TITLE_LENGTH = 200
SHORT_TITLE_LENGTH = 180
MAX_SLUG_LENGTH = 100
MAX_EXCERPT_LENGTH = 500
EXCERPT_PREVIEW_LENGTH = 200
WORDS_PER_MINUTE = 200

# Categories with their friendly names and rotating topics
CATEGORY_TOPICS = {
    'technology': {
        'name': 'Technology',
        'topics': ['Latest Technology Trends', 'AI and Machine Learning', 'Software Development', 'Tech Innovation'],
        'news_category': 'technology'
    },
    'business': {
        'name': 'Business',
        'topics': ['Business Strategy', 'Market Analysis', 'Entrepreneurship', 'Corporate News'],
        'news_category': 'business'
    },
    'science': {
        'name': 'Science',
        'topics': ['Scientific Discoveries', 'Research Breakthroughs', 'Health and Medicine', 'Climate Science'],
        'news_category': 'science'
    }
}

# Keywords picked at random for the daily trending post
TRENDING_KEYWORDS = ['AI', 'blockchain', 'startup', 'innovation', 'tech']

# Topic labels recognised in article titles when grouping
TOPIC_KEYWORDS = ['AI', 'blockchain', 'startup', 'tech', 'innovation', 'business', 'science']
DEFAULT_GROUP_TOPIC = 'Technology News'

# Words ignored when comparing articles
STOP_WORDS = frozenset([
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of', 'with', 'by',
    'is', 'are', 'was', 'were', 'be', 'been', 'being', 'have', 'has', 'had', 'do', 'does',
    'did', 'will', 'would', 'could', 'should', 'may', 'might', 'must', 'can', 'this', 'that',
    'these', 'those'
])
MIN_SIGNIFICANT_WORD_LENGTH = 4
MIN_COMMON_WORDS = 2

# Tags extracted from generated content
COMMON_TAGS = ['technology', 'business', 'innovation', 'ai', 'startup', 'science', 'news']
DEFAULT_TAGS = ['general', 'news']

# Featured image selection
PREFERRED_IMAGE_SOURCES = ['TechCrunch', 'Reuters', 'BBC', 'CNN', 'The Verge']
IMAGE_EXTENSIONS = ['.jpg', '.jpeg', '.png', '.webp', '.gif']
IMAGE_URL_HINTS = ['images', 'img', 'photo']

DEFAULT_BLOG_TITLE = 'Generated Blog Post'
DEFAULT_EXCERPT = 'A comprehensive analysis of current news and trends.'

# Categories served by the GNews top-headlines endpoint; others are searched by name
GNEWS_HEADLINE_CATEGORIES = frozenset([
    'general', 'world', 'nation', 'business', 'technology', 'entertainment', 'sports', 'science', 'health'
])
