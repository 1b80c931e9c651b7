"""Feed package exports."""
from auto_blogger.feeds.gnews_api import GNewsAPI, GNewsAPIError, parse_article_date
from auto_blogger.feeds.grouping import (
    group_articles_by_topic,
    are_articles_related,
    get_common_words,
    extract_topic_from_title
)

__all__ = [
    'GNewsAPI',
    'GNewsAPIError',
    'parse_article_date',
    'group_articles_by_topic',
    'are_articles_related',
    'get_common_words',
    'extract_topic_from_title'
]
