"""Group related articles so each blog post covers a single story line."""
import re
from typing import List
from auto_blogger.core.types import Article, ArticleGroup
from auto_blogger.core.constants import (
    STOP_WORDS,
    TOPIC_KEYWORDS,
    DEFAULT_GROUP_TOPIC,
    MIN_SIGNIFICANT_WORD_LENGTH,
    MIN_COMMON_WORDS
)
from auto_blogger.config.settings import GENERATION_SETTINGS

WORD_PATTERN = re.compile(r'\b\w+\b')


def significant_words(text: str) -> List[str]:
    """Lowercased words long enough to carry meaning, stop words removed."""
    words = WORD_PATTERN.findall((text or '').lower())
    return [w for w in words if len(w) >= MIN_SIGNIFICANT_WORD_LENGTH and w not in STOP_WORDS]


def get_common_words(text1: str, text2: str) -> List[str]:
    """Significant words of text1 that also occur in text2. Repeats in text1 are kept."""
    words2 = set(significant_words(text2))
    return [w for w in significant_words(text1) if w in words2]


def _article_text(article: Article) -> str:
    return f"{article.get('title') or ''} {article.get('description') or ''}"


def are_articles_related(article1: Article, article2: Article) -> bool:
    return len(get_common_words(_article_text(article1), _article_text(article2))) >= MIN_COMMON_WORDS


def extract_topic_from_title(title: str) -> str:
    """Pick the first known topic keyword appearing anywhere in a title, e.g. "tech" in "Fintech"."""
    title_lower = (title or '').lower()
    for topic in TOPIC_KEYWORDS:
        if topic.lower() in title_lower:
            return topic
    return DEFAULT_GROUP_TOPIC


def group_articles_by_topic(
    articles: List[Article],
    max_group_size: int = None,
    max_groups: int = None
) -> List[ArticleGroup]:
    """
    Greedily cluster articles around seed articles.

    The first remaining article seeds a group; remaining articles are scanned
    from the end and pulled in when related to the seed. Groups are capped at
    ``max_group_size`` articles and at most ``max_groups`` groups are built.
    """
    if max_group_size is None:
        max_group_size = GENERATION_SETTINGS['max_group_size']
    if max_groups is None:
        max_groups = GENERATION_SETTINGS['max_groups']

    groups: List[ArticleGroup] = []
    remaining = list(articles)

    while remaining and len(groups) < max_groups:
        base = remaining.pop(0)
        group: ArticleGroup = {
            'topic': extract_topic_from_title(base.get('title', '')),
            'articles': [base]
        }

        for i in range(len(remaining) - 1, -1, -1):
            if len(group['articles']) >= max_group_size:
                break
            if are_articles_related(base, remaining[i]):
                group['articles'].append(remaining.pop(i))

        groups.append(group)

    return groups
