"""Fetch news, generate a blog post and store it."""
import random
import time
from typing import Any, Dict, List, Optional
from auto_blogger.config.settings import GENERATION_SETTINGS
from auto_blogger.core.constants import BLOG_CATEGORIES, CATEGORY_TOPICS, GNEWS_HEADLINE_CATEGORIES, DEFAULT_CATEGORY
from auto_blogger.core.types import Article, Blog, BlogDraft
from auto_blogger.feeds.gnews_api import GNewsAPI
from auto_blogger.llm.generator import BlogGenerator
from auto_blogger.storage.blogs import BlogRepository, BlogValidationError, build_from_draft
from auto_blogger.storage.db import utcnow
from auto_blogger.logging_cfg.logger import setup_logger, update_metrics

logger = setup_logger()


class NoArticlesError(Exception):
    """Raised when the news API returns nothing to write about."""
    pass


class BlogRunner:
    """Turns news for a category or search query into a stored blog post."""

    def __init__(
        self,
        repository: BlogRepository,
        news_api: Optional[GNewsAPI] = None,
        generator: Optional[BlogGenerator] = None
    ):
        self.repository = repository
        self.news_api = news_api or GNewsAPI()
        self.generator = generator or BlogGenerator()

    def fetch_category_articles(self, category: str, max_articles: int) -> List[Article]:
        info = CATEGORY_TOPICS.get(category, {})
        news_category = info.get('news_category', category)
        if news_category in GNEWS_HEADLINE_CATEGORIES:
            return self.news_api.fetch_latest_news(news_category, max_results=max_articles)
        return self.news_api.search_news(news_category, max_results=max_articles)

    def publish(
        self,
        draft: BlogDraft,
        articles: List[Article],
        category: str,
        topic: Optional[str],
        extra_tags: Optional[List[str]] = None,
        **flags: bool
    ) -> Blog:
        """
        Store a generated draft.

        Args:
            draft: Parsed generator output
            articles: Articles the draft was written from
            category: Blog category
            topic: Topic the draft was written about
            extra_tags: Tags appended after the generated ones
            flags: generation_info markers such as scheduled_generation=True

        Raises:
            BlogValidationError: If the draft is missing required fields
            DuplicateBlogError: If a blog with the same slug exists
        """
        if GENERATION_SETTINGS['generate_metadata'] and not draft.get('meta_data'):
            draft['meta_data'] = self.generator.generate_metadata(draft.get('content', ''))

        generation_info: Dict[str, Any] = {
            'model': self.generator.model,
            'generated_at': utcnow(),
            'articles_used': len(articles),
            'topic': topic,
            'category': category
        }
        generation_info.update(flags)

        document = build_from_draft(draft, articles, category, generation_info, extra_tags)
        blog = self.repository.create(document)
        update_metrics('blogs_generated', 1)
        return blog

    def generate_for_category(
        self,
        category: str,
        topic: Optional[str] = None,
        max_articles: Optional[int] = None
    ) -> Blog:
        """Generate one blog for a category, picking a random category topic when none is given."""
        category = category.strip().lower()
        if category not in BLOG_CATEGORIES:
            raise BlogValidationError([f"category must be one of: {', '.join(BLOG_CATEGORIES)}"])
        max_articles = max_articles or GENERATION_SETTINGS['manual_articles']

        if topic is None and category in CATEGORY_TOPICS:
            topic = random.choice(CATEGORY_TOPICS[category]['topics'])

        logger.info(f"Generating {category} blog (topic: {topic})")
        articles = self.fetch_category_articles(category, max_articles)
        if not articles:
            raise NoArticlesError(f"No articles found for category: {category}")

        draft = self.generator.generate_blog_post(articles, topic)
        blog = self.publish(draft, articles, category, topic, manual_generation=True)
        logger.info(f"Generated blog: {blog['title']} ({blog['word_count']} words)")
        return blog

    def generate_for_categories(
        self,
        categories: Optional[List[str]] = None,
        delay: Optional[float] = None
    ) -> Dict[str, Any]:
        """Generate one blog per category; failures are collected, not raised."""
        categories = categories or GENERATION_SETTINGS['scheduled_categories']
        delay = GENERATION_SETTINGS['delay_between_blogs'] if delay is None else delay
        results: Dict[str, Any] = {'successful': [], 'failed': []}

        for i, category in enumerate(categories):
            try:
                blog = self.generate_for_category(category)
                results['successful'].append({'category': category, 'title': blog['title'], 'slug': blog['slug']})
            except Exception as e:
                logger.error(f"Failed to generate {category} blog: {str(e)}")
                update_metrics('generation_failures', 1)
                update_metrics('failed_categories', [category])
                results['failed'].append({'category': category, 'error': str(e)})

            if delay and i < len(categories) - 1:
                time.sleep(delay)

        logger.info(f"Generated {len(results['successful'])}/{len(categories)} blogs")
        return results

    def search_and_generate(self, query: str, max_articles: Optional[int] = None) -> Blog:
        """Generate a focused blog about a search query, tagged with the query."""
        max_articles = max_articles or GENERATION_SETTINGS['search_articles']

        logger.info(f"Searching news for: {query}")
        articles = self.news_api.search_news(query, max_results=max_articles)
        if not articles:
            raise NoArticlesError(f"No articles found for query: {query}")

        draft = self.generator.generate_blog_post(articles, query, focused=True)
        blog = self.publish(
            draft, articles, DEFAULT_CATEGORY, query,
            extra_tags=[query.strip().lower()],
            manual_generation=True
        )
        logger.info(f"Generated blog: {blog['title']}")
        return blog
