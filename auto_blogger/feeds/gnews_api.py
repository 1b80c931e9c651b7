from datetime import datetime
from typing import List, Dict, Optional, Any
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
from urllib.parse import urlencode
from dateutil import parser as dateutil_parser, tz as dateutil_tz
from auto_blogger.config.settings import GNEWS_CONFIG, SYSTEM_SETTINGS
from auto_blogger.core.types import Article
from auto_blogger.logging_cfg.logger import setup_logger

logger = setup_logger()


class GNewsAPIError(Exception):
    """Custom exception for GNews API errors."""
    pass


class GNewsAPI:
    """Client for the GNews API service."""

    BASE_URL = GNEWS_CONFIG['base_url']

    def __init__(self, api_key: Optional[str] = None, session: Optional[requests.Session] = None):
        self.api_key = api_key or GNEWS_CONFIG['api_key']

        if session is None:
            # Configure session with retry logic
            session = requests.Session()
            retries = Retry(
                total=SYSTEM_SETTINGS['max_retries'],
                backoff_factor=0.5,
                status_forcelist=[429, 500, 502, 503, 504]
            )
            session.mount('https://', HTTPAdapter(max_retries=retries))
        self.session = session

    def validate_api_key(self) -> None:
        if not self.api_key:
            raise GNewsAPIError("GNews API key is required. Please set GNEWS_API_KEY in your .env file")

    def _validate_query(self, query: str) -> str:
        """Validate query string before sending to GNews API."""
        if not query or not query.strip():
            raise ValueError(f"Invalid search term: {query!r}")
        return query.strip()

    def _validate_response(self, data: dict) -> None:
        """Validate GNews API response data."""
        if not isinstance(data, dict):
            raise GNewsAPIError(f"Invalid response format. Expected dict, got {type(data)}")

        if 'errors' in data:
            raise GNewsAPIError(f"API returned errors: {data['errors']}")

        if 'articles' not in data:
            raise GNewsAPIError("Response missing 'articles' field")

        if not isinstance(data['articles'], list):
            raise GNewsAPIError(f"Invalid articles format. Expected list, got {type(data['articles'])}")

    def _build_url(self, endpoint: str, params: Dict[str, Any]) -> str:
        """Build URL with proper encoding for GNews API."""
        debug_params = params.copy()
        debug_params['apikey'] = 'REDACTED'
        logger.debug(f"GNews API request URL (redacted): {self.BASE_URL}/{endpoint}?{urlencode(debug_params)}")
        return f"{self.BASE_URL}/{endpoint}?{urlencode(params)}"

    def _request(self, endpoint: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        self.validate_api_key()
        params = dict(params, apikey=self.api_key)

        try:
            url = self._build_url(endpoint, params)
            response = self.session.get(url, timeout=SYSTEM_SETTINGS['request_timeout'])
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"GNews API request failed: {str(e)}")
            raise GNewsAPIError(f"Failed to fetch news: {str(e)}") from e
        except ValueError as e:
            logger.error(f"GNews API returned invalid JSON: {str(e)}")
            raise GNewsAPIError(f"Invalid JSON from GNews: {str(e)}") from e

        self._validate_response(data)
        return data['articles']

    def fetch_latest_news(
        self,
        category: str = 'general',
        lang: str = 'en',
        max_results: int = GNEWS_CONFIG['max_articles_per_query']
    ) -> List[Article]:
        """
        Fetch top headlines for a category.

        Args:
            category: GNews category (general, world, business, technology, science, ...)
            lang: Language code
            max_results: Maximum number of results to return

        Returns:
            List of normalized articles

        Raises:
            GNewsAPIError: If the API request fails or returns invalid data
        """
        params = {
            'category': category,
            'lang': lang,
            'max': min(max_results, 100),  # API limit is 100
        }
        articles = self._request('top-headlines', params)
        return self._process_articles(articles[:max_results])

    def search_news(self, query: str, lang: str = 'en', max_results: int = GNEWS_CONFIG['max_articles_per_query']) -> List[Article]:
        """
        Search for news articles matching a query.

        Raises:
            GNewsAPIError: If the API request fails or returns invalid data
        """
        params = {
            'q': self._validate_query(query),
            'lang': lang,
            'max': min(max_results, 100),
        }
        articles = self._request('search', params)
        return self._process_articles(articles[:max_results])

    def get_top_stories_for_blog(self, categories: Optional[List[str]] = None) -> List[Article]:
        """Collect headlines across categories, deduplicated and newest first."""
        if categories is None:
            categories = ['technology', 'business', 'science']

        all_articles: List[Article] = []
        for category in categories:
            all_articles.extend(
                self.fetch_latest_news(category, GNEWS_CONFIG['language'], GNEWS_CONFIG['articles_per_category'])
            )

        unique_articles = self.remove_duplicates(all_articles)
        return sorted(
            unique_articles,
            key=lambda a: self._parse_date(a.get('published_at')) or datetime.min,
            reverse=True
        )

    @staticmethod
    def remove_duplicates(articles: List[Article]) -> List[Article]:
        """Drop articles whose title was already seen (case-insensitive)."""
        seen = set()
        unique = []
        for article in articles:
            key = (article.get('title') or '').lower()
            if key in seen:
                continue
            seen.add(key)
            unique.append(article)
        return unique

    def _process_articles(self, articles: List[Dict]) -> List[Article]:
        """Process and normalize article data."""
        processed_articles = []

        for article in articles:
            if not isinstance(article, dict):
                logger.warning(f"Skipping invalid article format: {type(article)}")
                continue

            url = article.get('url')
            if not url:
                logger.warning("Skipping article without URL")
                continue

            title = (article.get('title') or '').strip()
            if not title:
                logger.warning(f"Skipping article with empty title: {url}")
                continue

            source = article.get('source') if isinstance(article.get('source'), dict) else {}
            processed: Article = {
                'title': title,
                'description': (article.get('description') or '').strip(),
                'content': article.get('content'),
                'url': url,
                'image': article.get('image'),
                'published_at': article.get('publishedAt'),
                'source': {
                    'name': (source.get('name') or 'Unknown').strip(),
                    'url': source.get('url')
                }
            }
            processed_articles.append(processed)

        return processed_articles

    @staticmethod
    def _parse_date(date_str: Optional[str]) -> Optional[datetime]:
        return parse_article_date(date_str)


def parse_article_date(date_str: Optional[str]) -> Optional[datetime]:
    """Parse an API date string into a naive UTC datetime using dateutil."""
    if not date_str:
        return None
    try:
        parsed = dateutil_parser.parse(date_str)
    except (ValueError, OverflowError) as e:
        logger.warning(f"Failed to parse date: {date_str} - {str(e)}")
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(dateutil_tz.UTC).replace(tzinfo=None)
    return parsed


def check_gnews_connection() -> bool:
    """Check that the GNews key works with a minimal request."""
    GNewsAPI().fetch_latest_news('general', max_results=1)
    return True
