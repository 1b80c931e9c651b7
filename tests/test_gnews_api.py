"""Tests for the GNews API client."""
import unittest
from unittest.mock import patch, MagicMock
from datetime import datetime
import requests
from auto_blogger.feeds.gnews_api import GNewsAPI, GNewsAPIError, parse_article_date


def api_article(title, published_at='2024-05-01T10:00:00Z', **extra):
    article = {
        'title': title,
        'description': f"{title} description",
        'content': f"{title} content",
        'url': f"https://news.example.com/{title.replace(' ', '-').lower()}",
        'image': 'https://cdn.example.com/image.jpg',
        'publishedAt': published_at,
        'source': {'name': 'Reuters', 'url': 'https://reuters.com'}
    }
    article.update(extra)
    return article


class TestGNewsAPI(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.response = self.session.get.return_value
        self.response.raise_for_status.return_value = None
        self.api = GNewsAPI(api_key='test-key', session=self.session)

    def test_fetch_latest_news_normalizes_articles(self):
        """Test that GNews fields are mapped to the article shape"""
        self.response.json.return_value = {'totalArticles': 1, 'articles': [api_article('Chip shortage eases')]}

        articles = self.api.fetch_latest_news('technology', 'en', 5)

        self.assertEqual(len(articles), 1)
        article = articles[0]
        self.assertEqual(article['title'], 'Chip shortage eases')
        self.assertEqual(article['published_at'], '2024-05-01T10:00:00Z')
        self.assertEqual(article['image'], 'https://cdn.example.com/image.jpg')
        self.assertEqual(article['source']['name'], 'Reuters')

        url = self.session.get.call_args[0][0]
        self.assertIn('/top-headlines?', url)
        self.assertIn('category=technology', url)
        self.assertIn('max=5', url)
        self.assertIn('apikey=test-key', url)

    def test_search_news_uses_search_endpoint(self):
        self.response.json.return_value = {'articles': [api_article('Blockchain rally')]}

        articles = self.api.search_news('blockchain', max_results=6)

        self.assertEqual(articles[0]['title'], 'Blockchain rally')
        url = self.session.get.call_args[0][0]
        self.assertIn('/search?', url)
        self.assertIn('q=blockchain', url)

    def test_missing_api_key_raises(self):
        api = GNewsAPI(api_key=None, session=self.session)
        api.api_key = None
        with self.assertRaises(GNewsAPIError):
            api.fetch_latest_news()
        self.session.get.assert_not_called()

    def test_transport_error_wrapped(self):
        self.session.get.side_effect = requests.exceptions.ConnectionError("boom")
        with self.assertRaises(GNewsAPIError):
            self.api.fetch_latest_news()

    def test_invalid_payload_raises(self):
        self.response.json.return_value = {'errors': ['You did not provide an API key.']}
        with self.assertRaises(GNewsAPIError):
            self.api.search_news('ai')

        self.response.json.return_value = {'articles': 'not-a-list'}
        with self.assertRaises(GNewsAPIError):
            self.api.search_news('ai')

    def test_empty_query_rejected(self):
        with self.assertRaises(ValueError):
            self.api.search_news('   ')

    def test_articles_without_url_or_title_skipped(self):
        self.response.json.return_value = {'articles': [
            api_article('Kept'),
            api_article('No url', url=None),
            api_article('', url='https://news.example.com/empty'),
        ]}
        articles = self.api.fetch_latest_news()
        self.assertEqual([a['title'] for a in articles], ['Kept'])

    def test_missing_source_name_defaults_to_unknown(self):
        self.response.json.return_value = {'articles': [api_article('Sourceless', source={})]}
        self.assertEqual(self.api.fetch_latest_news()[0]['source']['name'], 'Unknown')

    def test_remove_duplicates_case_insensitive(self):
        articles = [
            {'title': 'Big News'},
            {'title': 'big news'},
            {'title': 'Other News'},
        ]
        unique = GNewsAPI.remove_duplicates(articles)
        self.assertEqual([a['title'] for a in unique], ['Big News', 'Other News'])

    def test_top_stories_deduplicated_newest_first(self):
        with patch.object(self.api, 'fetch_latest_news') as mock_fetch:
            mock_fetch.side_effect = [
                [{'title': 'Older', 'published_at': '2024-05-01T10:00:00Z'}],
                [{'title': 'Newer', 'published_at': '2024-05-02T10:00:00Z'},
                 {'title': 'older', 'published_at': '2024-05-03T10:00:00Z'}],
            ]
            stories = self.api.get_top_stories_for_blog(['technology', 'business'])

        self.assertEqual([s['title'] for s in stories], ['Newer', 'Older'])


class TestParseArticleDate(unittest.TestCase):
    def test_converts_to_naive_utc(self):
        self.assertEqual(parse_article_date('2024-05-01T12:00:00+02:00'), datetime(2024, 5, 1, 10, 0))

    def test_invalid_returns_none(self):
        self.assertIsNone(parse_article_date('not a date'))
        self.assertIsNone(parse_article_date(None))


if __name__ == '__main__':
    unittest.main()
